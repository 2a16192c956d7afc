"""Daily check-in streak transition.

Pure function of the previous state and today's UTC date. The service layer
loads and stores the state; nothing here touches the database.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

# Streak length -> bonus reputation, awarded only when the streak lands exactly on it
STREAK_MILESTONES = {
    3: 5,
    7: 15,
    14: 30,
    30: 100,
    100: 500,
}


@dataclass(frozen=True)
class StreakTransition:
    current_streak: int
    longest_streak: int
    last_streak_date: date
    free_skip_count: int
    day_advanced: bool
    used_skip: bool
    was_reset: bool
    bonus_reputation: int


def milestone_bonus(streak: int) -> int:
    return STREAK_MILESTONES.get(streak, 0)


def advance_streak(
    today: date,
    last_streak_date: Optional[date],
    current_streak: int,
    longest_streak: int,
    free_skip_count: int,
) -> StreakTransition:
    """Apply one check-in on ``today``.

    - first check-in starts at 1
    - same day (or a date before the last one) changes nothing
    - the next day extends the streak
    - a one-day gap is bridged by a skip credit when one is available
    - any other gap resets to 1 and leaves skip credits alone
    """
    if last_streak_date is None:
        new_streak = 1
        used_skip = False
        was_reset = False
    else:
        day_diff = (today - last_streak_date).days
        if day_diff <= 0:
            return StreakTransition(
                current_streak=current_streak,
                longest_streak=max(longest_streak, current_streak),
                last_streak_date=last_streak_date,
                free_skip_count=free_skip_count,
                day_advanced=False,
                used_skip=False,
                was_reset=False,
                bonus_reputation=0,
            )
        if day_diff == 1:
            new_streak = current_streak + 1
            used_skip = False
            was_reset = False
        elif day_diff == 2 and free_skip_count > 0:
            new_streak = current_streak + 1
            used_skip = True
            was_reset = False
        else:
            new_streak = 1
            used_skip = False
            was_reset = True

    return StreakTransition(
        current_streak=new_streak,
        longest_streak=max(longest_streak, new_streak),
        last_streak_date=today,
        free_skip_count=free_skip_count - 1 if used_skip else free_skip_count,
        day_advanced=True,
        used_skip=used_skip,
        was_reset=was_reset,
        bonus_reputation=milestone_bonus(new_streak),
    )
