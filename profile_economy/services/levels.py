"""Level curve derived from lifetime experience.

level = floor(sqrt(xp / 100)) + 1, so level N starts at (N - 1)^2 * 100 XP.
"""
import math

LEVEL_TITLES = {
    1: "Novice",
    5: "Apprentice",
    10: "Seasoned",
    15: "Veteran",
    20: "Master",
    25: "Expert",
    30: "Legend",
    35: "Myth",
    40: "Immortal",
    50: "God",
}


def calculate_level(xp: int) -> int:
    if not xp or xp < 0:
        return 1
    return math.isqrt(xp // 100) + 1


def xp_for_level(level: int) -> int:
    if level <= 1:
        return 0
    return (level - 1) ** 2 * 100


def xp_for_next_level(current_xp: int) -> int:
    return xp_for_level(calculate_level(current_xp) + 1) - max(current_xp, 0)


def title_for_level(level: int) -> str:
    reached = [threshold for threshold in LEVEL_TITLES if level >= threshold]
    return LEVEL_TITLES[max(reached)] if reached else LEVEL_TITLES[1]
