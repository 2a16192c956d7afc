"""Effect descriptors applied by purchases, mystery boxes and gifts.

Effects are a discriminated union keyed on ``kind``. Descriptors coming back
from storage go through ``parse_effect`` which rejects anything that is not
exactly one of the known variants.
"""
import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter, ValidationError

from profile_economy.schemas.base import FrozenSchema
from profile_economy.utils.exceptions import InvalidEffectError


class PermanentUnlock(FrozenSchema):
    kind: Literal["permanent_unlock"] = "permanent_unlock"
    item_id: str = Field(min_length=1)


class TimedBoost(FrozenSchema):
    kind: Literal["timed_boost"] = "timed_boost"
    boost_type: str = Field(min_length=1)
    multiplier: float = Field(gt=1)
    duration_hours: int = Field(gt=0)


class SkipCredit(FrozenSchema):
    """Streak shield: one missed day forgiven per credit."""

    kind: Literal["skip_credit"] = "skip_credit"
    value: int = Field(default=1, ge=1)


class TitleOverwrite(FrozenSchema):
    """Sets the display title.

    ``duration_hours`` is carried from the gift table but nothing reverts the
    title when it elapses.
    """

    kind: Literal["title_overwrite"] = "title_overwrite"
    value: str = Field(min_length=1, max_length=80)
    duration_hours: Optional[int] = Field(default=None, gt=0)


class StreakBoost(FrozenSchema):
    kind: Literal["streak_boost"] = "streak_boost"
    value: int = Field(default=1, ge=1)


class QuestCredit(FrozenSchema):
    kind: Literal["quest_credit"] = "quest_credit"
    value: int = Field(default=1, ge=1)


class GiftCredit(FrozenSchema):
    kind: Literal["gift_credit"] = "gift_credit"
    value: int = Field(default=1, ge=1)


Effect = Annotated[
    Union[
        PermanentUnlock,
        TimedBoost,
        SkipCredit,
        TitleOverwrite,
        StreakBoost,
        QuestCredit,
        GiftCredit,
    ],
    Field(discriminator="kind"),
]

EFFECT_TYPES = (
    PermanentUnlock,
    TimedBoost,
    SkipCredit,
    TitleOverwrite,
    StreakBoost,
    QuestCredit,
    GiftCredit,
)

_effect_adapter: TypeAdapter = TypeAdapter(Effect)


def parse_effect(raw: Any) -> Effect:
    """Validate a stored or configured effect descriptor.

    Raises:
        InvalidEffectError: unknown ``kind``, missing fields or bad values.
    """
    if isinstance(raw, EFFECT_TYPES):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise InvalidEffectError(f"Effect descriptor is not valid JSON: {exc}") from exc
    try:
        return _effect_adapter.validate_python(raw)
    except ValidationError as exc:
        kind = raw.get("kind") if isinstance(raw, dict) else None
        raise InvalidEffectError(
            f"Invalid effect descriptor (kind={kind!r})",
            {"kind": kind, "errors": exc.error_count()},
        ) from exc


def dump_effect(effect: Effect) -> dict:
    """JSON-ready form stored on gift rows."""
    return effect.model_dump(mode="json")
