"""Catalog configuration schemas."""
from typing import Optional

from pydantic import Field, model_validator

from profile_economy.models.base import ItemLifecycle
from profile_economy.schemas.base import FrozenSchema
from profile_economy.schemas.effects import Effect, PermanentUnlock


class CatalogItem(FrozenSchema):
    """Purchasable store entry."""

    item_id: str = Field(min_length=1, max_length=64)
    name: str
    description: str = ""
    cost_xp: int = Field(default=0, ge=0)
    cost_rep: int = Field(default=0, ge=0)
    category: str
    lifecycle: ItemLifecycle
    duration_hours: Optional[int] = Field(default=None, gt=0)
    effect: Effect

    @model_validator(mode="after")
    def check_effect_matches_lifecycle(self):
        is_unlock = isinstance(self.effect, PermanentUnlock)
        if (self.lifecycle == ItemLifecycle.PERMANENT) != is_unlock:
            raise ValueError(f"{self.item_id}: permanent items must carry exactly a permanent_unlock effect")
        if is_unlock and self.effect.item_id != self.item_id:
            raise ValueError(f"{self.item_id}: permanent_unlock effect must target the item itself")
        if self.cost_xp == 0 and self.cost_rep == 0:
            raise ValueError(f"{self.item_id}: item must cost something")
        return self

    @property
    def is_permanent(self) -> bool:
        return self.lifecycle == ItemLifecycle.PERMANENT

    @property
    def is_reputation_only(self) -> bool:
        return self.cost_xp == 0 and self.cost_rep > 0


class GiftType(FrozenSchema):
    """Gift configuration; ``cost`` is paid in reputation by the sender."""

    gift_type: str = Field(min_length=1, max_length=32)
    name: str
    icon: str = ""
    cost: int = Field(gt=0)
    rarity: str
    description: str = ""
    effect: Effect
