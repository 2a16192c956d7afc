"""Tests for catalog construction and effect descriptor parsing."""
import json

import pytest
from pydantic import ValidationError

from profile_economy.models.base import ItemLifecycle
from profile_economy.schemas.effects import (
    PermanentUnlock,
    SkipCredit,
    TimedBoost,
    TitleOverwrite,
    dump_effect,
    parse_effect,
)
from profile_economy.services.catalog import DEFAULT_STORE_ITEMS, build_catalog
from profile_economy.utils.exceptions import InvalidEffectError


class TestParseEffect:

    def test_parses_dict(self):
        effect = parse_effect({"kind": "timed_boost", "boost_type": "xp_boost_2x",
                               "multiplier": 2.0, "duration_hours": 24})
        assert effect == TimedBoost(boost_type="xp_boost_2x", multiplier=2.0, duration_hours=24)

    def test_parses_json_text(self):
        effect = parse_effect(json.dumps({"kind": "skip_credit", "value": 2}))
        assert effect == SkipCredit(value=2)

    def test_instances_pass_through(self):
        effect = TitleOverwrite(value="Legend", duration_hours=168)
        assert parse_effect(effect) is effect

    def test_stored_form_round_trips(self):
        effect = PermanentUnlock(item_id="title_custom")
        assert parse_effect(dump_effect(effect)) == effect

    @pytest.mark.parametrize("raw", [
        {"kind": "teleport"},
        {"type": "streak_skip", "value": 1},
        {"kind": "timed_boost", "boost_type": "x", "multiplier": 0.5, "duration_hours": 1},
        {"kind": "skip_credit", "value": 0},
        {"kind": "permanent_unlock", "item_id": "a", "extra": True},
        "not json",
        None,
    ])
    def test_rejects_malformed(self, raw):
        with pytest.raises(InvalidEffectError):
            parse_effect(raw)


class TestCatalog:

    def test_default_catalog_loads_in_order(self, catalog):
        ids = [item.item_id for item in catalog.list_items()]
        assert ids == [raw["item_id"] for raw in DEFAULT_STORE_ITEMS]
        assert len(catalog) == len(DEFAULT_STORE_ITEMS)

    def test_lookup(self, catalog):
        assert "xp_boost_2x" in catalog
        assert catalog.get_item("missing") is None
        assert catalog.get_gift_type("legend").cost == 500
        assert [g.gift_type for g in catalog.list_gift_types()] == ["energy", "protection", "boost", "legend"]

    def test_catalog_is_immutable(self, catalog):
        with pytest.raises(AttributeError):
            catalog.extra = 1
        with pytest.raises(ValidationError):
            catalog.get_item("title_custom").cost_xp = 1

    def test_reputation_only_items(self, catalog):
        rep_only = {item.item_id for item in catalog.list_items() if item.is_reputation_only}
        assert rep_only == {"exclusive_badge_veteran", "exclusive_badge_legend"}

    def test_duplicate_ids_rejected(self):
        items = [DEFAULT_STORE_ITEMS[0], DEFAULT_STORE_ITEMS[0]]
        with pytest.raises(ValueError):
            build_catalog(items, ())

    def test_permanent_item_needs_matching_unlock(self):
        bad = {
            "item_id": "odd_item",
            "name": "Odd",
            "cost_xp": 10,
            "category": "profile",
            "lifecycle": ItemLifecycle.PERMANENT,
            "effect": PermanentUnlock(item_id="something_else"),
        }
        with pytest.raises(ValidationError):
            build_catalog([bad], ())

    def test_free_items_rejected(self):
        free = {
            "item_id": "free_shield",
            "name": "Free",
            "category": "boost",
            "lifecycle": ItemLifecycle.CONSUMABLE,
            "effect": SkipCredit(value=1),
        }
        with pytest.raises(ValidationError):
            build_catalog([free], ())
