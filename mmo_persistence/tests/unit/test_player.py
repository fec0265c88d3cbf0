"""
Unit tests for the in-memory player.
"""

import pytest

from mmo_persistence.core.items import Item, ItemSlot
from mmo_persistence.core.skills import Buff, clamp_level
from mmo_persistence.tests.utils.content import BLESSING, LEATHER_CAP, MAGE, WARRIOR


class TestCreatePlayer:
    def test_slots_sized_by_class(self, make_player):
        warrior = make_player("Aldric")
        mage = make_player("Brenna", player_class=MAGE)

        assert len(warrior.inventory) == 10
        assert len(warrior.equipment) == 8
        assert len(mage.inventory) == 8
        assert len(mage.equipment) == 3
        assert all(slot.is_empty for slot in warrior.inventory + warrior.equipment)

    def test_class_skills_start_unlearned(self, make_player):
        player = make_player("Aldric")

        assert [skill.name for skill in player.skills] == ["Cleave", "Blessing"]
        assert all(skill.level == 0 for skill in player.skills)
        assert player.get_skill_index("Blessing") == 1
        assert player.get_skill_index("Fireball") == -1

    def test_starts_with_full_vitals(self, make_player):
        player = make_player("Aldric")

        assert player.health == WARRIOR.base_health
        assert player.mana == WARRIOR.base_mana


class TestVitals:
    def test_equipment_and_buffs_raise_maxima(self, make_player):
        player = make_player("Aldric")
        player.equipment[0] = ItemSlot(item=Item(LEATHER_CAP), amount=1)
        player.buffs.append(Buff(BLESSING, level=2))

        assert player.max_health == 100 + 20 + 20
        assert player.max_mana == 20 + 5 + 10

    def test_health_is_clamped_to_maximum(self, make_player):
        player = make_player("Aldric")

        player.health = 500
        assert player.health == 100

        player.health = -5
        assert player.health == 0

    def test_assignment_order_matters(self, make_player):
        """Health above the base maximum only survives once bonuses are in place."""
        player = make_player("Aldric")

        player.health = 130
        assert player.health == 100

        player.equipment[0] = ItemSlot(item=Item(LEATHER_CAP), amount=1)
        player.buffs.append(Buff(BLESSING, level=2))
        player.health = 130
        assert player.health == 130


class TestItems:
    def test_durability_defaults_to_maximum(self):
        assert Item(LEATHER_CAP).durability == 50

    def test_zero_amount_slot_is_empty(self):
        assert ItemSlot(item=Item(LEATHER_CAP), amount=0).is_empty


class TestClampLevel:
    @pytest.mark.parametrize("level,expected", [(0, 1), (3, 3), (9, 5)])
    def test_clamp_level(self, level, expected):
        assert clamp_level(level, 5) == expected


class TestItemCooldowns:
    def test_remaining(self, make_player):
        player = make_player("Aldric")
        player.item_cooldowns["potion"] = 1030.0

        assert player.item_cooldown_remaining("potion", 1000.0) == 30.0
        assert player.item_cooldown_remaining("potion", 1100.0) == 0.0
        assert player.item_cooldown_remaining("scroll", 1000.0) == 0.0
