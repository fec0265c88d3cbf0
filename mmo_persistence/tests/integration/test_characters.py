"""
Integration tests for character load and save.

Every test runs against a fresh SQLite database through the public
PersistenceEngine operations.
"""

import logging
import math

import pytest
from sqlalchemy import select

from mmo_persistence.core.characters import PlayerClass, Position
from mmo_persistence.models import (
    Character,
    CharacterBuff,
    CharacterEquipment,
    CharacterInventory,
    CharacterItemCooldown,
    CharacterQuest,
    CharacterSkill,
)
from mmo_persistence.tests.utils.content import MAGE, WARRIOR


async def fetch_row(engine, name):
    async with engine.session_factory() as session:
        return await session.scalar(select(Character).where(Character.name == name))


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_full_round_trip(self, engine, equipped_warrior):
        await engine.character_save(equipped_warrior, online=False)

        player = await engine.character_load("Aldric")

        assert player is not None
        assert player.account == "account_one"
        assert player.class_name == "Warrior"
        assert player.position == Position(10.0, 0.0, -20.0)
        assert player.level == 12
        assert player.strength == 14
        assert player.intelligence == 3
        assert player.experience == 4500
        assert player.skill_experience == 320
        assert player.gold == 999
        assert player.coins == 25

        potion = player.inventory[0]
        assert potion.item.name == "Health Potion"
        assert potion.amount == 5
        sword = player.inventory[3].item
        assert sword.name == "Iron Sword"
        assert sword.durability == 80
        assert (sword.summoned_health, sword.summoned_level, sword.summoned_experience) == (40, 2, 1234)
        assert [index for index, slot in enumerate(player.inventory) if not slot.is_empty] == [0, 3]

        assert player.equipment[0].item.name == "Leather Cap"
        assert player.equipment[0].item.durability == 45
        assert player.equipment[4].item.name == "Iron Sword"

        cleave = player.skills[player.get_skill_index("Cleave")]
        assert cleave.level == 3
        assert player.skills[player.get_skill_index("Blessing")].level == 0

        assert [(buff.name, buff.level) for buff in player.buffs] == [("Blessing", 2)]
        quests = {quest.name: quest for quest in player.quests}
        assert quests["Wolf Hunt"].progress == 4
        assert not quests["Wolf Hunt"].completed
        assert quests["Lost Letter"].completed

        # Above the class base maximum: only valid because cap and buff loaded first
        assert player.health == 130
        assert player.mana == 30

    @pytest.mark.asyncio
    async def test_save_twice_leaves_no_duplicate_rows(self, engine, equipped_warrior, count_rows):
        await engine.character_save(equipped_warrior, online=True)
        await engine.character_save(equipped_warrior, online=True)

        assert await count_rows(CharacterInventory, "Aldric") == 2
        assert await count_rows(CharacterEquipment, "Aldric") == 2
        assert await count_rows(CharacterItemCooldown, "Aldric") == 1
        assert await count_rows(CharacterSkill, "Aldric") == 1
        assert await count_rows(CharacterBuff, "Aldric") == 1
        assert await count_rows(CharacterQuest, "Aldric") == 2

    @pytest.mark.asyncio
    async def test_emptied_slots_are_removed(self, engine, equipped_warrior, count_rows):
        await engine.character_save(equipped_warrior, online=False)

        equipped_warrior.inventory[3].item = None
        equipped_warrior.inventory[3].amount = 0
        equipped_warrior.quests.clear()
        await engine.character_save(equipped_warrior, online=False)

        assert await count_rows(CharacterInventory, "Aldric") == 1
        assert await count_rows(CharacterQuest, "Aldric") == 0

    @pytest.mark.asyncio
    async def test_online_flag_and_last_saved(self, engine, make_player):
        await engine.character_save(make_player("Brenna"), online=True)
        row = await fetch_row(engine, "Brenna")
        assert row.online
        assert row.last_saved is not None

        await engine.character_save(make_player("Brenna"), online=False)
        assert not (await fetch_row(engine, "Brenna")).online


class TestLoadRules:
    @pytest.mark.asyncio
    async def test_missing_character(self, engine):
        assert await engine.character_load("Nobody") is None

    @pytest.mark.asyncio
    async def test_unknown_class_fails_load(self, engine, make_player, caplog):
        necromancer = PlayerClass(name="Necromancer")
        await engine.character_save(make_player("Morwen", player_class=necromancer), online=False)

        with caplog.at_level(logging.ERROR):
            assert await engine.character_load("Morwen") is None

        assert "No class found for character" in caplog.text

    @pytest.mark.asyncio
    async def test_explicit_class_map(self, engine, make_player):
        await engine.character_save(make_player("Brenna", player_class=MAGE), online=False)

        assert await engine.character_load("Brenna", classes={"Warrior": WARRIOR}) is None
        player = await engine.character_load("Brenna", classes={"Mage": MAGE})
        assert player.class_name == "Mage"

    @pytest.mark.asyncio
    async def test_level_clamped_to_class_maximum(self, engine, make_player):
        await engine.character_save(make_player("Aldric", level=80), online=False)

        player = await engine.character_load("Aldric")

        assert player.level == WARRIOR.max_level

    @pytest.mark.asyncio
    async def test_invalid_position_moves_to_nearest_start(self, engine, make_player):
        await engine.character_save(
            make_player("Aldric", position=Position(500.0, 0.0, 480.0)), online=False
        )

        player = await engine.character_load("Aldric")

        assert player.position == Position(50.0, 0.0, 50.0)

    @pytest.mark.asyncio
    async def test_non_finite_position_moves_to_first_start(self, engine, make_player):
        await engine.character_save(
            make_player("Aldric", position=Position(math.inf, 0.0, 0.0)), online=False
        )

        player = await engine.character_load("Aldric")

        assert player.position == Position(0.0, 0.0, 0.0)

    @pytest.mark.asyncio
    async def test_load_marks_online(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)

        await engine.character_load("Aldric")

        row = await fetch_row(engine, "Aldric")
        assert row.online
        assert row.last_saved is not None

    @pytest.mark.asyncio
    async def test_preview_does_not_mark_online(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)

        player = await engine.character_load("Aldric", is_preview=True)

        assert player is not None
        assert not (await fetch_row(engine, "Aldric")).online


class TestStaleRows:
    @pytest.mark.asyncio
    async def test_retired_item_skipped_and_dropped_on_next_save(
        self, engine, equipped_warrior, templates, count_rows, caplog
    ):
        await engine.character_save(equipped_warrior, online=False)
        templates.remove_item("Iron Sword")

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Aldric")

        assert player.inventory[3].is_empty
        assert player.equipment[4].is_empty
        assert player.inventory[0].item.name == "Health Potion"
        assert "Skipped item that no longer exists" in caplog.text

        await engine.character_save(player, online=False)
        assert await count_rows(CharacterInventory, "Aldric") == 1
        assert await count_rows(CharacterEquipment, "Aldric") == 1

    @pytest.mark.asyncio
    async def test_slot_beyond_capacity_skipped(self, engine, make_player, caplog):
        await engine.character_save(make_player("Aldric"), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterInventory(
                    character="Aldric",
                    slot=25,
                    name="Health Potion",
                    amount=1,
                    durability=1,
                    summoned_health=0,
                    summoned_level=0,
                    summoned_experience=0,
                )
            )
            await session.commit()

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Aldric")

        assert len(player.inventory) == WARRIOR.inventory_size
        assert all(slot.is_empty for slot in player.inventory)
        assert "Skipped slot beyond current capacity" in caplog.text

    @pytest.mark.asyncio
    async def test_durability_capped_by_template(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterEquipment(
                    character="Aldric",
                    slot=0,
                    name="Leather Cap",
                    amount=1,
                    durability=999,
                    summoned_health=0,
                    summoned_level=0,
                    summoned_experience=0,
                )
            )
            await session.commit()

        player = await engine.character_load("Aldric")

        assert player.equipment[0].item.durability == 50

    @pytest.mark.asyncio
    async def test_skill_the_class_lost_is_skipped(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterSkill(
                    character="Aldric",
                    name="Fireball",
                    level=4,
                    cast_time_end=0.0,
                    cooldown_end=0.0,
                )
            )
            await session.commit()

        player = await engine.character_load("Aldric")

        assert player.get_skill_index("Fireball") == -1
        assert all(skill.level == 0 for skill in player.skills)

    @pytest.mark.asyncio
    async def test_retired_buff_skipped_and_dropped_on_next_save(
        self, engine, make_player, count_rows, caplog
    ):
        await engine.character_save(make_player("Aldric"), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterBuff(character="Aldric", name="Ancient Ward", level=1, buff_time_end=30.0)
            )
            await session.commit()

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Aldric")

        assert player.buffs == []
        assert "Skipped buff that no longer exists" in caplog.text

        await engine.character_save(player, online=False)
        assert await count_rows(CharacterBuff, "Aldric") == 0

    @pytest.mark.asyncio
    async def test_buff_row_naming_a_plain_skill_is_skipped(
        self, engine, make_player, count_rows, caplog
    ):
        await engine.character_save(make_player("Aldric"), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterBuff(character="Aldric", name="Cleave", level=2, buff_time_end=30.0)
            )
            await session.commit()

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Aldric")

        assert player.buffs == []
        assert player.max_health == WARRIOR.base_health
        assert "Skipped buff naming a skill that is not a buff" in caplog.text

        await engine.character_save(player, online=False)
        assert await count_rows(CharacterBuff, "Aldric") == 0

    @pytest.mark.asyncio
    async def test_retired_quest_skipped_and_dropped_on_next_save(
        self, engine, equipped_warrior, count_rows, caplog
    ):
        await engine.character_save(equipped_warrior, online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterQuest(character="Aldric", name="Forgotten Errand", progress=2, completed=False)
            )
            await session.commit()

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Aldric")

        assert sorted(quest.name for quest in player.quests) == ["Lost Letter", "Wolf Hunt"]
        assert "Skipped quest that no longer exists" in caplog.text

        await engine.character_save(player, online=False)
        assert await count_rows(CharacterQuest, "Aldric") == 2

    @pytest.mark.asyncio
    async def test_equipment_slot_beyond_class_slots_skipped(
        self, engine, make_player, count_rows, caplog
    ):
        await engine.character_save(make_player("Brenna", player_class=MAGE), online=False)
        async with engine.session_factory() as session:
            session.add(
                CharacterEquipment(
                    character="Brenna",
                    slot=5,
                    name="Leather Cap",
                    amount=1,
                    durability=50,
                    summoned_health=0,
                    summoned_level=0,
                    summoned_experience=0,
                )
            )
            await session.commit()

        with caplog.at_level(logging.WARNING):
            player = await engine.character_load("Brenna")

        assert len(player.equipment) == len(MAGE.equipment_slots)
        assert all(slot.is_empty for slot in player.equipment)
        assert "Skipped slot beyond current capacity" in caplog.text

        await engine.character_save(player, online=False)
        assert await count_rows(CharacterEquipment, "Brenna") == 0


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_deleted_character_keeps_its_name(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)

        await engine.character_delete("Aldric")

        assert await engine.character_exists("Aldric")
        assert await engine.character_load("Aldric") is None
        assert (await fetch_row(engine, "Aldric")).deleted

    @pytest.mark.asyncio
    async def test_listing_skips_deleted_and_other_accounts(self, engine, make_player):
        await engine.character_save(make_player("Aldric"), online=False)
        await engine.character_save(make_player("Brenna", player_class=MAGE), online=False)
        await engine.character_save(make_player("Cassian"), online=False)
        await engine.character_save(make_player("Dorian", account="account_two"), online=False)
        await engine.character_delete("Cassian")

        names = await engine.characters_for_account("account_one")

        assert names == ["Aldric", "Brenna"]
        assert await engine.characters_for_account("account_two") == ["Dorian"]
        assert await engine.characters_for_account("account_three") == []

    @pytest.mark.asyncio
    async def test_exists(self, engine, make_player):
        assert not await engine.character_exists("Aldric")

        await engine.character_save(make_player("Aldric"), online=False)

        assert await engine.character_exists("Aldric")

    @pytest.mark.asyncio
    async def test_listing_is_in_creation_order(self, engine, make_player):
        """Characters created within the same second keep their creation order."""
        await engine.character_save(make_player("Zed"), online=False)
        await engine.character_save(make_player("Abe"), online=False)
        await engine.character_save(make_player("Mira"), online=False)

        # Later saves do not move a character
        await engine.character_save(make_player("Zed", gold=5), online=False)

        assert await engine.characters_for_account("account_one") == ["Zed", "Abe", "Mira"]
