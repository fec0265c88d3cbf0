"""
Character lifecycle: existence checks, soft delete, listing, full load and
full save.

A character spans the characters table and seven sub-tables (inventory,
equipment, item cooldowns, skills, buffs, quests, guild membership). A save
writes all of them inside one transaction so nobody ever observes a character
with some sub-tables written and others not.
"""

import time
import traceback
from functools import partial
from typing import Iterable, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from mmo_persistence.core.characters import Player, PlayerClass, Position
from mmo_persistence.core.clock import Clock
from mmo_persistence.core.config import settings
from mmo_persistence.core.events import EventHook
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.metrics import (
    character_load_duration_seconds,
    character_loads_total,
    character_save_duration_seconds,
)
from mmo_persistence.core.transactions import StorageTransaction
from mmo_persistence.models.character import Character
from mmo_persistence.services.template_registry import TemplateRegistry
from mmo_persistence.services.world import SpawnValidator

from .base_manager import BaseManager
from .cooldown_manager import CooldownManager
from .guild_manager import GuildManager
from .inventory_manager import EquipmentManager, InventoryManager
from .quest_manager import QuestManager
from .skills_manager import SkillsManager

logger = get_logger(__name__)


class CharacterManager(BaseManager):
    """Orchestrates composite character loads and saves."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker],
        templates: TemplateRegistry,
        clock: Clock,
        world: SpawnValidator,
        guilds: GuildManager,
        on_character_load: Optional[EventHook] = None,
        on_character_save: Optional[EventHook] = None,
    ):
        super().__init__(session_factory)
        self._world = world
        self._guilds = guilds
        self._inventory = InventoryManager(templates)
        self._equipment = EquipmentManager(templates)
        self._cooldowns = CooldownManager(clock)
        self._skills = SkillsManager(templates, clock)
        self._quests = QuestManager(templates)
        self.on_character_load = (
            on_character_load if on_character_load is not None else EventHook("on_character_load")
        )
        self.on_character_save = (
            on_character_save if on_character_save is not None else EventHook("on_character_save")
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    async def exists(self, name: str) -> bool:
        """True if the name is taken, including by a soft-deleted character."""
        async with self._db_session() as db:
            found = await db.scalar(select(Character.name).where(Character.name == name))
            return found is not None

    async def delete(self, name: str) -> None:
        """Soft delete: the row stays so the name can never be reused by accident."""
        async with self._transaction() as tx:
            await tx.session.execute(
                update(Character).where(Character.name == name).values(deleted=True)
            )
        logger.info("Character deleted", extra={"character": name})

    async def characters_for_account(self, account: str) -> List[str]:
        """Names of the account's characters that are not deleted, oldest first."""
        async with self._db_session() as db:
            result = await db.execute(
                select(Character.name)
                .where(Character.account == account, Character.deleted.is_(False))
                .order_by(Character.created_at, Character.name)
            )
            return list(result.scalars().all())

    # =========================================================================
    # Loading
    # =========================================================================

    async def load(
        self,
        name: str,
        classes: Mapping[str, PlayerClass],
        is_preview: bool = False,
    ) -> Optional[Player]:
        """
        Load a full character.

        Args:
            name: Character name
            classes: Class identifier -> class, used to construct the player
            is_preview: Load for the character selection screen only; the
                character is not marked online

        Returns:
            The hydrated player, or None if the character does not exist,
            is deleted, or its class is no longer known
        """
        started = time.perf_counter()

        async with self._db_session() as db:
            row = await db.scalar(
                select(Character).where(Character.name == name, Character.deleted.is_(False))
            )
            if row is None:
                character_loads_total.labels(status="not_found").inc()
                logger.debug("Character not found", extra={"character": name})
                return None

            player_class = classes.get(row.class_name)
            if player_class is None:
                character_loads_total.labels(status="missing_class").inc()
                logger.error(
                    "No class found for character",
                    extra={"character": name, "class_name": row.class_name},
                )
                return None

            player = player_class.create_player(row.name, row.account)
            self._hydrate(player, row)
            player.position = self._spawn_position(player, Position(row.x, row.y, row.z))

            await self._inventory.load_inventory(db, player)
            await self._equipment.load_equipment(db, player)
            await self._cooldowns.load_item_cooldowns(db, player)
            await self._skills.load_skills(db, player)
            await self._skills.load_buffs(db, player)
            await self._quests.load_quests(db, player)
            await self._guilds.load_on_demand(db, player)

            # Maxima depend on equipment and buffs, which are loaded now
            player.health = row.health
            player.mana = row.mana

            # Mark online right away instead of on the next save, which may be
            # minutes away
            if not is_preview:
                row.online = True
                row.last_saved = self._utc_now()
                await db.commit()

        await self.on_character_load.fire(player)

        character_loads_total.labels(status="success").inc()
        character_load_duration_seconds.observe(time.perf_counter() - started)
        logger.info(
            "Character loaded",
            extra={"character": name, "preview": is_preview, "guild": player.guild and player.guild.name},
        )
        return player

    def _hydrate(self, player: Player, row: Character) -> None:
        # Max level may have been lowered since the character was saved
        player.level = max(1, min(row.level, player.player_class.max_level, settings.MAX_LEVEL))
        player.strength = row.strength
        player.intelligence = row.intelligence
        player.experience = row.experience
        player.skill_experience = row.skill_experience
        player.gold = row.gold
        player.coins = row.coins
        player.is_game_master = row.gamemaster

    def _spawn_position(self, player: Player, stored: Position) -> Position:
        if self._world.is_valid_spawn(stored):
            return stored
        # Terrain changed or the player logged out in an instance that is gone
        start = self._world.nearest_start_position(stored)
        logger.debug(
            "Spawn position reset",
            extra={"character": player.name, "stored": str(stored), "start": str(start)},
        )
        return start

    # =========================================================================
    # Saving
    # =========================================================================

    async def save(
        self,
        player: Player,
        online: bool,
        tx: Optional[StorageTransaction] = None,
    ) -> None:
        """
        Insert or overwrite a character and all of its sub-tables.

        Runs inside `tx` when given (see `save_many`), otherwise in a
        transaction of its own. `on_character_save` fires after the commit.
        """
        started = time.perf_counter()
        try:
            async with self._transaction(tx) as tx:
                db = tx.session
                await self._save_base_row(db, player, online)
                await self._inventory.save_inventory(db, player)
                await self._equipment.save_equipment(db, player)
                await self._cooldowns.save_item_cooldowns(db, player)
                await self._skills.save_skills(db, player)
                await self._skills.save_buffs(db, player)
                await self._quests.save_quests(db, player)
                if player.in_guild:
                    await self._guilds.save_guild(player.guild, tx)

                tx.after_commit(partial(self.on_character_save.fire, player))
                owned = tx.owns
        except Exception as e:
            logger.error(
                "Character save failed",
                extra={"character": player.name, "error": str(e), "traceback": traceback.format_exc()},
            )
            raise

        if owned:
            character_save_duration_seconds.labels(mode="single").observe(
                time.perf_counter() - started
            )
            logger.debug("Character saved", extra={"character": player.name, "online": online})

    async def save_many(self, players: Iterable[Player], online: bool = True) -> None:
        """Save a batch of characters in one transaction. All or nothing."""
        started = time.perf_counter()
        players = list(players)
        try:
            async with self._transaction() as tx:
                for player in players:
                    await self.save(player, online, tx)
        except Exception as e:
            logger.error(
                "Batch save failed, no character in the batch was written",
                extra={"count": len(players), "error": str(e)},
            )
            raise

        character_save_duration_seconds.labels(mode="batch").observe(
            time.perf_counter() - started
        )
        logger.info("Characters saved", extra={"count": len(players), "online": online})

    async def _save_base_row(self, db: AsyncSession, player: Player, online: bool) -> None:
        row = await db.get(Character, player.name)
        if row is None:
            # Server default has second resolution on SQLite; listings need creation order
            row = Character(name=player.name, deleted=False, created_at=self._utc_now())
            db.add(row)

        row.account = player.account
        row.class_name = player.class_name
        row.x = player.position.x
        row.y = player.position.y
        row.z = player.position.z
        row.level = player.level
        row.health = player.health
        row.mana = player.mana
        row.strength = player.strength
        row.intelligence = player.intelligence
        row.experience = player.experience
        row.skill_experience = player.skill_experience
        row.gold = player.gold
        row.coins = player.coins
        row.gamemaster = player.is_game_master
        row.online = online
        row.last_saved = self._utc_now()
        await db.flush()
