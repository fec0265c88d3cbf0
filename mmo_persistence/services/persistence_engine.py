"""
PersistenceEngine - single entry point for the game server.

Wires the engine, the session factory, every persistence manager and the
notification hooks together. The game server calls `connect()` once at
startup and then uses the account, character, guild and order operations.

Hooks:
- on_connected(): after the schema is ready; add-ons create their tables here
- on_character_load(player): after a successful character load
- on_character_save(player): after a character save committed
"""

from typing import Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from mmo_persistence.core.characters import Player, PlayerClass
from mmo_persistence.core.clock import Clock, ServerClock
from mmo_persistence.core.database import create_engine, create_schema, create_session_factory
from mmo_persistence.core.events import EventHook
from mmo_persistence.core.guilds import Guild
from mmo_persistence.core.logging_config import get_logger

from .online_registry import OnlineRegistry
from .persistence import (
    AccountManager,
    CharacterManager,
    GuildCache,
    GuildManager,
    OrderManager,
)
from .template_registry import TemplateRegistry
from .world import BoundedWorld, SpawnValidator

logger = get_logger(__name__)


class PersistenceEngine:
    """
    Facade over the persistence managers.

    Design principles:
    - One writer: a single server process owns the database
    - Every composite write is one transaction
    - Content is only referenced by stable template names
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[AsyncEngine] = None,
        templates: Optional[TemplateRegistry] = None,
        online_players: Optional[OnlineRegistry] = None,
        world: Optional[SpawnValidator] = None,
        clock: Optional[Clock] = None,
    ):
        self._engine = engine or create_engine(database_url)
        self._session_factory = create_session_factory(self._engine)

        self.templates = templates if templates is not None else TemplateRegistry()
        self.online_players = online_players if online_players is not None else OnlineRegistry()
        self.world = world or BoundedWorld()
        self.clock = clock or ServerClock()

        self.on_connected = EventHook("on_connected")
        self.on_character_load = EventHook("on_character_load")
        self.on_character_save = EventHook("on_character_save")

        self.accounts = AccountManager(self._session_factory)
        self.guilds = GuildManager(self._session_factory, self.online_players, GuildCache())
        self.characters = CharacterManager(
            self._session_factory,
            self.templates,
            self.clock,
            self.world,
            self.guilds,
            on_character_load=self.on_character_load,
            on_character_save=self.on_character_save,
        )
        self.orders = OrderManager(self._session_factory)

    @property
    def session_factory(self):
        return self._session_factory

    @property
    def guild_cache(self) -> GuildCache:
        return self.guilds.cache

    async def connect(self) -> None:
        """Create missing tables, then let add-ons hook in."""
        await create_schema(self._engine)
        await self.on_connected.fire()
        logger.info(
            "Persistence engine connected",
            extra={"url": self._engine.url.render_as_string(hide_password=True), **self.templates.counts()},
        )

    async def dispose(self) -> None:
        await self._engine.dispose()

    # =========================================================================
    # Accounts
    # =========================================================================

    async def try_login(self, name: str, password: str) -> bool:
        return await self.accounts.try_login(name, password)

    # =========================================================================
    # Characters
    # =========================================================================

    async def character_exists(self, name: str) -> bool:
        return await self.characters.exists(name)

    async def character_delete(self, name: str) -> None:
        await self.characters.delete(name)

    async def characters_for_account(self, account: str) -> List[str]:
        return await self.characters.characters_for_account(account)

    async def character_load(
        self,
        name: str,
        classes: Optional[Mapping[str, PlayerClass]] = None,
        is_preview: bool = False,
    ) -> Optional[Player]:
        """Load a character; classes default to the registered ones."""
        if classes is None:
            classes = self.templates.classes
        return await self.characters.load(name, classes, is_preview)

    async def character_save(self, player: Player, online: bool) -> None:
        await self.characters.save(player, online)

    async def character_save_many(self, players: Iterable[Player], online: bool = True) -> None:
        await self.characters.save_many(players, online)

    # =========================================================================
    # Guilds
    # =========================================================================

    async def guild_exists(self, name: str) -> bool:
        return await self.guilds.guild_exists(name)

    async def save_guild(self, guild: Guild) -> None:
        await self.guilds.save_guild(guild)

    async def remove_guild(self, name: str) -> None:
        await self.guilds.remove_guild(name)

    # =========================================================================
    # Item mall
    # =========================================================================

    async def drain_orders(self, character_name: str) -> List[int]:
        return await self.orders.drain_unprocessed(character_name)


# Singleton instance
_persistence_engine: Optional[PersistenceEngine] = None


def init_persistence_engine(**kwargs) -> PersistenceEngine:
    global _persistence_engine
    _persistence_engine = PersistenceEngine(**kwargs)
    return _persistence_engine


def get_persistence_engine() -> PersistenceEngine:
    if _persistence_engine is None:
        raise RuntimeError("PersistenceEngine not initialized")
    return _persistence_engine


def reset_persistence_engine() -> None:
    global _persistence_engine
    _persistence_engine = None
