"""
Process-wide cache of loaded guilds.

Guilds are only materialized when their first member logs in. Loading is
single-flight per guild name: concurrent requests for a guild that is not
cached yet wait on one per-name lock, so exactly one of them hits storage and
all of them receive the same `Guild` object.

Entries are never evicted; a removed guild stays cached until restart.
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from mmo_persistence.core.guilds import Guild
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.metrics import guild_cache_lookups_total

logger = get_logger(__name__)

GuildLoader = Callable[[str], Awaitable[Guild]]


class GuildCache:
    def __init__(self):
        self._guilds: Dict[str, Guild] = {}
        self._load_locks: Dict[str, asyncio.Lock] = {}
        self._lock_creation_lock = asyncio.Lock()

    async def _get_or_create_lock(self, name: str) -> asyncio.Lock:
        if name not in self._load_locks:
            async with self._lock_creation_lock:
                # Double-check pattern
                if name not in self._load_locks:
                    self._load_locks[name] = asyncio.Lock()
        return self._load_locks[name]

    async def get_or_load(self, name: str, loader: GuildLoader) -> Guild:
        """Return the cached guild, loading it with `loader` exactly once."""
        guild = self._guilds.get(name)
        if guild is not None:
            guild_cache_lookups_total.labels(result="hit").inc()
            return guild

        lock = await self._get_or_create_lock(name)
        async with lock:
            guild = self._guilds.get(name)
            if guild is not None:
                # Someone else finished loading while we waited
                guild_cache_lookups_total.labels(result="hit").inc()
                return guild

            guild_cache_lookups_total.labels(result="miss").inc()
            guild = await loader(name)
            self._guilds[name] = guild
            logger.debug(
                "Guild cached",
                extra={"guild": name, "members": len(guild.members)},
            )
            return guild

    def get(self, name: str) -> Optional[Guild]:
        return self._guilds.get(name)

    def put(self, guild: Guild) -> None:
        """Cache a guild created at runtime (e.g. a freshly founded one)."""
        self._guilds[guild.name] = guild

    def __contains__(self, name: str) -> bool:
        return name in self._guilds

    def __len__(self) -> int:
        return len(self._guilds)

    def names(self) -> List[str]:
        return list(self._guilds)
