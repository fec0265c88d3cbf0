"""
Guild persistence.

Guilds are loaded on demand: loading a character looks up its membership row
and attaches the cached guild, loading it first if this is the guild's first
member to come online. Loading every guild at startup would cost memory and
time for guilds nobody is using.
"""

import traceback
from functools import partial
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from mmo_persistence.core.characters import Player
from mmo_persistence.core.guilds import Guild, GuildMember, GuildRank
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.transactions import StorageTransaction
from mmo_persistence.models.character import Character
from mmo_persistence.models.guild import CharacterGuild, GuildInfo
from mmo_persistence.services.online_registry import OnlineRegistry

from .base_manager import BaseManager
from .guild_cache import GuildCache

logger = get_logger(__name__)


class GuildManager(BaseManager):
    """Loads, saves and removes guilds; owns the guild cache."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker],
        online_players: OnlineRegistry,
        cache: Optional[GuildCache] = None,
    ):
        super().__init__(session_factory)
        self._online = online_players
        self._cache = cache if cache is not None else GuildCache()

    @property
    def cache(self) -> GuildCache:
        return self._cache

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_on_demand(self, db: AsyncSession, player: Player) -> None:
        """Attach the player's guild, loading and caching it if needed."""
        guild_name = await db.scalar(
            select(CharacterGuild.guild).where(CharacterGuild.character == player.name)
        )
        if guild_name is None:
            player.guild = None
            return

        player.guild = await self._cache.get_or_load(guild_name, partial(self.load_guild, db))

    async def load_guild(self, db: AsyncSession, guild_name: str) -> Guild:
        """Build a guild from storage. Online members report their live level."""
        guild = Guild(name=guild_name)

        info = await db.get(GuildInfo, guild_name)
        if info is not None:
            guild.notice = info.notice

        result = await db.execute(
            select(CharacterGuild)
            .where(CharacterGuild.guild == guild_name)
            .order_by(CharacterGuild.rank.desc(), CharacterGuild.character)
        )
        for row in result.scalars().all():
            member = GuildMember(name=row.character, rank=self._member_rank(guild_name, row))

            online_player = self._online.get(member.name)
            if online_player is not None:
                member.online = True
                member.level = online_player.level
            else:
                level = await db.scalar(
                    select(Character.level).where(Character.name == member.name)
                )
                member.level = level if level is not None else 1

            guild.members.append(member)

        logger.info(
            "Guild loaded",
            extra={"guild": guild_name, "members": len(guild.members)},
        )
        return guild

    def _member_rank(self, guild_name: str, row: CharacterGuild) -> GuildRank:
        try:
            return GuildRank(row.rank)
        except ValueError:
            # Keep the member, demoted to the lowest rank
            self._skip_row(
                CharacterGuild.__tablename__,
                "out_of_range",
                "Unknown guild rank, using member rank",
                guild=guild_name,
                character=row.character,
                rank=row.rank,
            )
            return GuildRank.MEMBER

    async def guild_exists(self, guild_name: str) -> bool:
        async with self._db_session() as db:
            return await db.get(GuildInfo, guild_name) is not None

    # =========================================================================
    # Saving
    # =========================================================================

    async def save_guild(self, guild: Guild, tx: Optional[StorageTransaction] = None) -> None:
        """
        Upsert the guild info and replace its whole member list.

        Runs inside `tx` when given (e.g. as part of a character save),
        otherwise in a transaction of its own.
        """
        try:
            async with self._transaction(tx) as tx:
                db = tx.session

                info = await db.get(GuildInfo, guild.name)
                if info is None:
                    db.add(GuildInfo(name=guild.name, notice=guild.notice))
                else:
                    info.notice = guild.notice

                # Also clears rows of members who moved here from another guild
                # that has not been saved since
                member_names = [member.name for member in guild.members]
                await db.execute(
                    delete(CharacterGuild).where(
                        or_(
                            CharacterGuild.guild == guild.name,
                            CharacterGuild.character.in_(member_names),
                        )
                    )
                )
                db.add_all(
                    CharacterGuild(
                        character=member.name,
                        guild=guild.name,
                        rank=int(member.rank),
                    )
                    for member in guild.members
                )
                await db.flush()
        except Exception as e:
            logger.error(
                "Guild save failed",
                extra={"guild": guild.name, "error": str(e), "traceback": traceback.format_exc()},
            )
            raise

    async def remove_guild(self, guild_name: str) -> None:
        """Delete the guild info and every membership row. The cache keeps its entry."""
        async with self._transaction() as tx:
            await tx.session.execute(delete(GuildInfo).where(GuildInfo.name == guild_name))
            await tx.session.execute(
                delete(CharacterGuild).where(CharacterGuild.guild == guild_name)
            )
        logger.info("Guild removed", extra={"guild": guild_name})
