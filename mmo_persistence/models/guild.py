"""
SQLAlchemy models for guilds.
"""

from sqlalchemy import Column, Integer, String
from .base import Base


class GuildInfo(Base):
    """
    Per-guild data that is not derived from membership.

    The guild master is not stored here; ranks live on the membership rows.
    """

    __tablename__ = "guild_info"

    name = Column(String, primary_key=True)
    notice = Column(String, default="", nullable=False)

    def __repr__(self):
        return f"<GuildInfo(name='{self.name}')>"

    __table_args__ = {"extend_existing": True}


class CharacterGuild(Base):
    """
    Guild membership, one row per character that is in a guild.

    Kept out of the characters table so guilds can be saved on their own and
    a full member replacement clears kicked members automatically.
    """

    __tablename__ = "character_guild"

    character = Column(String, primary_key=True)
    guild = Column(String, nullable=False, index=True)
    rank = Column(Integer, default=0, nullable=False)  # GuildRank value

    def __repr__(self):
        return f"<CharacterGuild(character='{self.character}', guild='{self.guild}', rank={self.rank})>"

    __table_args__ = {"extend_existing": True}
