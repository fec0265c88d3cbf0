"""
Runtime guild objects.

A guild's member list is derived from the character_guild table; it is never
stored anywhere else.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class GuildRank(IntEnum):
    """Guild ranks, persisted as their integer value."""

    MEMBER = 0
    VICE = 1
    MASTER = 2


@dataclass
class GuildMember:
    name: str
    rank: GuildRank = GuildRank.MEMBER
    level: int = 1
    online: bool = False


@dataclass
class Guild:
    name: str
    notice: str = ""
    members: List[GuildMember] = field(default_factory=list)
