"""
Relational schema of the persistence engine (eleven tables).
"""

from .base import Base
from .account import Account
from .character import (
    Character,
    CharacterInventory,
    CharacterEquipment,
    CharacterItemCooldown,
    CharacterSkill,
    CharacterBuff,
    CharacterQuest,
)
from .guild import GuildInfo, CharacterGuild
from .order import CharacterOrder

__all__ = [
    "Base",
    "Account",
    "Character",
    "CharacterInventory",
    "CharacterEquipment",
    "CharacterItemCooldown",
    "CharacterSkill",
    "CharacterBuff",
    "CharacterQuest",
    "GuildInfo",
    "CharacterGuild",
    "CharacterOrder",
]
