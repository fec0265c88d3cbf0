"""
Persistence managers.

Provides focused managers for the different parts of a character:
- AccountManager: login with lazy account creation
- CharacterManager: composite character load/save, soft delete, listing
- InventoryManager / EquipmentManager: item slot tables
- CooldownManager: item cooldowns (stored as remaining time)
- SkillsManager: learned skills and active buffs
- QuestManager: quest progress
- GuildManager / GuildCache: on-demand guild loading and membership
- OrderManager: pending item mall orders
"""

from .base_manager import BaseManager
from .account_manager import AccountManager
from .inventory_manager import InventoryManager, EquipmentManager
from .cooldown_manager import CooldownManager
from .skills_manager import SkillsManager
from .quest_manager import QuestManager
from .guild_cache import GuildCache
from .guild_manager import GuildManager
from .character_manager import CharacterManager
from .order_manager import OrderManager

__all__ = [
    "BaseManager",
    "AccountManager",
    "InventoryManager",
    "EquipmentManager",
    "CooldownManager",
    "SkillsManager",
    "QuestManager",
    "GuildCache",
    "GuildManager",
    "CharacterManager",
    "OrderManager",
]
