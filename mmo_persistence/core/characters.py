"""
Player classes and the in-memory player the persistence engine hydrates.

A `PlayerClass` is the registered factory for one stored class identifier.
Loading a character looks its class up once and calls `create_player`; a
class that no longer exists is an explicit load failure.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import settings
from .guilds import Guild
from .items import DEFAULT_EQUIPMENT_SLOTS, ItemSlot, empty_slots
from .quests import Quest
from .skills import Buff, Skill, SkillTemplate
from .timers import remaining_from_end


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_tuple(cls, values) -> "Position":
        x, y, z = values
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class PlayerClass:
    """Static definition of a playable class."""

    name: str
    base_health: int = 100
    base_mana: int = 50
    max_level: int = 100
    inventory_size: int = field(default_factory=lambda: settings.DEFAULT_INVENTORY_SIZE)
    equipment_slots: Tuple[str, ...] = DEFAULT_EQUIPMENT_SLOTS
    skill_templates: Tuple[SkillTemplate, ...] = ()

    def create_player(self, name: str, account: str = "") -> "Player":
        player = Player(name=name, account=account, player_class=self)
        player.fill_empty_slots()
        player.health = player.max_health
        player.mana = player.max_mana
        return player


class Player:
    """
    Runtime state of one character.

    Health and mana are clamped to maxima that depend on equipment and buffs,
    so they must be assigned after those are in place.
    """

    def __init__(self, name: str, account: str, player_class: PlayerClass):
        self.name = name
        self.account = account
        self.player_class = player_class
        self.position = Position()

        self.level = 1
        self.strength = 0
        self.intelligence = 0
        self.experience = 0
        self.skill_experience = 0
        self.gold = 0
        self.coins = 0
        self.is_game_master = False

        self.inventory: List[ItemSlot] = []
        self.equipment: List[ItemSlot] = []
        self.item_cooldowns: Dict[str, float] = {}
        self.skills: List[Skill] = []
        self.buffs: List[Buff] = []
        self.quests: List[Quest] = []
        self.guild: Optional[Guild] = None

        self._health = 0
        self._mana = 0

    def __repr__(self):
        return f"<Player(name='{self.name}', class='{self.class_name}', level={self.level})>"

    @property
    def class_name(self) -> str:
        return self.player_class.name

    @property
    def inventory_size(self) -> int:
        return self.player_class.inventory_size

    @property
    def equipment_slot_count(self) -> int:
        return len(self.player_class.equipment_slots)

    @property
    def in_guild(self) -> bool:
        return self.guild is not None

    # =========================================================================
    # Vitals
    # =========================================================================

    @property
    def max_health(self) -> int:
        bonus = sum(s.item.template.health_bonus for s in self.equipment if not s.is_empty)
        bonus += sum(b.health_bonus for b in self.buffs)
        return self.player_class.base_health + bonus

    @property
    def max_mana(self) -> int:
        bonus = sum(s.item.template.mana_bonus for s in self.equipment if not s.is_empty)
        bonus += sum(b.mana_bonus for b in self.buffs)
        return self.player_class.base_mana + bonus

    @property
    def health(self) -> int:
        return self._health

    @health.setter
    def health(self, value: int) -> None:
        self._health = max(0, min(value, self.max_health))

    @property
    def mana(self) -> int:
        return self._mana

    @mana.setter
    def mana(self, value: int) -> None:
        self._mana = max(0, min(value, self.max_mana))

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_skill_index(self, name: str) -> int:
        for index, skill in enumerate(self.skills):
            if skill.name == name:
                return index
        return -1

    def item_cooldown_remaining(self, category: str, now: float) -> float:
        end_time = self.item_cooldowns.get(category)
        if end_time is None:
            return 0.0
        return remaining_from_end(end_time, now)

    def fill_empty_slots(self) -> None:
        """Size inventory and equipment for this class, all slots empty."""
        self.inventory = empty_slots(self.inventory_size)
        self.equipment = empty_slots(self.equipment_slot_count)
        self.skills = [Skill(template) for template in self.player_class.skill_templates]
