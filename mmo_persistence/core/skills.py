"""
Skill templates, learned skills and active buffs.

Cast, cooldown and buff timers hold absolute end times on the server clock
(see core/clock.py). They are converted to remaining durations on save.
"""

from dataclasses import dataclass

from .timers import remaining_from_end


@dataclass(frozen=True)
class SkillTemplate:
    """Static definition of a skill. Buff skills grant timed bonuses."""

    name: str
    max_level: int = 1

    # Buff skills
    is_buff: bool = False
    health_bonus_per_level: int = 0
    mana_bonus_per_level: int = 0


@dataclass
class Skill:
    """A class skill as known by one player. Level 0 means not learned."""

    template: SkillTemplate
    level: int = 0
    cast_time_end: float = 0.0
    cooldown_end: float = 0.0

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def max_level(self) -> int:
        return self.template.max_level

    def cast_time_remaining(self, now: float) -> float:
        return remaining_from_end(self.cast_time_end, now)

    def cooldown_remaining(self, now: float) -> float:
        return remaining_from_end(self.cooldown_end, now)


@dataclass
class Buff:
    """A timed effect on a player, possibly cast by someone else."""

    template: SkillTemplate
    level: int = 1
    buff_time_end: float = 0.0

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def health_bonus(self) -> int:
        return self.template.health_bonus_per_level * self.level

    @property
    def mana_bonus(self) -> int:
        return self.template.mana_bonus_per_level * self.level

    def buff_time_remaining(self, now: float) -> float:
        return remaining_from_end(self.buff_time_end, now)


def clamp_level(level: int, max_level: int) -> int:
    """Keep a stored level inside 1..max_level (content may have changed)."""
    return max(1, min(level, max_level))
