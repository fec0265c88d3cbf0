"""
Skill and buff persistence.

Skills come from the player's class: every class skill exists in memory at
level 0 and stored rows only raise learned ones. Template changes therefore
apply to existing characters on their next load. Buffs are resolved against
all skills since they may have been cast by other players.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mmo_persistence.core.characters import Player
from mmo_persistence.core.clock import Clock
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.skills import Buff, Skill, clamp_level
from mmo_persistence.core.timers import end_from_remaining, is_running
from mmo_persistence.models.character import CharacterBuff, CharacterSkill
from mmo_persistence.services.template_registry import TemplateRegistry

from .base_manager import BaseManager

logger = get_logger(__name__)


class SkillsManager(BaseManager):
    """Persists learned skills and active buffs."""

    def __init__(self, templates: TemplateRegistry, clock: Clock):
        super().__init__()
        self._templates = templates
        self._clock = clock

    # =========================================================================
    # Skills
    # =========================================================================

    async def load_skills(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        player.skills = [Skill(template) for template in player.player_class.skill_templates]

        result = await db.execute(
            select(CharacterSkill).where(CharacterSkill.character == player.name)
        )
        for row in result.scalars().all():
            index = player.get_skill_index(row.name)
            if index == -1:
                self._skip_row(
                    CharacterSkill.__tablename__,
                    "stale_reference",
                    "Skipped skill the class no longer has",
                    character=player.name,
                    skill=row.name,
                    class_name=player.class_name,
                )
                continue

            skill = player.skills[index]
            skill.level = clamp_level(row.level, skill.max_level)
            skill.cast_time_end = end_from_remaining(row.cast_time_end, now)
            skill.cooldown_end = end_from_remaining(row.cooldown_end, now)

    async def save_skills(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        await db.execute(delete(CharacterSkill).where(CharacterSkill.character == player.name))

        # Only learned skills
        db.add_all(
            CharacterSkill(
                character=player.name,
                name=skill.name,
                level=skill.level,
                cast_time_end=skill.cast_time_remaining(now),
                cooldown_end=skill.cooldown_remaining(now),
            )
            for skill in player.skills
            if skill.level > 0
        )
        await db.flush()

    # =========================================================================
    # Buffs
    # =========================================================================

    async def load_buffs(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        player.buffs = []

        result = await db.execute(
            select(CharacterBuff).where(CharacterBuff.character == player.name)
        )
        for row in result.scalars().all():
            template = self._templates.get_skill(row.name)
            if template is None:
                self._skip_row(
                    CharacterBuff.__tablename__,
                    "stale_reference",
                    "Skipped buff that no longer exists",
                    character=player.name,
                    buff=row.name,
                )
                continue

            if not template.is_buff:
                self._skip_row(
                    CharacterBuff.__tablename__,
                    "stale_reference",
                    "Skipped buff naming a skill that is not a buff",
                    character=player.name,
                    buff=row.name,
                )
                continue

            player.buffs.append(
                Buff(
                    template=template,
                    level=clamp_level(row.level, template.max_level),
                    buff_time_end=end_from_remaining(row.buff_time_end, now),
                )
            )

    async def save_buffs(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        await db.execute(delete(CharacterBuff).where(CharacterBuff.character == player.name))

        db.add_all(
            CharacterBuff(
                character=player.name,
                name=buff.name,
                level=buff.level,
                buff_time_end=buff.buff_time_remaining(now),
            )
            for buff in player.buffs
            if is_running(buff.buff_time_end, now)
        )
        await db.flush()
