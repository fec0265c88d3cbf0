"""
Quest progress persistence.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mmo_persistence.core.characters import Player
from mmo_persistence.core.quests import Quest
from mmo_persistence.models.character import CharacterQuest
from mmo_persistence.services.template_registry import TemplateRegistry

from .base_manager import BaseManager


class QuestManager(BaseManager):
    def __init__(self, templates: TemplateRegistry):
        super().__init__()
        self._templates = templates

    async def load_quests(self, db: AsyncSession, player: Player) -> None:
        player.quests = []
        result = await db.execute(
            select(CharacterQuest).where(CharacterQuest.character == player.name)
        )
        for row in result.scalars().all():
            template = self._templates.get_quest(row.name)
            if template is None:
                self._skip_row(
                    CharacterQuest.__tablename__,
                    "stale_reference",
                    "Skipped quest that no longer exists",
                    character=player.name,
                    quest=row.name,
                )
                continue
            player.quests.append(
                Quest(template=template, progress=row.progress, completed=row.completed)
            )

    async def save_quests(self, db: AsyncSession, player: Player) -> None:
        await db.execute(delete(CharacterQuest).where(CharacterQuest.character == player.name))
        db.add_all(
            CharacterQuest(
                character=player.name,
                name=quest.name,
                progress=quest.progress,
                completed=quest.completed,
            )
            for quest in player.quests
        )
        await db.flush()
