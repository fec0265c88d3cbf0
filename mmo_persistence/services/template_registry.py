"""
Template registry - lookup of content definitions by stable name.

Content (items, skills, quests, player classes) is defined elsewhere and
registered here at startup. The persistence engine only ever asks "what is
the template called X", and treats a missing answer as a stale reference.
"""

from typing import Dict, Iterable, Optional

from mmo_persistence.core.characters import PlayerClass
from mmo_persistence.core.items import ItemTemplate
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.core.quests import QuestTemplate
from mmo_persistence.core.skills import SkillTemplate

logger = get_logger(__name__)


class TemplateRegistry:
    """In-memory template lookup, keyed by exact template name."""

    def __init__(self):
        self._items: Dict[str, ItemTemplate] = {}
        self._skills: Dict[str, SkillTemplate] = {}
        self._quests: Dict[str, QuestTemplate] = {}
        self._classes: Dict[str, PlayerClass] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register_items(self, templates: Iterable[ItemTemplate]) -> None:
        for template in templates:
            self._items[template.name] = template

    def register_skills(self, templates: Iterable[SkillTemplate]) -> None:
        for template in templates:
            self._skills[template.name] = template

    def register_quests(self, templates: Iterable[QuestTemplate]) -> None:
        for template in templates:
            self._quests[template.name] = template

    def register_class(self, player_class: PlayerClass) -> None:
        """Register a class and the skills it carries."""
        self._classes[player_class.name] = player_class
        self.register_skills(player_class.skill_templates)

    def remove_item(self, name: str) -> None:
        """Drop an item definition, e.g. when content is retired."""
        self._items.pop(name, None)

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_item(self, name: str) -> Optional[ItemTemplate]:
        return self._items.get(name)

    def get_skill(self, name: str) -> Optional[SkillTemplate]:
        return self._skills.get(name)

    def get_quest(self, name: str) -> Optional[QuestTemplate]:
        return self._quests.get(name)

    @property
    def classes(self) -> Dict[str, PlayerClass]:
        """Class identifier -> class, as passed to character loading."""
        return dict(self._classes)

    def counts(self) -> Dict[str, int]:
        return {
            "items": len(self._items),
            "skills": len(self._skills),
            "quests": len(self._quests),
            "classes": len(self._classes),
        }

