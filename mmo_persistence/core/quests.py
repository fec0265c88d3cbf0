"""
Quest templates and per-player quest progress.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuestTemplate:
    name: str


@dataclass
class Quest:
    template: QuestTemplate
    progress: int = 0
    completed: bool = False

    @property
    def name(self) -> str:
        return self.template.name
