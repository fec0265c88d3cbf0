"""
Registry of players currently in the world, keyed by character name.

The guild loader prefers a member's live level over the stored one when the
member is online.
"""

from typing import Dict, List, Optional

from mmo_persistence.core.characters import Player
from mmo_persistence.core.logging_config import get_logger

logger = get_logger(__name__)


class OnlineRegistry:
    def __init__(self):
        self._players: Dict[str, Player] = {}

    def register(self, player: Player) -> None:
        self._players[player.name] = player
        logger.debug("Player registered online", extra={"character": player.name})

    def unregister(self, name: str) -> None:
        self._players.pop(name, None)

    def get(self, name: str) -> Optional[Player]:
        return self._players.get(name)

    def is_online(self, name: str) -> bool:
        return name in self._players

    def all(self) -> List[Player]:
        return list(self._players.values())

    def __len__(self) -> int:
        return len(self._players)
