"""
Item templates and the item instances stored in inventory and equipment slots.

Templates are content definitions looked up by their stable name. Instances
carry the mutable fields that are persisted per slot.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ItemTemplate:
    """Static definition of an item."""

    name: str
    max_durability: int = 100

    # Bonuses applied while equipped
    health_bonus: int = 0
    mana_bonus: int = 0


@dataclass
class Item:
    """One concrete item, created from a template."""

    template: ItemTemplate
    durability: Optional[int] = None
    summoned_health: int = 0
    summoned_level: int = 0
    summoned_experience: int = 0

    def __post_init__(self):
        if self.durability is None:
            self.durability = self.template.max_durability

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def max_durability(self) -> int:
        return self.template.max_durability


@dataclass
class ItemSlot:
    """An inventory or equipment position holding `amount` of one item."""

    item: Optional[Item] = None
    amount: int = 0

    @property
    def is_empty(self) -> bool:
        return self.item is None or self.amount <= 0


def empty_slots(count: int) -> List[ItemSlot]:
    return [ItemSlot() for _ in range(count)]


# Equipment positions every class has unless it declares its own
DEFAULT_EQUIPMENT_SLOTS = (
    "head",
    "chest",
    "legs",
    "feet",
    "weapon",
    "shield",
    "ring",
    "amulet",
)
