"""
Inventory and equipment persistence.

Both use the same row layout and protocol on separate tables:
- load: one query for all of a character's rows, each placed into its slot
- save: delete every row of the character, insert one row per filled slot

Deleting everything instead of updating per slot guarantees there are never
leftover rows from an earlier save.
"""

from abc import ABC, abstractmethod
from typing import List, Type

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mmo_persistence.core.characters import Player
from mmo_persistence.core.items import Item, ItemSlot, empty_slots
from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.models.character import (
    CharacterEquipment,
    CharacterInventory,
    ItemSlotColumns,
)
from mmo_persistence.services.template_registry import TemplateRegistry

from .base_manager import BaseManager

logger = get_logger(__name__)


class ItemSlotManager(BaseManager, ABC):
    """Maps a list of item slots onto one slot table."""

    model: Type[ItemSlotColumns]

    def __init__(self, templates: TemplateRegistry):
        super().__init__()
        self._templates = templates

    @abstractmethod
    def _capacity(self, player: Player) -> int:
        """Number of slots the player currently has."""
        pass

    @abstractmethod
    def _get_slots(self, player: Player) -> List[ItemSlot]:
        pass

    @abstractmethod
    def _set_slots(self, player: Player, slots: List[ItemSlot]) -> None:
        pass

    async def _load_slots(self, db: AsyncSession, player: Player) -> None:
        model = self.model
        table = model.__tablename__
        capacity = self._capacity(player)
        slots = empty_slots(capacity)

        result = await db.execute(select(model).where(model.character == player.name))
        for row in result.scalars().all():
            if row.slot < 0 or row.slot >= capacity:
                self._skip_row(
                    table,
                    "out_of_range",
                    "Skipped slot beyond current capacity",
                    character=player.name,
                    slot=row.slot,
                    capacity=capacity,
                )
                continue

            template = self._templates.get_item(row.name)
            if template is None:
                self._skip_row(
                    table,
                    "stale_reference",
                    "Skipped item that no longer exists",
                    character=player.name,
                    slot=row.slot,
                    item=row.name,
                )
                continue

            item = Item(
                template=template,
                durability=min(row.durability, template.max_durability),
                summoned_health=row.summoned_health,
                summoned_level=row.summoned_level,
                summoned_experience=row.summoned_experience,
            )
            slots[row.slot] = ItemSlot(item=item, amount=row.amount)

        self._set_slots(player, slots)

    async def _save_slots(self, db: AsyncSession, player: Player) -> None:
        model = self.model
        await db.execute(delete(model).where(model.character == player.name))

        rows = []
        for index, slot in enumerate(self._get_slots(player)):
            if slot.is_empty:
                continue
            rows.append(
                model(
                    character=player.name,
                    slot=index,
                    name=slot.item.name,
                    amount=slot.amount,
                    durability=slot.item.durability,
                    summoned_health=slot.item.summoned_health,
                    summoned_level=slot.item.summoned_level,
                    summoned_experience=slot.item.summoned_experience,
                )
            )
        db.add_all(rows)
        await db.flush()


class InventoryManager(ItemSlotManager):
    """Persists the player's inventory."""

    model = CharacterInventory

    def _capacity(self, player: Player) -> int:
        return player.inventory_size

    def _get_slots(self, player: Player) -> List[ItemSlot]:
        return player.inventory

    def _set_slots(self, player: Player, slots: List[ItemSlot]) -> None:
        player.inventory = slots

    async def load_inventory(self, db: AsyncSession, player: Player) -> None:
        await self._load_slots(db, player)

    async def save_inventory(self, db: AsyncSession, player: Player) -> None:
        await self._save_slots(db, player)


class EquipmentManager(ItemSlotManager):
    """Persists the player's equipment. Capacity is the class's slot count."""

    model = CharacterEquipment

    def _capacity(self, player: Player) -> int:
        return player.equipment_slot_count

    def _get_slots(self, player: Player) -> List[ItemSlot]:
        return player.equipment

    def _set_slots(self, player: Player, slots: List[ItemSlot]) -> None:
        player.equipment = slots

    async def load_equipment(self, db: AsyncSession, player: Player) -> None:
        await self._load_slots(db, player)

    async def save_equipment(self, db: AsyncSession, player: Player) -> None:
        await self._save_slots(db, player)
