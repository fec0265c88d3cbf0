"""
Pending item mall orders.

An external shop appends orders; the game server drains them for a character
and credits the coins. Drained orders are flagged, not deleted, so they stay
available for support and debugging.
"""

from typing import List

from sqlalchemy import select

from mmo_persistence.core.logging_config import get_logger
from mmo_persistence.models.order import CharacterOrder

from .base_manager import BaseManager

logger = get_logger(__name__)


class OrderManager(BaseManager):
    async def drain_unprocessed(self, character_name: str) -> List[int]:
        """
        Mark every unprocessed order of a character as processed.

        Rows are locked for the duration of the transaction where the
        backend supports it, so each order is handed out exactly once.

        Returns:
            Coin amounts of the drained orders, oldest first
        """
        async with self._transaction() as tx:
            result = await tx.session.execute(
                select(CharacterOrder)
                .where(
                    CharacterOrder.character == character_name,
                    CharacterOrder.processed.is_(False),
                )
                .order_by(CharacterOrder.order_id)
                .with_for_update()
            )
            coins = []
            for order in result.scalars().all():
                order.processed = True
                coins.append(order.coins)

        if coins:
            logger.info(
                "Orders drained",
                extra={"character": character_name, "orders": len(coins), "coins": sum(coins)},
            )
        return coins

    async def enqueue(self, character_name: str, coins: int) -> int:
        """Append an unprocessed order. Returns its order id."""
        async with self._transaction() as tx:
            order = CharacterOrder(character=character_name, coins=coins, processed=False)
            tx.session.add(order)
            await tx.session.flush()
            order_id = order.order_id
        return order_id
