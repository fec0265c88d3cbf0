"""
Item cooldown persistence.

Cooldowns are absolute end times on the server clock at runtime and are
stored as the time remaining, since the clock restarts at zero.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mmo_persistence.core.characters import Player
from mmo_persistence.core.clock import Clock
from mmo_persistence.core.timers import end_from_remaining, remaining_from_end
from mmo_persistence.models.character import CharacterItemCooldown

from .base_manager import BaseManager


class CooldownManager(BaseManager):
    def __init__(self, clock: Clock):
        super().__init__()
        self._clock = clock

    async def load_item_cooldowns(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        result = await db.execute(
            select(CharacterItemCooldown).where(CharacterItemCooldown.character == player.name)
        )
        player.item_cooldowns = {
            row.category: end_from_remaining(row.cooldown_end, now)
            for row in result.scalars().all()
        }

    async def save_item_cooldowns(self, db: AsyncSession, player: Player) -> None:
        now = self._clock.now()
        await db.execute(
            delete(CharacterItemCooldown).where(CharacterItemCooldown.character == player.name)
        )
        for category, end_time in player.item_cooldowns.items():
            remaining = remaining_from_end(end_time, now)
            # Elapsed cooldowns are simply dropped
            if remaining > 0:
                db.add(
                    CharacterItemCooldown(
                        character=player.name,
                        category=category,
                        cooldown_end=remaining,
                    )
                )
        await db.flush()
