import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable

from sqlalchemy import func, select

from mmo_persistence.core.characters import Player, PlayerClass, Position
from mmo_persistence.core.items import Item, ItemSlot
from mmo_persistence.core.quests import Quest
from mmo_persistence.core.skills import Buff
from mmo_persistence.services.persistence_engine import PersistenceEngine
from mmo_persistence.services.template_registry import TemplateRegistry
from mmo_persistence.services.world import BoundedWorld
from mmo_persistence.tests.utils.content import (
    BLESSING,
    HEALTH_POTION,
    IRON_SWORD,
    LEATHER_CAP,
    LOST_LETTER,
    MAGE,
    WARRIOR,
    WOLF_HUNT,
)
from mmo_persistence.tests.utils.time_mock import FrozenClock


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(1000.0)


@pytest.fixture
def templates() -> TemplateRegistry:
    registry = TemplateRegistry()
    registry.register_items([HEALTH_POTION, IRON_SWORD, LEATHER_CAP])
    registry.register_quests([WOLF_HUNT, LOST_LETTER])
    registry.register_class(WARRIOR)
    registry.register_class(MAGE)
    return registry


@pytest.fixture
def world() -> BoundedWorld:
    return BoundedWorld(
        bounds_min=(-100.0, -10.0, -100.0),
        bounds_max=(100.0, 50.0, 100.0),
        start_positions=[(0.0, 0.0, 0.0), (50.0, 0.0, 50.0)],
    )


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    # File database so every session gets its own connection and real
    # transaction isolation
    return f"sqlite+aiosqlite:///{tmp_path / 'persistence.db'}"


@pytest_asyncio.fixture
async def engine(database_url, templates, world, clock) -> AsyncGenerator[PersistenceEngine, None]:
    """A connected persistence engine on a fresh SQLite database."""
    persistence = PersistenceEngine(
        database_url=database_url,
        templates=templates,
        world=world,
        clock=clock,
    )
    await persistence.connect()

    yield persistence

    await persistence.dispose()


@pytest.fixture
def count_rows(engine: PersistenceEngine):
    """Count rows of `model` belonging to a character."""

    async def _count_rows(model, character: str) -> int:
        async with engine.session_factory() as session:
            return await session.scalar(
                select(func.count()).select_from(model).where(model.character == character)
            )

    return _count_rows


# =============================================================================
# Players
# =============================================================================


@pytest.fixture
def make_player() -> Callable[..., Player]:
    """Factory for a fresh player of a given class."""

    def _make_player(
        name: str,
        account: str = "account_one",
        player_class: PlayerClass = WARRIOR,
        **fields,
    ) -> Player:
        player = player_class.create_player(name, account)
        for key, value in fields.items():
            setattr(player, key, value)
        return player

    return _make_player


@pytest.fixture
def equipped_warrior(make_player, clock) -> Player:
    """A warrior with something in every persisted feature."""
    player = make_player(
        "Aldric",
        level=12,
        strength=14,
        intelligence=3,
        experience=4500,
        skill_experience=320,
        gold=999,
        coins=25,
        position=Position(10.0, 0.0, -20.0),
    )
    player.inventory[0] = ItemSlot(item=Item(HEALTH_POTION), amount=5)
    player.inventory[3] = ItemSlot(
        item=Item(
            IRON_SWORD,
            durability=80,
            summoned_health=40,
            summoned_level=2,
            summoned_experience=1234,
        ),
        amount=1,
    )
    player.equipment[0] = ItemSlot(item=Item(LEATHER_CAP, durability=45), amount=1)
    player.equipment[4] = ItemSlot(item=Item(IRON_SWORD), amount=1)

    now = clock.now()
    player.item_cooldowns["potion"] = now + 30.0

    cleave = player.skills[player.get_skill_index("Cleave")]
    cleave.level = 3
    cleave.cooldown_end = now + 8.0

    player.buffs.append(Buff(BLESSING, level=2, buff_time_end=now + 45.0))
    player.quests.append(Quest(WOLF_HUNT, progress=4))
    player.quests.append(Quest(LOST_LETTER, progress=1, completed=True))

    # Assign vitals after equipment and buffs, as the game does
    player.health = 130
    player.mana = 30
    return player

