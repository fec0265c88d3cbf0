"""
SQLAlchemy models for characters and their per-character sub-tables.

Every sub-table is keyed by the character name plus a feature key and is
rewritten in full on each save, so none of them carry surrogate ids.
Durations are stored as seconds remaining at save time.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    BigInteger,
    Float,
    DateTime,
    func,
)
from .base import Base


class Character(Base):
    __tablename__ = "characters"

    name = Column(String, primary_key=True)
    account = Column(String, nullable=False, index=True)
    class_name = Column(String, nullable=False)

    # Position
    x = Column(Float, default=0.0, nullable=False)
    y = Column(Float, default=0.0, nullable=False)
    z = Column(Float, default=0.0, nullable=False)

    # Stats
    level = Column(Integer, default=1, nullable=False)
    health = Column(Integer, default=0, nullable=False)
    mana = Column(Integer, default=0, nullable=False)
    strength = Column(Integer, default=0, nullable=False)
    intelligence = Column(Integer, default=0, nullable=False)
    experience = Column(BigInteger, default=0, nullable=False)
    skill_experience = Column(BigInteger, default=0, nullable=False)

    # Currency
    gold = Column(BigInteger, default=0, nullable=False)
    coins = Column(BigInteger, default=0, nullable=False)

    gamemaster = Column(Boolean, default=False, nullable=False)

    # External tools can treat `online and last_saved within a minute` as
    # online, which survives server crashes
    online = Column(Boolean, default=False, nullable=False)
    last_saved = Column(DateTime(timezone=True), nullable=True)

    # Soft delete keeps the name reserved
    deleted = Column(Boolean, default=False, nullable=False)

    # Only used to list an account's characters in creation order
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Character(name='{self.name}', account='{self.account}', level={self.level})>"

    __table_args__ = {"extend_existing": True}


class ItemSlotColumns:
    """Row layout shared by inventory and equipment."""

    character = Column(String, primary_key=True)
    slot = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)  # ItemTemplate name
    amount = Column(Integer, default=1, nullable=False)
    durability = Column(Integer, default=0, nullable=False)
    summoned_health = Column(Integer, default=0, nullable=False)
    summoned_level = Column(Integer, default=0, nullable=False)
    summoned_experience = Column(BigInteger, default=0, nullable=False)

    def __repr__(self):
        return f"<{type(self).__name__}(character='{self.character}', slot={self.slot}, name='{self.name}', amount={self.amount})>"


class CharacterInventory(ItemSlotColumns, Base):
    __tablename__ = "character_inventory"
    __table_args__ = {"extend_existing": True}


class CharacterEquipment(ItemSlotColumns, Base):
    """Same layout as inventory, separate slot numbering."""

    __tablename__ = "character_equipment"
    __table_args__ = {"extend_existing": True}


class CharacterItemCooldown(Base):
    __tablename__ = "character_itemcooldowns"

    character = Column(String, primary_key=True)
    category = Column(String, primary_key=True)
    cooldown_end = Column(Float, nullable=False)  # seconds remaining

    def __repr__(self):
        return f"<CharacterItemCooldown(character='{self.character}', category='{self.category}', remaining={self.cooldown_end})>"

    __table_args__ = {"extend_existing": True}


class CharacterSkill(Base):
    __tablename__ = "character_skills"

    character = Column(String, primary_key=True)
    name = Column(String, primary_key=True)  # SkillTemplate name
    level = Column(Integer, default=1, nullable=False)
    cast_time_end = Column(Float, default=0.0, nullable=False)  # seconds remaining
    cooldown_end = Column(Float, default=0.0, nullable=False)  # seconds remaining

    def __repr__(self):
        return f"<CharacterSkill(character='{self.character}', name='{self.name}', level={self.level})>"

    __table_args__ = {"extend_existing": True}


class CharacterBuff(Base):
    __tablename__ = "character_buffs"

    character = Column(String, primary_key=True)
    name = Column(String, primary_key=True)  # SkillTemplate name
    level = Column(Integer, default=1, nullable=False)
    buff_time_end = Column(Float, nullable=False)  # seconds remaining

    def __repr__(self):
        return f"<CharacterBuff(character='{self.character}', name='{self.name}', level={self.level})>"

    __table_args__ = {"extend_existing": True}


class CharacterQuest(Base):
    __tablename__ = "character_quests"

    character = Column(String, primary_key=True)
    name = Column(String, primary_key=True)  # QuestTemplate name
    progress = Column(Integer, default=0, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<CharacterQuest(character='{self.character}', name='{self.name}', completed={self.completed})>"

    __table_args__ = {"extend_existing": True}
