"""
SQLAlchemy model for pending item mall orders.
"""

from sqlalchemy import Column, Integer, String, BigInteger, Boolean
from .base import Base


class CharacterOrder(Base):
    """
    Coins bought outside the game, waiting to be credited.

    Rows are written by an external shop and only ever flagged as processed,
    never deleted, so support can audit them.
    """

    __tablename__ = "character_orders"

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    character = Column(String, nullable=False, index=True)
    coins = Column(BigInteger, nullable=False)
    processed = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<CharacterOrder(order_id={self.order_id}, character='{self.character}', coins={self.coins}, processed={self.processed})>"

    __table_args__ = {"extend_existing": True}
