"""
SQLAlchemy model for accounts.
"""

from sqlalchemy import Column, String, Boolean, DateTime
from .base import Base


class Account(Base):
    __tablename__ = "accounts"

    name = Column(String, primary_key=True)
    # Compared as given; hashing belongs to whoever sits in front of the engine
    password = Column(String, nullable=False)

    # Timestamps for registration / activity statistics
    created = Column(DateTime(timezone=True), nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=False)

    banned = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Account(name='{self.name}', banned={self.banned})>"

    __table_args__ = {"extend_existing": True}
