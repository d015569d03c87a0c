"""
SQLAlchemy ORM Model for the review state store.

A single key-value table holding serialized card states and the
review progress mapping as text.
"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoreEntry(Base):
    """
    One keyed text entry.

    Keys look like 'sm2:<card_id>' for card states and 'review_progress'
    for the progress mapping.
    """
    __tablename__ = 'review_store'

    key = Column(String(255), primary_key=True, nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<StoreEntry({self.key})>"
