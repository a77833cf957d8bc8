from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text, Index
from .db import Base


def utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False, index=True)
    player = Column(String(255), nullable=False, index=True)
    added_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    manufacturer = Column(String(255), nullable=False)
    card_set = Column(String(255))
    subset = Column(String(255))
    type = Column(String(64), nullable=False)
    on_card_code = Column(String(64), nullable=False)
    sport = Column(String(64), nullable=False)
    tags = Column(JSON(none_as_null=True))  # ordered list of strings
    notes = Column(Text)
    grade = Column(String(64))
    price_paid = Column(Float)
    market_price = Column(Float)
    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_card_year_player", "year", "player"),
    )

    def __repr__(self) -> str:
        return f"<Card {self.id} {self.year} {self.player!r}>"
