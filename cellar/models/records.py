from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cellar.db import Base
from cellar.models.wine import WineColor


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WineRecord(Base):
    __tablename__ = "wines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(200))
    vintage: Mapped[int] = mapped_column(Integer)
    producer: Mapped[str] = mapped_column(String(200))
    region: Mapped[str | None] = mapped_column(String(200))
    country: Mapped[str] = mapped_column(String(100))
    grape_variety: Mapped[str | None] = mapped_column(String(200))
    blend_detail: Mapped[str | None] = mapped_column(String(500))
    color: Mapped[WineColor] = mapped_column(SAEnum(WineColor, name="wine_color"))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    purchase_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    purchase_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    drink_by_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rating: Mapped[float | None] = mapped_column(Numeric(2, 1, asdecimal=False))
    notes: Mapped[str | None] = mapped_column(Text)
    wine_link: Mapped[str | None] = mapped_column(String(2048))
    image_url: Mapped[str | None] = mapped_column(String(255))
    favorite: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
