from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from matcount.core.id_utils import generate_shortuuid
from matcount.db.base import Base


class Material(Base):
    __tablename__ = "materials"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False)

    # Cached projection of the inventory ledger; see inventory_service.
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    unit_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    gst_percent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_materials_category_name", "category", "name"),
        Index("ix_materials_quantity", "quantity"),
    )
