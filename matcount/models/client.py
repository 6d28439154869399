from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from matcount.core.id_utils import generate_shortuuid
from matcount.db.base import Base


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    consumer_no: Mapped[str] = mapped_column(String(12), nullable=False, unique=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    plant_capacity: Mapped[str] = mapped_column(String(60), nullable=False)  # e.g. "5 kW"
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
