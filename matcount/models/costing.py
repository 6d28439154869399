from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, String, func
from sqlalchemy.orm import Mapped, mapped_column

from matcount.core.id_utils import generate_shortuuid
from matcount.db.base import Base


class CostingSnapshot(Base):
    """Cached costing for one client. Always re-derivable from the client ledger."""
    __tablename__ = "client_costing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    client_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    # [{"material_id", "name", "qty", "rate", "gst_percent", "base", "gst", "total"}]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    before_tax: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    gst: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    grand: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
