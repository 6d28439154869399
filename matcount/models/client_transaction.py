from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from matcount.core.id_utils import generate_shortuuid
from matcount.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientTransaction(Base):
    """
    Dispatch ("out") or return ("in") of material for a client.

    Append-only; there is no update or delete path.
    """
    __tablename__ = "client_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    client_id: Mapped[str] = mapped_column(String(36), index=True)
    direction: Mapped[str] = mapped_column(String(3), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # [{"material_id", "material_name", "quantity"}]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_client_transactions_client_created_at", "client_id", "created_at"),
    )
