from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from matcount.schemas.common import PaginationMeta

Direction = Literal["in", "out"]


def _clean_reason(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class StockAdjustIn(BaseModel):
    material_id: str = Field(min_length=1)
    direction: Direction
    quantity: int = Field(ge=1)
    reason: str | None = Field(default=None, max_length=255)

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, value: str | None) -> str | None:
        return _clean_reason(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "material_id": "material-id-here",
                "direction": "out",
                "quantity": 20,
                "reason": "Damaged in transit",
            }
        }
    )


class StockAdjustOut(BaseModel):
    success: bool = True
    message: str
    material_id: str
    previous_stock: int
    new_stock: int


class SetQuantityIn(BaseModel):
    material_id: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class SetQuantityOut(BaseModel):
    success: bool = True
    message: str
    material_id: str
    quantity: int


class FillStockIn(BaseModel):
    quantities: dict[str, Annotated[int, Field(ge=0)]] = Field(
        ..., description="Material id to quantity to add. Zero entries are ignored."
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"quantities": {"material-a": 5, "material-b": 3}}}
    )


class StockHistoryItemOut(BaseModel):
    material_id: str
    material_name: str
    quantity_added: int


class StockHistoryOut(BaseModel):
    id: str
    kind: str
    direction: str | None = None
    reason: str | None = None
    previous_stock: int | None = None
    new_stock: int | None = None
    items: list[StockHistoryItemOut]
    total_items: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FillStockOut(BaseModel):
    success: bool = True
    message: str
    history: StockHistoryOut


class InventoryLedgerEntryOut(BaseModel):
    id: str
    material_id: str
    material_name: str
    qty_delta: int
    reason: str
    reference_id: str | None = None
    note: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InventoryLedgerListOut(BaseModel):
    items: list[InventoryLedgerEntryOut]
    pagination: PaginationMeta


class StockLevelOut(BaseModel):
    material_id: str
    stock: int
    cached_quantity: int


class StockRebuildItemOut(BaseModel):
    material_id: str
    name: str
    cached_quantity: int
    ledger_quantity: int


class StockRebuildOut(BaseModel):
    success: bool = True
    message: str
    corrected: list[StockRebuildItemOut]
