from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from matcount.schemas.costing import CostingLineIn
from matcount.schemas.inventory import Direction


class BackupMaterial(BaseModel):
    id: str
    name: str
    description: str = ""
    quantity: int = Field(default=0, ge=0)
    category: str
    unit_price: float | None = Field(default=None, ge=0)
    gst_percent: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(from_attributes=True)


class BackupClient(BaseModel):
    id: str
    name: str
    consumer_no: str
    address: str
    plant_capacity: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BackupTransactionItem(BaseModel):
    material_id: str = Field(min_length=1)
    material_name: str
    quantity: int = Field(ge=1)


class BackupStockHistoryItem(BaseModel):
    material_id: str = Field(min_length=1)
    material_name: str
    quantity_added: int


class BackupClientTransaction(BaseModel):
    id: str
    client_id: str
    direction: Direction
    title: str
    items: list[BackupTransactionItem]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BackupStockHistory(BaseModel):
    id: str
    kind: str
    direction: str | None = None
    reason: str | None = None
    previous_stock: int | None = None
    new_stock: int | None = None
    items: list[BackupStockHistoryItem]
    total_items: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BackupLedgerEntry(BaseModel):
    id: str
    material_id: str
    material_name: str
    qty_delta: int
    reason: str
    reference_id: str | None = None
    note: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BackupCosting(BaseModel):
    client_id: str
    items: list[CostingLineIn]
    is_manual: bool = False


class BackupData(BaseModel):
    version: int = 1
    exported_at: datetime | None = None
    materials: list[BackupMaterial]
    clients: list[BackupClient]
    stock_history: list[BackupStockHistory]
    client_transactions: list[BackupClientTransaction] = []
    inventory_ledger: list[BackupLedgerEntry] = []
    costing: list[BackupCosting] = []


class RestoreOut(BaseModel):
    success: bool = True
    message: str
    materials: int
    clients: int
    client_transactions: int
    stock_history: int
    inventory_ledger: int


class SeedOut(BaseModel):
    success: bool
    message: str
    materials: int = 0
    clients: int = 0
