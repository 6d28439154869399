from pydantic import BaseModel


class OutstandingMaterialOut(BaseModel):
    material_id: str
    material_name: str
    out_qty: int
    in_qty: int
    net_qty: int
    clients: int


class DashboardSummaryOut(BaseModel):
    total_materials: int
    total_stock_units: int
    low_stock_count: int
    low_stock_threshold: int
    total_clients: int
    total_transactions: int
    inventory_value_before_tax: float
    inventory_value_with_gst: float
    outstanding: list[OutstandingMaterialOut]
