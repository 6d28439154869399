from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CostingLineIn(BaseModel):
    """Only quantity, rate and GST are taken from the caller; amounts are re-derived."""

    material_id: str = ""
    name: str = ""
    qty: float = Field(default=0, ge=0)
    rate: float = Field(default=0, ge=0)
    gst_percent: float = Field(default=0, ge=0, le=100)


class CostingSaveIn(BaseModel):
    items: list[CostingLineIn]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {"material_id": "material-id", "name": "Bolt", "qty": 10, "rate": 2.0, "gst_percent": 18}
                ]
            }
        }
    )


class CostingLineOut(BaseModel):
    material_id: str
    name: str
    qty: float
    rate: float
    gst_percent: float
    base: float
    gst: float
    total: float


class CostingOut(BaseModel):
    id: str | None = None
    client_id: str
    items: list[CostingLineOut]
    before_tax: float
    gst: float
    grand: float
    is_manual: bool = False
    persisted: bool = False
    updated_at: datetime
