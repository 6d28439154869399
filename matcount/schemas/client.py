from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from matcount.schemas.inventory import Direction


class ClientCreateIn(BaseModel):
    name: str
    address: str
    plant_capacity: str
    consumer_no: str
    avatar_url: str | None = Field(default=None, max_length=500)

    @field_validator("name", "address", "plant_capacity")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required.")
        return cleaned

    @field_validator("consumer_no")
    @classmethod
    def validate_consumer_no(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) != 12 or not cleaned.isdigit():
            raise ValueError("Consumer No. must be 12 digits.")
        return cleaned

    @field_validator("avatar_url")
    @classmethod
    def normalize_avatar_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ravi Patel",
                "address": "12 Sun Street, Ahmedabad",
                "plant_capacity": "5 kW",
                "consumer_no": "100200300400",
            }
        }
    )


class ClientOut(BaseModel):
    id: str
    name: str
    consumer_no: str
    address: str
    plant_capacity: str
    avatar_url: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ClientCreateOut(BaseModel):
    success: bool = True
    message: str
    client: ClientOut


class ClientTransactionIn(BaseModel):
    material_id: str = Field(min_length=1)
    material_name: str | None = Field(
        default=None,
        description="Defaults to the material's current name.",
    )
    quantity: int = Field(ge=1)
    direction: Direction
    reason: str | None = Field(default=None, max_length=255)

    @field_validator("material_name", "reason")
    @classmethod
    def normalize_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "material_id": "material-id-here",
                "quantity": 10,
                "direction": "out",
                "reason": "Rooftop install, phase 1",
            }
        }
    )


class ClientTransactionItemOut(BaseModel):
    material_id: str
    material_name: str
    quantity: int


class ClientTransactionOut(BaseModel):
    id: str
    client_id: str
    direction: str
    title: str
    items: list[ClientTransactionItemOut]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClientTransactionCreateOut(BaseModel):
    success: bool = True
    message: str
    transaction: ClientTransactionOut
    new_stock: int


class MaterialUsageOut(BaseModel):
    material_id: str
    material_name: str
    out_qty: int
    in_qty: int
    net_qty: int


class MaterialUsageListOut(BaseModel):
    client_id: str
    usage: list[MaterialUsageOut]


class NetQuantityOut(BaseModel):
    client_id: str
    net_quantity: int
    total_out: int
    total_in: int
