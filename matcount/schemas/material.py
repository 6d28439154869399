from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MaterialOut(BaseModel):
    id: str
    name: str
    description: str
    quantity: int
    category: str
    unit_price: float | None = None
    gst_percent: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MaterialCreateIn(BaseModel):
    name: str
    description: str
    quantity: int = Field(default=0, ge=0)
    category: str | None = None
    new_category: str | None = Field(
        default=None,
        description="Free-form category; takes precedence over `category` when set.",
    )
    unit_price: float | None = Field(default=None, ge=0)
    gst_percent: float | None = Field(default=None, ge=0, le=100)

    @field_validator("name", "description")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required.")
        return cleaned

    @field_validator("category", "new_category")
    @classmethod
    def normalize_optional_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    def resolved_category(self) -> str | None:
        return self.new_category or self.category

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Solar Panel 540W",
                "description": "Mono PERC, half-cut",
                "quantity": 40,
                "category": "Panels",
                "unit_price": 11500.0,
                "gst_percent": 12,
            }
        }
    )


class MaterialUpdateIn(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    unit_price: float | None = Field(default=None, ge=0)
    gst_percent: float | None = Field(default=None, ge=0, le=100)

    @field_validator("name", "category")
    @classmethod
    def validate_non_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Cannot be blank.")
        return cleaned

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()


class MaterialPricingIn(BaseModel):
    material_id: str
    unit_price: float | None = Field(default=None, ge=0)
    gst_percent: float | None = Field(default=None, ge=0, le=100)
    quantity: int | None = Field(default=None, ge=0)


class MaterialPricingBulkIn(BaseModel):
    items: list[MaterialPricingIn]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {"material_id": "material-id", "unit_price": 2.0, "gst_percent": 18},
                    {"material_id": "other-material-id", "quantity": 25},
                ]
            }
        }
    )


class MaterialCreateOut(BaseModel):
    success: bool = True
    message: str
    material: MaterialOut


class MaterialPricingOut(BaseModel):
    success: bool = True
    message: str
    updated: int
