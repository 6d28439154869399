from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import commit_or_raise, get_db
from matcount.core.errors import ValidationError
from matcount.core.observability import log_event
from matcount.models.material import Material
from matcount.schemas.common import ActionOut
from matcount.schemas.material import (
    MaterialCreateIn,
    MaterialCreateOut,
    MaterialOut,
    MaterialPricingBulkIn,
    MaterialPricingOut,
    MaterialUpdateIn,
)
from matcount.services.inventory_service import create_material, get_material_or_404, update_pricing

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get(
    "",
    response_model=list[MaterialOut],
    summary="List materials",
    responses=error_responses(500),
)
def list_materials(db: Session = Depends(get_db)):
    rows = db.execute(select(Material).order_by(Material.category.asc(), Material.name.asc())).scalars().all()
    return [MaterialOut.model_validate(row) for row in rows]


@router.get(
    "/categories",
    response_model=list[str],
    summary="List distinct material categories",
    responses=error_responses(500),
)
def list_categories(db: Session = Depends(get_db)):
    return list(db.execute(select(Material.category).distinct().order_by(Material.category.asc())).scalars())


@router.post(
    "",
    response_model=MaterialCreateOut,
    summary="Create a material",
    responses=error_responses(422, 500),
)
def create_material_route(payload: MaterialCreateIn, db: Session = Depends(get_db)):
    category = payload.resolved_category()
    if not category:
        raise ValidationError.for_field("category", "Category is required.")

    material = create_material(
        db,
        name=payload.name,
        description=payload.description,
        category=category,
        quantity=payload.quantity,
        unit_price=payload.unit_price,
        gst_percent=payload.gst_percent,
    )
    commit_or_raise(db)
    db.refresh(material)
    log_event("material_created", material_id=material.id, quantity=material.quantity)
    return MaterialCreateOut(
        message=f"Material '{material.name}' added successfully.",
        material=MaterialOut.model_validate(material),
    )


@router.put(
    "/pricing",
    response_model=MaterialPricingOut,
    summary="Bulk update unit price, GST and quantity",
    responses=error_responses(404, 422, 500),
)
def update_materials_pricing(payload: MaterialPricingBulkIn, db: Session = Depends(get_db)):
    updated = update_pricing(db, payload.items)
    commit_or_raise(db)
    return MaterialPricingOut(message="Pricing updated successfully.", updated=updated)


@router.get(
    "/{material_id}",
    response_model=MaterialOut,
    summary="Get a material",
    responses=error_responses(404, 500),
)
def get_material(material_id: str, db: Session = Depends(get_db)):
    return MaterialOut.model_validate(get_material_or_404(db, material_id))


@router.patch(
    "/{material_id}",
    response_model=MaterialOut,
    summary="Edit material details or pricing",
    responses=error_responses(404, 422, 500),
)
def update_material(material_id: str, payload: MaterialUpdateIn, db: Session = Depends(get_db)):
    material = get_material_or_404(db, material_id, for_update=True)
    # Quantity is not editable here; it only moves through the stock endpoints.
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "category", "description"):
            continue
        setattr(material, field, value)
    commit_or_raise(db)
    db.refresh(material)
    return MaterialOut.model_validate(material)


@router.delete(
    "/{material_id}",
    response_model=ActionOut,
    summary="Delete a material",
    responses=error_responses(404, 500),
)
def delete_material(material_id: str, db: Session = Depends(get_db)):
    material = get_material_or_404(db, material_id)
    db.delete(material)
    commit_or_raise(db)
    log_event("material_deleted", material_id=material_id)
    return ActionOut(message="Material deleted.")
