from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import get_db
from matcount.schemas.dashboard import DashboardSummaryOut
from matcount.services.dashboard_service import get_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/summary",
    response_model=DashboardSummaryOut,
    summary="Get stock and client summary",
    responses={
        200: {
            "description": "Dashboard summary",
            "content": {
                "application/json": {
                    "example": {
                        "total_materials": 5,
                        "total_stock_units": 730,
                        "low_stock_count": 1,
                        "low_stock_threshold": 10,
                        "total_clients": 4,
                        "total_transactions": 12,
                        "inventory_value_before_tax": 152000.0,
                        "inventory_value_with_gst": 170240.0,
                        "outstanding": [
                            {
                                "material_id": "material-id",
                                "material_name": "Solar Panels",
                                "out_qty": 24,
                                "in_qty": 2,
                                "net_qty": 22,
                                "clients": 2,
                            }
                        ],
                    }
                }
            },
        },
        **error_responses(500),
    },
)
def summary(db: Session = Depends(get_db)):
    return get_summary(db)
