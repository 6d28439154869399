from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import commit_or_raise, get_db
from matcount.models.client import Client
from matcount.schemas.client import (
    ClientCreateIn,
    ClientCreateOut,
    ClientOut,
    ClientTransactionCreateOut,
    ClientTransactionIn,
    ClientTransactionOut,
    MaterialUsageListOut,
    MaterialUsageOut,
    NetQuantityOut,
)
from matcount.schemas.common import ActionOut
from matcount.services.client_service import (
    create_client,
    delete_client,
    get_client_or_404,
    record_transaction,
)
from matcount.services.usage_service import get_client_usage, list_client_transactions, net_quantity_totals

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get(
    "",
    response_model=list[ClientOut],
    summary="List clients",
    responses=error_responses(500),
)
def list_clients(db: Session = Depends(get_db)):
    rows = db.execute(select(Client).order_by(Client.name.asc())).scalars().all()
    return [ClientOut.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=ClientCreateOut,
    summary="Create a client",
    responses=error_responses(409, 422, 500, conflict="duplicate_key"),
)
def create_client_route(payload: ClientCreateIn, db: Session = Depends(get_db)):
    client = create_client(db, **payload.model_dump())
    commit_or_raise(db)
    db.refresh(client)
    return ClientCreateOut(
        message=f"Client '{client.name}' added successfully.",
        client=ClientOut.model_validate(client),
    )


@router.get(
    "/{client_id}",
    response_model=ClientOut,
    summary="Get a client",
    responses=error_responses(404, 500),
)
def get_client(client_id: str, db: Session = Depends(get_db)):
    return ClientOut.model_validate(get_client_or_404(db, client_id))


@router.delete(
    "/{client_id}",
    response_model=ActionOut,
    summary="Delete a client",
    responses=error_responses(404, 500),
)
def delete_client_route(client_id: str, db: Session = Depends(get_db)):
    delete_client(db, client_id)
    commit_or_raise(db)
    return ActionOut(message="Client deleted.")


@router.post(
    "/{client_id}/transactions",
    response_model=ClientTransactionCreateOut,
    summary="Dispatch material to, or take a return from, a client",
    responses=error_responses(404, 409, 422, 500, conflict="insufficient_stock"),
)
def create_client_transaction(
    client_id: str,
    payload: ClientTransactionIn,
    db: Session = Depends(get_db),
):
    recorded = record_transaction(
        db,
        client_id=client_id,
        material_id=payload.material_id,
        quantity=payload.quantity,
        direction=payload.direction,
        material_name=payload.material_name,
        reason=payload.reason,
    )
    commit_or_raise(db)
    db.refresh(recorded.transaction)
    action = "returned" if payload.direction == "in" else "dispatched"
    return ClientTransactionCreateOut(
        message=f"{payload.quantity} unit(s) {action}.",
        transaction=ClientTransactionOut.model_validate(recorded.transaction),
        new_stock=recorded.stock.new_stock,
    )


@router.get(
    "/{client_id}/transactions",
    response_model=list[ClientTransactionOut],
    summary="List a client's transactions, newest first",
    responses=error_responses(404, 500),
)
def list_transactions(client_id: str, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    return [ClientTransactionOut.model_validate(row) for row in list_client_transactions(db, client_id)]


@router.get(
    "/{client_id}/material-usage",
    response_model=MaterialUsageListOut,
    summary="Per-material dispatched, returned and net quantities for a client",
    responses=error_responses(404, 500),
)
def get_material_usage(client_id: str, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    usage = sorted(get_client_usage(db, client_id).values(), key=lambda u: u.material_name.casefold())
    return MaterialUsageListOut(
        client_id=client_id,
        usage=[
            MaterialUsageOut(
                material_id=u.material_id,
                material_name=u.material_name,
                out_qty=u.out_qty,
                in_qty=u.in_qty,
                net_qty=u.net_qty,
            )
            for u in usage
        ],
    )


@router.get(
    "/{client_id}/net-quantity",
    response_model=NetQuantityOut,
    summary="Total quantity currently with a client",
    responses=error_responses(404, 500),
)
def get_net_quantity(client_id: str, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    total_out, total_in, net = net_quantity_totals(get_client_usage(db, client_id))
    return NetQuantityOut(client_id=client_id, net_quantity=net, total_out=total_out, total_in=total_in)
