from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from matcount.core.errors import DuplicateKey, NotFound, OverReturn
from matcount.core.id_utils import generate_shortuuid
from matcount.core.observability import log_event
from matcount.models.client import Client
from matcount.models.client_transaction import ClientTransaction
from matcount.models.costing import CostingSnapshot
from matcount.services.costing_service import refresh_costing_snapshot
from matcount.services.inventory_service import (
    StockChange,
    apply_stock_delta,
    get_material_or_404,
    validate_direction,
    validate_quantity,
)
from matcount.services.usage_service import get_client_usage


@dataclass(frozen=True)
class RecordedTransaction:
    transaction: ClientTransaction
    stock: StockChange


def get_client_or_404(db: Session, client_id: str) -> Client:
    client = db.execute(select(Client).where(Client.id == client_id)).scalar_one_or_none()
    if not client:
        raise NotFound("Client not found.")
    return client


def consumer_no_taken(db: Session, consumer_no: str) -> bool:
    return db.execute(
        select(Client.id).where(Client.consumer_no == consumer_no)
    ).scalar_one_or_none() is not None


def _consumer_no_in_use() -> DuplicateKey:
    return DuplicateKey(
        "A client with this consumer number already exists.",
        errors={"consumer_no": ["This consumer number is already in use."]},
    )


def create_client(
    db: Session,
    *,
    name: str,
    address: str,
    plant_capacity: str,
    consumer_no: str,
    avatar_url: str | None = None,
) -> Client:
    if consumer_no_taken(db, consumer_no):
        raise _consumer_no_in_use()
    client = Client(
        id=generate_shortuuid(),
        name=name,
        address=address,
        plant_capacity=plant_capacity,
        consumer_no=consumer_no,
        avatar_url=avatar_url,
    )
    db.add(client)
    # Another request can claim the number between the lookup and the insert.
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise _consumer_no_in_use() from None
    log_event("client_created", client_id=client.id)
    return client


def delete_client(db: Session, client_id: str) -> None:
    """Hard delete. The client's transaction ledger is kept; the derived costing is dropped."""
    client = get_client_or_404(db, client_id)
    db.execute(delete(CostingSnapshot).where(CostingSnapshot.client_id == client_id))
    db.delete(client)
    log_event("client_deleted", client_id=client_id)


def record_transaction(
    db: Session,
    *,
    client_id: str,
    material_id: str,
    quantity: int,
    direction: str,
    material_name: str | None = None,
    reason: str | None = None,
) -> RecordedTransaction:
    """
    Dispatch material to (``out``) or take a return from (``in``) a client.

    Stock movement, ledger line and costing refresh are staged in the same
    session and committed together by the caller.
    """
    validate_direction(direction)
    validate_quantity(quantity)
    get_client_or_404(db, client_id)
    material = get_material_or_404(db, material_id, for_update=True)

    if direction == "in":
        usage = get_client_usage(db, client_id).get(material_id)
        outstanding = usage.net_qty if usage else 0
        if quantity > outstanding:
            raise OverReturn(max_returnable=outstanding, requested=quantity)

    title = reason or ("Client Return" if direction == "in" else "Client Dispatch")
    transaction_id = generate_shortuuid()
    stock = apply_stock_delta(
        db,
        material,
        direction=direction,
        quantity=quantity,
        reason_code="client_return" if direction == "in" else "client_dispatch",
        reference_id=transaction_id,
        note=title,
    )

    transaction = ClientTransaction(
        id=transaction_id,
        client_id=client_id,
        direction=direction,
        title=title,
        items=[
            {
                "material_id": material.id,
                "material_name": material_name or material.name,
                "quantity": quantity,
            }
        ],
    )
    db.add(transaction)
    db.flush()
    refresh_costing_snapshot(db, client_id)

    log_event(
        "client_transaction",
        client_id=client_id,
        material_id=material.id,
        direction=direction,
        quantity=quantity,
        new_stock=stock.new_stock,
    )
    return RecordedTransaction(transaction=transaction, stock=stock)
