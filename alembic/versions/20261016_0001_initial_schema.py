"""initial schema: materials, clients, ledgers and costing

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261016_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(inspector: sa.Inspector, table_name: str) -> bool:
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _table_exists(inspector, "materials"):
        op.create_table(
            "materials",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("quantity", sa.Integer(), server_default="0", nullable=False),
            sa.Column("unit_price", sa.Float(), nullable=True),
            sa.Column("gst_percent", sa.Float(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_materials_category_name", "materials", ["category", "name"], unique=False)
        op.create_index("ix_materials_quantity", "materials", ["quantity"], unique=False)

    if not _table_exists(inspector, "clients"):
        op.create_table(
            "clients",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=120), nullable=False),
            sa.Column("consumer_no", sa.String(length=12), nullable=False),
            sa.Column("address", sa.String(length=255), nullable=False),
            sa.Column("plant_capacity", sa.String(length=60), nullable=False),
            sa.Column("avatar_url", sa.String(length=500), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("consumer_no"),
        )
        op.create_index(op.f("ix_clients_name"), "clients", ["name"], unique=False)

    if not _table_exists(inspector, "inventory_ledger"):
        op.create_table(
            "inventory_ledger",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("material_id", sa.String(length=36), nullable=False),
            sa.Column("material_name", sa.String(length=255), nullable=False),
            sa.Column("qty_delta", sa.Integer(), nullable=False),
            sa.Column("reason", sa.String(length=50), nullable=False),
            sa.Column("reference_id", sa.String(length=36), nullable=True),
            sa.Column("note", sa.String(length=255), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_inventory_ledger_material_id"), "inventory_ledger", ["material_id"], unique=False)
        op.create_index(
            "ix_inventory_ledger_material_created_at",
            "inventory_ledger",
            ["material_id", "created_at"],
            unique=False,
        )

    if not _table_exists(inspector, "stock_history"):
        op.create_table(
            "stock_history",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("kind", sa.String(length=20), nullable=False),
            sa.Column("direction", sa.String(length=3), nullable=True),
            sa.Column("reason", sa.String(length=255), nullable=True),
            sa.Column("previous_stock", sa.Integer(), nullable=True),
            sa.Column("new_stock", sa.Integer(), nullable=True),
            sa.Column("items", sa.JSON(), nullable=False),
            sa.Column("total_items", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_stock_history_created_at"), "stock_history", ["created_at"], unique=False)

    if not _table_exists(inspector, "client_transactions"):
        op.create_table(
            "client_transactions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("direction", sa.String(length=3), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("items", sa.JSON(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            op.f("ix_client_transactions_client_id"), "client_transactions", ["client_id"], unique=False
        )
        op.create_index(
            "ix_client_transactions_client_created_at",
            "client_transactions",
            ["client_id", "created_at"],
            unique=False,
        )

    if not _table_exists(inspector, "client_costing"):
        op.create_table(
            "client_costing",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("items", sa.JSON(), nullable=False),
            sa.Column("before_tax", sa.Float(), nullable=False),
            sa.Column("gst", sa.Float(), nullable=False),
            sa.Column("grand", sa.Float(), nullable=False),
            sa.Column("is_manual", sa.Boolean(), server_default="0", nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("client_id"),
        )


def downgrade() -> None:
    op.drop_table("client_costing")
    op.drop_index("ix_client_transactions_client_created_at", table_name="client_transactions")
    op.drop_index(op.f("ix_client_transactions_client_id"), table_name="client_transactions")
    op.drop_table("client_transactions")
    op.drop_index(op.f("ix_stock_history_created_at"), table_name="stock_history")
    op.drop_table("stock_history")
    op.drop_index("ix_inventory_ledger_material_created_at", table_name="inventory_ledger")
    op.drop_index(op.f("ix_inventory_ledger_material_id"), table_name="inventory_ledger")
    op.drop_table("inventory_ledger")
    op.drop_index(op.f("ix_clients_name"), table_name="clients")
    op.drop_table("clients")
    op.drop_index("ix_materials_quantity", table_name="materials")
    op.drop_index("ix_materials_category_name", table_name="materials")
    op.drop_table("materials")
