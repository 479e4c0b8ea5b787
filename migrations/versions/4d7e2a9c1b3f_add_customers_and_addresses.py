"""add customers and addresses

Revision ID: 4d7e2a9c1b3f
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = "4d7e2a9c1b3f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = inspect(bind)
    existing_tables = set(insp.get_table_names())

    def _has_index(table: str, name: str) -> bool:
        try:
            return any(ix.get("name") == name for ix in insp.get_indexes(table))
        except Exception:
            return False

    if "customers" not in existing_tables:
        op.create_table(
            "customers",
            sa.Column("id", sa.String(36), primary_key=True, nullable=False),
            sa.Column("firstName", sa.Text(), nullable=False),
            sa.Column("lastName", sa.Text(), nullable=False),
            sa.Column("phoneNumber", sa.Text(), nullable=False),
            sa.Column("email", sa.Text(), nullable=False),
        )
        existing_tables.add("customers")

    if not _has_index("customers", "idx_customers_email"):
        op.create_index("idx_customers_email", "customers", ["email"])

    if "addresses" not in existing_tables:
        op.create_table(
            "addresses",
            sa.Column("address_id", sa.String(36), primary_key=True, nullable=False),
            sa.Column("customer_id", sa.String(36), nullable=False),
            sa.Column("address", sa.Text(), nullable=False),
            sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        )
        existing_tables.add("addresses")

    insp = inspect(op.get_bind())
    if not _has_index("addresses", "idx_addresses_customer_id"):
        op.create_index("idx_addresses_customer_id", "addresses", ["customer_id"])
    if not _has_index("addresses", "uq_addresses_one_primary"):
        op.create_index(
            "uq_addresses_one_primary",
            "addresses",
            ["customer_id"],
            unique=True,
            sqlite_where=sa.text("is_primary = 1"),
            postgresql_where=sa.text("is_primary"),
        )


def downgrade() -> None:
    op.drop_index("uq_addresses_one_primary", table_name="addresses")
    op.drop_index("idx_addresses_customer_id", table_name="addresses")
    op.drop_table("addresses")

    op.drop_index("idx_customers_email", table_name="customers")
    op.drop_table("customers")
