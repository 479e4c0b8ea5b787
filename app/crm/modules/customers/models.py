from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.crm.models import Base


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        Index("idx_customers_email", "email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    first_name: Mapped[str] = mapped_column("firstName", Text, nullable=False)
    last_name: Mapped[str] = mapped_column("lastName", Text, nullable=False)
    phone_number: Mapped[str] = mapped_column("phoneNumber", Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)

    # Rows are removed by the database (ON DELETE CASCADE), not by the ORM.
    addresses: Mapped[list["Address"]] = relationship(
        "Address",
        back_populates="customer",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Customer(id='{self.id}', first_name='{self.first_name}', last_name='{self.last_name}')>"


class Address(Base):
    __tablename__ = "addresses"
    __table_args__ = (
        Index("idx_addresses_customer_id", "customer_id"),
        # At most one primary address per customer, enforced by the store.
        Index(
            "uq_addresses_one_primary",
            "customer_id",
            unique=True,
            sqlite_where=text("is_primary = 1"),
            postgresql_where=text("is_primary"),
        ),
    )

    address_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    address_text: Mapped[str] = mapped_column("address", Text, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    customer: Mapped[Customer] = relationship("Customer", back_populates="addresses")

    def __repr__(self) -> str:
        return f"<Address(address_id='{self.address_id}', customer_id='{self.customer_id}', is_primary={self.is_primary})>"
