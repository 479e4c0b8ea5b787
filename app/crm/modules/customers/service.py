"""
CUSTOMER / ADDRESS WRITE PATH
=============================

Every mutation here is one unit of work: it opens its own session from the store
handle, commits only if every step succeeded, and rolls back otherwise.

INVARIANTS:
- Every address belongs to an existing customer (FK with ON DELETE CASCADE).
- A customer with addresses has exactly one primary address.
- A customer is created together with its first address, which is primary.
- The primary address is only ever removed by deleting its customer.

Operations that read before they write (primary swap, address delete) first lock
the owning customer row so concurrent writers on the same customer serialize.

Inputs are assumed to have passed validation.check_customer_payload /
check_address_text already.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from collections.abc import Generator

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.crm.db import session_scope
from app.crm.errors import Conflict, NotFound, PersistenceError
from app.crm.modules.customers.models import Address, Customer
from app.crm.modules.customers.validation import CustomerFields

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def _unit_of_work(store: sessionmaker, failure_message: str) -> Generator[Session, None, None]:
    try:
        with session_scope(store) as s:
            yield s
    except SQLAlchemyError as exc:
        logger.exception("%s (transaction rolled back)", failure_message)
        raise PersistenceError(failure_message) from exc


def _lock_customer(s: Session, customer_id: str) -> bool:
    """
    Row-lock the customer for the rest of the transaction (FOR UPDATE is a no-op
    on SQLite, which serializes writers itself). Returns False if it doesn't exist.
    """
    row = (
        s.query(Customer.id)
        .filter(Customer.id == customer_id)
        .with_for_update()
        .one_or_none()
    )
    return row is not None


def _apply_fields(c: Customer, fields: CustomerFields) -> None:
    c.first_name = fields.first_name
    c.last_name = fields.last_name
    c.phone_number = fields.phone_number
    c.email = fields.email


# ----------------------------------------------------------------------------
# Customers
# ----------------------------------------------------------------------------

def create_customer(store: sessionmaker, fields: CustomerFields, address_text: str) -> str:
    customer_id = _new_id()
    with _unit_of_work(store, "Error creating customer") as s:
        c = Customer(id=customer_id)
        _apply_fields(c, fields)
        s.add(c)
        s.flush()
        s.add(
            Address(
                address_id=_new_id(),
                customer_id=customer_id,
                address_text=address_text,
                is_primary=True,
            )
        )
        s.flush()
    logger.info("customer.create id=%s", customer_id)
    return customer_id


def update_customer(store: sessionmaker, customer_id: str, fields: CustomerFields) -> None:
    with _unit_of_work(store, "Error updating customer") as s:
        c = s.get(Customer, customer_id)
        if c is None:
            logger.warning("customer.update not_found id=%s", customer_id)
            raise NotFound("Customer not found")
        _apply_fields(c, fields)
    logger.info("customer.update id=%s", customer_id)


def delete_customer(store: sessionmaker, customer_id: str) -> None:
    with _unit_of_work(store, "Error deleting customer") as s:
        # Addresses go with it via ON DELETE CASCADE.
        deleted = (
            s.query(Customer)
            .filter(Customer.id == customer_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            logger.warning("customer.delete not_found id=%s", customer_id)
            raise NotFound("Customer not found")
    logger.info("customer.delete id=%s", customer_id)


def get_customer(store: sessionmaker, customer_id: str) -> Customer:
    with store() as s:
        c = s.get(Customer, customer_id)
        if c is None:
            raise NotFound("Customer not found")
        return c


def list_customers(store: sessionmaker) -> list[Customer]:
    with store() as s:
        return s.query(Customer).all()


def search_customers(
    store: sessionmaker,
    *,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
) -> list[Customer]:
    """
    Supplied criteria are ANDed; absent or blank ones are ignored.
    name: case-insensitive substring of first or last name. email: exact.
    phone: substring. % and _ in the search text match literally.
    """
    with store() as s:
        query = s.query(Customer)
        if name:
            query = query.filter(
                Customer.first_name.icontains(name, autoescape=True)
                | Customer.last_name.icontains(name, autoescape=True)
            )
        if email:
            query = query.filter(Customer.email == email)
        if phone:
            query = query.filter(Customer.phone_number.contains(phone, autoescape=True))
        return query.all()


# ----------------------------------------------------------------------------
# Addresses
# ----------------------------------------------------------------------------

def _find_address(s: Session, customer_id: str, address_id: str) -> Address | None:
    return (
        s.query(Address)
        .filter(Address.address_id == address_id, Address.customer_id == customer_id)
        .one_or_none()
    )


def add_address(store: sessionmaker, customer_id: str, address_text: str) -> str:
    address_id = _new_id()
    with _unit_of_work(store, "Error adding address") as s:
        if not _lock_customer(s, customer_id):
            logger.warning("address.create customer_not_found customer_id=%s", customer_id)
            raise NotFound("Customer not found")
        s.add(
            Address(
                address_id=address_id,
                customer_id=customer_id,
                address_text=address_text,
                is_primary=False,
            )
        )
        s.flush()
    logger.info("address.create customer_id=%s address_id=%s", customer_id, address_id)
    return address_id


def update_address(store: sessionmaker, customer_id: str, address_id: str, address_text: str) -> None:
    with _unit_of_work(store, "Error updating address") as s:
        a = _find_address(s, customer_id, address_id)
        if a is None:
            logger.warning("address.update not_found customer_id=%s address_id=%s", customer_id, address_id)
            raise NotFound("address not found")
        a.address_text = address_text
    logger.info("address.update customer_id=%s address_id=%s", customer_id, address_id)


def set_primary_address(store: sessionmaker, customer_id: str, address_id: str) -> None:
    with _unit_of_work(store, "Error updating primary address") as s:
        if not _lock_customer(s, customer_id) or _find_address(s, customer_id, address_id) is None:
            logger.warning("address.set_primary not_found customer_id=%s address_id=%s", customer_id, address_id)
            raise NotFound("address not found")
        # Clear before set: the partial unique index allows at most one primary.
        (
            s.query(Address)
            .filter(Address.customer_id == customer_id, Address.is_primary.is_(True))
            .update({"is_primary": False}, synchronize_session=False)
        )
        (
            s.query(Address)
            .filter(Address.customer_id == customer_id, Address.address_id == address_id)
            .update({"is_primary": True}, synchronize_session=False)
        )
    logger.info("address.set_primary customer_id=%s address_id=%s", customer_id, address_id)


def delete_address(store: sessionmaker, customer_id: str, address_id: str) -> None:
    with _unit_of_work(store, "Error deleting address") as s:
        a = _find_address(s, customer_id, address_id) if _lock_customer(s, customer_id) else None
        if a is None:
            logger.warning("address.delete not_found customer_id=%s address_id=%s", customer_id, address_id)
            raise NotFound("address not found")
        if a.is_primary:
            logger.warning("address.delete refused_primary customer_id=%s address_id=%s", customer_id, address_id)
            raise Conflict("cannot delete primary address")
        s.delete(a)
    logger.info("address.delete customer_id=%s address_id=%s", customer_id, address_id)


def get_address(store: sessionmaker, customer_id: str, address_id: str) -> Address:
    with store() as s:
        a = _find_address(s, customer_id, address_id)
        if a is None:
            raise NotFound("address not found")
        return a


def list_addresses(store: sessionmaker, customer_id: str) -> list[Address]:
    with store() as s:
        if s.get(Customer, customer_id) is None:
            raise NotFound("Customer not found")
        return (
            s.query(Address)
            .filter(Address.customer_id == customer_id)
            .order_by(Address.is_primary.desc())
            .all()
        )


def find_primary_violations(store: sessionmaker) -> list[tuple[str, int]]:
    """
    Customers that have addresses but not exactly one primary, as
    (customer_id, primary_count). Empty on a healthy store.
    """
    with store() as s:
        rows = (
            s.query(
                Address.customer_id,
                func.sum(case((Address.is_primary.is_(True), 1), else_=0)),
            )
            .group_by(Address.customer_id)
            .all()
        )
    return [(customer_id, int(n or 0)) for customer_id, n in rows if int(n or 0) != 1]
