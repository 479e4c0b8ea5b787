from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from app.crm.db import get_store
from app.crm.errors import Conflict, CustomerDomainError, InputRejected, NotFound, PersistenceError
from app.crm.modules.customers.models import Address, Customer
from app.crm.modules.customers.service import (
    add_address,
    create_customer,
    delete_address,
    delete_customer,
    get_address,
    get_customer,
    list_addresses,
    list_customers,
    search_customers,
    set_primary_address,
    update_address,
    update_customer,
)
from app.crm.modules.customers.validation import check_address_text, check_customer_payload

bp = Blueprint("customers", __name__)

_STATUS_BY_ERROR: dict[type[CustomerDomainError], int] = {
    InputRejected: 400,
    NotFound: 404,
    Conflict: 409,
    PersistenceError: 500,
}


def _customer_json(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "firstName": c.first_name,
        "lastName": c.last_name,
        "phoneNumber": c.phone_number,
        "email": c.email,
    }


def _address_json(a: Address) -> dict[str, Any]:
    return {
        "addressId": a.address_id,
        "customerId": a.customer_id,
        "address": a.address_text,
        "isPrimary": bool(a.is_primary),
    }


def _payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.errorhandler(CustomerDomainError)
def _domain_error(e: CustomerDomainError):
    status = _STATUS_BY_ERROR.get(type(e), 500)
    body: dict[str, Any] = {"error": e.message}
    if isinstance(e, InputRejected):
        body["reason"] = e.reason
        if e.field:
            body["field"] = e.field
    return jsonify(body), status


# ----------------------------------------------------------------------------
# Customers
# ----------------------------------------------------------------------------

@bp.get("/customers")
def customers_list():
    return jsonify([_customer_json(c) for c in list_customers(get_store())])


@bp.get("/customers/search")
def customers_search():
    def _arg(name: str) -> str | None:
        return (request.args.get(name) or "").strip() or None

    rows = search_customers(
        get_store(),
        name=_arg("name"),
        email=_arg("email"),
        phone=_arg("phoneNumber"),
    )
    return jsonify([_customer_json(c) for c in rows])


@bp.post("/customers")
def customers_create():
    fields, address = check_customer_payload(_payload(), with_address=True)
    customer_id = create_customer(get_store(), fields, address or "")
    return jsonify({"message": "Customer created successfully", "id": customer_id}), 201


@bp.get("/customers/<customer_id>")
def customer_detail(customer_id: str):
    c = get_customer(get_store(), customer_id)
    body = _customer_json(c)
    body["addresses"] = [_address_json(a) for a in c.addresses]
    return jsonify(body)


@bp.put("/customers/<customer_id>")
def customer_update(customer_id: str):
    fields, _ = check_customer_payload(_payload(), with_address=False)
    update_customer(get_store(), customer_id, fields)
    return jsonify({"message": "Customer updated successfully"})


@bp.delete("/customers/<customer_id>")
def customer_delete(customer_id: str):
    delete_customer(get_store(), customer_id)
    return jsonify({"message": "Customer deleted successfully"})


# ----------------------------------------------------------------------------
# Addresses
# ----------------------------------------------------------------------------

@bp.get("/customers/<customer_id>/addresses")
def addresses_list(customer_id: str):
    return jsonify([_address_json(a) for a in list_addresses(get_store(), customer_id)])


@bp.post("/customers/<customer_id>/address")
def address_create(customer_id: str):
    text = check_address_text(_payload().get("address"))
    address_id = add_address(get_store(), customer_id, text)
    return jsonify({"message": "Address added successfully", "addressId": address_id}), 201


@bp.get("/customers/<customer_id>/addresses/<address_id>")
def address_detail(customer_id: str, address_id: str):
    return jsonify(_address_json(get_address(get_store(), customer_id, address_id)))


@bp.put("/customers/<customer_id>/addresses/<address_id>")
def address_update(customer_id: str, address_id: str):
    text = check_address_text(_payload().get("address"))
    update_address(get_store(), customer_id, address_id, text)
    return jsonify({"message": "Address updated successfully"})


@bp.put("/customers/<customer_id>/addresses/<address_id>/primary")
def address_set_primary(customer_id: str, address_id: str):
    set_primary_address(get_store(), customer_id, address_id)
    return jsonify({"message": "Primary Address updated successfully"})


@bp.delete("/customers/<customer_id>/addresses/<address_id>")
def address_delete(customer_id: str, address_id: str):
    delete_address(get_store(), customer_id, address_id)
    return jsonify({"message": "Address deleted successfully"})
