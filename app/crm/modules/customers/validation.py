"""
Field checks for customer and address input.

Pure functions: no I/O, no session. Callers run these before any customer
operation; the operations themselves assume admitted values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from app.crm.errors import InputRejected

_NAME_RE = re.compile(r"^[A-Za-z]+$")
_PHONE_RE = re.compile(r"^[0-9]{10}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

CUSTOMER_FIELDS = ("firstName", "lastName", "phoneNumber", "email")

# Rejection reasons
REQUIRED_FIELD = "required_field"
BAD_NAME = "bad_name"
BAD_PHONE = "bad_phone"
BAD_EMAIL = "bad_email"
EMPTY_ADDRESS = "empty_address"


@dataclass(frozen=True)
class CustomerFields:
    first_name: str
    last_name: str
    phone_number: str
    email: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def validate_name(value: Any) -> bool:
    return bool(_NAME_RE.fullmatch(_text(value)))


def validate_phone(value: Any) -> bool:
    return bool(_PHONE_RE.fullmatch(_text(value)))


def validate_email(value: Any) -> bool:
    return bool(_EMAIL_RE.fullmatch(_text(value)))


def validate_required(payload: dict[str, Any], fields: Iterable[str]) -> bool:
    return all(_text(payload.get(f)).strip() for f in fields)


def check_address_text(value: Any) -> str:
    text = _text(value).strip()
    if not text:
        raise InputRejected("Address can't be empty.", reason=EMPTY_ADDRESS, field="address")
    return text


def check_customer_payload(payload: dict[str, Any], *, with_address: bool) -> tuple[CustomerFields, str | None]:
    """
    Run every customer check in order and raise InputRejected for the first failure.

    Returns the admitted fields plus the address text (None unless with_address).
    """
    required = CUSTOMER_FIELDS + (("address",) if with_address else ())
    if not validate_required(payload, required):
        missing = next(f for f in required if not _text(payload.get(f)).strip())
        raise InputRejected("Missing required fields", reason=REQUIRED_FIELD, field=missing)

    first_name = _text(payload["firstName"])
    last_name = _text(payload["lastName"])
    phone_number = _text(payload["phoneNumber"])
    email = _text(payload["email"])

    if not validate_name(first_name):
        raise InputRejected("Invalid first name. Only letters are allowed.", reason=BAD_NAME, field="firstName")
    if not validate_name(last_name):
        raise InputRejected("Invalid last name. Only letters are allowed.", reason=BAD_NAME, field="lastName")
    if not validate_phone(phone_number):
        raise InputRejected("Invalid phone number. Must be exactly 10 digits.", reason=BAD_PHONE, field="phoneNumber")
    if not validate_email(email):
        raise InputRejected("Invalid email format.", reason=BAD_EMAIL, field="email")

    address = check_address_text(payload["address"]) if with_address else None
    fields = CustomerFields(
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        email=email,
    )
    return fields, address
