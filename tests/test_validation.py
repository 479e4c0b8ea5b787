"""
Unit tests for customer/address field validation.

Tests cover:
- Individual validators (name, phone, email, required)
- First-failure ordering in check_customer_payload
- Address text admission
"""

import pytest

from app.crm.errors import InputRejected
from app.crm.modules.customers.validation import (
    BAD_EMAIL,
    BAD_NAME,
    BAD_PHONE,
    EMPTY_ADDRESS,
    REQUIRED_FIELD,
    CustomerFields,
    check_address_text,
    check_customer_payload,
    validate_email,
    validate_name,
    validate_phone,
    validate_required,
)


def _payload(**overrides):
    data = {
        "firstName": "Jane",
        "lastName": "Doe",
        "phoneNumber": "5551234567",
        "email": "jane@x.com",
        "address": "1 Main St",
    }
    data.update(overrides)
    return data


class TestValidateName:
    def test_letters_only(self):
        assert validate_name("Jane")
        assert validate_name("o")

    def test_rejects_non_letters(self):
        assert not validate_name("Jane2")
        assert not validate_name("Mary Ann")
        assert not validate_name("O'Brien")
        assert not validate_name("Jane\n")

    def test_rejects_empty(self):
        assert not validate_name("")
        assert not validate_name(None)


class TestValidatePhone:
    def test_exactly_ten_digits(self):
        assert validate_phone("5551234567")

    def test_numbers_are_checked_as_text(self):
        assert validate_phone(5551234567)

    def test_rejects_wrong_length_or_format(self):
        assert not validate_phone("555123456")
        assert not validate_phone("55512345678")
        assert not validate_phone("555-123-4567")
        assert not validate_phone("5551234567\n")
        assert not validate_phone("")


class TestValidateEmail:
    def test_valid_shapes(self):
        assert validate_email("jane@x.com")
        assert validate_email("first.last@mail.example.org")

    def test_requires_dot_in_domain(self):
        assert not validate_email("jane@localhost")

    def test_rejects_whitespace_and_extra_at(self):
        assert not validate_email("jane doe@x.com")
        assert not validate_email("jane@@x.com")
        assert not validate_email("jane@x .com")
        assert not validate_email("@x.com")
        assert not validate_email("")


class TestValidateRequired:
    def test_all_present(self):
        assert validate_required(_payload(), ("firstName", "address"))

    def test_missing_or_blank(self):
        assert not validate_required(_payload(address=""), ("firstName", "address"))
        assert not validate_required(_payload(address="   "), ("address",))
        assert not validate_required({}, ("firstName",))


class TestCheckCustomerPayload:
    def test_accepts_valid_payload(self):
        fields, address = check_customer_payload(_payload(), with_address=True)
        assert fields == CustomerFields("Jane", "Doe", "5551234567", "jane@x.com")
        assert address == "1 Main St"

    def test_address_not_required_for_updates(self):
        data = _payload()
        del data["address"]
        fields, address = check_customer_payload(data, with_address=False)
        assert fields.first_name == "Jane"
        assert address is None

    @pytest.mark.parametrize(
        "overrides, reason, field",
        [
            ({"firstName": ""}, REQUIRED_FIELD, "firstName"),
            ({"address": None}, REQUIRED_FIELD, "address"),
            ({"firstName": "J4ne"}, BAD_NAME, "firstName"),
            ({"lastName": "Doe-Smith"}, BAD_NAME, "lastName"),
            ({"phoneNumber": "12345"}, BAD_PHONE, "phoneNumber"),
            ({"email": "jane.x.com"}, BAD_EMAIL, "email"),
        ],
    )
    def test_rejection_reasons(self, overrides, reason, field):
        with pytest.raises(InputRejected) as exc:
            check_customer_payload(_payload(**overrides), with_address=True)
        assert exc.value.reason == reason
        assert exc.value.field == field

    def test_first_failure_wins(self):
        # Missing field is reported before the bad name and bad email.
        with pytest.raises(InputRejected) as exc:
            check_customer_payload(_payload(firstName="J4ne", email="bad", phoneNumber=""), with_address=True)
        assert exc.value.reason == REQUIRED_FIELD

        with pytest.raises(InputRejected) as exc:
            check_customer_payload(_payload(lastName="D0e", email="bad"), with_address=True)
        assert exc.value.reason == BAD_NAME


class TestCheckAddressText:
    def test_strips_and_accepts(self):
        assert check_address_text("  2 Side Ave ") == "2 Side Ave"

    def test_rejects_empty(self):
        for value in ("", "   ", None):
            with pytest.raises(InputRejected) as exc:
                check_address_text(value)
            assert exc.value.reason == EMPTY_ADDRESS
