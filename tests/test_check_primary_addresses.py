"""Tests for the primary-address audit script."""
import pytest

from app.crm.db import build_engine, session_scope
from app.crm.models import Base
from app.crm.modules.customers.models import Address
from app.crm.modules.customers.service import create_customer, add_address, find_primary_violations
from app.crm.modules.customers.validation import CustomerFields
from scripts import check_primary_addresses
from scripts._db_utils import script_store


@pytest.fixture()
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path/'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    engine = build_engine(url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    return url


def _break_primary(store, customer_id):
    with session_scope(store) as s:
        s.query(Address).filter(Address.customer_id == customer_id).update({"is_primary": False})


def test_report_only_exits_nonzero(db_url, monkeypatch, capsys):
    with script_store(db_url) as store:
        cid = create_customer(store, CustomerFields("Jane", "Doe", "5551234567", "jane@x.com"), "1 Main St")
        _break_primary(store, cid)

    monkeypatch.setattr("sys.argv", ["check_primary_addresses.py"])
    assert check_primary_addresses.main() == 1
    assert cid in capsys.readouterr().out

    with script_store(db_url) as store:
        assert find_primary_violations(store) == [(cid, 0)]


def test_fix_promotes_one_address(db_url, monkeypatch):
    with script_store(db_url) as store:
        cid = create_customer(store, CustomerFields("Jane", "Doe", "5551234567", "jane@x.com"), "1 Main St")
        add_address(store, cid, "2 Side Ave")
        _break_primary(store, cid)

    monkeypatch.setattr("sys.argv", ["check_primary_addresses.py", "--fix"])
    assert check_primary_addresses.main() == 0

    with script_store(db_url) as store:
        assert find_primary_violations(store) == []


def test_healthy_store_is_ok(db_url, monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["check_primary_addresses.py"])
    assert check_primary_addresses.main() == 0
    assert "OK" in capsys.readouterr().out
