from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from rentdash.core.exceptions import UpstreamQueryError
from rentdash.core.recipients import DueItem, SqlRecipientResolver


class _FakeSession:
    def __init__(self, rows=None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.executed: list[tuple[str, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, statement, params=None):
        self.executed.append((str(statement), params))
        if self.error:
            raise self.error
        result = MagicMock()
        result.mappings.return_value.all.return_value = self.rows
        return result


def _row(**overrides) -> dict:
    row = {
        "property_id": "P1",
        "property_name": "Apartamenti 12",
        "property_short_code": "A12",
        "tenant_name": "Alice",
        "tenant_phone": "+355691111111",
        "owner_phone": "+355699999999",
        "rent_amount": Decimal("250.00"),
        "currency": "EUR",
        "due_date": date(2025, 6, 1),
    }
    row.update(overrides)
    return row


def test_due_item_coerces_blank_strings_and_types() -> None:
    property_id = uuid.uuid4()
    item = DueItem.model_validate(_row(
        property_id=property_id,
        property_short_code="",
        tenant_phone="   ",
        currency=" eur ",
        due_date=datetime(2025, 6, 1, 0, 0),
    ))

    assert item.property_id == str(property_id)
    assert item.property_short_code is None
    assert item.tenant_phone is None
    assert item.currency == "EUR"
    assert item.due_date == date(2025, 6, 1)
    assert item.has_tenant_contact is False


def test_due_item_accepts_iso_date_and_numeric_amount() -> None:
    item = DueItem.model_validate(_row(due_date="2025-06-01", rent_amount=250))

    assert item.due_date == date(2025, 6, 1)
    assert item.rent_amount == Decimal("250")


def test_due_today_maps_rows_in_order() -> None:
    session = _FakeSession(rows=[_row(property_id="P2"), _row(property_id="P1", tenant_name=None)])
    resolver = SqlRecipientResolver(lambda: session)

    items = asyncio.run(resolver.due_today())

    assert [i.property_id for i in items] == ["P2", "P1"]
    assert items[1].tenant_name is None
    assert "get_properties_due_today()" in session.executed[0][0]


def _contract_row(property_id: str, expiry_date) -> dict:
    return {
        "property_id": property_id,
        "property_name": f"Shkalla {property_id}",
        "owner_phone": "+3559",
        "expiry_date": expiry_date,
    }


def test_expiring_soon_calls_function_without_arguments_and_applies_threshold() -> None:
    session = _FakeSession(rows=[
        _contract_row("P1", "2025-06-20"),
        _contract_row("P2", "2025-06-15"),
        _contract_row("P3", datetime(2025, 6, 29, 12, 0)),
        _contract_row("P4", "2025-05-31"),
    ])
    resolver = SqlRecipientResolver(lambda: session)

    contracts = asyncio.run(resolver.expiring_soon(14, date(2025, 6, 1)))

    assert [c.property_id for c in contracts] == ["P1", "P2"]
    assert contracts[0].expiry_date == date(2025, 6, 20)
    statement, params = session.executed[0]
    assert "get_contracts_expiring_soon()" in statement
    assert not params


def test_expiring_soon_keeps_contracts_ending_on_the_cutoff_day() -> None:
    session = _FakeSession(rows=[_contract_row("P1", "2025-07-01"), _contract_row("P2", "2025-06-01")])
    resolver = SqlRecipientResolver(lambda: session)

    contracts = asyncio.run(resolver.expiring_soon(30, date(2025, 6, 1)))

    assert [c.property_id for c in contracts] == ["P1", "P2"]


def test_database_error_becomes_upstream_query_error() -> None:
    session = _FakeSession(error=OperationalError("SELECT", {}, Exception("connection refused")))
    resolver = SqlRecipientResolver(lambda: session)

    with pytest.raises(UpstreamQueryError) as exc_info:
        asyncio.run(resolver.due_today())

    assert "connection refused" in exc_info.value.message


def test_row_with_unexpected_shape_is_skipped(caplog) -> None:
    session = _FakeSession(rows=[
        _row(property_id="P1"),
        _row(property_id="P2", property_name=None),
        _row(property_id="P3"),
    ])
    resolver = SqlRecipientResolver(lambda: session)

    with caplog.at_level(logging.ERROR, logger="rentdash.core.recipients"):
        items = asyncio.run(resolver.due_today())

    assert [i.property_id for i in items] == ["P1", "P3"]
    assert "Skipping row 1" in caplog.text
    assert "property_id=P2" in caplog.text
