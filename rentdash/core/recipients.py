"""
Recipient resolution: turns the database's "due today" / "expiring soon" functions into typed rows.
Rows are validated at this boundary; the rest of the dispatch code never sees raw mappings.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentdash.core.exceptions import UpstreamQueryError

logger = logging.getLogger(__name__)

DUE_TODAY_QUERY = "SELECT * FROM get_properties_due_today()"
EXPIRING_SOON_QUERY = "SELECT * FROM get_contracts_expiring_soon()"


class RecipientRow(BaseModel):
    """Fields shared by every row that names a property, its tenant and its owner."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    property_id: str
    property_name: str
    property_short_code: str | None = None
    tenant_name: str | None = None
    tenant_phone: str | None = None
    owner_phone: str | None = None

    @field_validator("property_id", mode="before")
    @classmethod
    def property_id_as_str(cls, v: Any) -> Any:
        return str(v) if v is not None else v

    @field_validator("property_short_code", "tenant_name", "tenant_phone", "owner_phone", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def has_tenant_contact(self) -> bool:
        return bool(self.tenant_phone and self.tenant_name)


def _as_date(v: Any) -> Any:
    if isinstance(v, datetime):
        return v.date()
    return v


class DueItem(RecipientRow):
    """A property whose rent is due on the day being processed."""
    rent_amount: Decimal | None = None
    currency: str | None = None
    due_date: date

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_only(cls, v: Any) -> Any:
        return _as_date(v)


class ExpiringContract(RecipientRow):
    """A lease contract ending within the configured threshold."""
    expiry_date: date

    @field_validator("expiry_date", mode="before")
    @classmethod
    def expiry_date_only(cls, v: Any) -> Any:
        return _as_date(v)


class RecipientResolver(Protocol):
    async def due_today(self) -> Sequence[DueItem]: ...

    async def expiring_soon(self, threshold_days: int, today: date) -> Sequence[ExpiringContract]: ...


class SqlRecipientResolver:
    """Reads recipients through the database's stored functions."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def _fetch(self, query: str) -> list[dict[str, Any]]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(text(query))
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.error("Recipient query failed: %s (%s)", query, e)
            raise UpstreamQueryError(str(e), query=query) from e

    async def due_today(self) -> list[DueItem]:
        rows = await self._fetch(DUE_TODAY_QUERY)
        return _validate_rows(DueItem, rows, DUE_TODAY_QUERY)

    async def expiring_soon(self, threshold_days: int, today: date) -> list[ExpiringContract]:
        """
        The database function has a fixed window of its own (30 days); the threshold narrows it.
        Contracts that already ended before today are dropped.
        """
        rows = await self._fetch(EXPIRING_SOON_QUERY)
        contracts = _validate_rows(ExpiringContract, rows, EXPIRING_SOON_QUERY)
        cutoff = today + timedelta(days=threshold_days)
        return [c for c in contracts if today <= c.expiry_date <= cutoff]


def _validate_rows(model: type[RecipientRow], rows: list[dict[str, Any]], query: str) -> list:
    """Rows that do not fit the model are logged and left out; the others are still dispatched."""
    items = []
    for index, row in enumerate(rows):
        try:
            items.append(model.model_validate(row))
        except ValidationError as e:
            logger.error(
                "Skipping row %s from %s (property_id=%s): %s",
                index, query, row.get("property_id"), e,
            )
    return items
