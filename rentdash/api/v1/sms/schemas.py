from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecipientResultItem(_CamelModel):
    """Outcome for one tenant or one owner."""
    role: str = Field(..., description="tenant | owner")
    recipient: str | None = None
    outcome: str = Field(..., description="sent | already_sent | failed | skipped")
    property_ids: list[str] = Field(default_factory=list)
    idempotency_key: str | None = None
    message_sid: str | None = None
    error_code: int | None = None
    error: str | None = None


class DispatchResponse(_CamelModel):
    """Aggregate result of one dispatch run. Per-recipient failures never turn this into an error response."""
    success: bool = True
    message: str
    properties_found: int = Field(..., description="Due items (or expiring contracts) returned by the database")
    tenants_sent: int = Field(..., description="Tenants notified, including ones already notified earlier today")
    owners_sent: int = Field(..., description="Owners notified with a consolidated message")
    owners_with_multiple_properties: int = Field(..., description="Owners with more than one item in this run")
    tenants_failed: int = 0
    owners_failed: int = 0
    tenants_skipped: int = Field(0, description="Items without tenant phone or name")
    results: list[RecipientResultItem] = Field(default_factory=list)


class DispatchErrorResponse(BaseModel):
    error: str
    details: str | None = None
