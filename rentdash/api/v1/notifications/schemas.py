from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationLogItem(BaseModel):
    """One SMS send attempt from the notification log."""
    id: UUID
    property_id: str | None = None
    channel: str
    recipient: str
    status: str = Field(..., description="sent | failed")
    message_sid: str | None = None
    error_code: int | None = None
    error_message: str | None = None
    idempotency_key: str
    notification_type: str
    message_body: str
    sent_at: datetime | None = None
    failed_at: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationLogResponse(BaseModel):
    items: list[NotificationLogItem]
    count: int
