"""
Notification log store: persists one RentNotification row per send attempt.
A partial unique index allows a single status='sent' row per idempotency_key; inserting a second one
is reported as a conflict instead of an error.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rentdash.core.utils import utc_now
from rentdash.models.enums import NotificationChannel, NotificationStatus
from rentdash.models.rent_notification import RentNotification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationRecord:
    idempotency_key: str
    notification_type: str
    recipient: str
    status: str
    message_body: str
    property_id: str | None = None
    channel: str = NotificationChannel.sms.value
    message_sid: str | None = None
    error_code: int | None = None
    error_message: str | None = None
    sent_at: datetime | None = None
    failed_at: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def sent(cls, *, message_sid: str, **kwargs) -> NotificationRecord:
        now = utc_now()
        return cls(
            status=NotificationStatus.sent.value,
            message_sid=message_sid,
            sent_at=now,
            created_at=now,
            **kwargs,
        )

    @classmethod
    def failed(cls, *, error_code: int | None, error_message: str | None, **kwargs) -> NotificationRecord:
        now = utc_now()
        return cls(
            status=NotificationStatus.failed.value,
            error_code=error_code,
            error_message=error_message,
            failed_at=now,
            created_at=now,
            **kwargs,
        )

    @property
    def is_sent(self) -> bool:
        return self.status == NotificationStatus.sent.value


class NotificationLogStore(Protocol):
    async def has_sent(self, idempotency_key: str) -> bool: ...

    async def insert(self, record: NotificationRecord) -> bool:
        """Insert the row. Return False if a 'sent' row for the same key already exists."""
        ...


class SqlNotificationLogStore:
    """RentNotification table access. Each call uses its own session so concurrent sends never share one."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def has_sent(self, idempotency_key: str) -> bool:
        async with self._session_maker() as session:
            result = await session.execute(
                select(RentNotification.id).where(
                    RentNotification.idempotency_key == idempotency_key,
                    RentNotification.status == NotificationStatus.sent.value,
                ).limit(1)
            )
            return result.scalar_one_or_none() is not None

    async def insert(self, record: NotificationRecord) -> bool:
        async with self._session_maker() as session:
            session.add(RentNotification(**asdict(record)))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                if record.is_sent:
                    return False
                raise
            return True
