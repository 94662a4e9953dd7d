"""Append-only log of SMS notification attempts, used for duplicate prevention and audit."""
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID

from rentdash.core.database import Base
from rentdash.core.utils import utc_now
from rentdash.models.enums import NotificationStatus


class RentNotification(Base):
    """
    One row per send attempt (sent or failed). Never updated or deleted.
    idempotency_key: "{channel}-{kind}-{YYYYMMDD}-{property_id | owner_phone}".
    At most one row with status='sent' may exist per idempotency_key (partial unique index).
    """
    __tablename__ = "rent_notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(String(64), nullable=True, index=True)  # null for owner-consolidated messages
    channel = Column(String(20), nullable=False)
    recipient = Column(String(32), nullable=False)
    status = Column(String(20), nullable=False)  # sent, failed
    message_sid = Column(String(64), nullable=True)
    error_code = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    idempotency_key = Column(String(255), nullable=False, index=True)
    notification_type = Column(String(50), nullable=False)  # rent_due, contract_expiring
    message_body = Column(Text, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    failed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        Index(
            "uq_rent_notifications_sent_key",
            "idempotency_key",
            unique=True,
            postgresql_where=text(f"status = '{NotificationStatus.sent.value}'"),
        ),
    )
