"""
Idempotency guard: at most one successful notification per (channel, kind, recipient, day).
Prior failed attempts never block a retry under the same key.
"""
import logging
from datetime import date

from rentdash.core.exceptions import LogWriteError
from rentdash.core.notification_log import NotificationLogStore, NotificationRecord
from rentdash.core.utils import yyyymmdd

logger = logging.getLogger(__name__)

# Kinds used in idempotency keys
TENANT_RENT_DUE = "tenant-due"
OWNER_RENT_DUE = "owner-consolidated"
TENANT_CONTRACT_EXPIRING = "tenant-expiring"
OWNER_CONTRACT_EXPIRING = "owner-expiring"


def build_idempotency_key(channel: str, kind: str, day: date, identity: str) -> str:
    """
    "{channel}-{kind}-{YYYYMMDD}-{identity}".
    identity is the property id for tenant messages and the owner's phone for owner messages.
    """
    return f"{channel}-{kind}-{yyyymmdd(day)}-{identity}"


class IdempotencyGuard:
    def __init__(self, store: NotificationLogStore):
        self._store = store

    async def has_succeeded(self, key: str) -> bool:
        """True if a 'sent' record exists for this key. Must be checked before any transport call."""
        return await self._store.has_sent(key)

    async def record(self, record: NotificationRecord) -> bool:
        """
        Store the outcome of one attempt; call exactly once, after the transport call resolved.
        Best-effort: a write failure is logged (the attempt loses its idempotency protection) and
        never changes the send outcome. Returns True if the row was stored.
        """
        try:
            stored = await self._store.insert(record)
        except Exception as e:
            err = LogWriteError(f"Could not record notification {record.idempotency_key}: {e}")
            logger.exception("%s; status=%s recipient=%s", err, record.status, record.recipient)
            return False
        if not stored:
            logger.warning(
                "Notification %s was already recorded as sent by a concurrent run (recipient=%s)",
                record.idempotency_key, record.recipient,
            )
        return stored
