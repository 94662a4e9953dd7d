"""
Cron job entry point: rent due today.
Used by the in-process cron loop; the HTTP triggers build the same dispatcher through deps.
"""
import logging

from rentdash.core.config import settings
from rentdash.core.database import get_async_session_maker_instance
from rentdash.core.dispatcher import NotificationDispatcher
from rentdash.core.exceptions import UpstreamQueryError
from rentdash.core.idempotency import IdempotencyGuard
from rentdash.core.notification_log import SqlNotificationLogStore
from rentdash.core.recipients import SqlRecipientResolver
from rentdash.core.sms_transport import build_sms_transport

logger = logging.getLogger(__name__)


def build_dispatcher() -> NotificationDispatcher:
    """Dispatcher wired to the database and Twilio from settings."""
    session_maker = get_async_session_maker_instance()
    return NotificationDispatcher(
        resolver=SqlRecipientResolver(session_maker),
        guard=IdempotencyGuard(SqlNotificationLogStore(session_maker)),
        transport=build_sms_transport(settings),
    )


async def send_rent_due_notifications() -> None:
    """Run the rent-due dispatch once. Errors are logged, never raised, so the cron loop keeps going."""
    logger.info("Cron: send_rent_due_notifications started")
    try:
        summary = await build_dispatcher().dispatch_rent_due()
    except UpstreamQueryError as e:
        logger.error("Cron: could not fetch properties due today: %s", e.message)
        return
    except Exception as e:
        logger.exception("Cron: send_rent_due_notifications failed: %s", e)
        return
    logger.info(
        "Cron: send_rent_due_notifications finished - found=%s tenants=%s owners=%s failed=%s",
        summary.properties_found,
        summary.tenants_sent,
        summary.owners_sent,
        summary.tenants_failed + summary.owners_failed,
    )
