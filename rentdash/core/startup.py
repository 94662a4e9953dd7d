"""
Startup utilities for the application.
"""
import logging
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from rentdash.core.config import settings
from rentdash.core.database import get_async_session_maker_instance

logger = logging.getLogger(__name__)


async def ensure_rent_notifications_table() -> bool:
    """Check that the notification log table exists. Without it no send can be deduplicated."""
    try:
        async_session_maker = get_async_session_maker_instance()
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1 FROM rent_notifications LIMIT 1"))
            return True
    except (ProgrammingError, OperationalError) as e:
        logger.warning(
            "rent_notifications table not reachable (%s). Please run 'alembic upgrade head' to create it.", e
        )
        return False
    except Exception as e:
        logger.error(f"Unexpected error while checking rent_notifications table: {e}", exc_info=True)
        return False


def warn_if_unprotected() -> None:
    if not settings.CRON_SECRET:
        logger.warning(
            "CRON_SECRET is not set: notification endpoints accept unauthenticated requests. "
            "Only acceptable for local development (ENVIRONMENT=%s).",
            settings.ENVIRONMENT,
        )
