import logging
import secrets
from typing import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from rentdash.core.config import settings
from rentdash.core.database import async_session_maker
from rentdash.core.dispatcher import NotificationDispatcher
from rentdash.core.exceptions import AuthError
from rentdash.cron.notifications import build_dispatcher

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def verify_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """
    Compare the bearer token with CRON_SECRET.
    With no CRON_SECRET configured every request is allowed (local development only).
    """
    cron_secret = settings.CRON_SECRET
    if not cron_secret:
        logger.warning("CRON_SECRET not set - allowing request without authorization (development only)")
        return
    token = credentials.credentials if credentials is not None else ""
    if not token or not secrets.compare_digest(token.encode("utf-8"), cron_secret.encode("utf-8")):
        logger.error("Invalid cron authorization")
        raise AuthError("Invalid or missing bearer token")


def get_dispatcher() -> NotificationDispatcher:
    return build_dispatcher()
