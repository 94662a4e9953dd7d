"""Read access to the notification log for reporting."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdash.models.rent_notification import RentNotification


async def list_notifications(
    db: AsyncSession,
    *,
    limit: int = 50,
    status: str | None = None,
    notification_type: str | None = None,
    idempotency_key: str | None = None,
) -> list[RentNotification]:
    """Most recent attempts first."""
    query = select(RentNotification)
    if status:
        query = query.where(RentNotification.status == status)
    if notification_type:
        query = query.where(RentNotification.notification_type == notification_type)
    if idempotency_key:
        query = query.where(RentNotification.idempotency_key == idempotency_key)
    query = query.order_by(RentNotification.created_at.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
