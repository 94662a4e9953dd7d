from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentdash.api.v1.notifications.schemas import NotificationLogItem, NotificationLogResponse
from rentdash.api.v1.notifications.service import list_notifications
from rentdash.core.deps import get_db, verify_cron_secret

router = APIRouter()


@router.get(
    "/",
    response_model=NotificationLogResponse,
    status_code=status.HTTP_200_OK,
    summary="Recent SMS notification attempts",
    description="List notification log rows, newest first. Filter by status, type or idempotency key.",
    tags=["notifications"],
    dependencies=[Depends(verify_cron_secret)],
)
async def get_notifications(
    limit: int = Query(50, ge=1, le=500),
    status_filter: Literal["sent", "failed"] | None = Query(None, alias="status"),
    notification_type: Literal["rent_due", "contract_expiring"] | None = Query(None),
    idempotency_key: str | None = Query(None, min_length=1),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_notifications(
        db,
        limit=limit,
        status=status_filter,
        notification_type=notification_type,
        idempotency_key=idempotency_key,
    )
    items = [NotificationLogItem.model_validate(row) for row in rows]
    return NotificationLogResponse(items=items, count=len(items))
