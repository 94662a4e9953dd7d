from fastapi import APIRouter, Depends, Query, status

from rentdash.api.v1.sms.schemas import DispatchErrorResponse, DispatchResponse
from rentdash.api.v1.sms.service import build_dispatch_response
from rentdash.core.config import settings
from rentdash.core.deps import get_dispatcher, verify_cron_secret
from rentdash.core.dispatcher import NotificationDispatcher

router = APIRouter()


@router.get(
    "/rent-due",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Send rent-due SMS (cron)",
    description=(
        "Send an SMS to every tenant whose rent is due today and one consolidated SMS per owner. "
        "Each notification is sent at most once per day. Bearer CRON_SECRET protected."
    ),
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": DispatchErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": DispatchErrorResponse},
    },
    dependencies=[Depends(verify_cron_secret)],
)
async def send_rent_due_sms(dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    summary = await dispatcher.dispatch_rent_due()
    return build_dispatch_response(
        summary,
        message="SMS notifications sent",
        empty_message="No properties due today",
    )


@router.get(
    "/contracts-expiring",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Send contract-expiry SMS (cron)",
    description=(
        "Notify tenants and owners about lease contracts ending within `days` days "
        "(default CONTRACT_EXPIRY_THRESHOLD_DAYS). Bearer CRON_SECRET protected."
    ),
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": DispatchErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": DispatchErrorResponse},
    },
    dependencies=[Depends(verify_cron_secret)],
)
async def send_contract_expiry_sms(
    days: int | None = Query(None, ge=1, le=365, description="Threshold in days"),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    summary = await dispatcher.dispatch_contract_expiry(days or settings.CONTRACT_EXPIRY_THRESHOLD_DAYS)
    return build_dispatch_response(
        summary,
        message="Contract expiry SMS notifications sent",
        empty_message="No contracts expiring soon",
    )
