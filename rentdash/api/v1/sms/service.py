"""Turns dispatch summaries into API responses."""
from rentdash.api.v1.sms.schemas import DispatchResponse, RecipientResultItem
from rentdash.core.dispatcher import DispatchSummary, RecipientResult


def _result_item(result: RecipientResult) -> RecipientResultItem:
    return RecipientResultItem(
        role=result.role.value,
        recipient=result.recipient,
        outcome=result.outcome.value,
        property_ids=list(result.property_ids),
        idempotency_key=result.idempotency_key,
        message_sid=result.message_sid,
        error_code=result.error_code,
        error=result.error,
    )


def build_dispatch_response(summary: DispatchSummary, *, message: str, empty_message: str) -> DispatchResponse:
    """Same shape for empty and non-empty runs; an empty run reports zero everywhere."""
    return DispatchResponse(
        success=True,
        message=message if summary.properties_found else empty_message,
        properties_found=summary.properties_found,
        tenants_sent=summary.tenants_sent,
        owners_sent=summary.owners_sent,
        owners_with_multiple_properties=summary.owners_with_multiple_properties,
        tenants_failed=summary.tenants_failed,
        owners_failed=summary.owners_failed,
        tenants_skipped=summary.tenants_skipped,
        results=[_result_item(r) for r in summary.results],
    )
