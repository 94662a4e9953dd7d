"""
Notification dispatch: one SMS per tenant with something due, plus one consolidated SMS per owner.

A run resolves its recipients, then sends in two phases (tenants, then owners). Within a phase every
send is started together and the phase waits for all of them to settle; one failure never cancels or
delays another. Per-recipient failures end up in the results and the notification log, never as an
exception from the run. Only a failing recipient query aborts a run (UpstreamQueryError).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable, Sequence, TypeVar

from rentdash.core import idempotency, messages
from rentdash.core.exceptions import InsufficientRecipientData, TransportError
from rentdash.core.idempotency import IdempotencyGuard, build_idempotency_key
from rentdash.core.notification_log import NotificationRecord
from rentdash.core.recipients import DueItem, ExpiringContract, RecipientResolver, RecipientRow
from rentdash.core.sms_transport import MessageTransport
from rentdash.core.utils import utc_today
from rentdash.models.enums import DispatchOutcome, NotificationChannel, NotificationType, RecipientRole

logger = logging.getLogger(__name__)

Row = TypeVar("Row", bound=RecipientRow)

NOTIFIED = (DispatchOutcome.sent, DispatchOutcome.already_sent)


@dataclass(frozen=True)
class RecipientResult:
    role: RecipientRole
    recipient: str | None
    outcome: DispatchOutcome
    property_ids: tuple[str, ...] = ()
    idempotency_key: str | None = None
    message_sid: str | None = None
    error_code: int | None = None
    error: str | None = None


@dataclass
class DispatchSummary:
    notification_type: str
    day: date
    properties_found: int = 0
    tenants_sent: int = 0
    tenants_failed: int = 0
    tenants_skipped: int = 0
    owners_sent: int = 0
    owners_failed: int = 0
    owners_with_multiple_properties: int = 0
    results: list[RecipientResult] = field(default_factory=list)

    def add_tenant(self, result: RecipientResult) -> None:
        self.results.append(result)
        if result.outcome in NOTIFIED:
            self.tenants_sent += 1
        elif result.outcome == DispatchOutcome.failed:
            self.tenants_failed += 1
        else:
            self.tenants_skipped += 1

    def add_owner(self, result: RecipientResult) -> None:
        self.results.append(result)
        if result.outcome in NOTIFIED:
            self.owners_sent += 1
        elif result.outcome == DispatchOutcome.failed:
            self.owners_failed += 1


@dataclass(frozen=True)
class _Plan:
    """What to send for one notification type."""
    notification_type: NotificationType
    tenant_kind: str
    owner_kind: str
    tenant_body: Callable[[RecipientRow], str]
    owner_body: Callable[[Sequence[RecipientRow]], str]


RENT_DUE = _Plan(
    notification_type=NotificationType.rent_due,
    tenant_kind=idempotency.TENANT_RENT_DUE,
    owner_kind=idempotency.OWNER_RENT_DUE,
    tenant_body=messages.tenant_rent_due_body,
    owner_body=messages.owner_rent_due_body,
)

CONTRACT_EXPIRING = _Plan(
    notification_type=NotificationType.contract_expiring,
    tenant_kind=idempotency.TENANT_CONTRACT_EXPIRING,
    owner_kind=idempotency.OWNER_CONTRACT_EXPIRING,
    tenant_body=messages.tenant_contract_expiring_body,
    owner_body=messages.owner_contract_expiring_body,
)


def group_by_owner(items: Sequence[Row]) -> dict[str, list[Row]]:
    """Items per owner phone, in resolver order. Items without an owner phone are left out."""
    by_owner: dict[str, list[Row]] = {}
    for item in items:
        if item.owner_phone:
            by_owner.setdefault(item.owner_phone, []).append(item)
    return by_owner


def _require_tenant_contact(item: RecipientRow) -> str:
    if not item.has_tenant_contact:
        raise InsufficientRecipientData(f"Missing tenant phone or name for {item.property_name}")
    return item.tenant_phone


class NotificationDispatcher:
    def __init__(
        self,
        resolver: RecipientResolver,
        guard: IdempotencyGuard,
        transport: MessageTransport,
        *,
        today: Callable[[], date] = utc_today,
        channel: NotificationChannel = NotificationChannel.sms,
    ):
        self._resolver = resolver
        self._guard = guard
        self._transport = transport
        self._today = today
        self._channel = channel.value

    async def dispatch_rent_due(self) -> DispatchSummary:
        """Notify tenants and owners about rent due today. Raises UpstreamQueryError if resolution fails."""
        logger.info("Starting SMS notifications for rent due today")
        items: list[DueItem] = list(await self._resolver.due_today())
        return await self._run(RENT_DUE, items, self._today())

    async def dispatch_contract_expiry(self, threshold_days: int) -> DispatchSummary:
        """Notify tenants and owners about contracts ending within threshold_days."""
        logger.info("Starting SMS notifications for contracts expiring within %s days", threshold_days)
        day = self._today()
        contracts: list[ExpiringContract] = list(await self._resolver.expiring_soon(threshold_days, day))
        return await self._run(CONTRACT_EXPIRING, contracts, day)

    async def _run(self, plan: _Plan, items: list[Row], day: date) -> DispatchSummary:
        summary = DispatchSummary(
            notification_type=plan.notification_type.value,
            day=day,
            properties_found=len(items),
        )
        if not items:
            logger.info("No %s notifications to send for %s", plan.notification_type.value, day)
            return summary
        logger.info("Found %s items for %s on %s", len(items), plan.notification_type.value, day)

        tenant_results = await self._settle(
            [self._notify_tenant(plan, item, day) for item in items],
            [(RecipientRole.tenant, item.tenant_phone, (item.property_id,)) for item in items],
        )
        for result in tenant_results:
            summary.add_tenant(result)

        by_owner = group_by_owner(items)
        summary.owners_with_multiple_properties = sum(1 for group in by_owner.values() if len(group) > 1)
        owner_results = await self._settle(
            [self._notify_owner(plan, phone, group, day) for phone, group in by_owner.items()],
            [
                (RecipientRole.owner, phone, tuple(item.property_id for item in group))
                for phone, group in by_owner.items()
            ],
        )
        for result in owner_results:
            summary.add_owner(result)

        logger.info(
            "Complete (%s): %s tenants notified, %s failed, %s skipped; %s owners notified, %s failed",
            plan.notification_type.value,
            summary.tenants_sent, summary.tenants_failed, summary.tenants_skipped,
            summary.owners_sent, summary.owners_failed,
        )
        return summary

    async def _settle(
        self,
        sends: list[Awaitable[RecipientResult]],
        contexts: list[tuple[RecipientRole, str | None, tuple[str, ...]]],
    ) -> list[RecipientResult]:
        """Run all sends concurrently and wait for every one; an exception becomes a failed result."""
        outcomes = await asyncio.gather(*sends, return_exceptions=True)
        results = []
        for outcome, (role, recipient, property_ids) in zip(outcomes, contexts):
            if isinstance(outcome, BaseException):
                logger.error("Unexpected error notifying %s %s", role.value, recipient, exc_info=outcome)
                outcome = RecipientResult(
                    role=role,
                    recipient=recipient,
                    outcome=DispatchOutcome.failed,
                    property_ids=property_ids,
                    error=str(outcome),
                )
            results.append(outcome)
        return results

    async def _notify_tenant(self, plan: _Plan, item: RecipientRow, day: date) -> RecipientResult:
        try:
            phone = _require_tenant_contact(item)
        except InsufficientRecipientData as e:
            logger.warning("%s; skipping", e)
            return RecipientResult(
                role=RecipientRole.tenant,
                recipient=item.tenant_phone,
                outcome=DispatchOutcome.skipped,
                property_ids=(item.property_id,),
                error=str(e),
            )
        return await self._deliver(
            plan,
            role=RecipientRole.tenant,
            recipient=phone,
            key=build_idempotency_key(self._channel, plan.tenant_kind, day, item.property_id),
            render=lambda: plan.tenant_body(item),
            property_id=item.property_id,
            property_ids=(item.property_id,),
        )

    async def _notify_owner(
        self, plan: _Plan, owner_phone: str, items: list[RecipientRow], day: date
    ) -> RecipientResult:
        return await self._deliver(
            plan,
            role=RecipientRole.owner,
            recipient=owner_phone,
            key=build_idempotency_key(self._channel, plan.owner_kind, day, owner_phone),
            render=lambda: plan.owner_body(items),
            property_id=None,
            property_ids=tuple(item.property_id for item in items),
        )

    async def _deliver(
        self,
        plan: _Plan,
        *,
        role: RecipientRole,
        recipient: str,
        key: str,
        render: Callable[[], str],
        property_id: str | None,
        property_ids: tuple[str, ...],
    ) -> RecipientResult:
        """Guard check, send, record. The record is written once, after the send resolved."""
        if await self._guard.has_succeeded(key):
            logger.info("SMS already sent: %s", key)
            return RecipientResult(
                role=role,
                recipient=recipient,
                outcome=DispatchOutcome.already_sent,
                property_ids=property_ids,
                idempotency_key=key,
            )

        body = render()
        common = dict(
            idempotency_key=key,
            notification_type=plan.notification_type.value,
            recipient=recipient,
            message_body=body,
            property_id=property_id,
            channel=self._channel,
        )
        try:
            sent = await self._transport.send(recipient, body)
        except TransportError as e:
            logger.error("Failed to send SMS to %s %s (code %s): %s", role.value, recipient, e.code, e.message)
            await self._guard.record(NotificationRecord.failed(error_code=e.code, error_message=e.message, **common))
            return RecipientResult(
                role=role,
                recipient=recipient,
                outcome=DispatchOutcome.failed,
                property_ids=property_ids,
                idempotency_key=key,
                error_code=e.code,
                error=e.message,
            )
        except Exception as e:
            logger.exception("Unexpected transport error for %s %s", role.value, recipient)
            await self._guard.record(NotificationRecord.failed(error_code=None, error_message=str(e), **common))
            return RecipientResult(
                role=role,
                recipient=recipient,
                outcome=DispatchOutcome.failed,
                property_ids=property_ids,
                idempotency_key=key,
                error=str(e),
            )

        await self._guard.record(NotificationRecord.sent(message_sid=sent.sid, **common))
        logger.info("SMS sent to %s %s: sid=%s", role.value, recipient, sent.sid)
        return RecipientResult(
            role=role,
            recipient=recipient,
            outcome=DispatchOutcome.sent,
            property_ids=property_ids,
            idempotency_key=key,
            message_sid=sent.sid,
        )
