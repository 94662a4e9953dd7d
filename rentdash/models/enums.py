from enum import Enum


class NotificationChannel(str, Enum):
    sms = "sms"


class NotificationStatus(str, Enum):
    sent = "sent"
    failed = "failed"


class NotificationType(str, Enum):
    rent_due = "rent_due"
    contract_expiring = "contract_expiring"


class DispatchOutcome(str, Enum):
    sent = "sent"
    # An earlier run already sent this notification; counted as notified.
    already_sent = "already_sent"
    failed = "failed"
    # Missing tenant phone or name; nothing sent, nothing logged.
    skipped = "skipped"


class RecipientRole(str, Enum):
    tenant = "tenant"
    owner = "owner"
