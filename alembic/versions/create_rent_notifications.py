"""create rent_notifications table

Revision ID: c4d5e6f7a8b9
Revises:
Create Date: 2025-06-01

"""
from typing import Sequence, Union

from alembic import op


revision: str = "c4d5e6f7a8b9"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS rent_notifications (
            id UUID NOT NULL,
            property_id VARCHAR(64),
            channel VARCHAR(20) NOT NULL,
            recipient VARCHAR(32) NOT NULL,
            status VARCHAR(20) NOT NULL,
            message_sid VARCHAR(64),
            error_code INTEGER,
            error_message TEXT,
            idempotency_key VARCHAR(255) NOT NULL,
            notification_type VARCHAR(50) NOT NULL,
            message_body TEXT NOT NULL,
            sent_at TIMESTAMP WITHOUT TIME ZONE,
            failed_at TIMESTAMP WITHOUT TIME ZONE,
            created_at TIMESTAMP WITHOUT TIME ZONE NOT NULL DEFAULT (now() AT TIME ZONE 'utc'),
            PRIMARY KEY (id),
            CONSTRAINT ck_rent_notifications_status CHECK (status IN ('sent', 'failed'))
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_rent_notifications_idempotency_key ON rent_notifications (idempotency_key)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_rent_notifications_property_id ON rent_notifications (property_id)"
    )
    # At most one successful send per idempotency key; failed attempts may repeat.
    op.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS uq_rent_notifications_sent_key "
        "ON rent_notifications (idempotency_key) WHERE status = 'sent'"
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS uq_rent_notifications_sent_key")
    op.execute("DROP INDEX IF EXISTS ix_rent_notifications_property_id")
    op.execute("DROP INDEX IF EXISTS ix_rent_notifications_idempotency_key")
    op.execute("DROP TABLE IF EXISTS rent_notifications")
