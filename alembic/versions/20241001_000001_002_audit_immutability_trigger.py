"""Make audit_events append-only.

Revision ID: 002
Revises: 001
Create Date: 2024-10-01 00:00:01.000000

Adds a PostgreSQL trigger rejecting UPDATE and DELETE on audit_events.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add immutability trigger to audit_events table."""
    op.execute("""
        CREATE OR REPLACE FUNCTION prevent_audit_modification()
        RETURNS TRIGGER AS $$
        BEGIN
            IF TG_OP = 'UPDATE' THEN
                RAISE EXCEPTION 'Audit events are immutable and cannot be modified. Event ID: %', OLD.id;
            ELSIF TG_OP = 'DELETE' THEN
                RAISE EXCEPTION 'Audit events are immutable and cannot be deleted. Event ID: %', OLD.id;
            END IF;
            RETURN NULL;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("DROP TRIGGER IF EXISTS audit_immutability_trigger ON audit_events")

    op.execute("""
        CREATE TRIGGER audit_immutability_trigger
        BEFORE UPDATE OR DELETE ON audit_events
        FOR EACH ROW
        EXECUTE FUNCTION prevent_audit_modification()
    """)

    op.execute("""
        COMMENT ON TABLE audit_events IS
        'Append-only assessment audit trail. Protected by immutability trigger.';
    """)


def downgrade() -> None:
    """Remove immutability trigger."""
    op.execute("DROP TRIGGER IF EXISTS audit_immutability_trigger ON audit_events;")
    op.execute("DROP FUNCTION IF EXISTS prevent_audit_modification();")
