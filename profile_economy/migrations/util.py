"""Utility functions for Alembic migrations."""
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op


def get_uuid_type():
    """Get the UUID column type matching ``AdaptiveUUID`` for the current dialect.

    Returns:
        - PostgreSQL: native UUID type (as_uuid=True)
        - SQLite/other: String(36) holding hex UUIDs
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return UUID(as_uuid=True)
    return sa.String(length=36)


def get_timestamp_default():
    """Server default for created/updated timestamps.

    Returns:
        - PostgreSQL: NOW()
        - SQLite: CURRENT_TIMESTAMP
    """
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        return sa.text('NOW()')
    return sa.text('CURRENT_TIMESTAMP')
