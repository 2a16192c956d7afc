"""Shared pydantic bases for economy values."""
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, model_serializer


def to_utc_iso(value: datetime) -> str:
    """ISO 8601 with a ``Z`` suffix. Naive values come from SQLite and are UTC."""
    aware = value if value.tzinfo else value.replace(tzinfo=UTC)
    return aware.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _render_timestamps(value):
    match value:
        case datetime():
            return to_utc_iso(value)
        case list():
            return [_render_timestamps(item) for item in value]
        case dict():
            return {key: _render_timestamps(item) for key, item in value.items()}
    return value


class BaseSchema(BaseModel):
    """Service result built from ORM rows.

    Dumps render every timestamp, nested ones included, as a UTC ``Z`` string
    so SQLite and PostgreSQL results serialize the same way.
    """

    model_config = ConfigDict(from_attributes=True)

    @model_serializer(mode="wrap")
    def dump_with_utc_timestamps(self, handler):
        return _render_timestamps(handler(self))


class FrozenSchema(BaseModel):
    """Immutable configuration value (catalog entries, effect descriptors)."""

    model_config = ConfigDict(frozen=True, extra="forbid")
