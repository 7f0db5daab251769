"""Portable column types shared by the models."""

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from lifetasks.utils.time import ensure_utc


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always round-trips as UTC.

    PostgreSQL keeps the offset natively; SQLite drops it, so values are
    normalized to UTC on the way in and re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)
