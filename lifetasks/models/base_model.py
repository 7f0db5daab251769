"""
Base model with common fields.

Tables inherit from this to get:
- id (UUID primary key)
- created_at (when the record was created)
- updated_at (when the record was last modified)
"""

import uuid
from datetime import datetime

from sqlalchemy import Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lifetasks.db.base import Base
from lifetasks.db.types import UTCDateTime
from lifetasks.utils.time import utc_now


class TimestampedModel(Base):
    """
    Abstract base class for all persisted records.

    This is not a real table - it's a template that other models inherit from.
    Timestamps are generated in Python so they are available on the instance
    right after a flush, without an extra round trip.
    """

    __abstract__ = True  # This means: don't create a table for this class

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
