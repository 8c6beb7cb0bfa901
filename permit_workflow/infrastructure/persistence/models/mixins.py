"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, CreatedAtMixin, SequencedMixin, TimestampMixin,
ActorAuditMixin, VersionedMixin.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Identity, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from permit_workflow.shared.utils.datetime import utc_now
from permit_workflow.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key (append-only history rows)."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Mixin for created_at only (append-only rows are never updated)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )


class SequencedMixin:
    """Mixin for append-only rows: insertion sequence and client-side timestamp.

    now() is fixed for a whole transaction, so rows written by one request
    share a server timestamp; seq gives their order.
    """

    @declared_attr
    def seq(cls) -> Mapped[int]:
        return mapped_column(BigInteger, Identity(), nullable=False, unique=True)

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class ActorAuditMixin(TimestampMixin):
    """Mixin for actor audit: created_by, updated_by (free-form actor identity)."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String(128), nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String(128), nullable=True)


class VersionedMixin:
    """Mixin for optimistic locking: version integer, default 1."""

    @declared_attr
    def version(cls) -> Mapped[int]:
        return mapped_column(Integer, default=1, server_default="1", nullable=False)
