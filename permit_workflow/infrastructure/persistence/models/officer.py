"""Officer ORM model. Role is immutable; officers are deactivated, never deleted."""

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from permit_workflow.domain.enums import OfficerRole
from permit_workflow.infrastructure.persistence.database import Base
from permit_workflow.infrastructure.persistence.models.mixins import TimestampMixin

_ROLE_VALUES = ", ".join(f"'{v}'" for v in OfficerRole.values())


class Officer(TimestampMixin, Base):
    """Reviewing officer. Table: officer."""

    __tablename__ = "officer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )

    __table_args__ = (
        CheckConstraint(f"role IN ({_ROLE_VALUES})", name="officer_role_check"),
    )
