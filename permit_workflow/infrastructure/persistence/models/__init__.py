"""ORM models. Import here so Base.metadata sees every table (Alembic autogenerate)."""

from permit_workflow.infrastructure.persistence.models.application import Application
from permit_workflow.infrastructure.persistence.models.history import (
    AssignmentHistory,
    WorkflowProgressionHistory,
)
from permit_workflow.infrastructure.persistence.models.officer import Officer

__all__ = [
    "Application",
    "AssignmentHistory",
    "Officer",
    "WorkflowProgressionHistory",
]
