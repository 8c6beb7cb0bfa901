"""SQLAlchemy repository implementations of the application ports."""

from permit_workflow.infrastructure.persistence.repositories.application_repo import (
    ApplicationRepository,
)
from permit_workflow.infrastructure.persistence.repositories.history_repo import (
    AssignmentHistoryRepository,
    ProgressionHistoryRepository,
)
from permit_workflow.infrastructure.persistence.repositories.officer_repo import (
    OfficerRepository,
)
from permit_workflow.infrastructure.persistence.repositories.unit_of_work import (
    SqlAlchemyUnitOfWork,
)

__all__ = [
    "ApplicationRepository",
    "AssignmentHistoryRepository",
    "OfficerRepository",
    "ProgressionHistoryRepository",
    "SqlAlchemyUnitOfWork",
]
