"""Domain layer: entities, enums, routing tables, status machine, exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from permit_workflow.domain.entities import ApplicationEntity, StageDecision
from permit_workflow.domain.enums import (
    ApplicationStatus,
    AssignmentStrategy,
    OfficerRole,
    PositionType,
    ResubmissionPolicy,
    ReviewStage,
)
from permit_workflow.domain.exceptions import PermitWorkflowException
from permit_workflow.domain.status_machine import StatusMachine

__all__ = [
    "ApplicationEntity",
    "ApplicationStatus",
    "AssignmentStrategy",
    "OfficerRole",
    "PermitWorkflowException",
    "PositionType",
    "ResubmissionPolicy",
    "ReviewStage",
    "StageDecision",
    "StatusMachine",
]
