"""Application services: officer directory, assignment selector, side effects."""

from permit_workflow.application.services.assignment_selector import (
    AssignmentSelection,
    AssignmentSelector,
)
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.application.services.side_effects import (
    DeferredSideEffects,
    GenerateCertificate,
    NotifyStage,
    SideEffect,
    SideEffectDispatcher,
)

__all__ = [
    "AssignmentSelection",
    "AssignmentSelector",
    "DeferredSideEffects",
    "GenerateCertificate",
    "NotifyStage",
    "OfficerDirectory",
    "SideEffect",
    "SideEffectDispatcher",
]
