"""Shared enumerations.

Cross-cutting enums used by application and infrastructure (assignment audit
actions, the system actor). Workflow enums (status, roles, positions)
live in permit_workflow.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AssignmentAction(_ValuesMixin, str, Enum):
    """Kind of officer binding change recorded in assignment history."""

    AUTO_ASSIGNED = "AutoAssigned"
    MANUALLY_ASSIGNED = "ManuallyAssigned"
    REASSIGNED = "Reassigned"
    UNASSIGNED = "Unassigned"


SYSTEM_ACTOR = "System"
