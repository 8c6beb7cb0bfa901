"""Officer administration use cases."""

from permit_workflow.application.use_cases.officers.officer_admin import (
    OfficerAdministration,
)

__all__ = ["OfficerAdministration"]
