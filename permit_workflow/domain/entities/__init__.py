"""Domain entities."""

from permit_workflow.domain.entities.application import (
    ApplicationEntity,
    StageDecision,
)

__all__ = ["ApplicationEntity", "StageDecision"]
