"""Workflow use cases: progression engine, action handlers, queries."""

from permit_workflow.application.use_cases.workflow.action_handlers import (
    StageActionHandler,
    build_action_handlers,
)
from permit_workflow.application.use_cases.workflow.progression_engine import (
    ProgressionEngine,
)
from permit_workflow.application.use_cases.workflow.queries import WorkflowQueries

__all__ = [
    "ProgressionEngine",
    "StageActionHandler",
    "WorkflowQueries",
    "build_action_handlers",
]
