"""Assignment selector: picks one eligible officer for a stage.

Strategies:
    RANDOM: uniform choice among eligible officers.
    ROUND_ROBIN: least-recently-assigned first; never-assigned officers first.
    WORKLOAD_BASED: fewest open applications.
    PRIORITY_BASED: first officer in the configured priority order; officers
        not listed rank after listed ones.

Ties under any ordered strategy fall back to a random choice among the
tied officers. The selector only reads; persisting the assignment is the
progression engine's job.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from permit_workflow.application.dtos.officer import OfficerResult
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.domain.enums import (
    AssignmentStrategy,
    OfficerRole,
    PositionType,
    ReviewStage,
)
from permit_workflow.domain.exceptions import NoEligibleOfficerException
from permit_workflow.domain.routing import resolve_role
from permit_workflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssignmentSelection:
    """Chosen officer plus the facts recorded in assignment history."""

    officer: OfficerResult
    role: OfficerRole
    strategy: AssignmentStrategy
    open_applications: int

    @property
    def reason(self) -> str:
        return f"Auto-assigned using {self.strategy.value} strategy"


class AssignmentSelector:
    """Select an officer by position category, stage, and strategy."""

    def __init__(
        self,
        directory: OfficerDirectory,
        default_strategy: AssignmentStrategy = AssignmentStrategy.RANDOM,
        priority_officer_ids: Sequence[int] = (),
        rng: random.Random | None = None,
    ) -> None:
        self._directory = directory
        self._default_strategy = default_strategy
        self._priority = {officer_id: rank for rank, officer_id in enumerate(priority_officer_ids)}
        self._rng = rng or random.Random()

    async def select(
        self,
        position: PositionType,
        stage: ReviewStage,
        strategy: AssignmentStrategy | None = None,
    ) -> AssignmentSelection:
        """Pick an officer for ``stage`` of a ``position`` application.

        Raises:
            NoEligibleOfficerException: If no active officer holds the role.
        """
        role = resolve_role(position, stage)
        return await self.select_for_role(role, strategy)

    async def select_for_role(
        self,
        role: OfficerRole,
        strategy: AssignmentStrategy | None = None,
    ) -> AssignmentSelection:
        strategy = strategy or self._default_strategy
        candidates = await self._directory.find_eligible(role)
        if not candidates:
            raise NoEligibleOfficerException(role.value)

        workloads = await self._directory.open_workloads([o.id for o in candidates])
        if strategy == AssignmentStrategy.ROUND_ROBIN:
            last = await self._directory.last_assigned([o.id for o in candidates])
            chosen = self._pick_min(candidates, lambda o: _recency_key(last.get(o.id)))
        elif strategy == AssignmentStrategy.WORKLOAD_BASED:
            chosen = self._pick_min(candidates, lambda o: workloads[o.id])
        elif strategy == AssignmentStrategy.PRIORITY_BASED:
            unlisted = len(self._priority)
            chosen = self._pick_min(candidates, lambda o: self._priority.get(o.id, unlisted))
        else:
            chosen = self._rng.choice(candidates)

        logger.debug(
            "Selected officer %s for role %s using %s (%d candidates)",
            chosen.id,
            role.value,
            strategy.value,
            len(candidates),
        )
        return AssignmentSelection(
            officer=chosen,
            role=role,
            strategy=strategy,
            open_applications=workloads[chosen.id],
        )

    def _pick_min(
        self,
        candidates: list[OfficerResult],
        key: Callable[[OfficerResult], Any],
    ) -> OfficerResult:
        best = min(key(o) for o in candidates)
        tied = [o for o in candidates if key(o) == best]
        return tied[0] if len(tied) == 1 else self._rng.choice(tied)


def _recency_key(last_seq: int | None) -> int:
    # Never-assigned officers sort before any history sequence.
    return 0 if last_seq is None else last_seq
