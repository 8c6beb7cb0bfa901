"""Status machine: legal transitions between application statuses.

The adjacency table here is the only source of truth for status
changes. Progression boundaries, officer decisions, resubmission and
administrative overrides all go through ``StatusMachine.apply``.
"""

from collections.abc import Iterable, Sequence

from permit_workflow.domain.entities.application import ApplicationEntity
from permit_workflow.domain.enums import ApplicationStatus, ResubmissionPolicy
from permit_workflow.domain.exceptions import IllegalTransitionException
from permit_workflow.domain.routing import STAGES

S = ApplicationStatus

_BASE_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED}),
    S.SUBMITTED: frozenset({S.UNDER_REVIEW_BY_JE, S.REJECTED}),
    S.UNDER_REVIEW_BY_JE: frozenset({S.APPROVED_BY_JE, S.REJECTED_BY_JE}),
    S.APPROVED_BY_JE: frozenset({S.UNDER_REVIEW_BY_AE}),
    S.REJECTED_BY_JE: frozenset({S.SUBMITTED}),
    S.UNDER_REVIEW_BY_AE: frozenset({S.APPROVED_BY_AE, S.REJECTED_BY_AE}),
    S.APPROVED_BY_AE: frozenset({S.UNDER_REVIEW_BY_EE1}),
    S.REJECTED_BY_AE: frozenset({S.SUBMITTED}),
    S.UNDER_REVIEW_BY_EE1: frozenset({S.APPROVED_BY_EE1, S.REJECTED_BY_EE1}),
    S.APPROVED_BY_EE1: frozenset({S.UNDER_REVIEW_BY_CE1}),
    S.REJECTED_BY_EE1: frozenset({S.SUBMITTED}),
    S.UNDER_REVIEW_BY_CE1: frozenset({S.APPROVED_BY_CE1, S.REJECTED_BY_CE1}),
    S.APPROVED_BY_CE1: frozenset({S.PAYMENT_PENDING}),
    S.REJECTED_BY_CE1: frozenset({S.SUBMITTED}),
    S.PAYMENT_PENDING: frozenset({S.PAYMENT_COMPLETED}),
    S.PAYMENT_COMPLETED: frozenset({S.UNDER_PROCESSING_BY_CLERK}),
    S.UNDER_PROCESSING_BY_CLERK: frozenset(
        {S.PROCESSED_BY_CLERK, S.REJECTED_BY_CLERK}
    ),
    S.PROCESSED_BY_CLERK: frozenset({S.UNDER_DIGITAL_SIGNATURE_BY_EE2}),
    S.REJECTED_BY_CLERK: frozenset({S.SUBMITTED}),
    S.UNDER_DIGITAL_SIGNATURE_BY_EE2: frozenset(
        {S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2, S.REJECTED_BY_EE2}
    ),
    S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2: frozenset({S.UNDER_FINAL_APPROVAL_BY_CE2}),
    S.REJECTED_BY_EE2: frozenset({S.SUBMITTED}),
    S.UNDER_FINAL_APPROVAL_BY_CE2: frozenset(
        {S.CERTIFICATE_ISSUED, S.REJECTED_BY_CE2}
    ),
    S.REJECTED_BY_CE2: frozenset({S.SUBMITTED}),
    S.CERTIFICATE_ISSUED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.REJECTED: frozenset(),
}

TERMINAL_STATUSES: frozenset[ApplicationStatus] = frozenset(
    {S.COMPLETED, S.REJECTED}
)


def build_transition_table(
    policy: ResubmissionPolicy,
) -> dict[ApplicationStatus, frozenset[ApplicationStatus]]:
    """Return the adjacency table for a resubmission policy.

    Under RESUME, Submitted may also re-enter any stage's pending status
    so a resubmitted application returns to the stage that rejected it.
    """
    table = dict(_BASE_TRANSITIONS)
    if policy == ResubmissionPolicy.RESUME:
        table[S.SUBMITTED] = table[S.SUBMITTED] | frozenset(
            d.pending_status for d in STAGES.values()
        )
    return table


def _reenterable(
    table: dict[ApplicationStatus, frozenset[ApplicationStatus]],
) -> frozenset[ApplicationStatus]:
    """Statuses that lie on a cycle (reachable again from themselves)."""
    result: set[ApplicationStatus] = set()
    for start in table:
        seen: set[ApplicationStatus] = set()
        stack = list(table[start])
        while stack:
            current = stack.pop()
            if current == start:
                result.add(start)
                break
            if current in seen:
                continue
            seen.add(current)
            stack.extend(table[current])
    return frozenset(result)


class StatusMachine:
    """Validates and applies status transitions against the adjacency table."""

    def __init__(
        self, policy: ResubmissionPolicy = ResubmissionPolicy.RESTART
    ) -> None:
        self.policy = policy
        self._table = build_transition_table(policy)
        self._reenterable = _reenterable(self._table)

    def is_legal(self, from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
        """Return whether ``from_status -> to_status`` is in the table."""
        return to_status in self._table.get(from_status, frozenset())

    def allowed_from(self, status: ApplicationStatus) -> frozenset[ApplicationStatus]:
        return self._table.get(status, frozenset())

    def is_terminal(self, status: ApplicationStatus) -> bool:
        return not self._table.get(status)

    def is_reenterable(self, status: ApplicationStatus) -> bool:
        """Return whether ``status`` can be left more than once (rejection loop)."""
        return status in self._reenterable

    def check(self, from_status: ApplicationStatus, to_status: ApplicationStatus) -> None:
        """Raise IllegalTransitionException unless the transition is legal."""
        if not self.is_legal(from_status, to_status):
            raise IllegalTransitionException(from_status.value, to_status.value)

    def apply(
        self, application: ApplicationEntity, to_status: ApplicationStatus
    ) -> ApplicationStatus:
        """Move ``application`` to ``to_status``; returns the previous status.

        Raises:
            IllegalTransitionException: If the transition is not legal.
        """
        previous = application.status
        self.check(previous, to_status)
        application.status = to_status
        return previous

    def statuses(self) -> Iterable[ApplicationStatus]:
        return self._table.keys()

    def path_violations(
        self, steps: Sequence[tuple[ApplicationStatus, ApplicationStatus]]
    ) -> list[str]:
        """Return problems with an ordered list of (from, to) history steps.

        Checks that each step is legal, that consecutive steps chain, and
        that a from-status repeats only when it is re-enterable.
        """
        problems: list[str] = []
        left: set[ApplicationStatus] = set()
        previous_to: ApplicationStatus | None = None
        for index, (from_status, to_status) in enumerate(steps):
            if not self.is_legal(from_status, to_status):
                problems.append(
                    f"step {index}: {from_status.value} -> {to_status.value} is not legal"
                )
            if previous_to is not None and from_status != previous_to:
                problems.append(
                    f"step {index}: starts at {from_status.value}, "
                    f"previous step ended at {previous_to.value}"
                )
            if from_status in left and not self.is_reenterable(from_status):
                problems.append(
                    f"step {index}: {from_status.value} left twice but is not re-enterable"
                )
            left.add(from_status)
            previous_to = to_status
        return problems
