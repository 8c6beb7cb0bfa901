"""Fire-and-forget side effects: stage notifications and certificate generation.

Side effects are a closed set of typed variants. Each dispatch runs in
its own asyncio task with a bounded number of attempts; failures are
logged and never reach the transition that triggered them.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from permit_workflow.application.interfaces.services import (
    ICertificateGenerator,
    INotificationService,
    ISideEffectDispatcher,
)
from permit_workflow.domain.enums import ApplicationStatus
from permit_workflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotifyStage:
    """Notify that an application reached a new status."""

    application_id: int
    new_status: ApplicationStatus
    remarks: str | None = None


@dataclass(frozen=True)
class GenerateCertificate:
    """Generate the certificate after a successful payment."""

    application_id: int


SideEffect = NotifyStage | GenerateCertificate


class SideEffectDispatcher:
    """Runs side effects in background tasks with bounded retry."""

    def __init__(
        self,
        notifier: INotificationService,
        certificate_generator: ICertificateGenerator,
        max_attempts: int = 3,
        retry_delay_seconds: float = 0.5,
    ) -> None:
        self._notifier = notifier
        self._certificate_generator = certificate_generator
        self._max_attempts = max(1, max_attempts)
        self._retry_delay_seconds = retry_delay_seconds
        self._tasks: set[asyncio.Task[None]] = set()

    def dispatch(self, effect: SideEffect) -> None:
        """Schedule ``effect``; the caller is not blocked and never sees its outcome."""
        task = asyncio.create_task(self._run(effect))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all scheduled side effects (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, effect: SideEffect) -> None:
        for attempt in range(1, self._max_attempts + 1):
            try:
                if await self._execute(effect):
                    return
                logger.warning(
                    "Side effect %s for application %s reported failure (attempt %d/%d)",
                    type(effect).__name__,
                    effect.application_id,
                    attempt,
                    self._max_attempts,
                )
            except Exception:
                logger.exception(
                    "Side effect %s for application %s raised (attempt %d/%d)",
                    type(effect).__name__,
                    effect.application_id,
                    attempt,
                    self._max_attempts,
                )
            if attempt < self._max_attempts and self._retry_delay_seconds:
                await asyncio.sleep(self._retry_delay_seconds)
        logger.error(
            "Giving up on side effect %s for application %s after %d attempts",
            type(effect).__name__,
            effect.application_id,
            self._max_attempts,
        )

    async def _execute(self, effect: SideEffect) -> bool:
        if isinstance(effect, NotifyStage):
            await self._notifier.notify_stage(
                effect.application_id, effect.new_status, effect.remarks
            )
            return True
        if isinstance(effect, GenerateCertificate):
            return await self._certificate_generator.generate_certificate(
                effect.application_id
            )
        raise TypeError(f"Unknown side effect: {type(effect).__name__}")


class DeferredSideEffects:
    """Holds side effects until the surrounding transaction has committed.

    Bound to one request; ``flush`` hands the buffered effects to the
    process-wide dispatcher and ``discard`` drops them after a rollback.
    """

    def __init__(self, dispatcher: ISideEffectDispatcher) -> None:
        self._dispatcher = dispatcher
        self._buffered: list[SideEffect] = []

    def dispatch(self, effect: SideEffect) -> None:
        self._buffered.append(effect)

    @property
    def buffered(self) -> int:
        return len(self._buffered)

    def flush(self) -> None:
        effects, self._buffered = self._buffered, []
        for effect in effects:
            self._dispatcher.dispatch(effect)

    def discard(self) -> None:
        if self._buffered:
            logger.info(
                "Dropping %d side effect(s) of a rolled-back transaction (applications %s)",
                len(self._buffered),
                sorted({effect.application_id for effect in self._buffered}),
            )
        self._buffered = []
