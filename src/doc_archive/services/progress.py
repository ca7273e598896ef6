"""Progress reporting shared by the export and import engines."""

from collections.abc import Callable
from typing import Generic, TypeVar

from doc_archive.models.export_import import (
    ExportPhase,
    ExportProgress,
    ImportPhase,
    ImportProgress,
)

PhaseT = TypeVar("PhaseT", ExportPhase, ImportPhase)
ProgressT = TypeVar("ProgressT", ExportProgress, ImportProgress)


class ProgressReporter(Generic[PhaseT, ProgressT]):
    """Deliver progress updates to a caller-supplied callback.

    Percentages are clamped to 0..100 and never decrease within one run.
    """

    def __init__(
        self,
        model: type[ProgressT],
        initial_phase: PhaseT,
        callback: Callable[[ProgressT], None] | None = None,
    ) -> None:
        self.model = model
        self.callback = callback
        self.phase = initial_phase
        self.progress = 0

    def report(
        self,
        phase: PhaseT,
        progress: float,
        message: str,
        current_item: str | None = None,
    ) -> None:
        """Record and deliver one progress update."""
        self.phase = phase
        self.progress = max(self.progress, min(100, max(0, int(progress))))
        if self.callback is not None:
            self.callback(
                self.model(
                    phase=phase,
                    progress=self.progress,
                    message=message,
                    current_item=current_item,
                )
            )

    def step(
        self,
        phase: PhaseT,
        start: int,
        span: int,
        done: int,
        total: int,
        message: str,
        current_item: str | None = None,
    ) -> None:
        """Report progress of item `done` out of `total` within [start, start + span]."""
        fraction = done / total if total else 1.0
        self.report(phase, start + span * fraction, message, current_item)
