"""Staged progress reporting for the extraction flow.

The server reports no incremental progress, so these stages are simulated:
fixed percentages advanced around the awaited call. Every update is flagged
``simulated`` so consumers do not mistake it for real progress.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

PREPARING = (0, "Preparing content...")
READING_FILE = (20, "Reading file...")
FETCHING_URL = (20, "Fetching URL content...")
ANALYZING = (40, "Analyzing content with AI...")
PROCESSING_RESULTS = (80, "Processing results...")
COMPLETE = (100, "Complete!")


@dataclass(frozen=True)
class ProgressUpdate:
    percent: int
    stage: str
    simulated: bool = True


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressReporter:
    """Tracks the current stage and forwards updates to an optional callback."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self.callback = callback
        self.percent = 0
        self.stage = ""
        self.history: list[ProgressUpdate] = []

    def advance(self, step: tuple[int, str]) -> None:
        percent, stage = step
        self.percent = percent
        self.stage = stage
        update = ProgressUpdate(percent=percent, stage=stage)
        self.history.append(update)
        if self.callback is not None:
            self.callback(update)

    def reset(self) -> None:
        self.advance((0, ""))
