"""Progress reporting and cooperative cancellation for long frame loops."""

import threading
import time
from typing import Callable, Optional

from .constants import YIELD_EVERY_FRAMES
from .errors import AnalysisCancelled

ProgressCallback = Callable[[float], None]


class CancellationToken:
    """Thread-safe flag a caller sets to stop a running analysis."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class FrameLoopControl:
    """Per-call helper that reports progress, polls cancellation, and yields.

    One instance is created per analysis call and dropped when it returns.
    """

    def __init__(
        self,
        progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
        yield_every: int = YIELD_EVERY_FRAMES,
    ):
        self.progress = progress
        self.cancel_token = cancel_token
        self.yield_every = yield_every

    def report(self, percent: float) -> None:
        """Report a coarse milestone (0-100)."""
        if self.progress is not None:
            self.progress(float(percent))

    def check(self) -> None:
        """Raise AnalysisCancelled if the caller asked to stop."""
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise AnalysisCancelled("Analysis cancelled by caller")

    def tick(self, index: int) -> None:
        """Call once per frame: polls cancellation and yields every chunk."""
        self.check()
        if index and index % self.yield_every == 0:
            # Let other threads run between chunks
            time.sleep(0)
