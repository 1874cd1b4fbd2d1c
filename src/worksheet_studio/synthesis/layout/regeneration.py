"""
Module: synthesis.layout.regeneration

Purpose:
    Track which illustrations have a regeneration request in flight.
    The pending state is time-bounded: it clears on its own once the
    timeout elapses, whether or not a completion ever arrives.

Key Classes:
    - RegenerationTracker: Thread-safe pending-state bookkeeping

Dependencies:
    - threading, time (std)

Used By:
    - synthesis.layout.sections: RegenerateControl.pending
    - synthesis.controller: Marks requests and completions
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 8.0


class RegenerationTracker:
    """
    Pending markers for per-section image regeneration.

    Completions arrive on worker threads, so every access goes through a
    lock. The clock is injectable for tests.

    Example:
        >>> tracker = RegenerationTracker(timeout_s=8.0)
        >>> tracker.start("section-1")
        True
        >>> tracker.is_pending("section-1")
        True
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive: {timeout_s}")
        self._timeout_s = timeout_s
        self._clock = clock
        self._started: Dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def start(self, section_id: str) -> bool:
        """
        Mark a section as pending.

        Returns:
            False if a live request for the section already exists
        """
        with self._lock:
            self._expire_locked()
            if section_id in self._started:
                return False
            self._started[section_id] = self._clock()
            return True

    def is_pending(self, section_id: str) -> bool:
        """Check whether a request is in flight and not yet timed out."""
        with self._lock:
            self._expire_locked()
            return section_id in self._started

    def complete(self, section_id: str) -> None:
        """Clear the pending marker early (completion or failure)."""
        with self._lock:
            self._started.pop(section_id, None)

    def clear(self) -> None:
        """Drop every marker."""
        with self._lock:
            self._started.clear()

    def pending_ids(self) -> Tuple[str, ...]:
        """Sections currently pending, in request order."""
        with self._lock:
            self._expire_locked()
            return tuple(self._started)

    def _expire_locked(self) -> None:
        now = self._clock()
        expired = [sid for sid, t in self._started.items() if now - t >= self._timeout_s]
        for sid in expired:
            logger.debug(f"Regeneration marker for {sid} timed out after {self._timeout_s}s")
            del self._started[sid]
