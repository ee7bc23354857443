"""Per-run search instrumentation."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Dict, Optional


class PerfMeter:
    """
    Counters for one search run.

    Every visited node is counted once on entry and once on exit, where the
    exit is exactly one of leaf, break (pruned) or propagate. The meter is
    closed with :meth:`finish`; counting on a closed meter is an error.
    """

    def __init__(self):
        self.started = time.time()
        self.ended: Optional[float] = None
        self.entered = 0
        self.leaf = 0
        self.broken = 0
        self.propagated = 0

    def _check_open(self) -> None:
        if self.ended is not None:
            raise RuntimeError("Already ended")

    def count_enter(self) -> int:
        self._check_open()
        self.entered += 1
        return self.entered

    def count_leaf(self) -> int:
        self._check_open()
        self.leaf += 1
        return self.leaf

    def count_break(self) -> int:
        self._check_open()
        self.broken += 1
        return self.broken

    def count_propagate(self) -> int:
        self._check_open()
        self.propagated += 1
        return self.propagated

    @property
    def exited(self) -> int:
        return self.leaf + self.broken + self.propagated

    def finish(self) -> None:
        """Stop the clock."""
        self._check_open()
        self.ended = time.time()

    @property
    def elapsed(self) -> float:
        end = self.ended if self.ended is not None else time.time()
        return end - self.started

    def report(self) -> Dict[str, object]:
        """Counters and timing as a JSON-serialisable dict."""
        return {
            "started": datetime.fromtimestamp(self.started).isoformat(timespec="seconds"),
            "finished": None
            if self.ended is None
            else datetime.fromtimestamp(self.ended).isoformat(timespec="seconds"),
            "elapsed": round(self.elapsed, 4),
            "entry": self.entered,
            "exit_leaf": self.leaf,
            "exit_break": self.broken,
            "exit_propagate": self.propagated,
        }

    def log_report(self) -> None:
        logger = logging.getLogger(__name__)
        logger.info(f"Time elapsed: {self.elapsed:9.2f} secs")
        logger.info(f"#ENTRY {self.entered}")
        logger.info(f"#EXIT by leaf {self.leaf}, break {self.broken}, propagate {self.propagated}")
