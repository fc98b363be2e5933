"""
Progress reporting for query fan-out.
"""

import logging
import threading
from typing import Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Owned completion counter with an optional progress bar.

    Every finished query, successful or not, must call `report_completion` exactly once.
    """

    def __init__(self, total: int, label: str = "", position: int = 0, enabled: bool = True):
        self.total = total
        self.label = label
        self._count = 0
        self._lock = threading.Lock()
        self._bar: Optional[tqdm] = None
        if enabled:
            self._bar = tqdm(total=total, desc=label, position=position, leave=True)

    @property
    def count(self) -> int:
        return self._count

    def report_completion(self) -> None:
        """Record one finished query."""
        with self._lock:
            self._count += 1
            if self._bar is not None:
                self._bar.update(1)
            logger.debug(f"{self.label} progress {self._count}/{self.total}")

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
