"""Progress tracking for a snapshot run."""
import time
import logging
from collections import defaultdict
from typing import Dict

from scratchscan.parse.models import Progress

logger = logging.getLogger(__name__)


class Metrics:
    """Count completed detail fetches and estimate time remaining."""

    def __init__(self, total: int):
        self.total = total
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    @property
    def completed(self) -> int:
        return self.counters["completed"]

    def progress(self) -> Progress:
        return Progress(current=self.completed, total=self.total)

    def get_rate(self) -> float:
        """Detail pages completed per second."""
        elapsed = time.time() - self.start_time
        if elapsed > 0:
            return self.completed / elapsed
        return 0.0

    def get_eta(self) -> float:
        """Estimated seconds until every detail page has completed."""
        rate = self.get_rate()
        if rate <= 0:
            return 0.0
        return (self.total - self.completed) / rate

    def format_eta(self) -> str:
        eta_seconds = self.get_eta()
        if eta_seconds < 60:
            return f"{eta_seconds:.0f}s"
        elif eta_seconds < 3600:
            return f"{eta_seconds / 60:.1f}m"
        else:
            return f"{eta_seconds / 3600:.1f}h"

    def report(self) -> None:
        """Log current progress."""
        percent = self.completed * 100 // self.total if self.total > 0 else 0
        logger.info(
            f"Progress: {self.completed}/{self.total} ({percent}%) | "
            f"Rate: {self.get_rate():.2f}/s | "
            f"ETA: {self.format_eta()} | "
            f"Resolved: {self.counters['resolved']} | "
            f"Failed: {self.counters['failed']}"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "total": self.total,
            "completed": self.completed,
            "resolved": self.counters["resolved"],
            "failed": self.counters["failed"],
            "rate": self.get_rate(),
            "eta_seconds": self.get_eta(),
            "elapsed_seconds": time.time() - self.start_time,
        }
