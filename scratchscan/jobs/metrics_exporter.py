"""Append run progress to a JSONL file so other processes can follow a run."""
import time
from pathlib import Path
from typing import Optional
import aiofiles
import orjson

from scratchscan.config import METRICS_FILE


class MetricsExporter:
    """Writes one JSON line per progress update."""

    def __init__(self, run_id: str, metrics_file: Optional[Path] = None):
        self.run_id = run_id
        self.metrics_file = metrics_file or METRICS_FILE

    async def export_progress(
        self,
        phase: str,
        completed: int,
        total: int,
        resolved: int,
        failed: int,
        rate: float,
        eta: float,
    ) -> None:
        line = {
            "ts": time.time(),
            "run_id": self.run_id,
            "phase": phase,
            "completed": completed,
            "total": total,
            "resolved": resolved,
            "failed": failed,
            "rate": round(rate, 2),
            "eta": round(eta, 2),
        }
        async with aiofiles.open(self.metrics_file, "ab") as f:
            await f.write(orjson.dumps(line) + b"\n")
