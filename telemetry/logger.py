from __future__ import annotations

import json
import os
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional, TextIO

if TYPE_CHECKING:
    from lidar_sandbox.sim import SimSnapshot


def snapshot_record(snapshot: "SimSnapshot") -> Dict[str, Any]:
    """Summarize a completed tick: pose, obstacle count, nearest range and grid fill."""
    r = snapshot.rover
    return {
        "tick": snapshot.tick,
        "rover": {"x": r.x, "y": r.y, "heading": r.heading, "v": r.v, "w": r.w},
        "num_obstacles": len(snapshot.obstacles),
        "rays": len(snapshot.scan),
        "nearest_range": snapshot.scan.nearest(),
        "occupied_cells": snapshot.grid.occupied_cells(),
        "grid_hits": snapshot.grid.total_hits(),
    }


def read_records(path: str) -> List[Dict[str, Any]]:
    """Load every record of a telemetry JSONL file, skipping blank lines."""
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TelemetryLogger:
    """Per-tick simulation telemetry, one JSON object per line.

    Appends to `path`; safe to share between threads. Usable as a context
    manager so the file is closed when a run ends.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")
        self.records_written = 0

    def log_snapshot(self, snapshot: "SimSnapshot") -> None:
        self.log_record(snapshot_record(snapshot))

    def log_record(self, record: Dict[str, Any]) -> None:
        """Append a raw dict record; ignored once the logger is closed."""
        if self._fp is None:
            return
        line = json.dumps(record, separators=(",", ":"))
        with self._lock:
            self._fp.write(line + "\n")
            self._fp.flush()
            self.records_written += 1

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
