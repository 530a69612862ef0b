"""Asynchronous structured logging for cave generation runs."""

from __future__ import annotations

import json
import queue
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .models import RunSummary, TickResult


class RunLogger:
    """Writes JSON-lines events to disk from a background thread."""

    def __init__(self, log_path: Path, summary_path: Optional[Path] = None) -> None:
        self._log_path = log_path
        self._summary_path = summary_path or log_path.with_suffix(".md")
        self._queue: "queue.Queue[Optional[Dict[str, Any]]]" = queue.Queue()
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._stop = threading.Event()
        self._attempt_records: dict[int, dict[str, Any]] = {}
        self._summary: RunSummary | None = None
        self._closed = False
        log_path.parent.mkdir(parents=True, exist_ok=True)
        self._thread.start()

    @property
    def log_path(self) -> Path:
        return self._log_path

    @property
    def summary_path(self) -> Path:
        return self._summary_path

    def _worker(self) -> None:
        with self._log_path.open("a", encoding="utf8") as fh:
            while True:
                try:
                    item = self._queue.get(timeout=0.1)
                except queue.Empty:
                    if self._stop.is_set():
                        break
                    continue
                try:
                    if item is None:
                        break
                    json.dump(item, fh, sort_keys=True)
                    fh.write("\n")
                    fh.flush()
                finally:
                    self._queue.task_done()

    @property
    def closed(self) -> bool:
        return self._closed

    def log_event(self, event: Dict[str, Any]) -> None:
        if self._closed:
            raise RuntimeError(f"RunLogger for {self._log_path} is closed")
        payload = {"timestamp": time.time(), **event}
        self._queue.put(payload)

    def log_run_start(self, run_id: str, config: Dict[str, Any]) -> None:
        self.log_event({"type": "run_start", "run_id": run_id, "config": config})

    def log_tick(self, tick: TickResult) -> None:
        payload = {"type": tick.phase, **tick.to_dict()}
        payload.pop("phase")
        self.log_event(payload)
        record = self._attempt_records.setdefault(
            tick.attempt,
            {"attempt": tick.attempt, "generations": 0, "duration_ns": 0, "passage_area": 0, "outcome": "running"},
        )
        record["duration_ns"] += tick.duration_ns
        record["passage_area"] = tick.passage_area
        if tick.phase == "step":
            record["generations"] = tick.generation
        elif tick.phase in ("accepted", "rejected"):
            record["outcome"] = tick.phase
        elif tick.phase == "restart" and tick.attempt > 0:
            previous = self._attempt_records.get(tick.attempt - 1)
            if previous is not None and previous["outcome"] == "running":
                previous["outcome"] = "rejected" if tick.metadata.get("reason") == "too_small" else "restarted"

    def log_run_end(self, summary: RunSummary) -> None:
        self._summary = summary
        self.log_event({"type": "run_end", **summary.to_dict()})

    def flush(self) -> None:
        """Block until every queued event is on disk, then refresh the summary."""
        if self._closed:
            return
        self._queue.join()
        self._write_summary()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        self._queue.put(None)
        self._thread.join(timeout=2)
        self._write_summary()

    def _write_summary(self) -> None:
        if not self._attempt_records:
            return
        lines = ["# Cave Generation Summary", "", f"- Attempts: {len(self._attempt_records)}"]
        if self._summary is not None:
            lines.append(f"- Ticks: {self._summary.ticks}")
            lines.append(f"- Final passage area: {self._summary.passage_area}")
            lines.append(f"- Accepted: {'yes' if self._summary.accepted else 'no'}")
        lines.append("")
        lines.append("| Attempt | Generations | Duration (ms) | Passage Area | Outcome |")
        lines.append("| ---: | ---: | ---: | ---: | --- |")
        for record in self._attempt_records.values():
            duration_ms = record["duration_ns"] / 1e6
            lines.append(
                f"| {record['attempt']} | {record['generations']} | {duration_ms:.2f} "
                f"| {record['passage_area']} | {record['outcome']} |"
            )
        self._summary_path.parent.mkdir(parents=True, exist_ok=True)
        self._summary_path.write_text("\n".join(lines), encoding="utf8")

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["RunLogger"]
