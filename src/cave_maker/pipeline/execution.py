"""Tick-driven step loop that grows a cave generation by generation."""

from __future__ import annotations

import hashlib
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional

import numpy as np

from ..core.automaton import CellularAutomaton
from .config import CaveConfig
from .logging import RunLogger
from .models import RunSummary, TickPhase, TickResult
from .visualization import FrameWriter


class RngPool:
    """Deterministic RNG factory keyed by restart attempt."""

    def __init__(self, seed: int) -> None:
        self._seed = int(seed)

    def for_label(self, label: str) -> np.random.Generator:
        payload = f"{label}:{self._seed}".encode("utf8")
        digest = hashlib.blake2b(payload, digest_size=16)
        seed = int.from_bytes(digest.digest()[:8], "little", signed=False)
        return np.random.default_rng(seed)

    def for_attempt(self, attempt: int) -> np.random.Generator:
        return self.for_label(f"attempt-{int(attempt)}")


class StepLoop:
    """Drives seeding, stepping and culling one tick at a time.

    Each ``tick`` advances the automaton by one generation. After the last
    generation one more tick culls to the largest cavern (when enabled) and
    checks the passage area against ``min_passage_area``; an undersized cave
    is reseeded until ``max_restarts`` is exhausted. ``restart`` reseeds on
    demand, e.g. in response to user input.
    """

    def __init__(
        self,
        config: CaveConfig,
        *,
        automaton: CellularAutomaton | None = None,
        log: bool = True,
        generate_frames: bool = False,
    ) -> None:
        self._config = config
        self._automaton = automaton or CellularAutomaton(config.width, config.height, config.rules)
        self._rng_pool = RngPool(config.rng_seed)
        self._logger: RunLogger | None = None
        self._frames: FrameWriter | None = None
        if log or generate_frames:
            config.ensure_directories()
        if log:
            self._logger = RunLogger(config.run_log_path())
            self._logger.log_run_start(config.run_id, config.to_dict())
        if generate_frames:
            self._frames = FrameWriter(config.run_frames_dir(), config.render)
        self._history: List[TickResult] = []
        self._attempt = -1
        self._generation = 0
        self._finished = False
        self._accepted = False
        self.restart(reason="initial")

    @property
    def automaton(self) -> CellularAutomaton:
        return self._automaton

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def accepted(self) -> bool:
        return self._accepted

    @property
    def history(self) -> List[TickResult]:
        return list(self._history)

    @property
    def logger(self) -> RunLogger | None:
        return self._logger

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            end = time.perf_counter_ns()
            if self._logger is not None:
                self._logger.log_event(
                    {
                        "type": "timed_scope",
                        "attempt": self._attempt,
                        "label": label,
                        "duration_ns": end - start,
                    }
                )

    def _record(self, phase: TickPhase, duration_ns: int, **metadata: object) -> TickResult:
        caverns = self._automaton.find_caverns()
        largest = max((len(cavern) for cavern in caverns), default=None)
        result = TickResult(
            phase=phase,
            attempt=self._attempt,
            generation=self._generation,
            passage_area=sum(len(cavern) for cavern in caverns),
            cavern_count=len(caverns),
            duration_ns=duration_ns,
            largest_cavern=largest,
            metadata=dict(metadata),
        )
        self._history.append(result)
        if self._logger is not None:
            self._logger.log_tick(result)
        if self._frames is not None:
            self._frames.emit(self._automaton.cells(), phase=phase, attempt=self._attempt)
        return result

    def restart(self, reason: str = "manual") -> TickResult:
        """Reseed the grid with fresh noise and start counting generations again."""
        start = time.perf_counter_ns()
        self._attempt += 1
        self._generation = 0
        self._finished = False
        self._accepted = False
        rng = self._rng_pool.for_attempt(self._attempt)
        self._automaton.seed(self._config.wall_probability, rng)
        return self._record("restart", time.perf_counter_ns() - start, reason=reason)

    def tick(self) -> TickResult:
        if self._finished:
            return TickResult(
                phase="idle",
                attempt=self._attempt,
                generation=self._generation,
                passage_area=self._automaton.total_passage_area(),
                cavern_count=len(self._automaton.find_caverns()),
            )
        if self._generation < self._config.generations:
            start = time.perf_counter_ns()
            with self.timed("step"):
                self._automaton.step()
            self._generation += 1
            return self._record("step", time.perf_counter_ns() - start)
        return self._finalize()

    def _finalize(self) -> TickResult:
        config = self._config
        if config.cull:
            start = time.perf_counter_ns()
            with self.timed("cull"):
                retained = self._automaton.cull_to_largest_cavern()
            self._record("cull", time.perf_counter_ns() - start, retained=len(retained) if retained else 0)

        area = self._automaton.total_passage_area()
        if area >= config.min_passage_area:
            self._finished = True
            self._accepted = True
            return self._record("accepted", 0)
        if self._attempt < config.max_restarts:
            return self.restart(reason="too_small")
        self._finished = True
        return self._record("rejected", 0, min_passage_area=config.min_passage_area)

    def summary(self) -> RunSummary:
        last = self._history[-1]
        return RunSummary(
            attempts=self._attempt + 1,
            ticks=len(self._history),
            generations=self._generation,
            passage_area=last.passage_area,
            cavern_count=last.cavern_count,
            accepted=self._accepted,
            duration_ns=sum(result.duration_ns for result in self._history),
        )

    def run(self, max_ticks: Optional[int] = None, *, realtime: bool = False) -> List[TickResult]:
        """Tick until the cave is accepted or rejected, then flush the run log.

        The log stays open so a later ``restart`` and ``run`` append to it;
        ``close`` (or leaving the ``with`` block) finishes it.
        """
        ticks = 0
        interval = self._config.tick_interval_ms / 1000.0
        while not self._finished and (max_ticks is None or ticks < max_ticks):
            self.tick()
            ticks += 1
            if realtime and not self._finished:
                time.sleep(interval)
        if self._logger is not None:
            self._logger.log_run_end(self.summary())
            self._logger.flush()
        return self.history

    def close(self) -> None:
        if self._logger is not None:
            self._logger.close()

    def __enter__(self) -> "StepLoop":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["RngPool", "StepLoop"]
