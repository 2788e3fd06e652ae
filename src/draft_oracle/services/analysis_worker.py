"""Background worker for draft analytics.

Requests go through a task queue and each one gets its own Future. The
handlers are the same pure functions used in-process, so a result does not
depend on where it was computed.
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional

from draft_oracle.services.composition_analyzer import analyze_composition
from draft_oracle.services.counter_engine import DEFAULT_COUNTER_LIMIT, find_counters
from draft_oracle.services.synergy_engine import calculate_synergy
from draft_oracle.services.win_rate_predictor import predict_win_rate

logger = logging.getLogger(__name__)

ANALYSIS_HANDLERS: dict[str, Callable[[dict], Any]] = {
    "analyze_team": lambda p: analyze_composition(p["team"]),
    "calculate_synergy": lambda p: calculate_synergy(p["champions"]),
    "find_counters": lambda p: find_counters(
        p["enemy_team"], p["candidates"], p.get("limit", DEFAULT_COUNTER_LIMIT)
    ),
    "predict_win_rate": lambda p: predict_win_rate(p["blue_team"], p["red_team"]),
}


def run_analysis(kind: str, payload: dict) -> Any:
    """Run one analysis request synchronously.

    Raises:
        ValueError: If kind is not a known analysis type
    """
    handler = ANALYSIS_HANDLERS.get(kind)
    if handler is None:
        raise ValueError(f"Unknown analysis type: {kind}")
    return handler(payload)


@dataclass
class _Task:
    kind: str
    payload: dict
    future: Future


class AnalysisWorker:
    """Single background thread consuming analysis requests from a queue."""

    def __init__(self, name: str = "draft-analysis-worker"):
        self._queue: queue.Queue[Optional[_Task]] = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        logger.info(f"Analysis worker '{name}' started")

    def submit(self, kind: str, payload: dict) -> Future:
        """Queue an analysis request and return a Future for its result.

        Raises:
            RuntimeError: If the worker has been shut down
        """
        future: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("Analysis worker is shut down")
            self._queue.put(_Task(kind=kind, payload=dict(payload), future=future))
        return future

    def _run(self) -> None:
        while True:
            task = self._queue.get()
            if task is None:
                break
            if not task.future.set_running_or_notify_cancel():
                continue
            start = time.perf_counter()
            try:
                result = run_analysis(task.kind, task.payload)
            except Exception as e:
                logger.error(f"[Worker Error] {task.kind}: {e}")
                task.future.set_exception(e)
                continue
            logger.debug(f"[Worker] {task.kind} took {(time.perf_counter() - start) * 1000:.2f}ms")
            task.future.set_result(result)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting requests; queued requests still run before exit."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)
        if wait:
            self._thread.join()

    def __enter__(self) -> "AnalysisWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
