"""SamplingLoop - periodic capture/evaluate cycles gated by a pass streak.

State machine::

    IDLE --start()--> WARMING_UP --camera ready + settle delay--> SAMPLING
    SAMPLING --streak reached--> READY
    any state --stop() / reset() / close()--> IDLE

Threads:
    - settle delay: ``threading.Timer``
    - periodic trigger: daemon ticker thread waiting on a per-session Event
    - cycle work (capture + detect): single-worker ThreadPoolExecutor

A trigger that arrives while a cycle is in flight is dropped, not queued.
Every session carries a generation number; a cycle that completes under
an older generation is discarded without touching state.

Example:
    >>> loop = SamplingLoop(camera, HaarFaceBackend(), on_update=print_state)
    >>> loop.start()
    >>> loop.wait_ready(timeout=30.0)
    >>> loop.close()
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from readycheck.backends.base import CameraDevice, FaceDetectionBackend
from readycheck.checklist import ChecklistState, initial_checklist
from readycheck.config import (
    DEFAULT_SAMPLING,
    DEFAULT_THRESHOLDS,
    SamplingConfig,
    ThresholdConfig,
)
from readycheck.evaluator import evaluate, passed_count
from readycheck.metrics import FaceMetricsExtractor
from readycheck.tracker import StabilizationTracker
from readycheck.types import FaceMetrics, LoopPhase

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[ChecklistState, LoopPhase], None]

# Per-thread marker set while listeners run.
_callbacks = threading.local()


class CycleOutcome(Enum):
    """What became of one evaluation cycle."""

    APPLIED = "applied"        # checklist and streak updated
    ABANDONED = "abandoned"    # capture/detect failed, no state change
    DISCARDED = "discarded"    # session stopped while the cycle ran


@dataclass
class SessionStats:
    cycles: int = 0
    abandoned: int = 0
    dropped_triggers: int = 0


class SamplingLoop:
    """Drives evaluation cycles for one readiness session at a time.

    Listeners run under the loop lock right after each state change
    (start, sampling begins, cycle applied, ready, stop). Keep them short.

    Args:
        camera: Camera device.
        detector: Face detection backend or a ready FaceMetricsExtractor.
        thresholds: Criterion thresholds (default: ``DEFAULT_THRESHOLDS``).
        sampling: Timing policy (default: ``DEFAULT_SAMPLING``).
        on_update: Callback ``(state, phase)`` fired after each state change.
    """

    def __init__(
        self,
        camera: CameraDevice,
        detector: Union[FaceDetectionBackend, FaceMetricsExtractor],
        *,
        thresholds: Optional[ThresholdConfig] = None,
        sampling: Optional[SamplingConfig] = None,
        on_update: Optional[UpdateCallback] = None,
    ):
        self._camera = camera
        if isinstance(detector, FaceMetricsExtractor):
            self._extractor = detector
        else:
            self._extractor = FaceMetricsExtractor(detector)
        self._thresholds = thresholds or DEFAULT_THRESHOLDS
        self._sampling = sampling or DEFAULT_SAMPLING
        self._listeners: List[UpdateCallback] = [on_update] if on_update else []

        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="readycheck_cycle")
        self._closed = False
        self._pending_cycles = 0
        self._released = False

        # Session state
        self._generation = 0
        self._phase = LoopPhase.IDLE
        self._tracker = StabilizationTracker(self._sampling.required_streak)
        self._state = initial_checklist(self._sampling.required_streak)
        self._stats = SessionStats()
        self._camera_ready = False
        self._in_flight = False
        self._settle_timer: Optional[threading.Timer] = None
        self._ticker_stop: Optional[threading.Event] = None
        self._session_done = threading.Event()
        self._session_done.set()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def phase(self) -> LoopPhase:
        return self._phase

    @property
    def state(self) -> ChecklistState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state.is_ready

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def stats(self) -> SessionStats:
        with self._lock:
            return SessionStats(**vars(self._stats))

    @property
    def thresholds(self) -> ThresholdConfig:
        return self._thresholds

    def add_listener(self, callback: UpdateCallback) -> None:
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: UpdateCallback) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin a fresh session (IDLE -> WARMING_UP).

        A running session is torn down first. If the camera already reports
        ready, the settle delay starts immediately.

        Raises:
            RuntimeError: If the loop was closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("SamplingLoop is closed")
            self._end_session()
            self._extractor.initialize()

            self._phase = LoopPhase.WARMING_UP
            self._session_done = threading.Event()
            logger.info("Readiness session %d started", self._generation)
            self._notify()

            if getattr(self._camera, "is_ready", False):
                self.camera_ready()

    def camera_ready(self) -> None:
        """Signal that the camera delivers frames; starts the settle delay."""
        with self._lock:
            if self._phase is not LoopPhase.WARMING_UP or self._camera_ready:
                return
            self._camera_ready = True

            delay = self._sampling.settle_delay_sec
            if delay <= 0:
                self._begin_sampling(self._generation)
                return
            timer = threading.Timer(delay, self._begin_sampling, args=(self._generation,))
            timer.daemon = True
            self._settle_timer = timer
            timer.start()
            logger.debug("Camera ready, settling for %.2fs", delay)

    def trigger(self) -> Optional[Future]:
        """Run one evaluation cycle unless one is already in flight.

        Returns:
            Future resolving to a CycleOutcome, or None when the trigger
            was dropped (not sampling, or a cycle is in flight).
        """
        return self._trigger(None)

    def stop(self) -> None:
        """End the session: cancel timers, drop in-flight work, reset state."""
        with self._lock:
            was_active = self._phase is not LoopPhase.IDLE
            self._end_session()
            if was_active:
                self._notify()

    reset = stop

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the session becomes ready or ends.

        Returns:
            True if the session reached READY.
        """
        with self._lock:
            done = self._session_done
        done.wait(timeout)
        return self.is_ready

    def close(self) -> None:
        """Stop and release the worker thread and detector. Idempotent.

        The detector is cleaned up only once no cycle is running. From a host
        thread this waits for the in-flight cycle; from inside a listener the
        cleanup runs when that cycle completes.
        """
        with self._lock:
            if self._closed:
                return
            self.stop()
            self._closed = True
            release = self._pending_cycles == 0
            if release:
                self._released = True

        in_callback = getattr(_callbacks, "depth", 0) > 0
        self._executor.shutdown(wait=not in_callback, cancel_futures=True)
        if release:
            self._extractor.cleanup()

    def __enter__(self) -> "SamplingLoop":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin_sampling(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._phase is not LoopPhase.WARMING_UP:
                return
            self._settle_timer = None
            self._phase = LoopPhase.SAMPLING

            period = self._sampling.period_sec
            if period > 0:
                stop_event = threading.Event()
                self._ticker_stop = stop_event
                ticker = threading.Thread(
                    target=self._run_ticker,
                    args=(generation, stop_event, period),
                    name="readycheck_ticker",
                    daemon=True,
                )
                ticker.start()
            logger.info("Sampling every %.2fs", period)
            self._notify()

    def _run_ticker(self, generation: int, stop_event: threading.Event, period: float) -> None:
        while not stop_event.wait(period):
            self._trigger(generation)

    def _trigger(self, generation: Optional[int]) -> Optional[Future]:
        with self._lock:
            if generation is not None and generation != self._generation:
                return None
            if self._phase is not LoopPhase.SAMPLING:
                return None
            if self._in_flight:
                self._stats.dropped_triggers += 1
                logger.debug("Trigger dropped, cycle in flight")
                return None
            self._in_flight = True
            self._pending_cycles += 1
            future = self._executor.submit(self._run_cycle, self._generation)
            future.add_done_callback(self._on_cycle_done)
            return future

    def _on_cycle_done(self, future: Future) -> None:
        with self._lock:
            self._pending_cycles -= 1
            release = self._closed and self._pending_cycles == 0 and not self._released
            if release:
                self._released = True
        if release:
            logger.debug("Releasing detector after last cycle")
            self._extractor.cleanup()

    def _run_cycle(self, generation: int) -> CycleOutcome:
        try:
            frame = self._camera.capture()
            if frame is None:
                logger.debug("Capture returned no frame")
                return self._abandon(generation)
            metrics = self._extractor.extract(frame)
            del frame
        except Exception:
            logger.debug("Cycle abandoned", exc_info=True)
            return self._abandon(generation)
        return self._apply(generation, metrics)

    def _abandon(self, generation: int) -> CycleOutcome:
        with self._lock:
            if generation != self._generation:
                return CycleOutcome.DISCARDED
            self._in_flight = False
            self._stats.abandoned += 1
            return CycleOutcome.ABANDONED

    def _apply(self, generation: int, metrics: Optional[FaceMetrics]) -> CycleOutcome:
        with self._lock:
            if generation != self._generation or self._phase is not LoopPhase.SAMPLING:
                logger.debug("Discarding result of stopped session %d", generation)
                return CycleOutcome.DISCARDED
            self._in_flight = False

            results = evaluate(metrics, self._thresholds)
            ready = self._tracker.update(passed_count(results))
            self._stats.cycles += 1
            self._state = ChecklistState(
                items=results,
                is_ready=ready,
                streak=self._tracker.streak,
                required_streak=self._tracker.required_streak,
            )

            if ready:
                self._phase = LoopPhase.READY
                self._cancel_timers()
                self._session_done.set()
                logger.info("Ready after %d cycles", self._stats.cycles)
            self._notify()
            return CycleOutcome.APPLIED

    def _end_session(self) -> None:
        """Tear down the current session and bump the generation (lock held)."""
        if self._phase is not LoopPhase.IDLE:
            s = self._stats
            logger.info(
                "Readiness session %d ended (%s): %d cycles, %d abandoned, %d dropped triggers",
                self._generation, self._phase.value, s.cycles, s.abandoned, s.dropped_triggers,
            )
        self._cancel_timers()
        self._generation += 1
        self._in_flight = False
        self._camera_ready = False
        self._tracker = StabilizationTracker(self._sampling.required_streak)
        self._state = initial_checklist(self._sampling.required_streak)
        self._stats = SessionStats()
        self._phase = LoopPhase.IDLE
        self._session_done.set()

    def _cancel_timers(self) -> None:
        if self._settle_timer is not None:
            self._settle_timer.cancel()
            self._settle_timer = None
        if self._ticker_stop is not None:
            self._ticker_stop.set()
            self._ticker_stop = None

    def _notify(self) -> None:
        state, phase = self._state, self._phase
        _callbacks.depth = getattr(_callbacks, "depth", 0) + 1
        try:
            for listener in list(self._listeners):
                try:
                    listener(state, phase)
                except Exception as e:
                    logger.warning("Checklist listener failed: %s", e, exc_info=True)
        finally:
            _callbacks.depth -= 1


__all__ = ["SamplingLoop", "CycleOutcome", "SessionStats", "UpdateCallback"]
