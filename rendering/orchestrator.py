from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, Dict, Optional

import numpy as np

from fractals.base import Viewport
from rendering.core import FrameGenerator
from rendering.events import FrameEvent, LogEvent
from rendering.frame_buffer import FrameBuffer
from rendering.view_state import ViewState
from utils.enums import GenState, RedrawPolicy

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """
    Single-flight scheduler for frame generation.

    The display loop calls request_redraw() whenever the view changes and
    poll() once per iteration. poll() launches at most one FrameGenerator
    job on a dedicated worker thread, using a snapshot of the view taken at
    launch time. While that job runs, further requests are either dropped
    (RedrawPolicy.DROP) or held as a single pending flag that launches one
    follow-up job after completion (RedrawPolicy.LATEST).

    A finished job publishes its frame into the FrameBuffer; a failed job
    is logged and reported through on_log, the FrameBuffer keeps the last
    good frame, and the orchestrator returns to IDLE so the next request
    retries. Running jobs are never cancelled or timed out.
    """

    def __init__(
        self,
        generator: FrameGenerator,
        view: ViewState,
        *,
        frames: Optional[FrameBuffer] = None,
        policy: RedrawPolicy = RedrawPolicy.DROP,
    ) -> None:
        self.generator = generator
        self.view = view
        self.frames = frames or FrameBuffer(view.width, view.height)
        self.policy = policy

        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="frame-gen")
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()

        self._state = GenState.IDLE
        self._pending = False
        self._seq = 0
        self._closed = False

        # Counters
        self.requests = 0
        self.launches = 0
        self.dropped = 0
        self.failures = 0

        # Callbacks
        self.on_frame: Optional[Callable[[FrameEvent], None]] = None
        self.on_log: Optional[Callable[[LogEvent], None]] = None

    # ---------------------------------------------------------------------
    # State
    # ---------------------------------------------------------------------

    @property
    def state(self) -> GenState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state is GenState.GENERATING

    @property
    def pending(self) -> bool:
        return self._pending

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "requests": self.requests,
                "launches": self.launches,
                "dropped": self.dropped,
                "failures": self.failures,
                "seq": self._seq,
            }

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    # ---------------------------------------------------------------------
    # Requests
    # ---------------------------------------------------------------------

    def request_redraw(self) -> None:
        with self._lock:
            self._pending = True
            self.requests += 1

    def poll(self) -> Optional[Future]:
        """
        Launch a generation if one is pending and none is running.
        Returns the Future of a newly launched job, else None.
        """
        with self._lock:
            if not self._pending or self._closed:
                return None

            if self._state is GenState.GENERATING:
                if self.policy is RedrawPolicy.DROP:
                    self._pending = False
                    self.dropped += 1
                    logger.debug("Redraw dropped; generation %d still running", self._seq)
                return None

            self._pending = False
            self._seq += 1
            seq = self._seq
            vp = self.view.snapshot()
            self._state = GenState.GENERATING
            self._idle.clear()
            self.launches += 1
            t0 = time.perf_counter()
            fut = self._pool.submit(self.generator.generate, vp, seq)

        logger.debug("Generation %d launched for %s", seq, vp)
        fut.add_done_callback(partial(self._on_done, vp, seq, t0))
        return fut

    # ---------------------------------------------------------------------
    # Completion
    # ---------------------------------------------------------------------

    def _on_done(self, vp: Viewport, seq: int, t0: float, fut: Future) -> None:
        elapsed = time.perf_counter() - t0
        image: Optional[np.ndarray] = None
        error: Optional[BaseException] = None
        try:
            error = fut.exception()
            if error is None:
                image = fut.result()
                self.frames.publish(image, seq)
        except Exception as e:
            error = e

        with self._lock:
            if error is not None:
                self.failures += 1
            self._state = GenState.IDLE

        try:
            if error is not None:
                logger.error("Generation %d failed: %s", seq, error, exc_info=error)
                self._emit_log(f"[Orchestrator] Generation {seq} failed: {error}", "error")
            else:
                logger.debug("Generation %d done in %.3fs", seq, elapsed)
                if self.on_frame:
                    self.on_frame(FrameEvent(image, vp.width, vp.height, seq, vp, elapsed))
                self._emit_log(f"Render time: {round(elapsed, 3)}s", None)
        finally:
            with self._lock:
                if self._state is GenState.IDLE:
                    self._idle.set()

    def _emit_log(self, message: str, level: Optional[str]) -> None:
        if self.on_log:
            self.on_log(LogEvent(message, level))

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting work; with wait=True block until the running job ends.
        """
        with self._lock:
            self._closed = True
            self._pending = False
        self._pool.shutdown(wait=wait)
