from __future__ import annotations

import itertools
import logging
import math
import threading
import time as _time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Literal, Mapping, Protocol, Sequence

from .core.aggregate import calculate_all_states
from .core.chains import AnimationChain, apply_chain_delays, compute_chain_delays
from .core.interpolate import MotionResolver, placeholder_motion
from .core.quality import QualitySettings, SimulationQuality, quality_preset
from .core.records import AnimationRecord, Element
from .core.state import ElementAnimationState
from .core.timing import timeline_duration

logger = logging.getLogger(__name__)

PlaybackState = Literal["stopped", "playing", "paused"]
Clock = Callable[[], float]

# play() at (or within this many seconds of) the end of a finite timeline restarts from 0.
RESTART_EPSILON = 0.05
MIN_PLAYBACK_RATE = 0.1


@dataclass(frozen=True)
class PlaybackSnapshot:
    """One broadcast: the query time and the states computed for it."""

    time: float
    states: Mapping[str, ElementAnimationState] = field(default_factory=lambda: MappingProxyType({}))


Listener = Callable[[PlaybackSnapshot], None]


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...


class ManualFrameScheduler:
    """Frames run only when `run_frame()` is called. Used for scripted playback and tests."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._pending: dict[int, Callable[[], None]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    def run_frame(self) -> int:
        """Run the callbacks requested before this call; returns how many ran."""
        callbacks = list(self._pending.values())
        self._pending.clear()
        for cb in callbacks:
            cb()
        return len(callbacks)


class ThreadFrameScheduler:
    """Runs frames on `threading.Timer` threads, one frame at a time."""

    def __init__(self, *, fps: float = 60.0) -> None:
        self._interval = 1.0 / float(fps)

    def request_frame(self, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(self._interval, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel_frame(self, handle: Any) -> None:
        handle.cancel()


class PlaybackController:
    """Live preview clock for one document.

    Drives `calculate_all_states` from a frame loop and pushes immutable
    snapshots to subscribers. States: stopped, playing, paused.

    Notes:
    - Every controller is independent; create one per open document.
    - Quality only throttles how often listeners are notified. Time keeps
      advancing on every frame.
    - After `dispose()` every call raises RuntimeError.
    """

    def __init__(
        self,
        *,
        quality: str | SimulationQuality = SimulationQuality.EDITING,
        clock: Clock = _time.perf_counter,
        scheduler: FrameScheduler | None = None,
        motion_resolver: MotionResolver = placeholder_motion,
    ) -> None:
        self._lock = threading.RLock()
        self._clock = clock
        self._scheduler: FrameScheduler = scheduler if scheduler is not None else ThreadFrameScheduler()
        self._motion_resolver = motion_resolver
        self._quality: QualitySettings = quality_preset(quality)

        self._state: PlaybackState = "stopped"
        self._disposed = False
        self._anchor: float | None = None
        self._paused_time = 0.0
        self._last_broadcast = -math.inf
        self._rate = 1.0
        self._frame_handle: Any = None

        self._records: list[AnimationRecord] = []
        self._elements: dict[str, Element] | None = None
        self._duration = 0.0

        self._listener_ids = itertools.count(1)
        self._listeners: dict[int, Listener] = {}
        self._snapshot = PlaybackSnapshot(time=0.0)

    # -- helpers -----------------------------------------------------------

    def _check(self) -> None:
        if self._disposed:
            raise RuntimeError("PlaybackController has been disposed")

    def _elapsed(self, now: float) -> float:
        assert self._anchor is not None
        return (now - self._anchor) * self._rate

    def _reanchor(self, now: float, t: float) -> None:
        self._anchor = now - t / self._rate

    def _compute(self, t: float) -> PlaybackSnapshot:
        states = calculate_all_states(self._records, self._elements, t, motion_resolver=self._motion_resolver)
        snap = PlaybackSnapshot(time=float(t), states=MappingProxyType(states))
        self._snapshot = snap
        return snap

    def _broadcast(self, snap: PlaybackSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(snap)
            except Exception:
                logger.exception("Playback listener failed at t=%.3f", snap.time)

    def _cancel_frame(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _tick(self) -> None:
        with self._lock:
            self._frame_handle = None
            if self._disposed or self._state != "playing":
                return
            now = self._clock()
            t = self._elapsed(now)
            self._paused_time = t

            snap: PlaybackSnapshot | None = None
            if now - self._last_broadcast >= self._quality.min_interval:
                snap = self._compute(t)
                self._last_broadcast = now

            self._frame_handle = self._scheduler.request_frame(self._tick)

        if snap is not None:
            self._broadcast(snap)

    # -- configuration -----------------------------------------------------

    def set_quality(self, mode: str | SimulationQuality) -> QualitySettings:
        preset = quality_preset(mode)
        with self._lock:
            self._check()
            self._quality = preset
            return preset

    def get_quality(self) -> QualitySettings:
        with self._lock:
            self._check()
            return self._quality

    def set_data(
        self,
        records: Iterable[AnimationRecord],
        elements: Iterable[Element] | Mapping[str, Element] | None,
        chains: Sequence[AnimationChain] | None = None,
    ) -> None:
        """Replace the animations and elements used by later evaluations.

        Chain delays are folded into each record's `begin`.
        """

        recs = list(records)
        if chains:
            recs = apply_chain_delays(recs, compute_chain_delays(chains, recs))
        if elements is None:
            elems = None
        elif isinstance(elements, Mapping):
            elems = dict(elements)
        else:
            elems = {e.id: e for e in elements}

        with self._lock:
            self._check()
            self._records = recs
            self._elements = elems
            self._duration = timeline_duration(recs)

    def get_duration(self) -> float:
        with self._lock:
            self._check()
            return self._duration

    def set_playback_rate(self, rate: float) -> float:
        r = max(MIN_PLAYBACK_RATE, float(rate))
        with self._lock:
            self._check()
            if self._state == "playing":
                now = self._clock()
                t = self._elapsed(now)
                self._rate = r
                self._reanchor(now, t)
            else:
                self._rate = r
            return r

    def get_playback_rate(self) -> float:
        with self._lock:
            self._check()
            return self._rate

    # -- transport ---------------------------------------------------------

    def play(self) -> None:
        with self._lock:
            self._check()
            if self._state == "playing":
                return
            if self._duration > 0.0 and self._paused_time >= self._duration - RESTART_EPSILON:
                self._paused_time = 0.0
            self._reanchor(self._clock(), self._paused_time)
            self._last_broadcast = -math.inf
            self._state = "playing"
            logger.debug("playback: play from t=%.3f", self._paused_time)
        self._tick()

    def pause(self) -> None:
        with self._lock:
            self._check()
            if self._state != "playing":
                return
            self._paused_time = self._elapsed(self._clock())
            self._cancel_frame()
            self._state = "paused"
            logger.debug("playback: paused at t=%.3f", self._paused_time)

    def stop(self) -> None:
        with self._lock:
            self._check()
            self._cancel_frame()
            self._state = "stopped"
            self._paused_time = 0.0
            self._anchor = None
            snap = self._compute(0.0)
            logger.debug("playback: stopped")
        self._broadcast(snap)

    def seek_to(self, time: float) -> None:
        t = float(time)
        with self._lock:
            self._check()
            self._paused_time = t
            if self._state == "playing":
                now = self._clock()
                self._reanchor(now, t)
                self._last_broadcast = now
            snap = self._compute(t)
        self._broadcast(snap)

    # -- queries -----------------------------------------------------------

    def get_current_time(self) -> float:
        with self._lock:
            self._check()
            return self._paused_time

    def get_is_playing(self) -> bool:
        with self._lock:
            self._check()
            return self._state == "playing"

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            self._check()
            return self._state

    def get_element_states(self) -> Mapping[str, ElementAnimationState]:
        """States from the latest broadcast (read-only)."""
        with self._lock:
            self._check()
            return self._snapshot.states

    def get_snapshot(self) -> PlaybackSnapshot:
        with self._lock:
            self._check()
            return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._check()
            key = next(self._listener_ids)
            self._listeners[key] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
        self.stop()
        with self._lock:
            self._disposed = True
            self._listeners.clear()
            self._records = []
            self._elements = None
            self._snapshot = PlaybackSnapshot(time=0.0)
            logger.debug("playback: disposed")
