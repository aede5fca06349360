from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal

import numpy as np

from .records import INDEFINITE, AnimationBase

TimingPhase = Literal["before", "active", "frozen", "removed"]

_OFFSET_RE = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(ms|s|min|h)?$")
_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "min": 60.0, "h": 3600.0, None: 1.0}

# Tolerance used when counting completed iterations of a finite active duration.
_ITERATION_EPS = 1e-9


@dataclass(frozen=True)
class TimingResult:
    """Raw (un-eased) progress of one record at one query time."""

    progress: float
    phase: TimingPhase
    iteration: int = 0

    @property
    def is_active(self) -> bool:
        return self.phase == "active"


def try_parse_time(value: Any) -> float | None:
    """Parse a clock value (`"2s"`, `"500ms"`, `"1.5"`, `"01:02.5"`). Returns None if unparsable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if np.isfinite(v) else None

    s = str(value).strip()
    if not s:
        return None

    m = _OFFSET_RE.match(s)
    if m is not None:
        v = float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        return v if np.isfinite(v) else None

    m = _CLOCK_RE.match(s)
    if m is not None:
        hours = float(m.group(1) or 0)
        return hours * 3600.0 + float(m.group(2)) * 60.0 + float(m.group(3))

    return None


def parse_time(value: Any) -> float:
    """Like `try_parse_time`, but unparsable input resolves to 0."""
    v = try_parse_time(value)
    return 0.0 if v is None else v


def parse_repeat_count(value: Any) -> float:
    """`indefinite` maps to `inf`; missing, invalid or non-positive counts map to 1."""

    if value is None:
        return 1.0
    if isinstance(value, str):
        s = value.strip().lower()
        if s == INDEFINITE:
            return math.inf
        try:
            n = float(s)
        except ValueError:
            return 1.0
    else:
        n = float(value)
    if not np.isfinite(n) or n <= 0.0:
        return 1.0
    return n


def begin_seconds(record: AnimationBase) -> float:
    return parse_time(record.begin or "0s")


def dur_seconds(record: AnimationBase) -> float:
    return parse_time(record.dur or "0s")


def active_duration(record: AnimationBase) -> float:
    """Total active duration in seconds (`inf` for an unbounded record).

    `repeatDur` wins over `repeatCount` when positive; `end` caps the result.
    """

    dur = dur_seconds(record)
    repeat_count = parse_repeat_count(record.repeat_count)

    repeat_dur = 0.0
    if isinstance(record.repeat_dur, str) and record.repeat_dur.strip().lower() == INDEFINITE:
        repeat_dur = math.inf
    elif record.repeat_dur:
        repeat_dur = parse_time(record.repeat_dur)

    if repeat_dur > 0.0:
        total = repeat_dur
    elif dur <= 0.0:
        total = 0.0
    else:
        total = dur * repeat_count

    end = try_parse_time(record.end)
    if end is not None:
        total = min(total, max(0.0, end - begin_seconds(record)))
    return total


def total_duration(record: AnimationBase | None) -> float:
    if record is None:
        return 0.0
    return active_duration(record)


def timeline_duration(records: Iterable[AnimationBase]) -> float:
    """End of the last finite record on the timeline (0 when there is none)."""

    ends = [begin_seconds(r) + active_duration(r) for r in records]
    finite = [e for e in ends if np.isfinite(e)]
    return max(finite) if finite else 0.0


def resolve_timing(record: AnimationBase, time: float) -> TimingResult:
    """Map a query time onto raw iteration progress in [0, 1]."""

    local = float(time) - begin_seconds(record)
    if local < 0.0:
        return TimingResult(progress=0.0, phase="before", iteration=0)

    dur = dur_seconds(record)
    total = active_duration(record)
    if dur <= 0.0 or (np.isfinite(total) and local >= total):
        iteration = 0
        if dur > 0.0 and total > 0.0:
            iteration = max(0, math.ceil(total / dur - _ITERATION_EPS) - 1)
        if record.fill == "freeze":
            return TimingResult(progress=1.0, phase="frozen", iteration=iteration)
        return TimingResult(progress=0.0, phase="removed", iteration=iteration)

    iteration = int(local // dur)
    progress = (local % dur) / dur
    return TimingResult(progress=float(np.clip(progress, 0.0, 1.0)), phase="active", iteration=iteration)
