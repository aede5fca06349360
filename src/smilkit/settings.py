from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any

from .compiler import CompileOptions
from .core.quality import SimulationQuality
from .playback import PlaybackController

logger = logging.getLogger(__name__)

MAX_PRECISION = 10
DEFAULT_PRECISION = 4


@dataclass
class Settings:
    """Runtime preferences for preview and export.

    Notes:
    - `quality` is the preset used by `SettingsStore.playback_controller()`.
    - `precision` and `optimize` feed the compiler on export.
    """

    quality: str = SimulationQuality.EDITING.value
    precision: int = DEFAULT_PRECISION
    optimize: bool = True


def _validate_precision(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError("precision must be an integer")
    try:
        n = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as ex:
        raise ValueError(f"precision must be an integer, got {value!r}") from ex
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"precision must be an integer, got {value!r}")
    if n < 0 or n > MAX_PRECISION:
        raise ValueError(f"precision must be between 0 and {MAX_PRECISION}")
    return n


def _precision_from_env() -> int:
    raw = os.getenv("SMILKIT_PRECISION", "").strip()
    if not raw:
        return DEFAULT_PRECISION
    try:
        return _validate_precision(raw)
    except ValueError:
        logger.warning("Ignoring invalid SMILKIT_PRECISION=%r", raw)
        return DEFAULT_PRECISION


class SettingsStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._settings = Settings(precision=_precision_from_env())

    def get(self) -> Settings:
        with self._lock:
            return Settings(
                quality=self._settings.quality,
                precision=self._settings.precision,
                optimize=self._settings.optimize,
            )

    def set_quality(self, mode: str | SimulationQuality) -> Settings:
        q = SimulationQuality.from_any(mode)
        with self._lock:
            self._settings.quality = q.value
            return self.get()

    def set_precision(self, precision: object) -> Settings:
        n = _validate_precision(precision)
        with self._lock:
            self._settings.precision = n
            return self.get()

    def set_optimize(self, optimize: object) -> Settings:
        if not isinstance(optimize, bool):
            raise ValueError("optimize must be a boolean")
        with self._lock:
            self._settings.optimize = optimize
            return self.get()

    def compile_options(self) -> CompileOptions:
        with self._lock:
            return CompileOptions(precision=self._settings.precision, optimize=self._settings.optimize)

    def playback_controller(self, **kwargs: Any) -> PlaybackController:
        """New controller running at the configured quality."""
        with self._lock:
            quality = self._settings.quality
        return PlaybackController(quality=quality, **kwargs)


def settings_to_dict(s: Settings) -> dict[str, object]:
    return {"quality": s.quality, "precision": int(s.precision), "optimize": bool(s.optimize)}
