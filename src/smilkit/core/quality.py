from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal


class SimulationQuality(str, Enum):
    """Preview quality mode.

    Notes:
    - Quality only changes how often playback notifies listeners (and what filter
      fidelity a renderer should use). It never changes evaluated values.
    """

    EDITING = "editing"
    PREVIEW = "preview"
    EXPORT = "export"

    @classmethod
    def from_any(cls, value: Any) -> "SimulationQuality":
        if isinstance(value, cls):
            return value

        v = str(value).strip().lower()
        aliases: dict[str, SimulationQuality] = {
            "editing": cls.EDITING,
            "edit": cls.EDITING,
            "preview": cls.PREVIEW,
            "export": cls.EXPORT,
            "final": cls.EXPORT,
        }
        if v in aliases:
            return aliases[v]

        raise ValueError("Unsupported quality mode. Use 'editing', 'preview' or 'export'.")


FilterQuality = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class QualitySettings:
    mode: SimulationQuality
    filter_quality: FilterQuality
    update_rate: float  # Hz
    disable_filters: bool = False

    @property
    def min_interval(self) -> float:
        """Minimum seconds between two listener notifications."""
        return 1.0 / float(self.update_rate)


QUALITY_PRESETS: dict[SimulationQuality, QualitySettings] = {
    SimulationQuality.EDITING: QualitySettings(SimulationQuality.EDITING, "low", 30.0, True),
    SimulationQuality.PREVIEW: QualitySettings(SimulationQuality.PREVIEW, "medium", 60.0, False),
    SimulationQuality.EXPORT: QualitySettings(SimulationQuality.EXPORT, "high", 60.0, False),
}


def quality_preset(mode: str | SimulationQuality) -> QualitySettings:
    return QUALITY_PRESETS[SimulationQuality.from_any(mode)]


def quality_settings_to_dict(q: QualitySettings) -> dict[str, Any]:
    return {
        "mode": q.mode.value,
        "filterQuality": q.filter_quality,
        "updateRate": float(q.update_rate),
        "disableFilters": bool(q.disable_filters),
    }
