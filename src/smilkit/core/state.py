from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .interpolate import MotionPathState


@dataclass(frozen=True)
class TransformState:
    translate_x: float = 0.0
    translate_y: float = 0.0
    rotate: float = 0.0
    rotate_center: tuple[float, float] | None = None
    scale_x: float = 1.0
    scale_y: float = 1.0
    skew_x: float = 0.0
    skew_y: float = 0.0


@dataclass(frozen=True)
class StyleState:
    opacity: float | None = None
    fill_color: str | None = None
    stroke_color: str | None = None
    stroke_width: float | None = None
    stroke_dashoffset: float | None = None


@dataclass(frozen=True)
class ElementAnimationState:
    """Animated values of one element at one query time.

    Notes:
    - Optional parts are None when no animation touches them.
    - A fresh instance is built on every evaluation; nothing here is cached or shared.
    """

    element_id: str
    time: float
    transform: TransformState | None = None
    style: StyleState | None = None
    attributes: Mapping[str, str | float] = field(default_factory=dict)
    path_data: str | None = None
    motion_path: MotionPathState | None = None


def transform_state_to_dict(t: TransformState) -> dict[str, Any]:
    out: dict[str, Any] = {
        "translateX": float(t.translate_x),
        "translateY": float(t.translate_y),
        "rotate": float(t.rotate),
        "scaleX": float(t.scale_x),
        "scaleY": float(t.scale_y),
        "skewX": float(t.skew_x),
        "skewY": float(t.skew_y),
    }
    if t.rotate_center is not None:
        out["rotateCenter"] = [float(t.rotate_center[0]), float(t.rotate_center[1])]
    return out


def style_state_to_dict(s: StyleState) -> dict[str, Any]:
    keys = {
        "opacity": s.opacity,
        "fillColor": s.fill_color,
        "strokeColor": s.stroke_color,
        "strokeWidth": s.stroke_width,
        "strokeDashoffset": s.stroke_dashoffset,
    }
    return {k: v for k, v in keys.items() if v is not None}


def element_state_to_dict(state: ElementAnimationState) -> dict[str, Any]:
    out: dict[str, Any] = {
        "elementId": state.element_id,
        "time": float(state.time),
    }
    if state.transform is not None:
        out["transform"] = transform_state_to_dict(state.transform)
    if state.style is not None:
        out["style"] = style_state_to_dict(state.style)
    if state.attributes:
        out["attributes"] = dict(state.attributes)
    if state.path_data is not None:
        out["pathData"] = state.path_data
    if state.motion_path is not None:
        out["motionPath"] = {
            "position": {"x": float(state.motion_path.position[0]), "y": float(state.motion_path.position[1])},
            "angle": float(state.motion_path.angle),
        }
    return out
