from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Sequence, TypeVar

import numpy as np

from .records import (
    AnimationBase,
    AttributeAnimation,
    MotionAnimation,
    SetAnimation,
    TransformAnimation,
    parse_float_list,
    split_list,
)

T = TypeVar("T")
ContributionTarget = Literal["style", "attribute", "path", "transform", "motion"]

_LEADING_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")

# attributeName -> style field for numeric style properties.
NUMERIC_STYLE_ATTRIBUTES: dict[str, str] = {
    "opacity": "opacity",
    "stroke-width": "stroke_width",
    "stroke-dashoffset": "stroke_dashoffset",
}
# attributeName -> style field for color style properties.
COLOR_STYLE_ATTRIBUTES: dict[str, str] = {
    "fill": "fill_color",
    "stroke": "stroke_color",
}
# Color-valued attributes kept in the generic attribute bag.
COLOR_ATTRIBUTES: frozenset[str] = frozenset({"stop-color", "flood-color", "lighting-color", "color"})

# (from, to) used when an endpoint is missing and the element has no base value.
_ENDPOINT_DEFAULTS: dict[str, tuple[Any, Any]] = {
    "opacity": (1.0, 0.0),
    "fill": ("#000000", "#000000"),
    "stroke": ("#000000", "#000000"),
    "stroke-width": (1.0, 1.0),
    "stroke-dashoffset": (0.0, 0.0),
}
_COLOR_DEFAULTS: tuple[Any, Any] = ("#000000", "#000000")
_GENERIC_DEFAULTS: tuple[Any, Any] = (0.0, 0.0)

_TRANSFORM_DEFAULTS: dict[str, float] = {
    "translate": 0.0,
    "scale": 1.0,
    "rotate": 0.0,
    "skewX": 0.0,
    "skewY": 0.0,
}


@dataclass(frozen=True)
class Contribution:
    """One resolved value an animation writes into an element state."""

    target: ContributionTarget
    key: str
    value: Any


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def parse_number(value: Any) -> float | None:
    """Leading-number parse (`"10px"` -> 10.0). Returns None when there is no number."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if np.isfinite(v) else None
    m = _LEADING_NUMBER_RE.match(str(value))
    if m is None:
        return None
    v = float(m.group(1))
    return v if np.isfinite(v) else None


def parse_number_list(value: Any) -> list[float] | None:
    """Parse a whitespace/comma separated list where every token must be numeric."""

    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [float(value)]
    tokens = [t for t in _TOKEN_SPLIT_RE.split(str(value).strip()) if t]
    if not tokens:
        return None
    try:
        return [float(t) for t in tokens]
    except ValueError:
        return None


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation, exact at both endpoints."""
    return a * (1.0 - t) + b * t


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def discrete_switch(from_v: T, to_v: T, progress: float) -> T:
    return from_v if progress < 0.5 else to_v


def parse_hex_color(value: Any) -> tuple[int, int, int] | None:
    if value is None:
        return None
    m = _HEX_RE.match(str(value).strip())
    if m is None:
        return None
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def interpolate_color(from_c: Any, to_c: Any, progress: float) -> str:
    """Channel-wise RGB interpolation of hex colors, emitted as `rgb(r, g, b)`.

    Malformed input on either side degrades to a hard switch at 0.5.
    """

    a = parse_hex_color(from_c)
    b = parse_hex_color(to_c)
    if a is None or b is None:
        return str(discrete_switch(from_c, to_c, progress))
    r, g, bl = (_round_half_up(lerp(float(x), float(y), progress)) for x, y in zip(a, b))
    return f"rgb({r}, {g}, {bl})"


def interpolate_scalar(from_v: Any, to_v: Any, progress: float) -> float | Any:
    a = parse_number(from_v)
    b = parse_number(to_v)
    if a is None or b is None:
        return discrete_switch(from_v, to_v, progress)
    return lerp(a, b, progress)


# ---------------------------------------------------------------------------
# Keyframe lists
# ---------------------------------------------------------------------------


def keyframe_segment(count: int, progress: float) -> tuple[int, float]:
    """Map progress onto a keyframe pair `(i, i+1)` and the local fraction within it."""

    if count < 2:
        return 0, 0.0
    scaled = float(np.clip(progress, 0.0, 1.0)) * (count - 1)
    i = min(max(int(math.floor(scaled)), 0), count - 2)
    return i, float(np.clip(scaled - i, 0.0, 1.0))


def discrete_index(count: int, progress: float, key_times: Sequence[float] | None = None) -> int:
    """Keyframe index for `calcMode="discrete"`."""

    if count <= 1:
        return 0
    p = float(np.clip(progress, 0.0, 1.0))
    if key_times is not None and len(key_times) == count:
        idx = 0
        for i, kt in enumerate(key_times):
            if kt <= p:
                idx = i
        return idx
    return min(int(math.floor(p * count)), count - 1)


def interpolate_keyframes(values: Sequence[T], progress: float, pair: Callable[[T, T, float], Any]) -> Any:
    """Apply `pair` to the keyframe pair selected by `keyframe_segment`."""

    if not values:
        return None
    if len(values) == 1:
        return pair(values[0], values[0], 0.0)
    i, local = keyframe_segment(len(values), progress)
    return pair(values[i], values[i + 1], local)


def keyframe_vector(value: Any) -> tuple[float, ...] | None:
    """Numeric vector for a keyframe: RGB for hex colors, else all numeric tokens."""

    rgb = parse_hex_color(value)
    if rgb is not None:
        return tuple(float(c) for c in rgb)
    nums = parse_number_list(value)
    return tuple(nums) if nums is not None else None


# ---------------------------------------------------------------------------
# Record dispatch
# ---------------------------------------------------------------------------


def _endpoint_defaults(attribute_name: str) -> tuple[Any, Any]:
    if attribute_name in _ENDPOINT_DEFAULTS:
        return _ENDPOINT_DEFAULTS[attribute_name]
    if attribute_name in COLOR_ATTRIBUTES:
        return _COLOR_DEFAULTS
    return _GENERIC_DEFAULTS


def keyframes_for(record: AnimationBase, *, base: Any = None, defaults: tuple[Any, Any] = _GENERIC_DEFAULTS) -> list[Any]:
    """Ordered keyframes: `values` when present, else `[from, to]` with fallbacks."""

    values = split_list(record.values)
    if values:
        return values
    start = record.from_value
    if start is None:
        start = base if base is not None else defaults[0]
    end = record.to if record.to is not None else defaults[1]
    return [start, end]


def _pick(record: AnimationBase, keyframes: Sequence[Any], progress: float, pair: Callable[[Any, Any, float], Any]) -> Any:
    if record.calc_mode == "discrete":
        return keyframes[discrete_index(len(keyframes), progress, parse_float_list(record.key_times))]
    return interpolate_keyframes(keyframes, progress, pair)


def attribute_slot(attribute_name: str) -> tuple[ContributionTarget, str]:
    """Where an attribute's value lands in the element state."""

    if attribute_name in NUMERIC_STYLE_ATTRIBUTES:
        return "style", NUMERIC_STYLE_ATTRIBUTES[attribute_name]
    if attribute_name in COLOR_STYLE_ATTRIBUTES:
        return "style", COLOR_STYLE_ATTRIBUTES[attribute_name]
    if attribute_name == "d":
        return "path", "d"
    return "attribute", attribute_name


def interpolate_attribute(record: AttributeAnimation, progress: float, *, base: Any = None) -> list[Contribution]:
    name = record.attribute_name
    if not name:
        return []
    target, key = attribute_slot(name)
    keyframes = keyframes_for(record, base=base, defaults=_endpoint_defaults(name))

    if target == "path":
        # Path morphs switch between literal keyframes; no geometric blending.
        chosen = _pick(record, [str(k) for k in keyframes], progress, discrete_switch)
        return [Contribution("path", key, chosen)] if chosen else []

    if name in COLOR_STYLE_ATTRIBUTES or name in COLOR_ATTRIBUTES:
        return [Contribution(target, key, _pick(record, keyframes, progress, interpolate_color))]

    value = _pick(record, keyframes, progress, interpolate_scalar)
    if target == "style":
        n = parse_number(value)
        if n is None:
            # Non-numeric style values cannot live in the numeric style bag.
            return [Contribution("attribute", name, value)]
        value = n
    return [Contribution(target, key, value)]


def parse_transform_value(value: Any) -> list[float]:
    """Numeric components of a transform keyframe; non-numeric tokens are dropped."""

    if value is None:
        return []
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [float(value)]
    out: list[float] = []
    for token in _TOKEN_SPLIT_RE.split(str(value).strip()):
        n = parse_number(token)
        if n is not None and token:
            out.append(n)
    return out


def _transform_pair(transform_type: str) -> Callable[[Any, Any, float], list[Contribution]]:
    default = _TRANSFORM_DEFAULTS[transform_type]

    def pair(from_v: Any, to_v: Any, t: float) -> list[Contribution]:
        a = parse_transform_value(from_v)
        b = parse_transform_value(to_v)
        a0 = a[0] if a else default
        b0 = b[0] if b else default

        if transform_type == "translate":
            return [
                Contribution("transform", "translate_x", lerp(a0, b0, t)),
                Contribution("transform", "translate_y", lerp(a[1] if len(a) > 1 else 0.0, b[1] if len(b) > 1 else 0.0, t)),
            ]
        if transform_type == "scale":
            # A single scale value is uniform.
            return [
                Contribution("transform", "scale_x", lerp(a0, b0, t)),
                Contribution("transform", "scale_y", lerp(a[1] if len(a) > 1 else a0, b[1] if len(b) > 1 else b0, t)),
            ]
        if transform_type == "rotate":
            return [Contribution("transform", "rotate", lerp(a0, b0, t))]
        if transform_type == "skewX":
            return [Contribution("transform", "skew_x", lerp(a0, b0, t))]
        return [Contribution("transform", "skew_y", lerp(a0, b0, t))]

    return pair


def interpolate_transform(record: TransformAnimation, progress: float) -> list[Contribution]:
    transform_type = record.transform_type
    if transform_type not in _TRANSFORM_DEFAULTS:
        return []
    keyframes = keyframes_for(record, defaults=(None, None))
    pair = _transform_pair(transform_type)
    if record.calc_mode == "discrete":
        chosen = keyframes[discrete_index(len(keyframes), progress, parse_float_list(record.key_times))]
        out = pair(chosen, chosen, 0.0)
    else:
        out = interpolate_keyframes(keyframes, progress, pair)

    if transform_type == "rotate":
        # The rotation center is static, taken from the first keyframe.
        center = parse_transform_value(keyframes[0])
        if len(center) >= 3:
            out.append(Contribution("transform", "rotate_center", (center[1], center[2])))
    return out


@dataclass(frozen=True)
class MotionPathState:
    position: tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0


MotionResolver = Callable[[MotionAnimation, float], Optional[MotionPathState]]


def placeholder_motion(record: MotionAnimation, progress: float) -> MotionPathState | None:  # noqa: ARG001
    """Motion placement stub: any record with a trajectory resolves to the origin, angle 0.

    Path-length parameterization is not implemented; pass a different `MotionResolver`
    to the aggregator to provide it.
    """

    if not record.path and not record.motion_path_ref:
        return None
    return MotionPathState()


def interpolate_motion(record: MotionAnimation, progress: float, resolver: MotionResolver = placeholder_motion) -> list[Contribution]:
    placed = resolver(record, progress)
    if placed is None:
        return []
    return [Contribution("motion", "motion_path", placed)]


def set_contributions(record: SetAnimation) -> list[Contribution]:
    if not record.attribute_name or record.to is None:
        return []
    target, key = attribute_slot(record.attribute_name)
    value: Any = record.to
    if target == "style" and record.attribute_name in NUMERIC_STYLE_ATTRIBUTES:
        n = parse_number(value)
        if n is None:
            return []
        value = n
    elif target == "path":
        value = str(value)
    return [Contribution(target, key, value)]
