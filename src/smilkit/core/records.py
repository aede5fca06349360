from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Iterable, Literal, Mapping, Union

logger = logging.getLogger(__name__)

AnimationKind = Literal["attribute-animate", "transform-animate", "motion-animate", "set"]
TransformType = Literal["translate", "scale", "rotate", "skewX", "skewY"]
FillMode = Literal["freeze", "remove"]
CalcMode = Literal["linear", "discrete", "paced", "spline"]
AdditiveMode = Literal["replace", "sum"]
AccumulateMode = Literal["none", "sum"]
RotateMode = Literal["none", "auto", "auto-reverse"]

TRANSFORM_TYPES: tuple[str, ...] = ("translate", "scale", "rotate", "skewX", "skewY")
INDEFINITE = "indefinite"


@dataclass(frozen=True, kw_only=True)
class AnimationBase:
    """Fields shared by every declarative animation record.

    Notes:
    - Timing fields keep their wire form (`"2s"`, `"500ms"`); they are parsed on evaluation.
    - `values`, `key_times` and `key_splines` stay semicolon-delimited strings.
    - `from_value` is the wire `from` field (a Python keyword).
    """

    type: ClassVar[str] = ""

    id: str
    target_element_id: str
    begin: str | None = None
    dur: str | None = None
    end: str | None = None
    repeat_count: float | str | None = None
    repeat_dur: str | None = None
    fill: FillMode | None = None
    from_value: str | float | None = None
    to: str | float | None = None
    values: str | None = None
    calc_mode: CalcMode | None = None
    key_times: str | None = None
    key_splines: str | None = None
    additive: AdditiveMode | None = None
    accumulate: AccumulateMode | None = None


@dataclass(frozen=True, kw_only=True)
class AttributeAnimation(AnimationBase):
    type: ClassVar[str] = "attribute-animate"

    attribute_name: str | None = None


@dataclass(frozen=True, kw_only=True)
class TransformAnimation(AnimationBase):
    type: ClassVar[str] = "transform-animate"

    transform_type: TransformType | None = None


@dataclass(frozen=True, kw_only=True)
class MotionAnimation(AnimationBase):
    type: ClassVar[str] = "motion-animate"

    path: str | None = None
    motion_path_ref: str | None = None
    rotate: RotateMode | float | None = None
    key_points: str | None = None


@dataclass(frozen=True, kw_only=True)
class SetAnimation(AnimationBase):
    type: ClassVar[str] = "set"

    attribute_name: str | None = None


AnimationRecord = Union[AttributeAnimation, TransformAnimation, MotionAnimation, SetAnimation]

RECORD_CLASSES: dict[str, type[AnimationBase]] = {
    AttributeAnimation.type: AttributeAnimation,
    TransformAnimation.type: TransformAnimation,
    MotionAnimation.type: MotionAnimation,
    SetAnimation.type: SetAnimation,
}

# Element tag names from exported markup are accepted as record kinds on input.
_KIND_ALIASES: dict[str, str] = {
    "attribute-animate": "attribute-animate",
    "animate": "attribute-animate",
    "transform-animate": "transform-animate",
    "animatetransform": "transform-animate",
    "motion-animate": "motion-animate",
    "animatemotion": "motion-animate",
    "set": "set",
}

# (python field, wire key) in wire emission order.
_WIRE_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("target_element_id", "targetElementId"),
    ("attribute_name", "attributeName"),
    ("transform_type", "transformType"),
    ("path", "path"),
    ("motion_path_ref", "mpath"),
    ("rotate", "rotate"),
    ("key_points", "keyPoints"),
    ("from_value", "from"),
    ("to", "to"),
    ("values", "values"),
    ("begin", "begin"),
    ("dur", "dur"),
    ("end", "end"),
    ("repeat_count", "repeatCount"),
    ("repeat_dur", "repeatDur"),
    ("fill", "fill"),
    ("calc_mode", "calcMode"),
    ("key_times", "keyTimes"),
    ("key_splines", "keySplines"),
    ("additive", "additive"),
    ("accumulate", "accumulate"),
)


@dataclass(frozen=True)
class Element:
    """A target element as supplied by the element store: `{id, type, data}`.

    `data` carries the element's unanimated attribute values, used as base values
    for missing `from` endpoints and for `additive="sum"`.
    """

    id: str
    type: str = "element"
    data: Mapping[str, Any] = field(default_factory=dict)

    def base_value(self, attribute_name: str) -> Any:
        if attribute_name in self.data:
            return self.data[attribute_name]
        camel = _camel_case(attribute_name)
        return self.data.get(camel)


def _camel_case(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def normalize_kind(value: Any) -> str:
    k = str(value).strip().replace("_", "-").lower()
    if k in _KIND_ALIASES:
        return _KIND_ALIASES[k]
    raise ValueError(f"Unsupported animation type: {value!r}")


def new_animation_id() -> str:
    return f"anim-{uuid.uuid4().hex}"


def split_list(text: str | None) -> list[str]:
    """Split a semicolon-delimited wire list, dropping empty entries."""
    if text is None:
        return []
    return [part.strip() for part in str(text).split(";") if part.strip()]


def parse_float_list(text: str | None) -> list[float] | None:
    parts = split_list(text)
    if not parts:
        return None
    try:
        return [float(p) for p in parts]
    except ValueError:
        return None


def parse_key_splines(text: str | None) -> list[tuple[float, float, float, float]]:
    out: list[tuple[float, float, float, float]] = []
    for part in split_list(text):
        nums = [n for n in part.replace(",", " ").split() if n]
        try:
            x1, y1, x2, y2 = (float(n) for n in nums[:4])
        except ValueError:
            out.append((0.0, 0.0, 1.0, 1.0))
            continue
        out.append((x1, y1, x2, y2))
    return out


def join_list(items: Iterable[Any]) -> str:
    return ";".join(str(i) for i in items)


def _parse_repeat_count(value: Any) -> float | str | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        s = value.strip()
        if s.lower() == INDEFINITE:
            return INDEFINITE
        try:
            return float(s)
        except ValueError as ex:
            raise ValueError(f"Invalid repeatCount: {value!r}") from ex
    return _wire_float(value, "repeatCount")


def _wire_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {key}: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as ex:
        raise ValueError(f"Invalid {key}: {value!r}") from ex


def _wire_scalar(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def animation_from_dict(data: Mapping[str, Any]) -> AnimationRecord:
    """Build a record from its wire (camelCase) form.

    Raises ValueError on an unknown `type` or a malformed `repeatCount` or
    `rotate`. The motion reference is read from `mpath`, or `motionPathRef`.
    """

    if "type" not in data:
        raise ValueError("Missing field: type")
    cls = RECORD_CLASSES[normalize_kind(data["type"])]
    names = {f.name for f in fields(cls)}

    kwargs: dict[str, Any] = {}
    for attr, key in _WIRE_FIELDS:
        if attr not in names or key not in data:
            continue
        value = data[key]
        if value is None:
            continue
        if attr == "repeat_count":
            value = _parse_repeat_count(value)
        elif attr == "rotate" and not isinstance(value, str):
            value = _wire_float(value, "rotate")
        kwargs[attr] = value

    if "motion_path_ref" in names and "motion_path_ref" not in kwargs and data.get("motionPathRef"):
        kwargs["motion_path_ref"] = data["motionPathRef"]

    kwargs["id"] = str(kwargs.get("id") or new_animation_id())
    kwargs["target_element_id"] = str(kwargs.get("target_element_id") or "")
    return cls(**kwargs)  # type: ignore[return-value]


def animation_to_dict(record: AnimationBase) -> dict[str, Any]:
    out: dict[str, Any] = {"type": record.type}
    for attr, key in _WIRE_FIELDS:
        value = getattr(record, attr, None)
        if value is None:
            continue
        out[key] = _wire_scalar(value)
    return out


def parse_animations(items: Iterable[Mapping[str, Any]]) -> list[AnimationRecord]:
    """Parse a list of wire records, skipping entries with an unsupported type."""

    out: list[AnimationRecord] = []
    for item in items:
        try:
            out.append(animation_from_dict(item))
        except ValueError as ex:
            logger.warning("Skipping animation %r: %s", item.get("id"), ex)
    return out


def element_from_dict(data: Mapping[str, Any]) -> Element:
    eid = str(data.get("id", "")).strip()
    if not eid:
        raise ValueError("element id cannot be empty")
    payload = data.get("data") or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"element data must be an object, got {type(payload).__name__}")
    return Element(id=eid, type=str(data.get("type", "element")), data=dict(payload))


def with_defaults(record: AnimationRecord) -> AnimationRecord:
    """Fill the editor defaults: `fill=freeze`, `repeatCount=1`, `dur=2s`.

    `set` records keep a missing `dur`, which means "hold indefinitely".
    """

    dur = record.dur
    if dur is None and not isinstance(record, SetAnimation):
        dur = "2s"
    return replace(
        record,
        fill=record.fill or "freeze",
        repeat_count=record.repeat_count if record.repeat_count is not None else 1.0,
        dur=dur,
    )
