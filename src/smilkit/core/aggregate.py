from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from .easing import apply_easing
from .interpolate import (
    Contribution,
    MotionResolver,
    interpolate_attribute,
    interpolate_motion,
    interpolate_transform,
    parse_number,
    placeholder_motion,
    set_contributions,
)
from .records import (
    AnimationBase,
    AttributeAnimation,
    Element,
    MotionAnimation,
    SetAnimation,
    TransformAnimation,
)
from .state import ElementAnimationState, StyleState, TransformState
from .timing import begin_seconds, parse_time, resolve_timing, try_parse_time

logger = logging.getLogger(__name__)

_TRANSFORM_IDENTITY: dict[str, Any] = {
    "translate_x": 0.0,
    "translate_y": 0.0,
    "rotate": 0.0,
    "rotate_center": None,
    "scale_x": 1.0,
    "scale_y": 1.0,
    "skew_x": 0.0,
    "skew_y": 0.0,
}
_MULTIPLICATIVE_FIELDS = frozenset({"scale_x", "scale_y"})


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def calculate_progress(record: AnimationBase, time: float) -> float:
    """Eased progress of a record at `time`."""
    timing = resolve_timing(record, time)
    return apply_easing(record, timing.progress)


def is_set_active(record: SetAnimation, time: float) -> bool:
    begin = begin_seconds(record)
    stop = begin + parse_time(record.dur) if record.dur is not None else math.inf
    end = try_parse_time(record.end)
    if end is not None:
        stop = min(stop, end)
    return begin <= float(time) < stop


def _interpolate(
    record: AnimationBase,
    progress: float,
    element: Element | None,
    motion_resolver: MotionResolver,
) -> list[Contribution]:
    if isinstance(record, AttributeAnimation):
        base = element.base_value(record.attribute_name) if element is not None and record.attribute_name else None
        return interpolate_attribute(record, progress, base=base)
    if isinstance(record, TransformAnimation):
        return interpolate_transform(record, progress)
    if isinstance(record, MotionAnimation):
        return interpolate_motion(record, progress, motion_resolver)
    logger.debug("Skipping animation %r with unsupported type %r", getattr(record, "id", None), type(record).__name__)
    return []


def _accumulate(current: list[Contribution], final: list[Contribution], iteration: int) -> list[Contribution]:
    finals = {(c.target, c.key): c.value for c in final}
    out: list[Contribution] = []
    for c in current:
        end_value = finals.get((c.target, c.key))
        if _is_number(c.value) and _is_number(end_value):
            out.append(Contribution(c.target, c.key, c.value + iteration * end_value))
        else:
            out.append(c)
    return out


def evaluate_record(
    record: AnimationBase,
    time: float,
    *,
    element: Element | None = None,
    motion_resolver: MotionResolver = placeholder_motion,
) -> list[Contribution]:
    """Run timing -> easing -> interpolation for one record."""

    if isinstance(record, SetAnimation):
        return set_contributions(record) if is_set_active(record, time) else []

    timing = resolve_timing(record, time)
    progress = apply_easing(record, timing.progress)
    contributions = _interpolate(record, progress, element, motion_resolver)

    if record.accumulate == "sum" and timing.phase in ("active", "frozen") and timing.iteration > 0 and contributions:
        final = _interpolate(record, 1.0, element, motion_resolver)
        contributions = _accumulate(contributions, final, timing.iteration)
    return contributions


class _StateBuilder:
    def __init__(self, element_id: str, time: float, element: Element | None) -> None:
        self._element_id = element_id
        self._time = float(time)
        self._element = element
        self._transform: dict[str, Any] | None = None
        self._style: dict[str, Any] | None = None
        self._attributes: dict[str, Any] = {}
        self._path_data: str | None = None
        self._motion: Any = None

    def _base_number(self, record: AnimationBase) -> float | None:
        name = getattr(record, "attribute_name", None)
        if self._element is None or not name:
            return None
        return parse_number(self._element.base_value(name))

    def _compose(self, previous: Any, value: Any, record: AnimationBase) -> Any:
        if record.additive != "sum" or not _is_number(value):
            return value
        prior = previous if _is_number(previous) else self._base_number(record)
        if prior is None:
            return value
        return prior + value

    def apply(self, record: AnimationBase, contributions: list[Contribution]) -> None:
        for c in contributions:
            if c.target == "transform":
                if self._transform is None:
                    self._transform = dict(_TRANSFORM_IDENTITY)
                if c.key == "rotate_center" or record.additive != "sum":
                    self._transform[c.key] = c.value
                elif c.key in _MULTIPLICATIVE_FIELDS:
                    self._transform[c.key] = self._transform[c.key] * c.value
                else:
                    self._transform[c.key] = self._transform[c.key] + c.value
            elif c.target == "style":
                if self._style is None:
                    self._style = {}
                self._style[c.key] = self._compose(self._style.get(c.key), c.value, record)
            elif c.target == "attribute":
                self._attributes[c.key] = self._compose(self._attributes.get(c.key), c.value, record)
            elif c.target == "path":
                self._path_data = str(c.value)
            elif c.target == "motion":
                self._motion = c.value

    def build(self) -> ElementAnimationState:
        return ElementAnimationState(
            element_id=self._element_id,
            time=self._time,
            transform=TransformState(**self._transform) if self._transform is not None else None,
            style=StyleState(**self._style) if self._style is not None else None,
            attributes=dict(self._attributes),
            path_data=self._path_data,
            motion_path=self._motion,
        )


def calculate_element_state(
    element_id: str,
    records: Iterable[AnimationBase],
    time: float,
    *,
    element: Element | None = None,
    motion_resolver: MotionResolver = placeholder_motion,
) -> ElementAnimationState:
    """Fold every record targeting `element_id` into one state, in list order."""

    builder = _StateBuilder(element_id, time, element)
    for record in records:
        if record.target_element_id != element_id:
            continue
        builder.apply(record, evaluate_record(record, time, element=element, motion_resolver=motion_resolver))
    return builder.build()


def _element_map(elements: Iterable[Element] | Mapping[str, Element] | None) -> dict[str, Element] | None:
    if elements is None:
        return None
    if isinstance(elements, Mapping):
        return dict(elements)
    return {e.id: e for e in elements}


def calculate_all_states(
    records: Iterable[AnimationBase],
    elements: Iterable[Element] | Mapping[str, Element] | None,
    time: float,
    *,
    motion_resolver: MotionResolver = placeholder_motion,
) -> dict[str, ElementAnimationState]:
    """States for every animated element at `time`.

    Records are grouped by target; targets missing from `elements` are skipped
    (pass `elements=None` to evaluate every target). Unanimated elements are absent.
    """

    element_map = _element_map(elements)
    groups: dict[str, list[AnimationBase]] = {}
    for record in records:
        groups.setdefault(record.target_element_id, []).append(record)

    states: dict[str, ElementAnimationState] = {}
    for element_id, group in groups.items():
        element: Element | None = None
        if element_map is not None:
            element = element_map.get(element_id)
            if element is None:
                continue
        states[element_id] = calculate_element_state(
            element_id,
            group,
            time,
            element=element,
            motion_resolver=motion_resolver,
        )
    return states
