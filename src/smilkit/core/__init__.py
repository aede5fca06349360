from __future__ import annotations

from .aggregate import calculate_all_states, calculate_element_state, calculate_progress, evaluate_record
from .chains import AnimationChain, ChainEntry, apply_chain_delays, compute_chain_delays
from .easing import apply_easing, cubic_bezier, paced_key_times
from .interpolate import (
    Contribution,
    MotionPathState,
    MotionResolver,
    interpolate_attribute,
    interpolate_color,
    interpolate_motion,
    interpolate_scalar,
    interpolate_transform,
    placeholder_motion,
)
from .quality import QUALITY_PRESETS, QualitySettings, SimulationQuality, quality_settings_to_dict
from .records import (
    AnimationBase,
    AnimationRecord,
    AttributeAnimation,
    Element,
    MotionAnimation,
    SetAnimation,
    TransformAnimation,
    animation_from_dict,
    animation_to_dict,
    element_from_dict,
    parse_animations,
    with_defaults,
)
from .state import ElementAnimationState, StyleState, TransformState, element_state_to_dict
from .timing import TimingResult, parse_time, resolve_timing, timeline_duration, total_duration

__all__ = [
    "AnimationBase",
    "AnimationRecord",
    "AttributeAnimation",
    "TransformAnimation",
    "MotionAnimation",
    "SetAnimation",
    "Element",
    "animation_from_dict",
    "animation_to_dict",
    "element_from_dict",
    "parse_animations",
    "with_defaults",
    "TimingResult",
    "parse_time",
    "resolve_timing",
    "total_duration",
    "timeline_duration",
    "apply_easing",
    "cubic_bezier",
    "paced_key_times",
    "Contribution",
    "MotionPathState",
    "MotionResolver",
    "placeholder_motion",
    "interpolate_attribute",
    "interpolate_color",
    "interpolate_motion",
    "interpolate_scalar",
    "interpolate_transform",
    "ElementAnimationState",
    "TransformState",
    "StyleState",
    "element_state_to_dict",
    "calculate_progress",
    "evaluate_record",
    "calculate_element_state",
    "calculate_all_states",
    "SimulationQuality",
    "QualitySettings",
    "QUALITY_PRESETS",
    "quality_settings_to_dict",
    "AnimationChain",
    "ChainEntry",
    "compute_chain_delays",
    "apply_chain_delays",
]
