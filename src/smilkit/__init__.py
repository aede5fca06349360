from __future__ import annotations

from .client import SmilkitClient
from .compiler import CompileError, CompileOptions, CompileResult, SmilCompiler, compile_all, compile_record, validate
from .core import (
    AnimationChain,
    AttributeAnimation,
    ChainEntry,
    Element,
    ElementAnimationState,
    MotionAnimation,
    SetAnimation,
    SimulationQuality,
    TransformAnimation,
    animation_from_dict,
    animation_to_dict,
    calculate_all_states,
    calculate_element_state,
)
from .playback import ManualFrameScheduler, PlaybackController, PlaybackSnapshot
from .runner import run
from .settings import Settings, SettingsStore

__all__ = [
    "run",
    "SmilkitClient",
    "SmilCompiler",
    "CompileError",
    "CompileOptions",
    "CompileResult",
    "compile_record",
    "compile_all",
    "validate",
    "PlaybackController",
    "PlaybackSnapshot",
    "ManualFrameScheduler",
    "Settings",
    "SettingsStore",
    "SimulationQuality",
    "AttributeAnimation",
    "TransformAnimation",
    "MotionAnimation",
    "SetAnimation",
    "Element",
    "ElementAnimationState",
    "AnimationChain",
    "ChainEntry",
    "animation_from_dict",
    "animation_to_dict",
    "calculate_all_states",
    "calculate_element_state",
]
