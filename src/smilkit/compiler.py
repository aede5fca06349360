from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping
from xml.sax.saxutils import escape

from .core.records import (
    AnimationBase,
    AttributeAnimation,
    MotionAnimation,
    SetAnimation,
    TransformAnimation,
    animation_from_dict,
    normalize_kind,
)

logger = logging.getLogger(__name__)

_ATTR_ENTITIES = {'"': "&quot;"}
_TOKEN_SEP_RE = re.compile(r"([\s,]+)")
_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_PATH_NUMBER_RE = re.compile(r"-?\d+\.?\d*(?:[eE][-+]?\d+)?")


class CompileError(ValueError):
    """A record cannot be turned into markup."""


@dataclass(frozen=True)
class CompileOptions:
    precision: int = 4
    optimize: bool = True  # round numbers inside inline motion paths


@dataclass
class CompileResult:
    elements: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    defs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()


def compile_result_to_dict(result: CompileResult) -> dict[str, Any]:
    return {"elements": list(result.elements), "warnings": list(result.warnings), "defs": list(result.defs)}


def validation_result_to_dict(result: ValidationResult) -> dict[str, Any]:
    return {"valid": bool(result.valid), "errors": list(result.errors)}


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------


def round_number(num: float, precision: int) -> str:
    """Round and print without trailing zeros; `-0` prints as `0`."""

    text = f"{float(num):.{int(precision)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_value(value: Any, precision: int) -> str:
    """Round every numeric token in a scalar or whitespace/comma list value."""

    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return round_number(value, precision)

    parts = _TOKEN_SEP_RE.split(str(value).strip())
    out: list[str] = []
    for part in parts:
        if part and _NUMBER_RE.match(part):
            out.append(round_number(float(part), precision))
        else:
            out.append(part)
    return "".join(out)


def format_values(values: str, precision: int) -> str:
    return ";".join(format_value(v.strip(), precision) for v in str(values).split(";"))


def format_key_points(key_points: str, precision: int) -> str:
    return ";".join(format_value(v.strip(), precision) for v in str(key_points).split(";") if v.strip())


def optimize_path(path: str, opts: CompileOptions) -> str:
    if not opts.optimize:
        return path
    return _PATH_NUMBER_RE.sub(lambda m: round_number(float(m.group(0)), opts.precision), path)


def _scalar_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def escape_attribute(value: str) -> str:
    return escape(str(value), _ATTR_ENTITIES)


def build_element(tag: str, attrs: Mapping[str, Any], children: str | None = None) -> str:
    """Serialize one element; `None` and empty-string attributes are dropped."""

    parts = [f'{k}="{escape_attribute(v)}"' for k, v in attrs.items() if v is not None and v != ""]
    attr_str = " ".join(parts)
    head = f"{tag} {attr_str}" if attr_str else tag
    if children:
        return f"<{head}>{children}</{tag}>"
    return f"<{head}/>"


# ---------------------------------------------------------------------------
# Per-kind emitters
# ---------------------------------------------------------------------------


def _add_values(attrs: dict[str, Any], record: AnimationBase, opts: CompileOptions) -> None:
    # values take precedence over from/to
    if record.values:
        attrs["values"] = format_values(record.values, opts.precision)
        return
    if record.from_value is not None:
        attrs["from"] = format_value(record.from_value, opts.precision)
    if record.to is not None:
        attrs["to"] = format_value(record.to, opts.precision)


def _add_timing(attrs: dict[str, Any], record: AnimationBase) -> None:
    attrs["dur"] = record.dur
    attrs["begin"] = record.begin
    attrs["end"] = record.end
    attrs["fill"] = record.fill
    if record.repeat_count is not None:
        attrs["repeatCount"] = _scalar_text(record.repeat_count)
    attrs["repeatDur"] = record.repeat_dur
    if record.calc_mode and record.calc_mode != "linear":
        attrs["calcMode"] = record.calc_mode
    attrs["keyTimes"] = record.key_times
    attrs["keySplines"] = record.key_splines


def _add_composition(attrs: dict[str, Any], record: AnimationBase) -> None:
    if record.additive == "sum":
        attrs["additive"] = "sum"
    if record.accumulate == "sum":
        attrs["accumulate"] = "sum"


def _compile_attribute(record: AttributeAnimation, opts: CompileOptions) -> str:
    if not record.attribute_name:
        raise CompileError("animate requires attributeName")
    attrs: dict[str, Any] = {"attributeName": record.attribute_name}
    _add_values(attrs, record, opts)
    _add_timing(attrs, record)
    _add_composition(attrs, record)
    return build_element("animate", attrs)


def _compile_transform(record: TransformAnimation, opts: CompileOptions) -> str:
    if not record.transform_type:
        raise CompileError("animateTransform requires transformType")
    attrs: dict[str, Any] = {"attributeName": "transform", "type": record.transform_type}
    _add_values(attrs, record, opts)
    _add_timing(attrs, record)
    _add_composition(attrs, record)
    return build_element("animateTransform", attrs)


def _compile_motion(record: MotionAnimation, opts: CompileOptions) -> str:
    if not record.path and not record.motion_path_ref:
        raise CompileError("animateMotion requires path or mpath")
    attrs: dict[str, Any] = {}
    if record.path and not record.motion_path_ref:
        attrs["path"] = optimize_path(record.path, opts)
    if record.rotate is not None:
        rotate = record.rotate
        attrs["rotate"] = format_value(rotate, opts.precision) if not isinstance(rotate, str) else rotate
    if record.key_points:
        attrs["keyPoints"] = format_key_points(record.key_points, opts.precision)
    _add_timing(attrs, record)

    if record.motion_path_ref:
        child = f'<mpath href="#{escape_attribute(record.motion_path_ref)}"/>'
        return build_element("animateMotion", attrs, child)
    return build_element("animateMotion", attrs)


def _compile_set(record: SetAnimation, opts: CompileOptions) -> str:
    if not record.attribute_name:
        raise CompileError("set requires attributeName")
    if record.to is None or record.to == "":
        raise CompileError("set requires a to value")
    attrs: dict[str, Any] = {
        "attributeName": record.attribute_name,
        "to": format_value(record.to, opts.precision),
        "begin": record.begin,
        "dur": record.dur,
        "end": record.end,
        "fill": record.fill,
    }
    return build_element("set", attrs)


def _as_record(animation: AnimationBase | Mapping[str, Any]) -> AnimationBase:
    if isinstance(animation, AnimationBase):
        return animation
    try:
        return animation_from_dict(animation)
    except ValueError as ex:
        raise CompileError(str(ex)) from ex


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_keyframes(record: AnimationBase, errors: list[str]) -> None:
    if not record.values:
        return
    count = len([v for v in record.values.split(";") if v.strip()])
    if record.key_times:
        times = [t for t in record.key_times.split(";") if t.strip()]
        if len(times) != count:
            errors.append(f"keyTimes must have {count} entries to match values")
    if record.calc_mode == "spline" and record.key_splines:
        splines = [s for s in record.key_splines.split(";") if s.strip()]
        if len(splines) != count - 1:
            errors.append(f"keySplines must have {count - 1} entries for {count} values")


def validate(animation: AnimationBase | Mapping[str, Any]) -> ValidationResult:
    """Check mandatory fields without raising."""

    errors: list[str] = []
    if isinstance(animation, AnimationBase):
        record: AnimationBase | None = animation
    else:
        record = None
        if not animation.get("type"):
            errors.append("Animation type is required")
        else:
            try:
                normalize_kind(animation["type"])
                record = animation_from_dict(animation)
            except ValueError as ex:
                errors.append(str(ex))
        if not animation.get("targetElementId"):
            errors.append("Target element ID is required")
        if record is None:
            return ValidationResult(valid=False, errors=tuple(errors))

    if isinstance(animation, AnimationBase) and not record.target_element_id:
        errors.append("Target element ID is required")

    if isinstance(record, AttributeAnimation):
        if not record.attribute_name:
            errors.append("attributeName is required for animate")
        if record.from_value is None and record.to is None and not record.values:
            errors.append("Either from/to or values must be specified")
    elif isinstance(record, TransformAnimation):
        if not record.transform_type:
            errors.append("transformType is required for animateTransform")
    elif isinstance(record, MotionAnimation):
        if not record.path and not record.motion_path_ref:
            errors.append("Either path or mpath is required for animateMotion")
    elif isinstance(record, SetAnimation):
        if not record.attribute_name:
            errors.append("attributeName is required for set")
        if record.to is None or record.to == "":
            errors.append("to value is required for set")
    else:
        errors.append(f"Unsupported animation type: {type(record).__name__}")

    _validate_keyframes(record, errors)
    return ValidationResult(valid=not errors, errors=tuple(errors))


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class SmilCompiler:
    """Turns animation records into SMIL markup strings.

    Notes:
    - Output is markup text only; placing it under the target element (or `<defs>`)
      is up to the caller.
    - Attribute order is emission order, never alphabetical.
    """

    def __init__(self, options: CompileOptions | None = None) -> None:
        self._options = options or CompileOptions()

    @property
    def options(self) -> CompileOptions:
        return self._options

    def set_default_options(self, **changes: Any) -> CompileOptions:
        self._options = replace(self._options, **changes)
        return self._options

    def _resolve(self, options: CompileOptions | None, overrides: Mapping[str, Any]) -> CompileOptions:
        opts = options or self._options
        if overrides:
            opts = replace(opts, **overrides)
        return opts

    def compile(self, animation: AnimationBase | Mapping[str, Any], options: CompileOptions | None = None, **overrides: Any) -> str:
        """Compile one record. Raises `CompileError` on a missing mandatory field."""

        opts = self._resolve(options, overrides)
        record = _as_record(animation)
        if isinstance(record, AttributeAnimation):
            return _compile_attribute(record, opts)
        if isinstance(record, TransformAnimation):
            return _compile_transform(record, opts)
        if isinstance(record, MotionAnimation):
            return _compile_motion(record, opts)
        if isinstance(record, SetAnimation):
            return _compile_set(record, opts)
        raise CompileError(f"Unknown animation type: {getattr(record, 'type', type(record).__name__)!r}")

    def compile_all(
        self,
        animations: Iterable[AnimationBase | Mapping[str, Any]],
        options: CompileOptions | None = None,
        **overrides: Any,
    ) -> CompileResult:
        """Compile a batch grouped by target; failures become warnings."""

        opts = self._resolve(options, overrides)
        groups: dict[str, list[AnimationBase | Mapping[str, Any]]] = {}
        for animation in animations:
            target = (
                animation.target_element_id
                if isinstance(animation, AnimationBase)
                else str(animation.get("targetElementId", ""))
            )
            groups.setdefault(target, []).append(animation)

        result = CompileResult()
        for group in groups.values():
            for animation in group:
                try:
                    result.elements.append(self.compile(animation, opts))
                except CompileError as ex:
                    aid = animation.id if isinstance(animation, AnimationBase) else animation.get("id")
                    msg = f"Failed to compile animation {aid}: {ex}"
                    logger.warning("%s", msg)
                    result.warnings.append(msg)
        return result

    def validate(self, animation: AnimationBase | Mapping[str, Any]) -> ValidationResult:
        return validate(animation)


def compile_record(animation: AnimationBase | Mapping[str, Any], options: CompileOptions | None = None) -> str:
    return SmilCompiler(options).compile(animation)


def compile_all(animations: Iterable[AnimationBase | Mapping[str, Any]], options: CompileOptions | None = None) -> CompileResult:
    return SmilCompiler(options).compile_all(animations)
