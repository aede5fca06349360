from __future__ import annotations

from typing import Any

from .records import (
    AttributeAnimation,
    MotionAnimation,
    SetAnimation,
    TransformAnimation,
    new_animation_id,
    with_defaults,
)


def _seconds(dur: float | str) -> str:
    if isinstance(dur, str):
        return dur
    return f"{float(dur):g}s"


def attribute(
    target_element_id: str,
    attribute_name: str,
    *,
    from_value: str | None = None,
    to: str | None = None,
    values: str | None = None,
    dur: float | str = 2.0,
    **kwargs: Any,
) -> AttributeAnimation:
    """Generic `attribute-animate` record with the editor defaults applied."""
    return with_defaults(
        AttributeAnimation(
            id=new_animation_id(),
            target_element_id=target_element_id,
            attribute_name=attribute_name,
            from_value=from_value,
            to=to,
            values=values,
            dur=_seconds(dur),
            **kwargs,
        )
    )  # type: ignore[return-value]


def _transform(target_element_id: str, transform_type: str, *, dur: float | str, **kwargs: Any) -> TransformAnimation:
    return with_defaults(
        TransformAnimation(
            id=new_animation_id(),
            target_element_id=target_element_id,
            transform_type=transform_type,  # type: ignore[arg-type]
            dur=_seconds(dur),
            **kwargs,
        )
    )  # type: ignore[return-value]


def fade(target_element_id: str, *, from_value: str = "1", to: str = "0", dur: float | str = 2.0) -> AttributeAnimation:
    return attribute(target_element_id, "opacity", from_value=from_value, to=to, dur=dur)


def rotate(target_element_id: str, *, from_value: str = "0", to: str = "360", dur: float | str = 2.0) -> TransformAnimation:
    return _transform(target_element_id, "rotate", dur=dur, from_value=from_value, to=to, additive="sum")


def move(target_element_id: str, *, from_value: str = "0 0", to: str = "50 0", dur: float | str = 2.0) -> TransformAnimation:
    return _transform(target_element_id, "translate", dur=dur, from_value=from_value, to=to, additive="sum")


def scale(target_element_id: str, *, from_value: str = "1 1", to: str = "1.2 1.2", dur: float | str = 2.0) -> TransformAnimation:
    return _transform(target_element_id, "scale", dur=dur, from_value=from_value, to=to)


def path_draw(target_element_id: str, *, from_value: str = "1", to: str = "0", dur: float | str = 2.0) -> AttributeAnimation:
    """Dash-offset sweep; pair with a normalized `stroke-dasharray` on the target."""
    return attribute(target_element_id, "stroke-dashoffset", from_value=from_value, to=to, dur=dur)


def fill_color_cycle(target_element_id: str, *, values: str = "#ff6b6b;#4ecdc4;#ff6b6b", dur: float | str = 2.0) -> AttributeAnimation:
    return attribute(target_element_id, "fill", values=values, dur=dur, repeat_count="indefinite")


def stroke_color_cycle(target_element_id: str, *, values: str = "#111111;#ff9900;#111111", dur: float | str = 2.0) -> AttributeAnimation:
    return attribute(target_element_id, "stroke", values=values, dur=dur, repeat_count="indefinite")


def stroke_width(target_element_id: str, *, from_value: str = "1", to: str = "4", dur: float | str = 2.0) -> AttributeAnimation:
    return attribute(target_element_id, "stroke-width", from_value=from_value, to=to, dur=dur)


def set_attribute(target_element_id: str, attribute_name: str = "opacity", to: str = "0", *, begin: str = "0s") -> SetAnimation:
    # no dur: a set holds its value until the timeline ends
    return with_defaults(
        SetAnimation(
            id=new_animation_id(),
            target_element_id=target_element_id,
            attribute_name=attribute_name,
            to=to,
            begin=begin,
        )
    )  # type: ignore[return-value]


def motion_along(
    target_element_id: str,
    path_id: str | None = None,
    *,
    path: str | None = None,
    rotate: str = "auto",
    dur: float | str = 2.0,
) -> MotionAnimation:
    """Motion along a referenced path element, or along inline `path` data."""

    if path_id is None and path is None:
        path = "M 0 0 L 100 0"
    return with_defaults(
        MotionAnimation(
            id=new_animation_id(),
            target_element_id=target_element_id,
            motion_path_ref=path_id,
            path=path,
            rotate=rotate,  # type: ignore[arg-type]
            dur=_seconds(dur),
        )
    )  # type: ignore[return-value]


QUICK_CREATE = {
    "fade": fade,
    "rotate": rotate,
    "move": move,
    "scale": scale,
    "pathDraw": path_draw,
    "fillColor": fill_color_cycle,
    "strokeColor": stroke_color_cycle,
    "strokeWidth": stroke_width,
    "set": set_attribute,
    "animateMotion": motion_along,
}


def quick_create(kind: str, target_element_id: str) -> Any:
    try:
        factory = QUICK_CREATE[kind]
    except KeyError as ex:
        raise ValueError(f"Unknown quick-create kind: {kind!r}") from ex
    return factory(target_element_id)
