from __future__ import annotations

import pytest

from smilkit.core.interpolate import (
    Contribution,
    MotionPathState,
    discrete_index,
    interpolate_attribute,
    interpolate_color,
    interpolate_motion,
    interpolate_scalar,
    interpolate_transform,
    keyframe_segment,
    parse_number,
    set_contributions,
)
from smilkit.core.records import AttributeAnimation, MotionAnimation, SetAnimation, TransformAnimation


def _attr(name: str, **kw) -> AttributeAnimation:
    return AttributeAnimation(id="a", target_element_id="el", attribute_name=name, dur="1s", **kw)


def _transform(kind: str, **kw) -> TransformAnimation:
    return TransformAnimation(id="t", target_element_id="el", transform_type=kind, dur="1s", **kw)


def _values(contribs: list[Contribution]) -> dict[str, object]:
    return {c.key: c.value for c in contribs}


def test_color_endpoints() -> None:
    assert interpolate_color("#000000", "#ffffff", 0.0) == "rgb(0, 0, 0)"
    assert interpolate_color("#000000", "#ffffff", 1.0) == "rgb(255, 255, 255)"
    assert interpolate_color("#000000", "#ffffff", 0.5) == "rgb(128, 128, 128)"


def test_color_short_hex() -> None:
    assert interpolate_color("#fff", "000", 0.0) == "rgb(255, 255, 255)"


def test_malformed_color_switches_at_half() -> None:
    assert interpolate_color("red", "#ffffff", 0.2) == "red"
    assert interpolate_color("red", "#ffffff", 0.7) == "#ffffff"


def test_scalar_interpolation() -> None:
    assert interpolate_scalar("0", "10", 0.25) == 2.5
    assert interpolate_scalar("10px", "20px", 0.5) == 15.0
    assert interpolate_scalar("0", "10", 0.0) == 0.0
    assert interpolate_scalar("0", "10", 1.0) == 10.0


def test_malformed_scalar_switches() -> None:
    assert interpolate_scalar("abc", "10", 0.4) == "abc"
    assert interpolate_scalar("abc", "10", 0.6) == "10"


def test_parse_number_is_leading() -> None:
    assert parse_number("12.5px") == 12.5
    assert parse_number("px") is None
    assert parse_number(True) is None


def test_keyframe_segment_mapping() -> None:
    assert keyframe_segment(3, 0.0) == (0, 0.0)
    assert keyframe_segment(3, 0.5) == (1, 0.0)
    assert keyframe_segment(3, 0.75) == (1, 0.5)
    assert keyframe_segment(3, 1.0) == (1, 1.0)


def test_discrete_index() -> None:
    assert discrete_index(3, 0.0) == 0
    assert discrete_index(3, 0.5) == 1
    assert discrete_index(3, 1.0) == 2
    assert discrete_index(3, 0.5, [0.0, 0.2, 0.9]) == 1
    assert discrete_index(3, 0.95, [0.0, 0.2, 0.9]) == 2


def test_opacity_goes_to_style() -> None:
    out = interpolate_attribute(_attr("opacity", from_value="0", to="1"), 0.5)
    assert out == [Contribution("style", "opacity", 0.5)]


def test_fill_values_interpolate_as_colors() -> None:
    record = _attr("fill", values="#ff0000;#00ff00;#0000ff")
    assert interpolate_attribute(record, 0.5) == [Contribution("style", "fill_color", "rgb(0, 255, 0)")]


def test_stop_color_goes_to_attributes() -> None:
    out = interpolate_attribute(_attr("stop-color", from_value="#000000", to="#ffffff"), 1.0)
    assert out == [Contribution("attribute", "stop-color", "rgb(255, 255, 255)")]


def test_missing_from_uses_base_then_default() -> None:
    assert _values(interpolate_attribute(_attr("x", to="10"), 0.5, base="4")) == {"x": 7.0}
    assert _values(interpolate_attribute(_attr("opacity", to="0"), 0.5)) == {"opacity": 0.5}


def test_path_data_switches_discretely() -> None:
    record = _attr("d", from_value="M0 0 L10 0", to="M0 0 L10 10")
    assert interpolate_attribute(record, 0.4) == [Contribution("path", "d", "M0 0 L10 0")]
    assert interpolate_attribute(record, 0.6) == [Contribution("path", "d", "M0 0 L10 10")]


def test_non_numeric_style_value_lands_in_attributes() -> None:
    out = interpolate_attribute(_attr("opacity", from_value="inherit", to="1"), 0.2)
    assert out == [Contribution("attribute", "opacity", "inherit")]


def test_discrete_attribute() -> None:
    record = _attr("x", values="0;10;20", calc_mode="discrete")
    # discrete keyframes are picked verbatim
    assert _values(interpolate_attribute(record, 0.4)) == {"x": "10"}
    assert _values(interpolate_attribute(record, 0.9)) == {"x": "20"}


def test_translate() -> None:
    out = _values(interpolate_transform(_transform("translate", from_value="0 0", to="10 20"), 0.5))
    assert out == {"translate_x": 5.0, "translate_y": 10.0}


def test_uniform_scale() -> None:
    out = _values(interpolate_transform(_transform("scale", from_value="1", to="3"), 0.5))
    assert out == {"scale_x": 2.0, "scale_y": 2.0}


def test_rotate_with_center() -> None:
    out = _values(interpolate_transform(_transform("rotate", from_value="0 50 40", to="90 50 40"), 0.5))
    assert out["rotate"] == pytest.approx(45.0)
    assert out["rotate_center"] == (50.0, 40.0)


def test_skew() -> None:
    assert _values(interpolate_transform(_transform("skewX", from_value="0", to="30"), 0.5)) == {"skew_x": 15.0}
    assert _values(interpolate_transform(_transform("skewY", values="0;10;20"), 0.75)) == {"skew_y": 15.0}


def test_unknown_transform_type_contributes_nothing() -> None:
    assert interpolate_transform(_transform("matrix", from_value="0", to="1"), 0.5) == []


def test_motion_placeholder() -> None:
    with_path = MotionAnimation(id="m", target_element_id="el", path="M0 0 L10 0", dur="1s")
    assert interpolate_motion(with_path, 0.5) == [Contribution("motion", "motion_path", MotionPathState())]

    no_path = MotionAnimation(id="m2", target_element_id="el", dur="1s")
    assert interpolate_motion(no_path, 0.5) == []


def test_motion_custom_resolver() -> None:
    record = MotionAnimation(id="m", target_element_id="el", motion_path_ref="p1", dur="1s")
    out = interpolate_motion(record, 0.5, lambda r, p: MotionPathState(position=(p * 100.0, 0.0), angle=0.0))
    assert out[0].value.position == (50.0, 0.0)


def test_set_contributions() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="opacity", to="0.5")
    assert set_contributions(record) == [Contribution("style", "opacity", 0.5)]

    vis = SetAnimation(id="s2", target_element_id="el", attribute_name="visibility", to="hidden")
    assert set_contributions(vis) == [Contribution("attribute", "visibility", "hidden")]
