from __future__ import annotations

import numpy as np
import pytest

from smilkit.core.aggregate import calculate_all_states, calculate_element_state, calculate_progress
from smilkit.core.interpolate import MotionPathState
from smilkit.core.records import AttributeAnimation, Element, MotionAnimation, SetAnimation, TransformAnimation


def _opacity(fill: str = "freeze") -> AttributeAnimation:
    return AttributeAnimation(
        id="fade",
        target_element_id="el",
        attribute_name="opacity",
        from_value="0",
        to="1",
        begin="0s",
        dur="2s",
        repeat_count=1.0,
        fill=fill,
    )


def _translate(aid: str, to: str = "10 0", **kw) -> TransformAnimation:
    return TransformAnimation(
        id=aid,
        target_element_id="el",
        transform_type="translate",
        from_value="0 0",
        to=to,
        dur="2s",
        fill="freeze",
        **kw,
    )


def test_fade_scenario_with_freeze() -> None:
    records = [_opacity()]
    elements = [Element("el")]
    expected = {0.0: 0.0, 1.0: 0.5, 2.0: 1.0, 3.0: 1.0}
    for t, opacity in expected.items():
        states = calculate_all_states(records, elements, t)
        assert np.isclose(states["el"].style.opacity, opacity)
        assert states["el"].time == t


def test_fade_scenario_with_remove() -> None:
    record = _opacity(fill="remove")
    assert calculate_progress(record, 3.0) == 0.0
    states = calculate_all_states([record], [Element("el")], 3.0)
    assert states["el"].style.opacity == 0.0


def test_color_keyframes_scenario() -> None:
    record = AttributeAnimation(
        id="cycle",
        target_element_id="el",
        attribute_name="fill",
        values="#ff0000;#00ff00;#0000ff",
        dur="3s",
    )
    states = calculate_all_states([record], [Element("el")], 1.5)
    assert states["el"].style.fill_color == "rgb(0, 255, 0)"


def test_unanimated_and_unknown_elements_are_absent() -> None:
    records = [_opacity()]
    assert calculate_all_states(records, [Element("other")], 1.0) == {}

    states = calculate_all_states(records, [Element("el"), Element("idle")], 1.0)
    assert set(states) == {"el"}


def test_no_element_filter() -> None:
    states = calculate_all_states([_opacity()], None, 1.0)
    assert set(states) == {"el"}


def test_transform_fields_merge_across_records() -> None:
    rotate = TransformAnimation(
        id="spin", target_element_id="el", transform_type="rotate", from_value="0", to="90", dur="2s"
    )
    state = calculate_element_state("el", [_translate("move"), rotate], 1.0)
    assert state.transform is not None
    assert state.transform.translate_x == pytest.approx(5.0)
    assert state.transform.rotate == pytest.approx(45.0)
    assert state.transform.scale_x == 1.0
    assert state.style is None


def test_replace_overwrites_and_sum_adds() -> None:
    replaced = calculate_element_state("el", [_translate("a"), _translate("b")], 2.0)
    assert replaced.transform.translate_x == pytest.approx(10.0)

    summed = calculate_element_state("el", [_translate("a", additive="sum"), _translate("b", additive="sum")], 2.0)
    assert summed.transform.translate_x == pytest.approx(20.0)


def test_additive_scale_multiplies() -> None:
    scales = [
        TransformAnimation(
            id=f"s{i}",
            target_element_id="el",
            transform_type="scale",
            from_value="1",
            to="2",
            dur="1s",
            fill="freeze",
            additive="sum",
        )
        for i in range(2)
    ]
    state = calculate_element_state("el", scales, 5.0)
    assert state.transform.scale_x == pytest.approx(4.0)
    assert state.transform.scale_y == pytest.approx(4.0)


def test_additive_style_adds_to_element_base() -> None:
    record = AttributeAnimation(
        id="o",
        target_element_id="el",
        attribute_name="opacity",
        from_value="0",
        to="0.5",
        dur="1s",
        fill="freeze",
        additive="sum",
    )
    element = Element("el", data={"opacity": 0.25})
    states = calculate_all_states([record], [element], 2.0)
    assert states["el"].style.opacity == pytest.approx(0.75)


def test_missing_from_uses_element_data() -> None:
    record = AttributeAnimation(
        id="w", target_element_id="el", attribute_name="stroke-width", to="5", dur="2s"
    )
    states = calculate_all_states([record], [Element("el", data={"strokeWidth": 3})], 1.0)
    assert states["el"].style.stroke_width == pytest.approx(4.0)


def test_later_record_wins_for_style() -> None:
    first = _opacity()
    second = AttributeAnimation(
        id="half", target_element_id="el", attribute_name="opacity", from_value="0.2", to="0.2", dur="2s"
    )
    state = calculate_element_state("el", [first, second], 1.0)
    assert state.style.opacity == pytest.approx(0.2)


def test_accumulate_sum_adds_completed_iterations() -> None:
    record = AttributeAnimation(
        id="x",
        target_element_id="el",
        attribute_name="x",
        from_value="0",
        to="10",
        dur="1s",
        repeat_count=3.0,
        accumulate="sum",
        fill="freeze",
    )
    assert calculate_element_state("el", [record], 1.5).attributes["x"] == pytest.approx(15.0)
    assert calculate_element_state("el", [record], 5.0).attributes["x"] == pytest.approx(30.0)


def test_accumulate_sum_reverts_after_end_with_fill_remove() -> None:
    record = AttributeAnimation(
        id="x",
        target_element_id="el",
        attribute_name="x",
        from_value="0",
        to="10",
        dur="1s",
        repeat_count=3.0,
        accumulate="sum",
        fill="remove",
    )
    assert calculate_element_state("el", [record], 2.5).attributes["x"] == pytest.approx(25.0)
    assert calculate_element_state("el", [record], 5.0).attributes["x"] == pytest.approx(0.0)


def test_set_applies_only_inside_its_window() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="opacity", to="0", begin="1s", dur="1s")
    assert calculate_element_state("el", [record], 0.5).style is None
    assert calculate_element_state("el", [record], 1.5).style.opacity == 0.0
    assert calculate_element_state("el", [record], 2.5).style is None


def test_set_without_dur_holds() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="visibility", to="hidden", begin="1s")
    assert calculate_element_state("el", [record], 100.0).attributes == {"visibility": "hidden"}


def test_motion_placeholder_and_resolver() -> None:
    record = MotionAnimation(id="m", target_element_id="el", path="M0 0 L100 0", dur="2s")
    state = calculate_element_state("el", [record], 1.0)
    assert state.motion_path == MotionPathState()

    def along_x(rec: MotionAnimation, progress: float) -> MotionPathState:
        return MotionPathState(position=(progress * 100.0, 0.0), angle=0.0)

    states = calculate_all_states([record], [Element("el")], 1.0, motion_resolver=along_x)
    assert states["el"].motion_path.position == (50.0, 0.0)


def test_path_morph_state() -> None:
    record = AttributeAnimation(
        id="d", target_element_id="el", attribute_name="d", values="M0 0 L1 1;M0 0 L2 2", dur="1s"
    )
    assert calculate_element_state("el", [record], 0.9).path_data == "M0 0 L2 2"
