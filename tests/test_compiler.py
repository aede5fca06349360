from __future__ import annotations

import pytest

from smilkit.compiler import (
    CompileError,
    CompileOptions,
    SmilCompiler,
    compile_all,
    compile_record,
    format_value,
    round_number,
    validate,
)
from smilkit.core.records import AttributeAnimation, MotionAnimation, SetAnimation, TransformAnimation


def _fade(**kw) -> AttributeAnimation:
    base = dict(
        id="fade",
        target_element_id="el",
        attribute_name="opacity",
        from_value="0",
        to="1",
        dur="2s",
    )
    base.update(kw)
    return AttributeAnimation(**base)


def test_compile_animate_attribute_order() -> None:
    out = compile_record(_fade(fill="freeze", repeat_count=1.0, begin="0s"))
    assert out == '<animate attributeName="opacity" from="0" to="1" dur="2s" begin="0s" fill="freeze" repeatCount="1"/>'


def test_default_additive_is_omitted() -> None:
    out = compile_record(_fade(additive="replace", accumulate="none", calc_mode="linear"))
    assert "additive" not in out
    assert "accumulate" not in out
    assert "calcMode" not in out


def test_sum_is_emitted() -> None:
    out = compile_record(_fade(additive="sum", accumulate="sum", calc_mode="spline", key_splines="0.4 0 0.2 1"))
    assert 'additive="sum"' in out
    assert 'accumulate="sum"' in out
    assert 'calcMode="spline"' in out


def test_values_take_precedence_over_from_to() -> None:
    out = compile_record(_fade(values="0;1;0"))
    assert 'values="0;1;0"' in out
    assert "from=" not in out


def test_compile_transform() -> None:
    record = TransformAnimation(
        id="spin",
        target_element_id="el",
        transform_type="rotate",
        from_value="0",
        to="360",
        dur="2s",
        additive="sum",
        repeat_count="indefinite",
    )
    assert compile_record(record) == (
        '<animateTransform attributeName="transform" type="rotate" from="0" to="360" '
        'dur="2s" repeatCount="indefinite" additive="sum"/>'
    )


def test_mpath_wins_over_inline_path() -> None:
    record = MotionAnimation(id="m", target_element_id="el", path="M0 0 L10 0", motion_path_ref="track", dur="2s")
    out = compile_record(record)
    assert out == '<animateMotion dur="2s"><mpath href="#track"/></animateMotion>'
    assert "path=" not in out


def test_motion_inline_path_is_rounded() -> None:
    record = MotionAnimation(
        id="m", target_element_id="el", path="M0.123456 0 L10.5 0", rotate="auto", key_points="0;0.333333;1", dur="1s"
    )
    out = compile_record(record)
    assert 'path="M0.1235 0 L10.5 0"' in out
    assert 'rotate="auto"' in out
    assert 'keyPoints="0;0.3333;1"' in out

    raw = compile_record(record, CompileOptions(optimize=False))
    assert 'path="M0.123456 0 L10.5 0"' in raw


def test_motion_never_emits_additive() -> None:
    record = MotionAnimation(id="m", target_element_id="el", path="M0 0", dur="1s", additive="sum")
    assert "additive" not in compile_record(record)


def test_compile_set() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="visibility", to="hidden", begin="1s")
    assert compile_record(record) == '<set attributeName="visibility" to="hidden" begin="1s"/>'


def test_set_without_to_fails() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="opacity")
    with pytest.raises(CompileError):
        compile_record(record)

    result = validate(record)
    assert result.valid is False
    assert any("to" in e for e in result.errors)


def test_missing_mandatory_fields_raise() -> None:
    with pytest.raises(CompileError):
        compile_record(_fade(attribute_name=None))
    with pytest.raises(CompileError):
        compile_record(TransformAnimation(id="t", target_element_id="el", from_value="0", to="1"))
    with pytest.raises(CompileError):
        compile_record(MotionAnimation(id="m", target_element_id="el", dur="1s"))


def test_unknown_type_raises() -> None:
    with pytest.raises(CompileError):
        compile_record({"type": "wobble", "targetElementId": "el"})


def test_compile_from_wire_dict() -> None:
    out = compile_record({"type": "animate", "targetElementId": "el", "attributeName": "x", "from": 0, "to": 10.5})
    assert out == '<animate attributeName="x" from="0" to="10.5"/>'


def test_attribute_values_are_escaped() -> None:
    record = SetAnimation(id="s", target_element_id="el", attribute_name="data-label", to='a<b & "c"')
    assert 'to="a&lt;b &amp; &quot;c&quot;"' in compile_record(record)


def test_numeric_tokens_are_rounded() -> None:
    out = compile_record(_fade(values="0.123456;1.00000;-0.00001"))
    assert 'values="0.1235;1;0"' in out
    assert 'from="0.33"' in compile_record(_fade(from_value="0.333333"), CompileOptions(precision=2))


def test_non_numeric_tokens_pass_through() -> None:
    assert format_value("#ff0000", 4) == "#ff0000"
    assert format_value("50%", 4) == "50%"
    assert format_value("1.23456 2.5", 2) == "1.23 2.5"
    assert round_number(-0.0, 3) == "0"
    assert round_number(2.0, 0) == "2"


def test_empty_attributes_are_omitted() -> None:
    out = compile_record(_fade(begin="", end=None))
    assert "begin" not in out
    assert "end=" not in out


def test_compile_all_collects_warnings() -> None:
    good = _fade()
    bad = SetAnimation(id="broken", target_element_id="other", attribute_name="opacity")
    result = compile_all([good, bad])
    assert result.elements == [compile_record(good)]
    assert len(result.warnings) == 1
    assert "broken" in result.warnings[0]


def test_compile_all_survives_malformed_wire_record() -> None:
    bad = {"id": "odd", "type": "animateMotion", "targetElementId": "el", "path": "M0 0 L1 1", "rotate": [1]}
    good = {"type": "animate", "targetElementId": "el", "attributeName": "opacity", "from": "0", "to": "1", "dur": "1s"}
    result = compile_all([bad, good])
    assert result.elements == ['<animate attributeName="opacity" from="0" to="1" dur="1s"/>']
    assert len(result.warnings) == 1
    assert "odd" in result.warnings[0]


def test_compile_all_groups_by_target() -> None:
    a1 = _fade(id="a1", target_element_id="a")
    b1 = _fade(id="b1", target_element_id="b", to="0.5")
    a2 = _fade(id="a2", target_element_id="a", to="0.25")
    result = compile_all([a1, b1, a2])
    assert result.elements == [compile_record(a1), compile_record(a2), compile_record(b1)]


def test_default_options() -> None:
    compiler = SmilCompiler()
    compiler.set_default_options(precision=1)
    assert 'to="0.3"' in compiler.compile(_fade(to="0.33"))
    assert 'to="0.33"' in compiler.compile(_fade(to="0.33"), precision=2)


def test_validate_reports_errors() -> None:
    assert validate(_fade()).valid
    assert validate(_fade()).errors == ()

    missing = validate(_fade(from_value=None, to=None))
    assert not missing.valid
    assert "Either from/to or values must be specified" in missing.errors

    raw = validate({"attributeName": "x"})
    assert "Animation type is required" in raw.errors
    assert "Target element ID is required" in raw.errors


def test_validate_key_times_cardinality() -> None:
    result = validate(_fade(values="0;1;0", key_times="0;1"))
    assert not result.valid

    splines = validate(_fade(values="0;1;0", key_times="0;0.5;1", calc_mode="spline", key_splines="0 0 1 1"))
    assert not splines.valid
