"""Tests for the transform expression evaluator."""

import pytest

from pocketbase_mcp.transforms import (
    TransformEvaluationError,
    TransformEvaluator,
    TransformSyntaxError,
    compile_transform,
)


def run(expression: str, old_value=None):
    return compile_transform(expression).apply(old_value)


# --- Strings ---


def test_upper_case():
    assert run("oldValue.toUpperCase()", "hello") == "HELLO"


def test_value_alias():
    assert run("value.trim()", "  x  ") == "x"


def test_split_and_join():
    assert run("oldValue.split(',').join(' | ')", "a,b,c") == "a | b | c"


def test_string_helpers():
    assert run("oldValue.replace('-', '_')", "a-b-c") == "a_b-c"
    assert run("oldValue.replaceAll('-', '_')", "a-b-c") == "a_b_c"
    assert run("oldValue.slice(0, 3)", "abcdef") == "abc"
    assert run("oldValue.substring(4, 1)", "abcdef") == "bcd"
    assert run("oldValue.padStart(5, '0')", "42") == "00042"
    assert run("oldValue.length", "abc") == 3


def test_plus_concatenates_when_either_side_is_text():
    assert run("oldValue + '!'", 5) == "5!"
    assert run("'#' + oldValue", 1.0) == "#1"
    assert run("oldValue + null", "x") == "xnull"


# --- Numbers ---


def test_arithmetic_keeps_integers():
    assert run("oldValue * 2", 21) == 42
    assert run("oldValue / 2", 5) == 2.5
    assert run("oldValue / 2", 4) == 2
    assert isinstance(run("oldValue / 2", 4), int)
    assert run("oldValue % 3", 10) == 1


def test_number_conversion():
    assert run("Number(oldValue)", "42") == 42
    assert run("Number(oldValue)", " 1.50 ") == 1.5
    assert run("Number(oldValue)", "") == 0
    assert run("parseInt(oldValue)", "42px") == 42
    assert run("parseInt(oldValue, 16)", "ff") == 255
    assert run("parseFloat(oldValue)", "3.5kg") == 3.5


def test_math():
    assert run("Math.round(oldValue)", 2.5) == 3
    assert run("Math.round(oldValue)", -2.5) == -2
    assert run("Math.pow(oldValue, 10)", 2) == 1024
    assert run("Math.max(oldValue, 10, 3)", 7) == 10
    assert run("Math.floor(oldValue)", "3.9") == 3


def test_to_fixed():
    assert run("oldValue.toFixed(2)", 3.14159) == "3.14"


def test_exponent_literals():
    assert run("oldValue * 1e3", 2) == 2000
    assert run("oldValue * 2.5e-1", 4) == 1


def test_numeric_string_comparison():
    assert run("oldValue > 10", "20") is True
    assert run("oldValue < 'b'", "a") is True


# --- Logic ---


def test_or_supplies_defaults_for_falsy_values():
    assert run("oldValue || 'N/A'", "") == "N/A"
    assert run("oldValue || 'N/A'", 0) == "N/A"
    assert run("oldValue || 'N/A'", "x") == "x"


def test_nullish_only_replaces_null():
    assert run("oldValue ?? 'x'", 0) == 0
    assert run("oldValue ?? 'x'", None) == "x"


def test_equality_is_strict():
    assert run("oldValue == 1", "1") is False
    assert run("oldValue == 1", 1) is True
    assert run("oldValue === 1", 1.0) is True
    assert run("oldValue != true", 1) is True


def test_conditional():
    expression = "oldValue ? oldValue.toUpperCase() : 'N/A'"
    assert run(expression, "draft") == "DRAFT"
    assert run(expression, None) == "N/A"


def test_empty_array_is_truthy():
    assert run("oldValue ? 'yes' : 'no'", []) == "yes"


# --- Structured values ---


def test_member_and_index_access():
    assert run("oldValue.name", {"name": "x"}) == "x"
    assert run("oldValue.missing", {"name": "x"}) is None
    assert run("oldValue[0]", [1, 2]) == 1
    assert run("oldValue[5]", [1, 2]) is None
    assert run("oldValue['a']", {"a": 3}) == 3


def test_json_helpers():
    assert run("JSON.stringify(oldValue)", {"a": 1}) == '{"a":1}'
    assert run("JSON.parse(oldValue).b", '{"b": 2}') == 2


def test_array_literals_and_methods():
    assert run("[oldValue, 'x'].join('-')", "a") == "a-x"
    assert run("oldValue.includes(2)", [1, 2]) is True
    assert run("oldValue.includes('2')", [1, 2]) is False


# --- Failures ---


@pytest.mark.parametrize(
    "expression,old_value,message",
    [
        ("other", 1, "Unknown identifier: other"),
        ("oldValue / 0", 1, "Division by zero"),
        ("oldValue % 0", 1, "Division by zero"),
        ("oldValue.frobnicate()", "x", "Unknown method 'frobnicate' on str"),
        ("oldValue.toUpperCase()", None, "Cannot call method 'toUpperCase' of null"),
        ("oldValue.toUpperCase()", 5, "Unknown method 'toUpperCase' on number"),
        ("oldValue * 2", "many", "Cannot convert 'many' to a number"),
        ("Math.sqrt(oldValue)", -1, "Math.sqrt of a negative number"),
        ("Math.pow(oldValue)", 2, "Invalid arguments for Math.pow"),
        ("eval(oldValue)", "1", "Unknown function: eval"),
        ("Math.random()", None, "Unknown function: Math.random"),
        ("parseInt(oldValue)", "px", "parseInt could not parse"),
        ("JSON.parse(oldValue)", "{", "JSON.parse failed"),
        ("oldValue.name", None, "Cannot read property 'name' of null"),
        ("oldValue.padStart(100000000000000000)", "x", "padStart width"),
        ("oldValue.padStart(1e300)", "x", "padStart width"),
        ("oldValue.toFixed(1000000000)", 1.5, "between 0 and 100"),
    ],
)
def test_evaluation_errors(expression, old_value, message):
    with pytest.raises(TransformEvaluationError, match=message):
        run(expression, old_value)


def test_non_finite_results_raise():
    with pytest.raises(TransformEvaluationError, match="not finite"):
        run("oldValue * oldValue", 1e200)


def test_compile_rejects_invalid_syntax():
    with pytest.raises(TransformSyntaxError):
        compile_transform("oldValue +")


def test_compiled_transform_is_reusable():
    transform = compile_transform("oldValue + 1")
    assert [transform.apply(v) for v in (1, 2, 3)] == [2, 3, 4]
    assert transform.expression == "oldValue + 1"


def test_pad_start_with_multi_character_fill():
    assert run("oldValue.padStart(6, 'ab')", "x") == "ababax"


def test_memory_error_surfaces_as_evaluation_error(monkeypatch):
    transform = compile_transform("oldValue")

    def exhausted(self, expression):
        raise MemoryError()

    monkeypatch.setattr(TransformEvaluator, "evaluate", exhausted)
    with pytest.raises(TransformEvaluationError, match="MemoryError"):
        transform.apply("x")
