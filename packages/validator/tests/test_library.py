"""Tests for the built-in validators and sanitizers."""

import math
import re

import pytest

from reqknobs_validator import UNSET, ChainBuildError, body
from reqknobs_validator import sanitizers, validators


def run_check(factory_result, value):
    return factory_result(value, None)


class TestDefaultSanitizer:
    """Test default() replacement rules."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("bar", "bar"),
            ("", "foo"),
            (UNSET, "foo"),
            (None, "foo"),
            (float("nan"), "foo"),
            (0, 0),
            (False, False),
            ([], []),
        ],
    )
    def test_default(self, value, expected):
        assert sanitizers.default("foo")(value, None) == expected

    def test_default_value_copied(self):
        fill = sanitizers.default([])
        first = fill(UNSET, None)
        first.append(1)

        assert fill(UNSET, None) == []

    @pytest.mark.asyncio
    async def test_default_in_chain(self):
        request = {"body": {"a": "", "b": "bar"}}

        await body("a", "b", "c").default("foo").run(request)

        assert request["body"] == {"a": "foo", "b": "bar", "c": "foo"}


class TestReplaceSanitizer:
    """Test replace() exact matching."""

    @pytest.mark.parametrize(
        "value,expected",
        [("bar_", "bar_"), ("bar", "foo"), ("BAR", "foo"), ("Bar", "Bar")],
    )
    def test_replace_list(self, value, expected):
        assert sanitizers.replace(["bar", "BAR"], "foo")(value, None) == expected

    def test_replace_single_value(self):
        assert sanitizers.replace("bar", "foo")("bar", None) == "foo"

    def test_replace_does_not_confuse_kinds(self):
        swap = sanitizers.replace([0], "zero")

        assert swap(False, None) is False
        assert swap(0, None) == "zero"


class TestToArraySanitizer:
    """Test to_array() wrapping."""

    def test_unset_becomes_empty(self):
        assert sanitizers.to_array()(UNSET, None) == []

    def test_sequence_unchanged(self):
        value = ["a", "b"]
        assert sanitizers.to_array()(value, None) is value

    @pytest.mark.parametrize("value", ["a", 1, None, {"a": 1}, False])
    def test_scalar_wrapped(self, value):
        assert sanitizers.to_array()(value, None) == [value]


class TestOtherSanitizers:
    """Test string and numeric sanitizers."""

    def test_trim(self):
        assert sanitizers.trim()("  a  ", None) == "a"
        assert sanitizers.trim("x")("xxaxx", None) == "a"
        assert sanitizers.trim()(5, None) == 5

    @pytest.mark.parametrize("value,expected", [("42", 42), ("12abc", 12), (" -3", -3), (7.9, 7), (True, 1)])
    def test_to_int(self, value, expected):
        assert sanitizers.to_int()(value, None) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, UNSET, float("inf")])
    def test_to_int_unparsable(self, value):
        assert math.isnan(sanitizers.to_int()(value, None))

    def test_to_float(self):
        assert sanitizers.to_float()("3.5kg", None) == 3.5
        assert sanitizers.to_float()(2, None) == 2.0
        assert math.isnan(sanitizers.to_float()("kg", None))

    @pytest.mark.parametrize(
        "value,loose,strict",
        [("true", True, True), ("1", True, True), ("yes", True, False), ("0", False, False), ("false", False, False), ("", False, False)],
    )
    def test_to_boolean(self, value, loose, strict):
        assert sanitizers.to_boolean()(value, None) is loose
        assert sanitizers.to_boolean(strict=True)(value, None) is strict

    def test_case(self):
        assert sanitizers.to_lower_case()("AbC", None) == "abc"
        assert sanitizers.to_upper_case()("AbC", None) == "ABC"
        assert sanitizers.to_upper_case()(None, None) is None


class TestValidators:
    """Test built-in validators."""

    def test_exists(self):
        assert run_check(validators.exists(), None)
        assert not run_check(validators.exists(), UNSET)
        assert not run_check(validators.exists(values="null"), None)
        assert run_check(validators.exists(values="null"), "")
        assert not run_check(validators.exists(values="falsy"), "")
        assert run_check(validators.exists(values="falsy"), [])

    def test_exists_invalid_option(self):
        with pytest.raises(ChainBuildError) as exc_info:
            body("x").exists(values="sometimes")

        assert exc_info.value.context["allowed"] == ["undefined", "null", "falsy"]

    @pytest.mark.parametrize("value,ok", [("a", True), ("", False), (UNSET, False), (None, False), ([], False), ([0], True), ({}, False), (0, True)])
    def test_not_empty(self, value, ok):
        assert run_check(validators.not_empty(), value) is ok

    def test_is_in(self):
        check = validators.is_in(["sunday", "saturday", 1])
        assert check("sunday", None)
        assert not check("monday", None)
        assert check("1", None)
        assert not check(None, None)

    def test_equals(self):
        assert validators.equals("5")(5, None)
        assert not validators.equals("5")("6", None)
        assert validators.equals({"a": 1})({"a": 1}, None)

    @pytest.mark.parametrize(
        "value,ok",
        [(5, True), ("5", True), ("-5", True), ("5.5", False), (5.0, True), (5.5, False), (True, False), ("abc", False), (None, False)],
    )
    def test_is_int(self, value, ok):
        assert validators.is_int()(value, None) is ok

    def test_is_int_bounds(self):
        assert validators.is_int(min=1, max=10)("10", None)
        assert not validators.is_int(min=1, max=10)("11", None)
        assert not validators.is_int(min=1)(0, None)

    def test_is_float(self):
        assert validators.is_float()("1.5", None)
        assert validators.is_float(max=2)(2, None)
        assert not validators.is_float()("nan", None)
        assert not validators.is_float()(float("nan"), None)
        assert not validators.is_float(min=0)("-1", None)

    def test_is_boolean(self):
        assert validators.is_boolean()(True, None)
        assert validators.is_boolean()("false", None)
        assert not validators.is_boolean()("yes", None)
        assert validators.is_boolean(loose=True)("YES", None)

    def test_is_array(self):
        assert validators.is_array()([], None)
        assert validators.is_array(min=1, max=2)(("a",), None)
        assert not validators.is_array(max=1)(["a", "b"], None)
        assert not validators.is_array()("ab", None)

    def test_is_object(self):
        assert validators.is_object()({}, None)
        assert not validators.is_object()([], None)
        assert not validators.is_object()(None, None)
        assert validators.is_object(strict=False)([], None)
        assert validators.is_object(strict=False)(None, None)
        assert not validators.is_object(strict=False)("a", None)

    def test_is_length(self):
        assert validators.is_length(min=2, max=3)("abc", None)
        assert not validators.is_length(min=2)("a", None)
        assert validators.is_length(max=2)(10, None)
        assert not validators.is_length()(["a"], None)

    def test_matches(self):
        assert validators.matches(r"^\d{3}$")("123", None)
        assert validators.matches(r"^abc$", re.IGNORECASE)("ABC", None)
        assert not validators.matches(r"^\d+$")(None, None)

    def test_is_email(self):
        assert validators.is_email()("ada@example.com", None)
        assert not validators.is_email()("ada@example", None)
        assert not validators.is_email()(None, None)
