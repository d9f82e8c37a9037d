"""Tests for server error normalization."""

import pytest

from formstate.errors import (
    NestedErrorValue,
    ScalarErrorValue,
    SequenceErrorValue,
    classify,
    first_message,
    normalize_errors,
)


class TestClassify:
    """Tests for structural classification of raw error values."""

    def test_mapping_is_nested(self) -> None:
        raw = classify({"0": "bad"})
        assert isinstance(raw, NestedErrorValue)
        assert raw.kind == "nested"

    def test_list_is_sequence(self) -> None:
        raw = classify(["bad", "also bad"])
        assert isinstance(raw, SequenceErrorValue)
        assert raw.items == ["bad", "also bad"]

    def test_tuple_is_sequence(self) -> None:
        assert classify(("bad",)).kind == "sequence"

    @pytest.mark.parametrize("value", ["bad", 42, None, True])
    def test_other_values_are_scalar(self, value) -> None:
        raw = classify(value)
        assert isinstance(raw, ScalarErrorValue)
        assert raw.value == value


class TestFirstMessage:
    """Tests for reducing a classified value to one message."""

    def test_nested_takes_first_value(self) -> None:
        assert first_message(classify({"required": "needed", "email": "invalid"})) == "needed"

    def test_sequence_takes_first_element(self) -> None:
        assert first_message(classify(["first", "second"])) == "first"

    def test_nested_list_resolves_to_string(self) -> None:
        assert first_message(classify({"rules": ["too short", "no digits"]})) == "too short"

    def test_empty_containers_have_no_message(self) -> None:
        assert first_message(classify({})) is None
        assert first_message(classify([])) is None

    def test_null_has_no_message(self) -> None:
        assert first_message(classify(None)) is None

    def test_non_string_scalar_is_stringified(self) -> None:
        assert first_message(classify(42)) == "42"


class TestNormalizeErrors:
    """Tests for normalize_errors()."""

    def test_nested_object(self) -> None:
        """Test {email: {0: "bad"}} yields email == "bad"."""
        assert normalize_errors({"email": {0: "bad"}}) == {"email": "bad"}

    def test_sequence(self) -> None:
        """Test {email: ["bad", "also bad"]} yields the first element."""
        assert normalize_errors({"email": ["bad", "also bad"]}) == {"email": "bad"}

    def test_scalar(self) -> None:
        """Test plain strings are used verbatim."""
        assert normalize_errors({"email": "bad"}) == {"email": "bad"}

    def test_mixed_shapes(self) -> None:
        """Test each field is normalized independently, keeping order."""
        payload = {
            "name": "required",
            "email": ["invalid", "taken"],
            "password": {"min": "too short", "mixed": "needs digits"},
        }

        errors = normalize_errors(payload)

        assert errors == {
            "name": "required",
            "email": "invalid",
            "password": "too short",
        }
        assert list(errors) == ["name", "email", "password"]

    def test_fields_without_message_are_skipped(self) -> None:
        assert normalize_errors({"name": [], "email": None, "age": "bad"}) == {"age": "bad"}

    def test_top_level_list_uses_indexes(self) -> None:
        assert normalize_errors(["first", ["second"]]) == {"0": "first", "1": "second"}

    @pytest.mark.parametrize("payload", [None, "oops", 42])
    def test_non_container_payload(self, payload) -> None:
        assert normalize_errors(payload) == {}
