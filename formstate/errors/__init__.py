"""Server error payload handling."""

from formstate.errors.normalize import (
    NestedErrorValue,
    RawErrorValue,
    ScalarErrorValue,
    SequenceErrorValue,
    classify,
    first_message,
    normalize_errors,
)

__all__ = [
    "NestedErrorValue",
    "RawErrorValue",
    "ScalarErrorValue",
    "SequenceErrorValue",
    "classify",
    "first_message",
    "normalize_errors",
]
