"""Normalization of server error payloads into field messages.

Servers report validation failures in several shapes: a plain message per
field, a list of messages per field, or an object of messages keyed by rule
or index. Each raw value is classified once into a tagged variant and then
reduced to a single message string.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NestedErrorValue(BaseModel):
    """An object of messages; the first value wins."""

    kind: Literal["nested"] = "nested"
    values: dict[str, Any]


class SequenceErrorValue(BaseModel):
    """A list of messages; the first element wins."""

    kind: Literal["sequence"] = "sequence"
    items: list[Any]


class ScalarErrorValue(BaseModel):
    """A single message, used verbatim."""

    kind: Literal["scalar"] = "scalar"
    value: Any = None


RawErrorValue = Annotated[
    NestedErrorValue | SequenceErrorValue | ScalarErrorValue,
    Field(discriminator="kind"),
]


def classify(value: Any) -> RawErrorValue:
    """Classify a raw server error value by its structure."""
    if isinstance(value, Mapping):
        return NestedErrorValue(values={str(k): v for k, v in value.items()})
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return SequenceErrorValue(items=list(value))
    return ScalarErrorValue(value=value)


def first_message(raw: RawErrorValue) -> str | None:
    """Reduce a classified error value to one message.

    Nested and sequence values recurse into their first member until a
    scalar is reached, so ``{"rules": ["too short"]}`` yields "too short".
    Returns None when the value carries no message (empty container or null).
    """
    if raw.kind == "nested":
        if not raw.values:
            return None
        return first_message(classify(next(iter(raw.values.values()))))

    if raw.kind == "sequence":
        if not raw.items:
            return None
        return first_message(classify(raw.items[0]))

    if raw.value is None:
        return None
    return raw.value if isinstance(raw.value, str) else str(raw.value)


def normalize_errors(payload: Any) -> dict[str, str]:
    """Flatten a server ``errors`` payload into field -> message.

    Args:
        payload: The ``errors`` member of a server response body. Mappings are
            read by key; a top-level list is read by index.

    Returns:
        Dict mapping field name to its first message. Fields without a
        usable message are omitted.
    """
    if isinstance(payload, Mapping):
        entries = [(str(key), value) for key, value in payload.items()]
    elif isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        entries = [(str(index), value) for index, value in enumerate(payload)]
    else:
        return {}

    errors: dict[str, str] = {}
    for field, value in entries:
        message = first_message(classify(value))
        if message is None:
            logger.debug("Skipping error entry without a message: %s", field)
            continue
        errors[field] = message

    return errors
