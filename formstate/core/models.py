"""Core state models for form tracking.

The FormState record holds field values alongside every derived status
flag. It carries no behavior; the Form container and the submission
coordinator are the only writers.
"""

from typing import Any

from pydantic import BaseModel, Field


class ProgressInfo(BaseModel):
    """Transfer progress reported by a transport while a request is in flight."""

    loaded: int = 0
    total: int | None = None

    @property
    def percentage(self) -> float | None:
        """Completed fraction as a percentage, when the total size is known."""
        if not self.total:
            return None
        return round(self.loaded / self.total * 100, 2)


class FormState(BaseModel):
    """Current values and status flags of a single form.

    Attributes:
        fields: Current editable data. The key set is fixed at construction.
        defaults: Last committed snapshot, never aliased with ``fields``.
        errors: Field name to error message.
        has_errors: Whether the last attempt failed or field errors remain.
        error_message: Top-level (non-field) error text.
        is_dirty: Whether ``fields`` differ structurally from ``defaults``.
        processing: True while a request is in flight.
        progress: Latest progress event of the in-flight request.
        was_successful: Whether the last submission succeeded.
        recently_successful: Cleared automatically shortly after success.
        remember_key: Persistence key, or None when the form is not remembered.
    """

    fields: dict[str, Any] = Field(default_factory=dict)
    defaults: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    has_errors: bool = False
    error_message: str | None = None
    is_dirty: bool = False
    processing: bool = False
    progress: ProgressInfo | None = None
    was_successful: bool = False
    recently_successful: bool = False
    remember_key: str | None = None


class RememberedSnapshot(BaseModel):
    """The part of a form that survives navigation when it is remembered."""

    data: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
