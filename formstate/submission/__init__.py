"""Submission lifecycle: coordinator, options and failure taxonomy."""

from formstate.submission.coordinator import (
    RECENTLY_SUCCESSFUL_SECONDS,
    SubmissionCoordinator,
)
from formstate.submission.errors import (
    GENERIC_ERROR_MESSAGE,
    ServerValidationError,
    SetupError,
    SubmissionError,
    TransportError,
)
from formstate.submission.options import SubmissionContext, SubmitOptions

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "RECENTLY_SUCCESSFUL_SECONDS",
    "ServerValidationError",
    "SetupError",
    "SubmissionContext",
    "SubmissionCoordinator",
    "SubmissionError",
    "SubmitOptions",
    "TransportError",
]
