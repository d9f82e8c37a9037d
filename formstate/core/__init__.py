"""Core shared infrastructure for formstate.

Contains the plain state records and the structural copy/compare helpers
used by the form container and the submission coordinator.
"""

from formstate.core.compare import deep_copy, deep_equal, project
from formstate.core.models import FormState, ProgressInfo, RememberedSnapshot

__all__ = [
    # Models
    "FormState",
    "ProgressInfo",
    "RememberedSnapshot",
    # Helpers
    "deep_copy",
    "deep_equal",
    "project",
]
