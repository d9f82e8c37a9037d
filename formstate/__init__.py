"""formstate: Form state tracking and submission lifecycle for UI layers."""

__version__ = "0.1.0"

from formstate.config import ConfigError, FormStateConfig, load_global_config
from formstate.core import FormState, ProgressInfo, RememberedSnapshot
from formstate.errors import normalize_errors
from formstate.form import Form
from formstate.remember import (
    FileRememberStore,
    MemoryRememberStore,
    RememberStore,
    SnapshotValidationError,
)
from formstate.submission import (
    ServerValidationError,
    SetupError,
    SubmissionCoordinator,
    SubmissionError,
    SubmitOptions,
    TransportError,
)
from formstate.transport import (
    CancelSignal,
    HttpxTransport,
    Request,
    RequestCancelled,
    RequestError,
    Response,
    Transport,
)

__all__ = [
    "__version__",
    # Container
    "Form",
    "FormState",
    "ProgressInfo",
    "RememberedSnapshot",
    # Submission
    "SubmissionCoordinator",
    "SubmitOptions",
    "SubmissionError",
    "ServerValidationError",
    "TransportError",
    "SetupError",
    "normalize_errors",
    # Transport
    "CancelSignal",
    "HttpxTransport",
    "Request",
    "RequestCancelled",
    "RequestError",
    "Response",
    "Transport",
    # Persistence
    "FileRememberStore",
    "MemoryRememberStore",
    "RememberStore",
    "SnapshotValidationError",
    # Config
    "ConfigError",
    "FormStateConfig",
    "load_global_config",
]
