"""Transport contract and the default httpx transport."""

from formstate.transport.base import (
    CancelSignal,
    Preprocessor,
    ProgressCallback,
    Request,
    RequestCancelled,
    RequestError,
    Response,
    Transport,
)
from formstate.transport.http import HttpxTransport

__all__ = [
    "CancelSignal",
    "HttpxTransport",
    "Preprocessor",
    "ProgressCallback",
    "Request",
    "RequestCancelled",
    "RequestError",
    "Response",
    "Transport",
]
