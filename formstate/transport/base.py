"""Transport contract consumed by the submission coordinator.

A transport executes one request, reports progress, honors a cancel signal,
and either returns a Response or raises RequestError describing how far the
request got before failing.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from formstate.core.models import ProgressInfo

# (data, headers) -> data, applied in order before the payload is encoded
Preprocessor = Callable[[Any, dict[str, str]], Any]
ProgressCallback = Callable[[ProgressInfo], Awaitable[None]]


class Request(BaseModel):
    """A request about to be dispatched.

    ``data`` stays None until the coordinator has applied the form's
    transform, so hooks that run before dispatch see the request without
    its payload.
    """

    method: str
    url: str
    data: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    preprocessors: list[Preprocessor] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Response(BaseModel):
    """A response received from the server."""

    data: Any = None
    status: int
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status < 300


class RequestError(Exception):
    """Raised by a transport when a request fails.

    Which of ``response`` and ``request`` is set tells how far the request
    got: a response means the server answered with a non-2xx status, a
    request alone means it was sent but nothing came back, and neither means
    it was never sent.
    """

    def __init__(
        self,
        message: str,
        response: Response | None = None,
        request: Request | None = None,
    ) -> None:
        self.message = message
        self.response = response
        self.request = request
        super().__init__(message)


class RequestCancelled(Exception):
    """Raised by a transport when its cancel signal fired before completion."""

    def __init__(self, request: Request | None = None) -> None:
        self.request = request
        super().__init__("Request cancelled")


class CancelSignal:
    """Handle used to ask a transport to abort an in-flight request.

    Cancellation is advisory: a transport may still deliver a late result,
    which the coordinator then discards.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until the signal fires."""
        await self._event.wait()


@runtime_checkable
class Transport(Protocol):
    """Protocol for request execution backends."""

    async def send(
        self,
        request: Request,
        cancel_signal: CancelSignal,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        """Execute a request.

        Args:
            request: The request, with its payload and preprocessor chain.
            cancel_signal: Fires when the caller wants the request aborted.
            on_progress: Awaited for every progress event, in arrival order.

        Returns:
            The 2xx response.

        Raises:
            RequestError: If the request failed.
            RequestCancelled: If the cancel signal fired first.
        """
        ...
