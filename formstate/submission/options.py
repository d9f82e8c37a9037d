"""Per-call submission options and the per-form submission context."""

import asyncio
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from formstate.transport.base import CancelSignal, Preprocessor


def identity(data: dict[str, Any]) -> Any:
    return data


class SubmitOptions(BaseModel):
    """Hooks and request extras for a single submission.

    Every hook is optional and may be a plain function or a coroutine
    function. Awaitable results are awaited before the submission moves on.

    Attributes:
        on_cancel_token: Receives the CancelSignal of the new request.
        on_before: Receives the request before its payload is built.
            Returning False aborts the submission.
        on_start: Receives the request right before dispatch.
        on_progress: Receives each ProgressInfo.
        on_success: Receives the Response; its return value, when not None,
            becomes the result of submit().
        on_error: Receives the SubmissionError before it is raised.
        on_cancel: Called without arguments when the request was cancelled.
        on_finish: Receives the Response, the SubmissionError, or None.
        headers: Extra request headers.
        preprocessors: Payload transforms applied by the transport.
    """

    on_cancel_token: Callable[..., Any] | None = None
    on_before: Callable[..., Any] | None = None
    on_start: Callable[..., Any] | None = None
    on_progress: Callable[..., Any] | None = None
    on_success: Callable[..., Any] | None = None
    on_error: Callable[..., Any] | None = None
    on_cancel: Callable[..., Any] | None = None
    on_finish: Callable[..., Any] | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    preprocessors: list[Preprocessor] = Field(default_factory=list)


class SubmissionContext(BaseModel):
    """Submission bookkeeping owned by one form.

    Attributes:
        transform: Maps the form's data to the wire payload.
        cancel_handle: Signal of the active request, None when idle.
        timer: Pending recently-successful clear, None when nothing is pending.
    """

    transform: Callable[[dict[str, Any]], Any] = identity
    cancel_handle: CancelSignal | None = None
    timer: asyncio.TimerHandle | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
