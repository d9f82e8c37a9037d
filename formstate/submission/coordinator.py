"""Submission coordinator.

Drives one request per attempt through the lifecycle

    Idle -> Before -> InFlight -> Success | Error | Cancelled -> Finish -> Idle

and writes every transition into the owning form's state. The coordinator
holds no per-form state itself: the cancel handle, the transform and the
recently-successful timer live on the form's SubmissionContext.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from formstate.core.compare import deep_copy
from formstate.core.models import ProgressInfo
from formstate.errors.normalize import normalize_errors
from formstate.submission.errors import (
    GENERIC_ERROR_MESSAGE,
    ServerValidationError,
    SetupError,
    SubmissionError,
    TransportError,
)
from formstate.submission.options import SubmitOptions
from formstate.transport.base import (
    CancelSignal,
    Request,
    RequestCancelled,
    RequestError,
    Response,
    Transport,
)

if TYPE_CHECKING:
    from formstate.form.container import Form

logger = logging.getLogger(__name__)

RECENTLY_SUCCESSFUL_SECONDS = 2.0


async def _call_hook(hook: Any, *args: Any) -> Any:
    """Invoke an optional hook, awaiting its result when it is awaitable."""
    if hook is None:
        return None
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _as_request_error(error: Exception, request: Request | None = None) -> RequestError:
    """Wrap an arbitrary exception raised by a hook or transport.

    Without ``request`` the failure classifies as a setup error; with it,
    as a transport error.
    """
    wrapped = RequestError(str(error) or type(error).__name__, request=request)
    wrapped.__cause__ = error
    return wrapped


class SubmissionCoordinator:
    """Maps transport events onto form state transitions.

    One coordinator may serve many forms; it only keeps the transport and
    the length of the recently-successful window.
    """

    def __init__(
        self,
        transport: Transport,
        recently_successful_seconds: float = RECENTLY_SUCCESSFUL_SECONDS,
    ) -> None:
        """Initialize the coordinator.

        Args:
            transport: Backend that executes requests.
            recently_successful_seconds: How long ``recently_successful``
                stays set after a success.
        """
        self.transport = transport
        self.recently_successful_seconds = recently_successful_seconds

    async def submit(
        self,
        form: Form,
        method: str,
        url: str,
        options: SubmitOptions | None = None,
    ) -> Any:
        """Submit a form.

        Args:
            form: The form whose data is sent and whose state is updated.
            method: HTTP method.
            url: Target URL.
            options: Hooks and request extras.

        Returns:
            The on_success result (or the Response) on success, None when the
            attempt was aborted by on_before, cancelled, or superseded by a
            newer submission.

        Raises:
            ServerValidationError: The server answered with a non-2xx status.
            TransportError: The request was sent but no response arrived,
                including unexpected exceptions out of the transport or an
                on_progress hook.
            SetupError: The request could not be built or sent, including
                exceptions from on_cancel_token, the transform, or on_start.

        Finish runs before any of these is raised. Exceptions from on_before
        propagate unchanged; nothing has been dispatched at that point.
        """
        options = options or SubmitOptions()
        state = form.state
        context = form.context

        request = Request(
            method=method,
            url=url,
            headers=dict(options.headers),
            preprocessors=list(options.preprocessors),
        )

        # Before
        state.was_successful = False
        state.recently_successful = False
        context.cancel_timer()

        if await _call_hook(options.on_before, request) is False:
            logger.debug("Submission to %s %s rejected by on_before", method, url)
            return None

        # InFlight
        handle = CancelSignal()
        if context.cancel_handle is not None:
            logger.warning("Replacing the cancel handle of an unfinished submission")
        context.cancel_handle = handle

        # Failures up to dispatch never reached the network
        try:
            await _call_hook(options.on_cancel_token, handle)
            state.processing = True
            logger.debug("Submitting %s %s", method.upper(), url)
            request.data = context.transform(form.data())
            await _call_hook(options.on_start, request)
        except Exception as e:
            return await self._handle_error(form, handle, _as_request_error(e), options)

        async def on_progress(info: ProgressInfo) -> None:
            if context.cancel_handle is not handle:
                return
            state.progress = info
            await _call_hook(options.on_progress, info)

        try:
            response = await self.transport.send(request, handle, on_progress)
        except RequestCancelled:
            return await self._handle_cancel(form, handle, options)
        except RequestError as e:
            if handle.cancelled:
                return await self._handle_cancel(form, handle, options)
            return await self._handle_error(form, handle, e, options)
        except Exception as e:
            if handle.cancelled:
                return await self._handle_cancel(form, handle, options)
            logger.warning("Unexpected %s during %s %s", type(e).__name__, method.upper(), url)
            error = _as_request_error(e, request)
            return await self._handle_error(form, handle, error, options)

        if handle.cancelled:
            return await self._handle_cancel(form, handle, options)
        return await self._handle_success(form, handle, response, options)

    def cancel(self, form: Form) -> None:
        """Ask the transport to abort the form's in-flight request, if any."""
        handle = form.context.cancel_handle
        if handle is None:
            return
        logger.debug("Cancelling in-flight submission")
        handle.cancel()

    def _is_stale(self, form: Form, handle: CancelSignal) -> bool:
        if form.context.cancel_handle is handle:
            return False
        logger.warning("Ignoring outcome of a superseded submission")
        return True

    async def _handle_success(
        self,
        form: Form,
        handle: CancelSignal,
        response: Response,
        options: SubmitOptions,
    ) -> Any:
        if self._is_stale(form, handle):
            return None

        state = form.state
        state.processing = False
        state.progress = None
        form.clear_errors()
        state.was_successful = True
        state.recently_successful = True
        self._schedule_clear(form)

        state.defaults = deep_copy(form.data())
        form.recompute_dirty()

        try:
            outcome = await _call_hook(options.on_success, response)
        finally:
            await self._finish(form, handle, response, options)

        return response if outcome is None else outcome

    async def _handle_error(
        self,
        form: Form,
        handle: CancelSignal,
        error: RequestError,
        options: SubmitOptions,
    ) -> Any:
        if self._is_stale(form, handle):
            return None

        state = form.state
        state.processing = False
        state.progress = None
        state.has_errors = True

        failure: SubmissionError
        if error.response is not None:
            body = error.response.data
            if isinstance(body, dict):
                if body.get("message"):
                    state.error_message = str(body["message"])
                state.errors.update(normalize_errors(body.get("errors")))
            failure = ServerValidationError(error.message, error.response, error.request)
        elif error.request is not None:
            state.error_message = GENERIC_ERROR_MESSAGE
            failure = TransportError(error.message, error.response, error.request)
        else:
            state.error_message = error.message
            failure = SetupError(error.message, error.response, error.request)

        logger.debug("Submission failed: %s", error.message)

        try:
            await _call_hook(options.on_error, failure)
        finally:
            await self._finish(form, handle, failure, options)

        raise failure from error

    async def _handle_cancel(
        self,
        form: Form,
        handle: CancelSignal,
        options: SubmitOptions,
    ) -> None:
        if self._is_stale(form, handle):
            return None

        form.state.processing = False
        form.state.progress = None

        try:
            await _call_hook(options.on_cancel)
        finally:
            await self._finish(form, handle, None, options)

        return None

    async def _finish(
        self,
        form: Form,
        handle: CancelSignal,
        outcome: Any,
        options: SubmitOptions,
    ) -> None:
        form.state.processing = False
        form.state.progress = None
        if form.context.cancel_handle is handle:
            form.context.cancel_handle = None
        await _call_hook(options.on_finish, outcome)

    def _schedule_clear(self, form: Form) -> None:
        context = form.context
        context.cancel_timer()

        def clear() -> None:
            form.state.recently_successful = False
            context.timer = None

        loop = asyncio.get_running_loop()
        context.timer = loop.call_later(self.recently_successful_seconds, clear)
