"""Exceptions raised by a failed submission.

Each failure updates the form state first and is then raised to the caller,
so code that never inspects the form still sees the failure.
"""

from formstate.transport.base import Request, Response

# Shown when the request went out but nothing came back
GENERIC_ERROR_MESSAGE = "Something went wrong"


class SubmissionError(Exception):
    """Base class for submission failures.

    Carries the same ``response``/``request``/``message`` triple the
    transport reported.
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


class ServerValidationError(SubmissionError):
    """The server answered with a non-2xx status."""

    @property
    def status(self) -> int | None:
        return self.response.status if self.response is not None else None


class TransportError(SubmissionError):
    """The request was sent but no response arrived."""

    pass


class SetupError(SubmissionError):
    """The request could not be built or sent."""

    pass
