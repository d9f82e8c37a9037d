"""Pytest configuration and shared fixtures."""

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from formstate.form import Form
from formstate.submission import SubmissionCoordinator
from formstate.transport import CancelSignal, Request, RequestCancelled, Response


class ScriptedTransport:
    """Transport double that replays a scripted outcome.

    Records every request it receives, emits the scripted progress events,
    optionally holds the request open until released or cancelled, and then
    returns the scripted Response or raises the scripted exception.
    """

    def __init__(
        self,
        outcome: Response | Exception | None = None,
        progress: list | None = None,
        hold: bool = False,
        honor_cancel: bool = True,
    ) -> None:
        self.outcome = outcome if outcome is not None else Response(status=200, data={"ok": True})
        self.progress = progress or []
        self.hold = hold
        self.honor_cancel = honor_cancel
        self.requests: list[Request] = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def send(
        self,
        request: Request,
        cancel_signal: CancelSignal,
        on_progress: Callable | None = None,
    ) -> Response:
        self.requests.append(request.model_copy(deep=True))

        for info in self.progress:
            if on_progress is not None:
                await on_progress(info)

        self.started.set()

        if self.hold:
            waiters = [asyncio.ensure_future(self.release.wait())]
            if self.honor_cancel:
                waiters.append(asyncio.ensure_future(cancel_signal.wait()))
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            for waiter in waiters:
                waiter.cancel()
            if self.honor_cancel and cancel_signal.cancelled:
                raise RequestCancelled(request)

        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def transport() -> ScriptedTransport:
    """A transport that answers every request with 200 {"ok": true}."""
    return ScriptedTransport()


@pytest.fixture
def make_form() -> Callable[..., Form]:
    """Factory for forms wired to a scripted transport."""

    def factory(
        initial: dict[str, Any] | None = None,
        transport: Any = None,
        recently_successful_seconds: float = 2.0,
        **kwargs: Any,
    ) -> Form:
        coordinator = SubmissionCoordinator(
            transport or ScriptedTransport(),
            recently_successful_seconds=recently_successful_seconds,
        )
        return Form(initial, coordinator=coordinator, **kwargs)

    return factory


@pytest.fixture
def formstate_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point FORMSTATE_HOME at a temp directory and clear env overrides."""
    home = tmp_path / "formstate-home"
    monkeypatch.setenv("FORMSTATE_HOME", str(home))
    for var in (
        "FORMSTATE_BASE_URL",
        "FORMSTATE_TIMEOUT",
        "FORMSTATE_REMEMBER_PATH",
        "FORMSTATE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
