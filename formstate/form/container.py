"""Form state container.

Owns the FormState record of one form: its field values, the committed
defaults snapshot and the derived status flags. Every mutator ends by
recomputing ``is_dirty``, so the flag is consistent whenever it is read.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from formstate.core.compare import deep_copy, deep_equal, project
from formstate.core.models import FormState, ProgressInfo, RememberedSnapshot
from formstate.remember.store import RememberStore
from formstate.submission.coordinator import SubmissionCoordinator
from formstate.submission.options import SubmissionContext, SubmitOptions
from formstate.transport.base import Transport
from formstate.transport.http import HttpxTransport

logger = logging.getLogger(__name__)


class Form:
    """Tracks edits to a fixed set of fields and submits them.

    Example:
        form = Form({"name": "", "email": ""}, transport=transport)
        form["name"] = "Ada"
        assert form.is_dirty
        await form.post("/users")
        assert not form.is_dirty
    """

    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        *,
        remember_key: str | None = None,
        store: RememberStore | None = None,
        transport: Transport | None = None,
        coordinator: SubmissionCoordinator | None = None,
    ) -> None:
        """Initialize the form.

        Args:
            initial: Initial field values. Their keys are the form's fields.
            remember_key: Opts the form into persistence under this key.
            store: Where remembered snapshots are read from and written to.
            transport: Request backend; defaults to HttpxTransport.
            coordinator: Submission coordinator; built from ``transport``
                when not given.
        """
        initial = initial or {}
        self._keys = list(initial.keys())
        self.state = FormState(
            fields=deep_copy(initial),
            defaults=deep_copy(initial),
            remember_key=remember_key,
        )
        self.context = SubmissionContext()
        self.store = store
        self.coordinator = coordinator or SubmissionCoordinator(transport or HttpxTransport())

        if remember_key is not None and store is not None:
            self._restore(store.load(remember_key))

        self.recompute_dirty()

    def __repr__(self) -> str:
        return f"Form(fields={self._keys!r}, dirty={self.is_dirty}, processing={self.processing})"

    # Field access

    def __getitem__(self, key: str) -> Any:
        return self.state.fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.update({key: value})

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    @property
    def keys(self) -> list[str]:
        """The form's field names, in construction order."""
        return list(self._keys)

    def set(self, **values: Any) -> "Form":
        """Assign several fields by keyword."""
        return self.update(values)

    def update(self, values: dict[str, Any]) -> "Form":
        """Assign several fields at once.

        Raises:
            KeyError: If a key is not one of the form's fields. Nothing is
                assigned in that case.
        """
        unknown = [key for key in values if key not in self._keys]
        if unknown:
            raise KeyError(f"Unknown form field(s): {unknown}")

        self.state.fields.update(values)
        self.recompute_dirty()
        return self

    @contextmanager
    def edit(self, key: str) -> Iterator[Any]:
        """Yield a field's live value for in-place mutation.

        Dirtiness is recomputed when the block exits.
        """
        if key not in self._keys:
            raise KeyError(f"Unknown form field: {key!r}")
        try:
            yield self.state.fields[key]
        finally:
            self.recompute_dirty()

    def data(self) -> dict[str, Any]:
        """Current values of the form's fields, without status flags."""
        return project(self.state.fields, self._keys)

    def recompute_dirty(self) -> bool:
        """Recompute ``is_dirty`` against the defaults snapshot."""
        self.state.is_dirty = not deep_equal(self.data(), self.state.defaults)
        return self.state.is_dirty

    # Status

    @property
    def defaults(self) -> dict[str, Any]:
        """Copy of the last committed snapshot."""
        return deep_copy(self.state.defaults)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self.state.errors)

    @property
    def has_errors(self) -> bool:
        return self.state.has_errors

    @property
    def error_message(self) -> str | None:
        return self.state.error_message

    @property
    def is_dirty(self) -> bool:
        return self.state.is_dirty

    @property
    def processing(self) -> bool:
        return self.state.processing

    @property
    def progress(self) -> ProgressInfo | None:
        return self.state.progress

    @property
    def was_successful(self) -> bool:
        return self.state.was_successful

    @property
    def recently_successful(self) -> bool:
        return self.state.recently_successful

    @property
    def remember_key(self) -> str | None:
        return self.state.remember_key

    # Operations

    def transform(self, callback: Callable[[dict[str, Any]], Any]) -> "Form":
        """Install the mapping applied to ``data()`` before each submission."""
        self.context.transform = callback
        return self

    def reset(self, *fields: str) -> "Form":
        """Restore fields from the defaults snapshot.

        Args:
            *fields: Fields to restore. All fields when empty; names that are
                not fields are ignored.
        """
        restored = deep_copy(self.state.defaults)
        if fields:
            restored = {key: value for key, value in restored.items() if key in fields}

        self.state.fields.update(restored)
        self.recompute_dirty()
        return self

    def clear_errors(self, *fields: str) -> "Form":
        """Clear errors.

        With no arguments every error and the top-level message are cleared.
        With arguments only the named fields' errors are dropped; the rest
        and the top-level message stay.
        """
        if fields:
            self.state.errors = {
                field: message
                for field, message in self.state.errors.items()
                if field not in fields
            }
        else:
            self.state.errors = {}
            self.state.error_message = None

        self.state.has_errors = len(self.state.errors) > 0
        return self

    # Submission

    async def submit(self, method: str, url: str, options: SubmitOptions | None = None) -> Any:
        """Submit the form; see SubmissionCoordinator.submit."""
        return await self.coordinator.submit(self, method, url, options)

    async def get(self, url: str, options: SubmitOptions | None = None) -> Any:
        return await self.submit("get", url, options)

    async def post(self, url: str, options: SubmitOptions | None = None) -> Any:
        return await self.submit("post", url, options)

    async def put(self, url: str, options: SubmitOptions | None = None) -> Any:
        return await self.submit("put", url, options)

    async def patch(self, url: str, options: SubmitOptions | None = None) -> Any:
        return await self.submit("patch", url, options)

    async def delete(self, url: str, options: SubmitOptions | None = None) -> Any:
        return await self.submit("delete", url, options)

    def cancel(self) -> None:
        """Cancel the in-flight submission. No-op when idle."""
        self.coordinator.cancel(self)

    def close(self) -> None:
        """Tear down: cancel any in-flight request and pending timer."""
        self.cancel()
        self.context.cancel_timer()

    # Persistence

    @property
    def is_rememberable(self) -> bool:
        return self.state.remember_key is not None

    def remember(self) -> RememberedSnapshot:
        """Snapshot of the state worth persisting."""
        return RememberedSnapshot(data=deep_copy(self.data()), errors=dict(self.state.errors))

    def persist(self) -> bool:
        """Write the snapshot to the store.

        Returns:
            True if written, False if the form has no remember key or store.
        """
        if not self.is_rememberable or self.store is None:
            return False
        self.store.save(self.state.remember_key, self.remember())
        return True

    def _restore(self, snapshot: RememberedSnapshot | None) -> None:
        if snapshot is None:
            return

        ignored = [key for key in snapshot.data if key not in self._keys]
        if ignored:
            logger.warning("Ignoring remembered values for unknown fields: %s", ignored)

        self.state.fields.update(
            deep_copy({key: value for key, value in snapshot.data.items() if key in self._keys})
        )
        self.state.errors = dict(snapshot.errors)
        self.state.has_errors = len(self.state.errors) > 0
