"""Form state container."""

from formstate.form.container import Form

__all__ = ["Form"]
