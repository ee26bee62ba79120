"""Keeps a finalizer on objects stored in an API server."""

from __future__ import annotations

from typing import Any

from .errors import ignore_not_found
from .kubeobject import KrmError
from .meta import add_finalizer, finalizer_exists, remove_finalizer

ERR_UPDATE_OBJECT = "cannot update object"


class APIFinalizer:
    """Adds and removes one finalizer, writing the change through a client."""

    def __init__(self, client: Any, finalizer: str) -> None:
        self.client = client
        self.finalizer = finalizer

    def add_finalizer(self, obj: Any) -> None:
        """Add the finalizer to obj and update it, unless it is already there."""
        if finalizer_exists(obj, self.finalizer):
            return
        add_finalizer(obj, self.finalizer)
        try:
            self.client.update(obj)
        except Exception as err:
            raise KrmError(f"{ERR_UPDATE_OBJECT}: {err}") from err

    def remove_finalizer(self, obj: Any) -> None:
        """Remove the finalizer from obj and update it; a missing object is fine."""
        if not finalizer_exists(obj, self.finalizer):
            return
        remove_finalizer(obj, self.finalizer)
        try:
            self.client.update(obj)
        except Exception as err:
            remaining = ignore_not_found(err)
            if remaining is None:
                return
            raise KrmError(f"{ERR_UPDATE_OBJECT}: {err}") from err