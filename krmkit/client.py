"""A scriptable mock API client and an applicator that creates or patches objects."""

from __future__ import annotations

import copy
import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Callable

from .errors import is_not_found
from .kubeobject import KrmError, KubeObject

ObjectFn = Callable[[Any], None]
ApplyOption = Callable[[Any, Any], None]
MergePatchType = "application/merge-patch+json"


def mock_fn(error: BaseException | None, *args: ObjectFn) -> Callable[..., None]:
    """Return a mock handler that runs each object function, then raises error.

    The handler is called with the object first and any further arguments
    after it. An object function stops the call by raising.
    """

    def handler(obj: Any, *_rest: Any) -> None:
        for object_fn in args:
            object_fn(obj)
        if error is not None:
            raise error

    return handler


def _default_handler() -> Callable[..., None]:
    return mock_fn(None)


@dataclass
class MockSubResourceClient:
    """Sub-resource client whose calls go to replaceable handlers."""

    mock_get: Callable[..., None] = field(default_factory=_default_handler)
    mock_create: Callable[..., None] = field(default_factory=_default_handler)
    mock_update: Callable[..., None] = field(default_factory=_default_handler)
    mock_patch: Callable[..., None] = field(default_factory=_default_handler)

    def get(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        self.mock_get(obj, sub_resource, *args)

    def create(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        self.mock_create(obj, sub_resource, *args)

    def update(self, obj: Any, *args: Any) -> None:
        self.mock_update(obj, *args)

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        self.mock_patch(obj, patch, *args)


@dataclass
class MockClient:
    """API client whose every call goes to a replaceable handler.

    Handlers receive the object first, followed by the other arguments.
    By default every call succeeds without doing anything.
    """

    mock_get: Callable[..., None] = field(default_factory=_default_handler)
    mock_list: Callable[..., None] = field(default_factory=_default_handler)
    mock_create: Callable[..., None] = field(default_factory=_default_handler)
    mock_delete: Callable[..., None] = field(default_factory=_default_handler)
    mock_delete_all_of: Callable[..., None] = field(default_factory=_default_handler)
    mock_update: Callable[..., None] = field(default_factory=_default_handler)
    mock_patch: Callable[..., None] = field(default_factory=_default_handler)

    mock_status_create: Callable[..., None] = field(default_factory=_default_handler)
    mock_status_update: Callable[..., None] = field(default_factory=_default_handler)
    mock_status_patch: Callable[..., None] = field(default_factory=_default_handler)

    mock_sub_resource_get: Callable[..., None] = field(default_factory=_default_handler)
    mock_sub_resource_create: Callable[..., None] = field(default_factory=_default_handler)
    mock_sub_resource_update: Callable[..., None] = field(default_factory=_default_handler)
    mock_sub_resource_patch: Callable[..., None] = field(default_factory=_default_handler)

    mock_scheme: Callable[[], Any] = lambda: None

    def get(self, key: Any, obj: Any) -> None:
        self.mock_get(obj, key)

    def list(self, obj: Any, *args: Any) -> None:
        self.mock_list(obj, *args)

    def create(self, obj: Any, *args: Any) -> None:
        self.mock_create(obj, *args)

    def delete(self, obj: Any, *args: Any) -> None:
        self.mock_delete(obj, *args)

    def delete_all_of(self, obj: Any, *args: Any) -> None:
        self.mock_delete_all_of(obj, *args)

    def update(self, obj: Any, *args: Any) -> None:
        self.mock_update(obj, *args)

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        self.mock_patch(obj, patch, *args)

    def status(self) -> MockSubResourceClient:
        """Return a writer for the status sub-resource."""
        return MockSubResourceClient(
            mock_create=self.mock_status_create,
            mock_update=self.mock_status_update,
            mock_patch=self.mock_status_patch,
        )

    def sub_resource(self, name: str) -> MockSubResourceClient:
        return MockSubResourceClient(
            mock_get=self.mock_sub_resource_get,
            mock_create=self.mock_sub_resource_create,
            mock_update=self.mock_sub_resource_update,
            mock_patch=self.mock_sub_resource_patch,
        )

    def scheme(self) -> Any:
        return self.mock_scheme()


def _plain(obj: Any) -> Any:
    if isinstance(obj, KubeObject):
        return obj.data
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if hasattr(obj, "__dict__"):
        return vars(obj)
    return obj


@dataclass
class MergePatch:
    """A JSON merge patch that makes an object look like source."""

    source: Any
    type: str = MergePatchType

    def data(self, obj: Any) -> bytes:
        return json.dumps(_plain(self.source), default=str, sort_keys=True).encode()


def _metadata(obj: Any) -> tuple[str, str, str]:
    """Return (name, namespace, generate_name) of obj."""
    if isinstance(obj, KubeObject):
        return obj.name, obj.namespace, obj.get("metadata", "generateName") or ""
    try:
        name = obj.name
    except AttributeError as err:
        raise KrmError("cannot access object metadata") from err
    return (
        name or "",
        getattr(obj, "namespace", "") or "",
        getattr(obj, "generate_name", "") or "",
    )


class APIPatchingApplicator:
    """Applies an object by creating it, or patching it when it already exists."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def _create(self, obj: Any) -> None:
        try:
            self.client.create(obj)
        except Exception as err:
            raise KrmError(f"cannot create object: {err}") from err

    def apply(self, obj: Any, *args: ApplyOption) -> None:
        """Create obj if it does not exist, otherwise patch it to match obj.

        Apply options run against the current and desired object before
        the patch; they are not run when the object is created.
        """
        name, namespace, generate_name = _metadata(obj)
        if not name and generate_name:
            self._create(obj)
            return

        desired = copy.deepcopy(obj)
        try:
            self.client.get((namespace, name), obj)
        except Exception as err:
            if is_not_found(err):
                self._create(obj)
                return
            raise KrmError(f"cannot get object: {err}") from err

        for option in args:
            option(obj, desired)

        try:
            self.client.patch(obj, MergePatch(desired))
        except Exception as err:
            raise KrmError(f"cannot patch object: {err}") from err


def update_fn(fn: Callable[[Any, Any], Any]) -> ApplyOption:
    """Return an apply option that lets fn change current to match desired."""

    def option(current: Any, desired: Any) -> None:
        fn(current, desired)

    return option