"""Object metadata and helpers for annotations, finalizers and kinds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .kubeobject import KubeObject


@dataclass
class ObjectMeta:
    """Metadata of a Kubernetes object."""

    name: str = ""
    namespace: str = ""
    generate_name: str = ""
    resource_version: str = ""
    annotations: dict[str, str] | None = None
    labels: dict[str, str] | None = None
    finalizers: list[str] | None = None
    deletion_timestamp: datetime | None = None


@dataclass(frozen=True)
class GroupVersionKind:
    group: str = ""
    version: str = ""
    kind: str = ""

    def group_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version


def add_annotations(obj: Any, annotations: dict[str, str]) -> None:
    """Merge annotations into the object's annotations."""
    if obj.annotations is None:
        obj.annotations = dict(annotations)
        return
    obj.annotations.update(annotations)


def remove_annotations(obj: Any, *args: str) -> None:
    """Remove the named annotations from the object."""
    if obj.annotations is None:
        return
    for key in args:
        obj.annotations.pop(key, None)


def add_finalizer(obj: Any, finalizer: str) -> None:
    if finalizer_exists(obj, finalizer):
        return
    obj.finalizers = [*(obj.finalizers or []), finalizer]


def remove_finalizer(obj: Any, finalizer: str) -> None:
    if obj.finalizers is None:
        return
    obj.finalizers = [f for f in obj.finalizers if f != finalizer]


def finalizer_exists(obj: Any, finalizer: str) -> bool:
    return finalizer in (obj.finalizers or [])


def was_deleted(obj: Any) -> bool:
    return obj.deletion_timestamp is not None


def unstructured_from_gvk(gvk: GroupVersionKind) -> KubeObject:
    """Return an empty object with the apiVersion and kind of gvk."""
    return KubeObject({"apiVersion": gvk.group_version(), "kind": gvk.kind})


def remove_string(items: list[str], value: str) -> list[str]:
    return [item for item in items if item != value]