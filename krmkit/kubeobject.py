"""Kubernetes resource objects, resource lists and the function entry point."""

from __future__ import annotations

import copy
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, TextIO

import yaml

PATH_ANNOTATION = "internal.config.kubernetes.io/path"
LEGACY_PATH_ANNOTATION = "config.kubernetes.io/path"
LOCAL_CONFIG_ANNOTATION = "config.kubernetes.io/local-config"
RESOURCE_LIST_API_VERSION = "config.kubernetes.io/v1"
RESOURCE_LIST_KIND = "ResourceList"


class KrmError(Exception):
    """Raised when a resource or a resource list cannot be read or changed."""


class KubeObject:
    """A Kubernetes resource held as a plain nested mapping."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise KrmError(f"a resource must be a mapping, got {type(data).__name__}")
        self.data = data

    @property
    def api_version(self) -> str:
        return self.get("apiVersion") or ""

    @property
    def kind(self) -> str:
        return self.get("kind") or ""

    @property
    def name(self) -> str:
        return self.get("metadata", "name") or ""

    @property
    def namespace(self) -> str:
        return self.get("metadata", "namespace") or ""

    @property
    def annotations(self) -> dict[str, str]:
        """A copy of the object's annotations."""
        return dict(self.get("metadata", "annotations") or {})

    def get(self, *path: str) -> Any:
        """Return the value at the given field path, or None if it is absent."""
        node: Any = self.data
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return node

    def set(self, value: Any, *path: str) -> None:
        """Set the value at the given field path, creating mappings on the way."""
        if not path:
            raise KrmError("a field path must not be empty")
        node = self.data
        for depth, key in enumerate(path[:-1], start=1):
            child = node.setdefault(key, {})
            if child is None:
                child = node[key] = {}
            if not isinstance(child, dict):
                raise KrmError(f"field {'.'.join(path[:depth])} is not a mapping")
            node = child
        node[path[-1]] = copy.deepcopy(value)

    def remove(self, *path: str) -> bool:
        """Remove the field at the given path; return whether it was there."""
        if not path:
            raise KrmError("a field path must not be empty")
        parent = self.get(*path[:-1]) if len(path) > 1 else self.data
        if not isinstance(parent, dict) or path[-1] not in parent:
            return False
        del parent[path[-1]]
        return True

    def get_annotation(self, key: str) -> str:
        value = self.get("metadata", "annotations", key)
        return "" if value is None else str(value)

    def set_annotation(self, key: str, value: str) -> None:
        self.set(value, "metadata", "annotations", key)

    @property
    def _group(self) -> str:
        group, sep, _ = self.api_version.rpartition("/")
        return group if sep else ""

    @property
    def _version(self) -> str:
        return self.api_version.rpartition("/")[2]

    def is_group_kind(self, group: str, kind: str) -> bool:
        return self._group == group and self.kind == kind

    def is_local_config(self) -> bool:
        return self.get_annotation(LOCAL_CONFIG_ANNOTATION) not in ("", "false")

    def path_annotation(self) -> str:
        return self.get_annotation(PATH_ANNOTATION) or self.get_annotation(
            LEGACY_PATH_ANNOTATION
        )

    def copy(self) -> KubeObject:
        return KubeObject(copy.deepcopy(self.data))

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.data, sort_keys=False, default_flow_style=False)

    def _identity(self) -> tuple[str, str, str, str, str]:
        return (self._group, self._version, self.kind, self.namespace, self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KubeObject):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"KubeObject({self.data!r})"


@dataclass
class Result:
    """A message reported by a function run."""

    message: str
    severity: str = "error"

    def _to_dict(self) -> dict[str, str]:
        return {"message": self.message, "severity": self.severity}


@dataclass
class ResourceList:
    """The items, configuration and results a function works on."""

    items: list[KubeObject] = field(default_factory=list)
    function_config: KubeObject | None = None
    results: list[Result] = field(default_factory=list)

    def upsert(self, obj: KubeObject, replace_if_exists: bool = True) -> None:
        """Add obj, or replace the item with the same identity if asked to."""
        key = obj._identity()
        for index, item in enumerate(self.items):
            if item._identity() == key:
                if replace_if_exists:
                    self.items[index] = obj
                return
        self.items.append(obj)

    def log_result(self, error: BaseException | None) -> None:
        if error is None:
            return
        self.results.append(Result(message=str(error), severity="error"))

    def to_yaml(self) -> str:
        document: dict[str, Any] = {
            "apiVersion": RESOURCE_LIST_API_VERSION,
            "kind": RESOURCE_LIST_KIND,
            "items": [item.data for item in self.items],
        }
        if self.function_config is not None:
            document["functionConfig"] = self.function_config.data
        if self.results:
            document["results"] = [result._to_dict() for result in self.results]
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def parse_kube_objects(text: str | bytes) -> list[KubeObject]:
    """Parse every YAML document in text into a KubeObject."""
    try:
        documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as err:
        raise KrmError(f"cannot parse YAML: {err}") from err
    return [KubeObject(doc) for doc in documents]


def parse_kube_object(text: str | bytes) -> KubeObject:
    """Parse text that holds exactly one resource."""
    objects = parse_kube_objects(text)
    if len(objects) != 1:
        raise KrmError(f"expected exactly one object, got {len(objects)}")
    return objects[0]


def parse_resource_list(text: str | bytes) -> ResourceList:
    """Parse a serialized ResourceList."""
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise KrmError(f"cannot parse YAML: {err}") from err
    if not isinstance(document, dict):
        raise KrmError("input is not a ResourceList mapping")
    kind = document.get("kind", "")
    if kind != RESOURCE_LIST_KIND:
        raise KrmError(f"input was of unexpected kind {kind!r}; expected ResourceList")
    items = document.get("items") or []
    if not isinstance(items, list):
        raise KrmError("ResourceList items must be a list")
    config = document.get("functionConfig")
    results = [
        Result(message=str(entry.get("message", "")), severity=str(entry.get("severity", "error")))
        for entry in document.get("results") or []
        if isinstance(entry, dict)
    ]
    return ResourceList(
        items=[KubeObject(item) for item in items],
        function_config=KubeObject(config) if config is not None else None,
        results=results,
    )


def run_processor(
    processor: Callable[[ResourceList], bool],
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Read a ResourceList, run processor on it, write it back; return an exit code."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    try:
        resource_list = parse_resource_list(stdin.read())
    except KrmError as err:
        print(f"failed to evaluate function: {err}", file=sys.stderr)
        return 1
    error: BaseException | None
    try:
        error = None if processor(resource_list) else KrmError("error: function failure")
    except Exception as err:  # reported to the caller, the output is still written
        error = err
    stdout.write(resource_list.to_yaml())
    if error is not None:
        print(f"failed to evaluate function: {error}", file=sys.stderr)
        return 1
    return 0