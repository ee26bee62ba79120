"""A function that generates a ConfigMap from its configuration."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .gotemplate import Template
from .kubeobject import PATH_ANNOTATION, KrmError, KubeObject, ResourceList, run_processor


def _field(mapping: Mapping[str, Any], name: str) -> Any:
    wanted = name.lower()
    for key, value in mapping.items():
        if str(key).lower() == wanted:
            return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class GenConfigMapEntry:
    """One data entry: a literal value or a template rendered with the params."""

    type: str = ""
    key: str = ""
    value: str = ""

    def generate(self, params: Mapping[str, str] | None, data: dict[str, str]) -> None:
        """Store the entry's value, rendered if needed, into data under its key."""
        if self.type == "gotmpl":
            template = Template(self.key, self.value)
            data[self.key] = template.execute(params if params is not None else {})
        else:
            data[self.key] = self.value


@dataclass
class GenConfigMap:
    """The function configuration."""

    config_map_metadata: dict[str, Any] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    data: list[GenConfigMapEntry] = field(default_factory=list)

    def validate(self) -> None:
        for index, entry in enumerate(self.data):
            if entry.key == "":
                raise KrmError(f"data entry {index}, key must not be empty")

    @classmethod
    def from_config(cls, obj: KubeObject | None) -> GenConfigMap:
        source = obj.data if obj is not None else {}
        metadata = _field(source, "configMapMetadata") or {}
        params = _field(source, "params") or {}
        entries = _field(source, "data") or []
        if not isinstance(metadata, Mapping):
            raise KrmError("configMapMetadata must be a mapping")
        if not isinstance(params, Mapping):
            raise KrmError("params must be a mapping")
        if not isinstance(entries, list):
            raise KrmError("data must be a list")
        parsed = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise KrmError("data entries must be mappings")
            parsed.append(
                GenConfigMapEntry(
                    type=_text(_field(entry, "type")),
                    key=_text(_field(entry, "key")),
                    value=_text(_field(entry, "value")),
                )
            )
        return cls(
            config_map_metadata=copy.deepcopy(dict(metadata)),
            params={str(k): _text(v) for k, v in params.items()},
            data=parsed,
        )


def process(resource_list: ResourceList) -> bool:
    """Generate the ConfigMap described by the function config into the items."""
    config = GenConfigMap.from_config(resource_list.function_config)
    name = config.config_map_metadata.get("name") or ""
    if not name and resource_list.function_config is not None:
        name = resource_list.function_config.name

    config.validate()

    configmap = KubeObject({"apiVersion": "v1", "kind": "ConfigMap"})
    configmap.set(config.config_map_metadata, "metadata")
    configmap.remove("metadata", "creationTimestamp")
    configmap.set(name, "metadata", "name")
    configmap.set_annotation(PATH_ANNOTATION, f"_gen_configmap_{name}.yaml")

    data: dict[str, str] = {}
    for index, entry in enumerate(config.data):
        try:
            entry.generate(config.params, data)
        except Exception as err:
            raise KrmError(f"data entry {index} generate error: {err}") from err
    if data:
        configmap.set(data, "data")

    resource_list.upsert(configmap, True)
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the function on a ResourceList read from stdin."""
    return run_processor(process)