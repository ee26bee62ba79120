"""A function that keeps a Kustomization listing the package's resources."""

from __future__ import annotations

from typing import Iterable

from .kubeobject import (
    PATH_ANNOTATION,
    KubeObject,
    ResourceList,
    parse_kube_object,
    run_processor,
)

KUSTOMIZE_GROUP = "kustomize.config.k8s.io"
KUSTOMIZE_KIND = "Kustomization"
KUSTOMIZE_NAME = "kustomization"

_KUSTOMIZATION_TEMPLATE = """
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
metadata:
  name: upsert-kustomize-res
resources: []"""


def merge_unique(*args: Iterable[str]) -> list[str]:
    """Concatenate the lists, keeping only the first occurrence of each item."""
    return list(dict.fromkeys(item for items in args for item in items))


def _is_kustomization(obj: KubeObject) -> bool:
    return obj.is_group_kind(KUSTOMIZE_GROUP, KUSTOMIZE_KIND)


def _existing_kustomization(resource_list: ResourceList) -> KubeObject | None:
    return next((item for item in resource_list.items if _is_kustomization(item)), None)


def _non_local_paths(resource_list: ResourceList) -> list[str]:
    return [
        item.path_annotation()
        for item in resource_list.items
        if not item.is_local_config() and not _is_kustomization(item)
    ]


def run(resource_list: ResourceList) -> bool:
    """Add or update a Kustomization whose resources list every non-local item."""
    try:
        existing = _existing_kustomization(resource_list)
        if existing is not None:
            current = existing.get("resources") or []
            if current:
                resources = merge_unique(current, _non_local_paths(resource_list))
            else:
                resources = _non_local_paths(resource_list)
            target = existing
        else:
            target = parse_kube_object(_KUSTOMIZATION_TEMPLATE)
            target.set_annotation(PATH_ANNOTATION, f"{KUSTOMIZE_NAME}.yaml")
            resources = _non_local_paths(resource_list)
        target.set(resources, "resources")
        resource_list.upsert(target, True)
    except Exception as err:
        resource_list.log_result(err)
        return False
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the function on a ResourceList read from stdin."""
    return run_processor(run)