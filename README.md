# krmkit

Helpers for working with Kubernetes Resource Model (KRM) objects, and two
functions in the kpt style. Each function reads a `ResourceList` as YAML on
standard input, changes it, and writes it back to standard output.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

Both commands exit with status 0 on success. If the input cannot be parsed
as a YAML mapping of `kind: ResourceList`, they print
`failed to evaluate function: ...` to standard error, write nothing, and exit
with status 1. If the function itself fails, the resource list is still
written to standard output, the error goes to standard error, and the exit
status is 1.

### gen-configmap

Builds a `ConfigMap` from the function configuration and upserts it into the
items. The configuration (`functionConfig`) may hold:

- `configMapMetadata`: metadata for the generated ConfigMap. Any
  `creationTimestamp` in it is dropped.
- `params`: a mapping of strings that templates are rendered against.
- `data`: a list of entries, each with a `key`, a `value` and an optional
  `type`. Entries of type `gotmpl` are rendered as templates; any other entry
  is copied as it is.

Field names in the configuration are matched without regard to case.

The ConfigMap takes its name from `configMapMetadata.name`, or from the
configuration's own `metadata.name` when that is empty. It is given the path
annotation `internal.config.kubernetes.io/path` with the value
`_gen_configmap_<name>.yaml`. A `data` section is written only if there is at
least one entry.

```yaml
apiVersion: config.kubernetes.io/v1
kind: ResourceList
items: []
functionConfig:
  apiVersion: fn.kpt.dev/v1alpha1
  kind: GenConfigMap
  metadata:
    name: my-settings
  params:
    region: west
  data:
  - type: literal
    key: mode
    value: production
  - type: gotmpl
    key: location
    value: "region-{{ .region }}"
```

```
gen-configmap < resource-list.yaml > output.yaml
```

An entry with an empty key fails with `data entry 0, key must not be empty`
(with that entry's index). A template that cannot be parsed or executed fails
with `data entry <n> generate error: ...`, for example
`data entry 0 generate error: template: bad:1: unclosed action`.

### gen-kustomize-res

Keeps a `Kustomization` (group `kustomize.config.k8s.io`) in step with the
package. It collects the path annotation of every item that is neither local
config nor a Kustomization. If the items already hold a Kustomization with a
non-empty `resources` list, the collected paths are appended to that list and
duplicates are dropped, keeping the first occurrence; with an empty list, the
collected paths replace it. If there is no Kustomization, a new one named
`upsert-kustomize-res` is added with the path annotation
`kustomization.yaml`.

```
gen-kustomize-res < resource-list.yaml > output.yaml
```

If updating fails, the error is added to the list's `results` with severity
`error` and the command exits with status 1.

## Library use

```python
from krmkit.kubeobject import parse_resource_list
from krmkit.configmap import process
from krmkit.kustomize import merge_unique

with open("resource-list.yaml") as stream:
    rl = parse_resource_list(stream.read())
process(rl)
print(rl.to_yaml())

merge_unique(["a.yaml", "b.yaml"], ["b.yaml", "c.yaml"])
# ['a.yaml', 'b.yaml', 'c.yaml']
```

Modules:

- `krmkit.kubeobject`: `KubeObject` (a resource held as a nested mapping,
  with `get`, `set`, `remove`, annotation helpers, `is_group_kind`,
  `is_local_config`, `path_annotation`, `copy` and `to_yaml`),
  `ResourceList` (with `upsert`, `log_result` and `to_yaml`), `Result`, and
  `KrmError`. `parse_kube_object`, `parse_kube_objects` and
  `parse_resource_list` read YAML; `run_processor` runs any function over
  standard input and output and returns an exit status.
- `krmkit.meta`: `ObjectMeta`, `GroupVersionKind`, and the functions
  `add_annotations`, `remove_annotations`, `add_finalizer`,
  `remove_finalizer`, `finalizer_exists`, `was_deleted`,
  `unstructured_from_gvk` and `remove_string`.
- `krmkit.errors`: `APIError`, `NotFoundError` and `BadRequestError`, and
  `ignore`, `ignore_any`, `ignore_not_found`, `is_not_found`, `is_api_error`
  and `is_api_error_wrapped` (which follows `__cause__` to the root error).
- `krmkit.client`: `MockClient` and `MockSubResourceClient`, whose calls go
  to replaceable handlers built with `mock_fn`; `MergePatch`;
  `APIPatchingApplicator`, which creates an object that does not exist and
  otherwise runs the apply options and patches it, raising `KrmError` with
  `cannot get object`, `cannot create object` or `cannot patch object`; and
  `update_fn`, which turns a function into an apply option.
- `krmkit.finalizer`: `APIFinalizer`, which adds or removes one finalizer and
  writes the change through a client's `update`; a not-found error on removal
  is ignored.
- `krmkit.conditions`: `Condition`, `porch_conditions` and
  `has_specific_type_conditions`.
- `krmkit.gotemplate`: `Template` and `TemplateError`, the template engine
  used by `gen-configmap`.

## The template engine

`Template(name, text).execute(data)` supports field access (`.a.b`), dot
(`.`), string, number and `true`/`false` literals, `if`/`else`, `range`,
`with`, `define`, `template`, comments, and the `{{-` / `-}}` trim markers.
A missing map key renders as `<no value>`. Error messages follow the
`template: <name>:<line>: ...` form.

## What the package does not do

- It talks to no API server. `MockClient` is the only client it provides;
  `APIPatchingApplicator` and `APIFinalizer` work with any object that has
  the `get`, `create`, `patch` and `update` methods they call.
- It runs no controller: nothing here watches package revisions or
  reconciles them. `krmkit.conditions` only converts and inspects
  condition lists.
- The template engine has no functions, pipelines or variables.