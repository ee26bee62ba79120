import io

import pytest

from krmkit.kubeobject import (
    PATH_ANNOTATION,
    KrmError,
    KubeObject,
    ResourceList,
    parse_kube_object,
    parse_kube_objects,
    parse_resource_list,
    run_processor,
)

KUSTOMIZATION = """
apiVersion: kustomize.config.k8s.io/v1beta1
kind: Kustomization
metadata:
  name: upsert-kustomize-res
resources: []
"""

CONFIGMAP = """
apiVersion: v1
kind: ConfigMap
metadata:
  name: cm
  namespace: ns
"""


def test_parse_and_yaml_round_trip():
    obj = parse_kube_object(KUSTOMIZATION)
    assert obj.api_version == "kustomize.config.k8s.io/v1beta1"
    assert obj.kind == "Kustomization"
    assert obj.name == "upsert-kustomize-res"
    assert obj.namespace == ""
    assert parse_kube_object(obj.to_yaml()) == obj


def test_parse_kube_object_rejects_several_documents():
    with pytest.raises(KrmError):
        parse_kube_object(KUSTOMIZATION + "---\n" + CONFIGMAP)


def test_parse_kube_objects_reads_all_documents():
    objects = parse_kube_objects(KUSTOMIZATION + "---\n" + CONFIGMAP)
    assert [o.kind for o in objects] == ["Kustomization", "ConfigMap"]


def test_parse_rejects_non_mapping():
    with pytest.raises(KrmError):
        parse_kube_object("- a\n- b\n")


def test_set_get_remove():
    obj = parse_kube_object(KUSTOMIZATION)
    obj.set(["a.yaml", "b.yaml"], "resources")
    assert obj.get("resources") == ["a.yaml", "b.yaml"]
    obj.set("x", "spec", "deep", "field")
    assert obj.get("spec", "deep", "field") == "x"
    assert obj.remove("spec", "deep", "field") is True
    assert obj.get("spec", "deep", "field") is None
    assert obj.remove("spec", "deep", "field") is False


def test_set_through_scalar_raises():
    obj = parse_kube_object(KUSTOMIZATION)
    with pytest.raises(KrmError):
        obj.set("v", "kind", "sub")


def test_annotations_and_path():
    obj = parse_kube_object(CONFIGMAP)
    assert obj.get_annotation(PATH_ANNOTATION) == ""
    obj.set_annotation(PATH_ANNOTATION, "cm.yaml")
    assert obj.path_annotation() == "cm.yaml"
    assert obj.annotations == {PATH_ANNOTATION: "cm.yaml"}


def test_annotations_property_is_a_copy():
    obj = parse_kube_object(CONFIGMAP)
    obj.set_annotation("a", "b")
    obj.annotations["a"] = "changed"
    assert obj.get_annotation("a") == "b"


def test_legacy_path_annotation_fallback():
    obj = parse_kube_object(CONFIGMAP)
    obj.set_annotation("config.kubernetes.io/path", "legacy.yaml")
    assert obj.path_annotation() == "legacy.yaml"


def test_is_group_kind():
    kust = parse_kube_object(KUSTOMIZATION)
    cm = parse_kube_object(CONFIGMAP)
    assert kust.is_group_kind("kustomize.config.k8s.io", "Kustomization")
    assert not cm.is_group_kind("kustomize.config.k8s.io", "Kustomization")
    assert cm.is_group_kind("", "ConfigMap")


@pytest.mark.parametrize(
    "value, expected", [("true", True), ("false", False), (None, False)]
)
def test_is_local_config(value, expected):
    obj = parse_kube_object(CONFIGMAP)
    if value is not None:
        obj.set_annotation("config.kubernetes.io/local-config", value)
    assert obj.is_local_config() is expected


def test_copy_is_independent():
    obj = parse_kube_object(CONFIGMAP)
    clone = obj.copy()
    clone.set("other", "metadata", "name")
    assert obj.name == "cm"
    assert clone.name == "other"


def test_upsert_replace_append_and_keep():
    rl = ResourceList(items=[parse_kube_object(CONFIGMAP)])
    updated = parse_kube_object(CONFIGMAP)
    updated.set({"k": "v"}, "data")
    rl.upsert(updated, True)
    assert len(rl.items) == 1
    assert rl.items[0].get("data") == {"k": "v"}

    kept = parse_kube_object(CONFIGMAP)
    rl.upsert(kept, False)
    assert rl.items[0].get("data") == {"k": "v"}

    rl.upsert(parse_kube_object(KUSTOMIZATION), True)
    assert [o.kind for o in rl.items] == ["ConfigMap", "Kustomization"]


def test_log_result():
    rl = ResourceList()
    rl.log_result(None)
    assert rl.results == []
    rl.log_result(ValueError("boom"))
    assert [(r.message, r.severity) for r in rl.results] == [("boom", "error")]


def test_resource_list_round_trip():
    rl = ResourceList(
        items=[parse_kube_object(CONFIGMAP)],
        function_config=parse_kube_object(KUSTOMIZATION),
    )
    rl.log_result(RuntimeError("boom"))
    again = parse_resource_list(rl.to_yaml())
    assert again == rl


def test_parse_resource_list_wrong_kind():
    with pytest.raises(KrmError):
        parse_resource_list(CONFIGMAP)


def _input_text():
    return ResourceList(items=[parse_kube_object(CONFIGMAP)]).to_yaml()


def test_run_processor_success():
    def processor(rl):
        rl.items[0].set({"k": "v"}, "data")
        return True

    out = io.StringIO()
    code = run_processor(processor, io.StringIO(_input_text()), out)
    assert code == 0
    assert parse_resource_list(out.getvalue()).items[0].get("data") == {"k": "v"}


def test_run_processor_failure_still_writes_output():
    def processor(rl):
        raise KrmError("boom")

    out = io.StringIO()
    code = run_processor(processor, io.StringIO(_input_text()), out)
    assert code == 1
    assert parse_resource_list(out.getvalue()).items[0].name == "cm"


def test_run_processor_unsuccessful_result():
    out = io.StringIO()
    assert run_processor(lambda rl: False, io.StringIO(_input_text()), out) == 1


def test_run_processor_bad_input():
    out = io.StringIO()
    assert run_processor(lambda rl: True, io.StringIO(CONFIGMAP), out) == 1
    assert out.getvalue() == ""


def test_kube_object_rejects_non_mapping():
    with pytest.raises(KrmError):
        KubeObject(["not", "a", "mapping"])