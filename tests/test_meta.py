from datetime import datetime, timezone

import pytest

from krmkit.meta import (
    GroupVersionKind,
    ObjectMeta,
    add_annotations,
    add_finalizer,
    finalizer_exists,
    remove_annotations,
    remove_finalizer,
    remove_string,
    unstructured_from_gvk,
    was_deleted,
)


def test_add_annotations_existing():
    obj = ObjectMeta(annotations={"ek": "ev"})
    add_annotations(obj, {"k": "v"})
    assert obj.annotations == {"ek": "ev", "k": "v"}


def test_add_annotations_none_existing():
    obj = ObjectMeta()
    add_annotations(obj, {"k": "v"})
    assert obj.annotations == {"k": "v"}


def test_remove_annotations_existing():
    obj = ObjectMeta(annotations={"kA": "vA", "kB": "vB"})
    remove_annotations(obj, "kA")
    assert obj.annotations == {"kB": "vB"}


def test_remove_annotations_none_existing():
    obj = ObjectMeta()
    remove_annotations(obj, "kA")
    assert obj.annotations is None


@pytest.mark.parametrize(
    "existing, expected",
    [
        (None, ["fin"]),
        (["fin"], ["fin"]),
        (["fun"], ["fun", "fin"]),
    ],
)
def test_add_finalizer(existing, expected):
    obj = ObjectMeta(finalizers=existing)
    add_finalizer(obj, "fin")
    assert obj.finalizers == expected


@pytest.mark.parametrize(
    "existing, expected",
    [
        (None, None),
        (["fin"], []),
        (["fin", "fun"], ["fun"]),
    ],
)
def test_remove_finalizer(existing, expected):
    obj = ObjectMeta(finalizers=existing)
    remove_finalizer(obj, "fin")
    assert obj.finalizers == expected


@pytest.mark.parametrize(
    "existing, expected",
    [
        (None, False),
        (["fin"], True),
        (["fun"], False),
    ],
)
def test_finalizer_exists(existing, expected):
    assert finalizer_exists(ObjectMeta(finalizers=existing), "fin") is expected


def test_was_deleted():
    assert was_deleted(ObjectMeta(deletion_timestamp=datetime.now(timezone.utc))) is True
    assert was_deleted(ObjectMeta(deletion_timestamp=None)) is False


@pytest.mark.parametrize(
    "gvk, api_version, kind",
    [
        (GroupVersionKind(group="a", version="b", kind="c"), "a/b", "c"),
        (GroupVersionKind(group="a", version="b", kind=""), "a/b", ""),
    ],
)
def test_unstructured_from_gvk(gvk, api_version, kind):
    obj = unstructured_from_gvk(gvk)
    assert obj.api_version == api_version
    assert obj.kind == kind


def test_group_version_without_group():
    assert GroupVersionKind(version="v1", kind="ConfigMap").group_version() == "v1"


@pytest.mark.parametrize(
    "items, value, expected",
    [
        (["a", "b"], "b", ["a"]),
        ([], "b", []),
        (["a", "b"], "c", ["a", "b"]),
    ],
)
def test_remove_string(items, value, expected):
    assert remove_string(items, value) == expected