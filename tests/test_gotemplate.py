import pytest

from krmkit.gotemplate import Template, TemplateError


def test_plain_text_round_trips():
    text = "no actions here\nsecond line"
    assert Template("t", text).execute({}) == text


def test_field_substitution():
    params = {"name": "world"}
    out = Template("t", "hello {{.name}}!").execute(params)
    assert out == "hello " + params["name"] + "!"


def test_missing_key_prints_no_value():
    assert Template("t", "{{.missing}}").execute({}) == "<no value>"


def test_nested_field():
    data = {"a": {"b": "deep"}}
    assert Template("t", "{{.a.b}}").execute(data) == data["a"]["b"]


def test_if_else():
    tmpl = Template("t", "{{if .on}}yes{{else}}no{{end}}")
    assert tmpl.execute({"on": "x"}) == "yes"
    assert tmpl.execute({"on": ""}) == "no"


def test_range_over_list():
    assert Template("t", "{{range .xs}}[{{.}}]{{end}}").execute({"xs": ["a", "b"]}) == "[a][b]"


def test_define_and_template_call():
    text = '{{define "inner"}}<{{.v}}>{{end}}{{template "inner" .}}'
    assert Template("t", text).execute({"v": "z"}) == "<z>"


def test_trim_markers():
    assert Template("t", "a  {{- .v -}}  b").execute({"v": "-"}) == "a-b"


def test_comment_is_dropped():
    assert Template("t", "x{{/* note */}}y").execute({}) == "xy"


def test_unclosed_action():
    with pytest.raises(TemplateError) as info:
        Template("bad", "foo{{")
    assert str(info.value) == "template: bad:1: unclosed action"


def test_undefined_template():
    tmpl = Template("bad", 'foo{{template "nope"}}')
    with pytest.raises(TemplateError) as info:
        tmpl.execute({})
    assert str(info.value) == (
        'template: bad:1:14: executing "bad" at <{{template "nope"}}>: '
        'template "nope" not defined'
    )


def test_unterminated_if():
    with pytest.raises(TemplateError, match="unexpected EOF"):
        Template("t", "{{if .a}}x")


def test_unknown_function():
    with pytest.raises(TemplateError, match='function "foo" not defined'):
        Template("t", "{{foo}}")