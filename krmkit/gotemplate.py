"""A small text template engine with the syntax and messages of Go's text/template."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class TemplateError(Exception):
    """Raised when a template cannot be parsed or executed."""


class _NoValue:
    def __repr__(self) -> str:
        return "<no value>"


_NO_VALUE = _NoValue()

_LEXEME = re.compile(
    r"""
     (?P<ws>\s+)
    |(?P<string>"(?:[^"\\\n]|\\.)*")
    |(?P<raw>`[^`]*`)
    |(?P<field>(?:\.[A-Za-z_]\w*)+)
    |(?P<dot>\.)
    |(?P<number>-?\d+(?:\.\d+)?)
    |(?P<ident>[A-Za-z_]\w*)
    """,
    re.X,
)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


@dataclass
class _Lexeme:
    kind: str
    value: Any
    pos: int


@dataclass
class _Action:
    tokens: list[_Lexeme]
    pos: int
    source: str


@dataclass
class _Text:
    text: str


@dataclass
class _Expr:
    kind: str  # "field", "dot", "literal"
    value: Any
    pos: int
    source: str


@dataclass
class _TemplateCall:
    name: str
    arg: _Expr | None
    pos: int
    source: str


@dataclass
class _Block:
    keyword: str
    cond: _Expr
    body: list[Any]
    else_body: list[Any] = field(default_factory=list)


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text[1:-1])


def _format(value: Any) -> str:
    if value is _NO_VALUE:
        return "<no value>"
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _truth(value: Any) -> bool:
    if value is _NO_VALUE or value is None:
        return False
    return bool(value)


class Template:
    """A parsed template that can be executed against data."""

    def __init__(self, name: str, text: str) -> None:
        self.name = name
        self.text = text
        self._templates: dict[str, list[Any]] = {}
        items = self._lex()
        root, index, _ = self._parse(items, 0, frozenset())
        self._templates[name] = root

    def _location(self, pos: int) -> tuple[int, int]:
        line = 1 + self.text.count("\n", 0, pos)
        col = pos - (self.text.rfind("\n", 0, pos) + 1)
        return line, col

    def _parse_error(self, pos: int, message: str) -> TemplateError:
        line, _ = self._location(pos)
        return TemplateError(f"template: {self.name}:{line}: {message}")

    def _lex(self) -> list[Any]:
        text = self.text
        items: list[Any] = []
        pos = 0
        trim_next = False
        while pos <= len(text):
            start = text.find("{{", pos)
            chunk = text[pos:] if start < 0 else text[pos:start]
            if trim_next:
                chunk = chunk.lstrip()
            if start < 0:
                if chunk:
                    items.append(_Text(chunk))
                break
            inner = start + 2
            if text.startswith("- ", inner) or text.startswith("-\t", inner) or text.startswith("-\n", inner):
                chunk = chunk.rstrip()
                inner += 2
            if chunk:
                items.append(_Text(chunk))
            body_start = inner
            while body_start < len(text) and text[body_start] in " \t\r\n":
                body_start += 1
            if text.startswith("/*", body_start):
                close = text.find("*/", body_start + 2)
                if close < 0:
                    raise self._parse_error(start, "unclosed comment")
                after = close + 2
                trim_next = False
                if text.startswith(" -}}", after):
                    trim_next = True
                    after += 4
                elif text.startswith("}}", after):
                    after += 2
                else:
                    raise self._parse_error(start, "comment ends before closing delimiter")
                pos = after
                continue
            end = text.find("}}", inner)
            if end < 0:
                raise self._parse_error(start, "unclosed action")
            content_end = end
            trim_next = False
            if end - 2 >= inner and text[end - 1] == "-" and text[end - 2] in " \t\r\n":
                trim_next = True
                content_end = end - 2
            content = text[inner:content_end]
            lexemes = self._tokenize(content, inner)
            source = "{{" + " ".join(content.split()) + "}}"
            items.append(_Action(lexemes, start, source))
            pos = end + 2
        return items

    def _tokenize(self, content: str, offset: int) -> list[_Lexeme]:
        lexemes: list[_Lexeme] = []
        index = 0
        while index < len(content):
            match = _LEXEME.match(content, index)
            if match is None:
                raise self._parse_error(
                    offset + index, f"unexpected {content[index]!r} in command"
                )
            kind = match.lastgroup or ""
            raw = match.group()
            if kind != "ws":
                if kind == "string":
                    lexemes.append(_Lexeme("string", _unquote(raw), offset + index))
                elif kind == "raw":
                    lexemes.append(_Lexeme("string", raw[1:-1], offset + index))
                elif kind == "field":
                    lexemes.append(_Lexeme("field", tuple(raw[1:].split(".")), offset + index))
                elif kind == "number":
                    number = float(raw) if "." in raw else int(raw)
                    lexemes.append(_Lexeme("number", number, offset + index))
                else:
                    lexemes.append(_Lexeme(kind, raw, offset + index))
            index = match.end()
        return lexemes

    def _expr(self, lexemes: list[_Lexeme], action: _Action) -> _Expr:
        if not lexemes:
            raise self._parse_error(action.pos, "missing value for command")
        if len(lexemes) > 1:
            raise self._parse_error(lexemes[1].pos, f"unexpected {lexemes[1].value!r} in operand")
        lex = lexemes[0]
        if lex.kind == "field":
            return _Expr("field", lex.value, lex.pos, action.source)
        if lex.kind == "dot":
            return _Expr("dot", None, lex.pos, action.source)
        if lex.kind in ("string", "number"):
            return _Expr("literal", lex.value, lex.pos, action.source)
        if lex.value in ("true", "false"):
            return _Expr("literal", lex.value == "true", lex.pos, action.source)
        if lex.value == "nil":
            raise self._parse_error(lex.pos, "nil is not a command")
        raise self._parse_error(lex.pos, f'function "{lex.value}" not defined')

    def _parse(self, items: list[Any], index: int, terminators: frozenset[str]):
        nodes: list[Any] = []
        while index < len(items):
            item = items[index]
            index += 1
            if isinstance(item, _Text):
                nodes.append(item)
                continue
            lexemes = item.tokens
            if not lexemes:
                raise self._parse_error(item.pos, "missing value for command")
            head = lexemes[0]
            keyword = head.value if head.kind == "ident" else ""
            if keyword in ("else", "end"):
                if keyword in terminators:
                    return nodes, index, keyword
                raise self._parse_error(item.pos, f"unexpected {{{{{keyword}}}}}")
            if keyword in ("if", "range", "with"):
                cond = self._expr(lexemes[1:], item)
                body, index, term = self._parse(items, index, frozenset({"else", "end"}))
                else_body: list[Any] = []
                if term == "else":
                    else_body, index, _ = self._parse(items, index, frozenset({"end"}))
                nodes.append(_Block(keyword, cond, body, else_body))
            elif keyword == "define":
                if len(lexemes) != 2 or lexemes[1].kind != "string":
                    raise self._parse_error(item.pos, "define requires a quoted name")
                body, index, _ = self._parse(items, index, frozenset({"end"}))
                self._templates[lexemes[1].value] = body
            elif keyword == "template":
                if len(lexemes) < 2 or lexemes[1].kind != "string":
                    raise self._parse_error(item.pos, "unexpected value in template clause")
                arg = self._expr(lexemes[2:], item) if len(lexemes) > 2 else None
                nodes.append(_TemplateCall(lexemes[1].value, arg, lexemes[1].pos, item.source))
            else:
                nodes.append(self._expr(lexemes, item))
        if terminators:
            raise self._parse_error(len(self.text), "unexpected EOF")
        return nodes, index, ""

    def _exec_error(self, pos: int, source: str, tname: str, message: str) -> TemplateError:
        line, col = self._location(pos)
        return TemplateError(
            f'template: {self.name}:{line}:{col}: executing "{tname}" at <{source}>: {message}'
        )

    def _eval(self, expr: _Expr, dot: Any, tname: str) -> Any:
        if expr.kind == "literal":
            return expr.value
        if expr.kind == "dot":
            return dot
        value = dot
        for key in expr.value:
            if isinstance(value, Mapping):
                value = value.get(key, _NO_VALUE)
            else:
                raise self._exec_error(
                    expr.pos, expr.source, tname,
                    f"can't evaluate field {key} in type {type(value).__name__}",
                )
        return value

    def _exec(self, nodes: list[Any], dot: Any, out: list[str], tname: str, depth: int) -> None:
        for node in nodes:
            if isinstance(node, _Text):
                out.append(node.text)
            elif isinstance(node, _Expr):
                out.append(_format(self._eval(node, dot, tname)))
            elif isinstance(node, _TemplateCall):
                target = self._templates.get(node.name)
                if target is None:
                    raise self._exec_error(
                        node.pos, node.source, tname, f'template "{node.name}" not defined'
                    )
                if depth > 100000 // 10:
                    raise self._exec_error(
                        node.pos, node.source, tname, "exceeded maximum template depth"
                    )
                arg = self._eval(node.arg, dot, tname) if node.arg else None
                self._exec(target, arg, out, node.name, depth + 1)
            else:
                self._exec_block(node, dot, out, tname, depth)

    def _exec_block(self, node: _Block, dot: Any, out: list[str], tname: str, depth: int) -> None:
        value = self._eval(node.cond, dot, tname)
        if node.keyword == "if":
            self._exec(node.body if _truth(value) else node.else_body, dot, out, tname, depth)
        elif node.keyword == "with":
            if _truth(value):
                self._exec(node.body, value, out, tname, depth)
            else:
                self._exec(node.else_body, dot, out, tname, depth)
        else:
            if isinstance(value, Mapping):
                elements = [value[key] for key in sorted(value)]
            elif isinstance(value, (list, tuple)):
                elements = list(value)
            elif value is _NO_VALUE or value is None:
                elements = []
            else:
                raise self._exec_error(
                    node.cond.pos, node.cond.source, tname,
                    f"range can't iterate over {_format(value)}",
                )
            if not elements:
                self._exec(node.else_body, dot, out, tname, depth)
            for element in elements:
                self._exec(node.body, element, out, tname, depth)

    def execute(self, data: Any) -> str:
        """Render the template with data as the starting value of dot."""
        out: list[str] = []
        self._exec(self._templates[self.name], data, out, self.name, 0)
        return "".join(out)