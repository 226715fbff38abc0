"""PHP parsing — tree-sitter parse tree reduced to a small tagged AST.

The extractors only care about a handful of constructs (calls, declarations,
variables and literals), so the concrete tree-sitter tree is folded into
``Node`` objects tagged with a ``NodeKind``. Everything else becomes an
``OTHER`` node that only carries children.

Usage::

    tree = parse_php("<?php add_action('init', 'boot');")
    for node in tree.children:
        ...
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

import tree_sitter as ts
import tree_sitter_php

logger = logging.getLogger(__name__)

_OPEN_TAG = "<?php"

_language: ts.Language | None = None


class ParseError(Exception):
    """Raised when source text is not syntactically valid PHP."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


class NodeKind(enum.Enum):
    PROGRAM = "program"
    FUNC_CALL = "func_call"
    FUNCTION_DECL = "function_decl"
    CLASS_DECL = "class_decl"
    METHOD_DECL = "method_decl"
    CLOSURE = "closure"
    TYPE_DECL = "type_decl"
    VARIABLE = "variable"
    STRING_LITERAL = "string_literal"
    INT_LITERAL = "int_literal"
    ARRAY_LITERAL = "array_literal"
    OTHER = "other"


# Kinds whose bodies are not file scope
SCOPE_KINDS = frozenset(
    {
        NodeKind.FUNCTION_DECL,
        NodeKind.CLASS_DECL,
        NodeKind.METHOD_DECL,
        NodeKind.CLOSURE,
        NodeKind.TYPE_DECL,
    }
)


@dataclass
class Node:
    """A node of the reduced AST.

    Attributes:
        kind: The construct this node represents.
        line: 1-based line of the first character of the construct.
        name: Callee name for ``FUNC_CALL`` (``None`` when the callee is
            dynamic), declared name for declarations, variable name
            without ``$`` for ``VARIABLE``.
        value: Decoded value of ``STRING_LITERAL`` / ``INT_LITERAL``.
        args: Argument expressions of a ``FUNC_CALL``, in call order.
        children: All child nodes in source order, including ``args``.
    """

    kind: NodeKind
    line: int
    name: str | None = None
    value: str | int | None = None
    args: list[Node] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)

    def arg(self, index: int) -> Node | None:
        return self.args[index] if index < len(self.args) else None


_DECL_KINDS = {
    "function_definition": NodeKind.FUNCTION_DECL,
    "class_declaration": NodeKind.CLASS_DECL,
    "method_declaration": NodeKind.METHOD_DECL,
    "anonymous_function": NodeKind.CLOSURE,
    "anonymous_function_creation_expression": NodeKind.CLOSURE,
    "arrow_function": NodeKind.CLOSURE,
    "interface_declaration": NodeKind.TYPE_DECL,
    "trait_declaration": NodeKind.TYPE_DECL,
    "enum_declaration": NodeKind.TYPE_DECL,
    "anonymous_class": NodeKind.TYPE_DECL,
}

_ARRAY_TYPES = {"array_creation_expression"}
_STRING_PART_TYPES = {"string_content", "string_value", "escape_sequence"}
_HEREDOC_PART_TYPES = _STRING_PART_TYPES | {
    "heredoc_start",
    "heredoc_end",
    "heredoc_body",
    "nowdoc_body",
    "nowdoc_string",
}

_SINGLE_QUOTE_ESCAPE = re.compile(r"\\([\\'])")
_DOUBLE_QUOTE_ESCAPE = re.compile(
    r"\\(?:([nrtvef\\$\"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
_SIMPLE_ESCAPES = {
    "n": b"\n",
    "r": b"\r",
    "t": b"\t",
    "v": b"\v",
    "e": b"\x1b",
    "f": b"\f",
    "\\": b"\\",
    "$": b"$",
}


def _get_language() -> ts.Language:
    global _language
    if _language is None:
        _language = ts.Language(tree_sitter_php.language_php())
    return _language


def parse_php(source: str) -> Node:
    """Parse PHP source into the reduced AST.

    Source without an open tag is treated as PHP code rather than inline
    HTML; line numbers are unaffected.

    Raises:
        ParseError: if the source contains a syntax error.
    """
    if _OPEN_TAG not in source and "<?=" not in source:
        source = f"{_OPEN_TAG} {source}"

    data = source.encode("utf-8", errors="replace")
    parser = ts.Parser(_get_language())
    tree = parser.parse(data)

    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        line = bad.start_point[0] + 1 if bad is not None else None
        kind = "missing token" if bad is not None and bad.is_missing else "syntax error"
        raise ParseError(f"PHP {kind} on line {line}", line=line)

    return _convert(root, data)


def _first_error(root: ts.Node) -> ts.Node | None:
    """Return the first ERROR or MISSING node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        # Only descend into subtrees that contain an error
        stack.extend(
            child for child in reversed(node.children) if child.has_error or child.is_missing
        )
    return None


def _convert(root: ts.Node, data: bytes) -> Node:
    """Fold the tree-sitter tree into ``Node`` objects (iteratively)."""
    program = Node(NodeKind.PROGRAM, line=1)
    stack: list[tuple[ts.Node, Node]] = [(root, program)]

    while stack:
        ts_node, node = stack.pop()
        if node.kind is NodeKind.FUNC_CALL:
            callee = ts_node.child_by_field_name("function")
            if callee is not None and node.name is None:
                child = _make_node(callee, data)
                node.children.append(child)
                stack.append((callee, child))
            arguments = ts_node.child_by_field_name("arguments")
            for expr in _argument_expressions(arguments):
                child = _make_node(expr, data)
                node.args.append(child)
                node.children.append(child)
                stack.append((expr, child))
            continue

        for ts_child in ts_node.named_children:
            child = _make_node(ts_child, data)
            node.children.append(child)
            if child.kind not in (NodeKind.STRING_LITERAL, NodeKind.INT_LITERAL):
                stack.append((ts_child, child))

    return program


def _make_node(ts_node: ts.Node, data: bytes) -> Node:
    line = ts_node.start_point[0] + 1
    node_type = ts_node.type

    if node_type == "function_call_expression":
        return Node(NodeKind.FUNC_CALL, line, name=_callee_name(ts_node, data))

    decl_kind = _DECL_KINDS.get(node_type)
    if decl_kind is not None:
        name_node = ts_node.child_by_field_name("name")
        name = _text(name_node, data) if name_node is not None else None
        return Node(decl_kind, line, name=name)

    if node_type == "variable_name":
        return Node(NodeKind.VARIABLE, line, name=_text(ts_node, data).lstrip("$"))

    if node_type in ("string", "encapsed_string"):
        value = _string_value(ts_node, data)
        if value is not None:
            return Node(NodeKind.STRING_LITERAL, line, value=value)
        return Node(NodeKind.OTHER, line)

    if node_type in ("heredoc", "nowdoc"):
        value = _heredoc_value(ts_node, data)
        if value is not None:
            return Node(NodeKind.STRING_LITERAL, line, value=value)
        return Node(NodeKind.OTHER, line)

    if node_type == "integer":
        value = _int_value(_text(ts_node, data))
        if value is not None:
            return Node(NodeKind.INT_LITERAL, line, value=value)
        return Node(NodeKind.OTHER, line)

    if node_type in _ARRAY_TYPES:
        return Node(NodeKind.ARRAY_LITERAL, line)

    return Node(NodeKind.OTHER, line)


def _callee_name(call: ts.Node, data: bytes) -> str | None:
    callee = call.child_by_field_name("function")
    if callee is None:
        return None
    if callee.type == "name":
        return _text(callee, data)
    if callee.type == "qualified_name":
        # \add_action resolves to the global function
        text = _text(callee, data)
        if text.startswith("\\") and text.count("\\") == 1:
            return text[1:]
        return text
    return None


def _argument_expressions(arguments: ts.Node | None) -> list[ts.Node]:
    if arguments is None:
        return []
    exprs = []
    for child in arguments.named_children:
        if child.type == "argument":
            # Named arguments carry their name as the first named child
            inner = child.named_children
            if inner:
                exprs.append(inner[-1])
        elif child.type != "comment":
            exprs.append(child)
    return exprs


def _string_value(node: ts.Node, data: bytes) -> str | None:
    """Decode a quoted string literal; ``None`` if it interpolates."""
    if any(child.type not in _STRING_PART_TYPES for child in node.named_children):
        return None

    text = _text(node, data)
    if text[:1] in ("b", "B"):
        text = text[1:]
    if len(text) < 2 or text[0] != text[-1] or text[0] not in "'\"":
        return None

    body = text[1:-1]
    if text[0] == "'":
        return _SINGLE_QUOTE_ESCAPE.sub(r"\1", body)
    return _unescape(body, quote='"')


def _heredoc_value(node: ts.Node, data: bytes) -> str | None:
    """Decode a heredoc or nowdoc; ``None`` if a heredoc interpolates."""
    stack = list(node.named_children)
    while stack:
        child = stack.pop()
        if child.type not in _HEREDOC_PART_TYPES:
            return None
        stack.extend(child.named_children)

    header, newline, rest = _text(node, data).partition("\n")
    if not newline:
        return None
    lines = [line.rstrip("\r") for line in rest.split("\n")]
    # The closing identifier's indentation is removed from every body line
    closing = lines[-1]
    indent = len(closing) - len(closing.lstrip(" \t"))
    body = "\n".join(line[indent:] for line in lines[:-1])

    if node.type == "nowdoc" or "'" in header:
        return body
    return _unescape(body, quote=None)


def _unescape(body: str, quote: str | None) -> str:
    """Apply PHP's double-quoted escape sequences.

    *quote* is the delimiter that ``\\`` may escape; heredocs have none.
    Unknown sequences are kept verbatim, as PHP does.
    """
    out = bytearray()
    last = 0
    for m in _DOUBLE_QUOTE_ESCAPE.finditer(body):
        out += body[last : m.start()].encode("utf-8", errors="replace")
        simple, octal, hex_digits, codepoint = m.groups()
        if simple is not None:
            if simple in _SIMPLE_ESCAPES:
                out += _SIMPLE_ESCAPES[simple]
            elif simple == quote:
                out += simple.encode()
            else:
                out += m.group(0).encode()
        elif octal is not None:
            out.append(int(octal, 8) & 0xFF)
        elif hex_digits is not None:
            out.append(int(hex_digits, 16))
        elif int(codepoint, 16) <= 0x10FFFF:
            out += chr(int(codepoint, 16)).encode("utf-8", errors="replace")
        else:
            out += m.group(0).encode()
        last = m.end()
    out += body[last:].encode("utf-8", errors="replace")
    return out.decode("utf-8", errors="replace")


def _int_value(text: str) -> int | None:
    text = text.replace("_", "")
    try:
        return int(text, 0)
    except ValueError:
        pass
    # PHP octal without the 0o prefix
    try:
        return int(text, 8) if text.startswith("0") else int(text)
    except ValueError:
        return None


def _text(node: ts.Node, data: bytes) -> str:
    return data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
