"""AST-based WordPress pattern extraction.

A single depth-first walk over the reduced AST feeds a set of handlers keyed
by ``NodeKind``. Each handler looks at one construct and appends facts to an
``_Collector``; shapes that do not match what a handler expects (dynamic hook
names, non-literal priorities, ...) are skipped, never raised.
"""

from __future__ import annotations

from collections.abc import Callable

from thinktest.analysis import patterns
from thinktest.analysis.models import (
    AjaxHandler,
    AnalysisMethod,
    AnalysisResult,
    DbOperation,
    HookCall,
    NamedLocation,
    PatternHit,
    RestEndpoint,
    SecurityHit,
)
from thinktest.analysis.php_ast import SCOPE_KINDS, Node, NodeKind
from thinktest.analysis.recommendations import generate_recommendations


class _Collector:
    """Mutable accumulation buffers for one walk."""

    def __init__(self) -> None:
        self.wordpress_patterns: list[PatternHit] = []
        self.functions: list[NamedLocation] = []
        self.classes: list[NamedLocation] = []
        self.hooks: list[HookCall] = []
        self.filters: list[HookCall] = []
        self.ajax_handlers: list[AjaxHandler] = []
        self.rest_endpoints: list[RestEndpoint] = []
        self.database_operations: list[DbOperation] = []
        self.security_patterns: list[SecurityHit] = []
        self.called_names: set[str] = set()
        self.action_names: list[str] = []


def extract(tree: Node, filename: str) -> AnalysisResult:
    """Walk a parsed tree and return the facts it contains."""
    out = _Collector()

    stack: list[tuple[Node, int]] = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        handler = _HANDLERS.get(node.kind)
        if handler is not None:
            handler(node, depth, out)

        child_depth = depth + 1 if node.kind in SCOPE_KINDS else depth
        stack.extend((child, child_depth) for child in reversed(node.children))

    return AnalysisResult(
        filename=filename,
        analysis_method=AnalysisMethod.AST,
        wordpress_patterns=tuple(out.wordpress_patterns),
        functions=tuple(out.functions),
        classes=tuple(out.classes),
        hooks=tuple(out.hooks),
        filters=tuple(out.filters),
        ajax_handlers=tuple(out.ajax_handlers),
        rest_endpoints=tuple(out.rest_endpoints),
        database_operations=tuple(out.database_operations),
        security_patterns=tuple(out.security_patterns),
        test_recommendations=tuple(
            generate_recommendations(out.called_names, out.action_names)
        ),
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _on_call(node: Node, depth: int, out: _Collector) -> None:
    name = node.name
    if name is None:
        return
    out.called_names.add(name)

    if name in patterns.HOOK_FUNCTIONS:
        out.wordpress_patterns.append(PatternHit(function=name, line=node.line))

    if name in (patterns.ACTION_FUNCTION, patterns.FILTER_FUNCTION):
        _on_hook_registration(node, out)
    elif name == patterns.REST_ROUTE_FUNCTION:
        out.rest_endpoints.append(
            RestEndpoint(
                namespace=_literal_or_unknown(node.arg(0)),
                route=_literal_or_unknown(node.arg(1)),
                line=node.line,
                methods=patterns.DEFAULT_REST_METHODS,
            )
        )

    if patterns.is_database_function(name):
        out.database_operations.append(
            DbOperation(
                type=name,
                category=patterns.categorize_database_operation(name),
                line=node.line,
            )
        )
    elif patterns.is_security_function(name):
        out.security_patterns.append(
            SecurityHit(
                type=name,
                category=patterns.categorize_security_function(name),
                line=node.line,
            )
        )


def _on_hook_registration(node: Node, out: _Collector) -> None:
    hook_name = _literal_string(node.arg(0))
    if hook_name is None:
        # Dynamic hook names are not supported
        return

    callback = _callback_name(node.arg(1))
    priority_node = node.arg(2)
    priority = (
        priority_node.value
        if priority_node is not None and priority_node.kind is NodeKind.INT_LITERAL
        else patterns.DEFAULT_PRIORITY
    )
    call = HookCall(name=hook_name, callback=callback, line=node.line, priority=priority)

    if node.name == patterns.FILTER_FUNCTION:
        out.filters.append(call)
        return

    out.hooks.append(call)
    out.action_names.append(hook_name)
    if hook_name.startswith(patterns.AJAX_PREFIX):
        out.ajax_handlers.append(
            AjaxHandler(
                action=hook_name[len(patterns.AJAX_PREFIX) :],
                hook=hook_name,
                callback=callback,
                line=node.line,
                is_public=hook_name.startswith(patterns.AJAX_PUBLIC_PREFIX),
            )
        )


def _on_function(node: Node, depth: int, out: _Collector) -> None:
    if depth == 0 and node.name:
        out.functions.append(NamedLocation(name=node.name, line=node.line))


def _on_class(node: Node, depth: int, out: _Collector) -> None:
    if depth == 0 and node.name:
        out.classes.append(NamedLocation(name=node.name, line=node.line))


def _on_variable(node: Node, depth: int, out: _Collector) -> None:
    if node.name == patterns.WPDB_VARIABLE:
        out.database_operations.append(
            DbOperation(
                type=patterns.WPDB_OPERATION,
                category=patterns.categorize_database_operation(patterns.WPDB_OPERATION),
                line=node.line,
            )
        )


_HANDLERS: dict[NodeKind, Callable[[Node, int, _Collector], None]] = {
    NodeKind.FUNC_CALL: _on_call,
    NodeKind.FUNCTION_DECL: _on_function,
    NodeKind.CLASS_DECL: _on_class,
    NodeKind.VARIABLE: _on_variable,
}


def _literal_string(node: Node | None) -> str | None:
    if node is not None and node.kind is NodeKind.STRING_LITERAL:
        return node.value
    return None


def _literal_or_unknown(node: Node | None) -> str:
    value = _literal_string(node)
    return patterns.UNKNOWN if value is None else value


def _callback_name(node: Node | None) -> str:
    if node is None:
        return patterns.UNKNOWN
    if node.kind is NodeKind.STRING_LITERAL:
        return node.value
    if node.kind is NodeKind.ARRAY_LITERAL:
        return patterns.ARRAY_CALLBACK
    return patterns.UNKNOWN
