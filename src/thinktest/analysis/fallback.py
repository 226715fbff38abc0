"""Regex-based extraction for PHP that tree-sitter could not parse."""

from __future__ import annotations

import re

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
from thinktest.analysis.recommendations import baseline_recommendations


def _alternation(names: tuple[str, ...]) -> str:
    return "|".join(re.escape(n) for n in names)


_PATTERN_CALL = re.compile(
    rf"\b({_alternation(patterns.FALLBACK_PATTERN_FUNCTIONS)})\s*\(", re.IGNORECASE
)
_FUNCTION_DECL = re.compile(r"\bfunction\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\(", re.IGNORECASE)
_CLASS_DECL = re.compile(r"\bclass\s+([a-zA-Z_][a-zA-Z0-9_]*)", re.IGNORECASE)
_ACTION = re.compile(r"\badd_action\s*\(\s*['\"]([^'\"]+)['\"]")
_FILTER = re.compile(r"\badd_filter\s*\(\s*['\"]([^'\"]+)['\"]")
_AJAX_ACTION = re.compile(r"\badd_action\s*\(\s*['\"]wp_ajax_([^'\"]+)['\"]")
_REST_ROUTE = re.compile(r"\bregister_rest_route\s*\(\s*['\"]([^'\"]+)['\"]")
_DATABASE_CALL = re.compile(rf"\b({_alternation(patterns.DATABASE_FUNCTIONS)})\s*\(")
_WPDB = re.compile(r"\$wpdb\b")
_SECURITY_CALL = re.compile(rf"\b({_alternation(patterns.SECURITY_FUNCTIONS)})\s*\(")


def line_at(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1


def regex_extract(content: str, filename: str) -> AnalysisResult:
    """Extract WordPress facts from raw text with line-oriented regexes."""
    canonical = {n.lower(): n for n in patterns.FALLBACK_PATTERN_FUNCTIONS}
    wordpress_patterns = [
        PatternHit(function=canonical[m.group(1).lower()], line=line_at(content, m.start()))
        for m in _PATTERN_CALL.finditer(content)
    ]

    functions = [
        NamedLocation(name=m.group(1), line=line_at(content, m.start(1)))
        for m in _FUNCTION_DECL.finditer(content)
    ]
    classes = [
        NamedLocation(name=m.group(1), line=line_at(content, m.start(1)))
        for m in _CLASS_DECL.finditer(content)
    ]

    hooks = [
        HookCall(name=m.group(1), callback=patterns.UNKNOWN, line=line_at(content, m.start()))
        for m in _ACTION.finditer(content)
    ]
    filters = [
        HookCall(name=m.group(1), callback=patterns.UNKNOWN, line=line_at(content, m.start()))
        for m in _FILTER.finditer(content)
    ]

    # The original prefix cannot be told apart here, so nothing is public
    ajax_handlers = [
        AjaxHandler(
            action=m.group(1),
            hook=patterns.AJAX_PREFIX + m.group(1),
            callback=patterns.UNKNOWN,
            line=line_at(content, m.start()),
            is_public=False,
        )
        for m in _AJAX_ACTION.finditer(content)
    ]

    rest_endpoints = [
        RestEndpoint(
            namespace=m.group(1),
            route=patterns.UNKNOWN,
            line=line_at(content, m.start()),
            methods=patterns.DEFAULT_REST_METHODS,
        )
        for m in _REST_ROUTE.finditer(content)
    ]

    db_matches = [(m.start(), m.group(1)) for m in _DATABASE_CALL.finditer(content)]
    db_matches.extend((m.start(), patterns.WPDB_OPERATION) for m in _WPDB.finditer(content))
    database_operations = [
        DbOperation(
            type=name,
            category=patterns.categorize_database_operation(name),
            line=line_at(content, offset),
        )
        for offset, name in sorted(db_matches)
    ]

    security_patterns = [
        SecurityHit(
            type=m.group(1),
            category=patterns.categorize_security_function(m.group(1)),
            line=line_at(content, m.start()),
        )
        for m in _SECURITY_CALL.finditer(content)
    ]

    return AnalysisResult(
        filename=filename,
        analysis_method=AnalysisMethod.REGEX_FALLBACK,
        wordpress_patterns=tuple(wordpress_patterns),
        functions=tuple(functions),
        classes=tuple(classes),
        hooks=tuple(hooks),
        filters=tuple(filters),
        ajax_handlers=tuple(ajax_handlers),
        rest_endpoints=tuple(rest_endpoints),
        database_operations=tuple(database_operations),
        security_patterns=tuple(security_patterns),
        test_recommendations=tuple(baseline_recommendations()),
    )
