"""Analysis engine — dispatches single- and multi-file plugin sources."""

from __future__ import annotations

import logging
from dataclasses import replace

from thinktest.analysis.extractors import extract
from thinktest.analysis.fallback import regex_extract
from thinktest.analysis.models import AnalysisMethod, AnalysisResult, AnalysisRules
from thinktest.analysis.php_ast import ParseError, parse_php
from thinktest.analysis.recommendations import (
    AJAX_TESTS,
    DATABASE_TESTS,
    REST_API_TESTS,
    merge_recommendations,
)
from thinktest.analysis.splitter import is_multi_file, split_sources

logger = logging.getLogger(__name__)

# Result fields emptied when the matching rule is switched off
_RULE_FIELDS = {
    "detect_hooks": "hooks",
    "detect_filters": "filters",
    "detect_ajax_handlers": "ajax_handlers",
    "detect_rest_endpoints": "rest_endpoints",
    "detect_database": "database_operations",
    "detect_security": "security_patterns",
}

# Targeted recommendations withdrawn with their rule
_RULE_RECOMMENDATIONS = {
    "detect_ajax_handlers": AJAX_TESTS.type,
    "detect_rest_endpoints": REST_API_TESTS.type,
    "detect_database": DATABASE_TESTS.type,
}

_FACT_FIELDS = (
    "wordpress_patterns",
    "functions",
    "classes",
    "hooks",
    "filters",
    "ajax_handlers",
    "rest_endpoints",
    "database_operations",
    "security_patterns",
)


class PluginAnalyzer:
    """Turns PHP plugin source into an ``AnalysisResult``.

    Stateless apart from its rules; one instance may serve concurrent
    callers.
    """

    def __init__(self, rules: AnalysisRules | None = None) -> None:
        self._rules = rules or AnalysisRules()

    def analyze(self, code: str, filename: str = "plugin.php") -> AnalysisResult:
        """Analyze a single file or a ``// File:`` bundle."""
        if is_multi_file(code, filename):
            result = self._analyze_bundle(code, filename)
        else:
            result, _ = self._analyze_unit(code, filename, bundled=False)
        return self._apply_rules(result)

    def _analyze_unit(
        self, code: str, filename: str, bundled: bool
    ) -> tuple[AnalysisResult, bool]:
        """Analyze one source unit; the flag is ``True`` when it parsed."""
        try:
            tree = parse_php(code)
        except ParseError as e:
            if bundled:
                logger.debug(
                    "Skipping AST analysis of %s (line %s): %s", filename, e.line or "unknown", e
                )
            else:
                logger.warning(
                    "PHP parsing error in %s (line %s), using fallback analysis: %s",
                    filename,
                    e.line or "unknown",
                    e,
                )
            return regex_extract(code, filename), False

        return extract(tree, filename), True

    def _analyze_bundle(self, content: str, filename: str) -> AnalysisResult:
        merged: dict[str, list] = {name: [] for name in _FACT_FIELDS}
        recommendations = []
        parsed = failed = 0

        for segment in split_sources(content):
            unit, ok = self._analyze_unit(segment.content, segment.path, bundled=True)
            if ok:
                parsed += 1
                recommendations.append(unit.test_recommendations)
            else:
                failed += 1
            for name in _FACT_FIELDS:
                merged[name].extend(getattr(unit, name))

        result = AnalysisResult(
            filename=filename,
            analysis_method=(
                AnalysisMethod.REGEX_FALLBACK if failed else AnalysisMethod.AST
            ),
            test_recommendations=tuple(merge_recommendations(recommendations)),
            parsed_file_count=parsed,
            failed_file_count=failed,
            **{name: tuple(values) for name, values in merged.items()},
        )

        logger.info(
            "Multi-file analysis of %s completed: %d parsed, %d failed, "
            "%d patterns, %d functions, %d classes",
            filename,
            parsed,
            failed,
            len(result.wordpress_patterns),
            len(result.functions),
            len(result.classes),
        )
        return result

    def _apply_rules(self, result: AnalysisResult) -> AnalysisResult:
        off = [rule for rule in _RULE_FIELDS if not getattr(self._rules, rule)]
        if not off:
            return result

        dropped = {_RULE_RECOMMENDATIONS[rule] for rule in off if rule in _RULE_RECOMMENDATIONS}
        return replace(
            result,
            test_recommendations=tuple(
                rec for rec in result.test_recommendations if rec.type not in dropped
            ),
            **{_RULE_FIELDS[rule]: () for rule in off},
        )


_default_analyzer = PluginAnalyzer()


def analyze_plugin(code: str, filename: str = "plugin.php") -> AnalysisResult:
    """Analyze plugin source with the default rules."""
    return _default_analyzer.analyze(code, filename)
