"""Test-coverage recommendations derived from extracted facts."""

from __future__ import annotations

from collections.abc import Iterable

from thinktest.analysis import patterns
from thinktest.analysis.models import Priority, Recommendation

UNIT_TESTS = Recommendation(
    type="unit_tests",
    description="Create unit tests for individual plugin functions and class methods",
    priority=Priority.HIGH,
)

INTEGRATION_TESTS = Recommendation(
    type="integration_tests",
    description="Test WordPress hook and filter integration with the plugin callbacks",
    priority=Priority.MEDIUM,
)

AJAX_TESTS = Recommendation(
    type="ajax_tests",
    description="Test AJAX handlers for authenticated and public requests, including nonce checks",
    priority=Priority.HIGH,
)

REST_API_TESTS = Recommendation(
    type="rest_api_tests",
    description="Test REST API endpoints for responses, permissions and argument validation",
    priority=Priority.HIGH,
)

DATABASE_TESTS = Recommendation(
    type="database_tests",
    description="Test database operations for options and posts, including cleanup",
    priority=Priority.MEDIUM,
)


def baseline_recommendations() -> list[Recommendation]:
    """The recommendations every analysis carries."""
    return [UNIT_TESTS, INTEGRATION_TESTS]


def generate_recommendations(
    called_names: Iterable[str],
    action_names: Iterable[str],
) -> list[Recommendation]:
    """Baseline recommendations plus ones targeted at what the code calls.

    Args:
        called_names: Every function name called in the source.
        action_names: Literal hook names registered through ``add_action``.
    """
    called = set(called_names)
    recommendations = baseline_recommendations()

    if any(name.startswith(patterns.AJAX_PREFIX) for name in action_names):
        recommendations.append(AJAX_TESTS)
    if patterns.REST_ROUTE_FUNCTION in called:
        recommendations.append(REST_API_TESTS)
    if called & patterns.DATABASE_RECOMMENDATION_TRIGGERS:
        recommendations.append(DATABASE_TESTS)

    return recommendations


def merge_recommendations(groups: Iterable[Iterable[Recommendation]]) -> list[Recommendation]:
    """Combine per-file recommendations, keeping the first of each type."""
    merged: list[Recommendation] = []
    seen: set[str] = set()
    for rec in [*baseline_recommendations(), *(r for group in groups for r in group)]:
        if rec.type not in seen:
            seen.add(rec.type)
            merged.append(rec)
    return merged
