"""WordPress API allow-lists shared by the AST and regex extractors."""

from __future__ import annotations

from thinktest.analysis.models import DbCategory, SecurityCategory

HOOK_FUNCTIONS: tuple[str, ...] = (
    "add_action",
    "add_filter",
    "do_action",
    "apply_filters",
)

# The regex path also reports asset enqueues as pattern hits
FALLBACK_PATTERN_FUNCTIONS: tuple[str, ...] = HOOK_FUNCTIONS + (
    "wp_enqueue_script",
    "wp_enqueue_style",
)

DATABASE_FUNCTIONS: tuple[str, ...] = (
    "get_option",
    "update_option",
    "delete_option",
    "add_option",
    "get_post_meta",
    "update_post_meta",
    "delete_post_meta",
    "add_post_meta",
    "get_user_meta",
    "update_user_meta",
    "delete_user_meta",
    "add_user_meta",
    "wp_insert_post",
    "wp_update_post",
    "wp_delete_post",
    "wp_insert_user",
    "wp_update_user",
    "wp_delete_user",
)

SECURITY_FUNCTIONS: tuple[str, ...] = (
    "wp_verify_nonce",
    "wp_create_nonce",
    "check_admin_referer",
    "sanitize_text_field",
    "sanitize_email",
    "sanitize_url",
    "esc_html",
    "esc_attr",
    "esc_url",
    "wp_kses",
    "wp_kses_post",
    "current_user_can",
    "is_admin",
    "is_user_logged_in",
)

ACTION_FUNCTION = "add_action"
FILTER_FUNCTION = "add_filter"
REST_ROUTE_FUNCTION = "register_rest_route"

AJAX_PREFIX = "wp_ajax_"
AJAX_PUBLIC_PREFIX = "wp_ajax_nopriv_"

WPDB_VARIABLE = "wpdb"
WPDB_OPERATION = "wpdb_direct"

DEFAULT_PRIORITY = 10
UNKNOWN = "unknown"
ARRAY_CALLBACK = "array_callback"
DEFAULT_REST_METHODS: tuple[str, ...] = ("GET",)

DATABASE_RECOMMENDATION_TRIGGERS: frozenset[str] = frozenset(
    {"get_option", "update_option", "wp_insert_post"}
)

# Checked in order; first substring hit wins
_DB_CATEGORY_RULES: tuple[tuple[tuple[str, ...], DbCategory], ...] = (
    (("option",), DbCategory.OPTIONS),
    (("post",), DbCategory.POSTS),
    (("user",), DbCategory.USERS),
    (("meta",), DbCategory.METADATA),
)

_SECURITY_CATEGORY_RULES: tuple[tuple[tuple[str, ...], SecurityCategory], ...] = (
    (("nonce", "referer"), SecurityCategory.NONCE_VERIFICATION),
    (("sanitize",), SecurityCategory.DATA_SANITIZATION),
    (("esc_", "kses"), SecurityCategory.OUTPUT_ESCAPING),
    (("can", "admin", "logged"), SecurityCategory.AUTHORIZATION),
)

_DATABASE_SET = frozenset(DATABASE_FUNCTIONS)
_SECURITY_SET = frozenset(SECURITY_FUNCTIONS)


def is_database_function(name: str) -> bool:
    return name in _DATABASE_SET


def is_security_function(name: str) -> bool:
    return name in _SECURITY_SET


def categorize_database_operation(name: str) -> DbCategory:
    """Map a database function name (or ``wpdb_direct``) to its category."""
    if name == WPDB_OPERATION:
        return DbCategory.DIRECT_DATABASE
    for needles, category in _DB_CATEGORY_RULES:
        if any(n in name for n in needles):
            return category
    return DbCategory.GENERAL


def categorize_security_function(name: str) -> SecurityCategory:
    """Map a security function name to its category."""
    for needles, category in _SECURITY_CATEGORY_RULES:
        if any(n in name for n in needles):
            return category
    return SecurityCategory.GENERAL_SECURITY
