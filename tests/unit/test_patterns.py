"""Tests for the shared WordPress allow-lists and categorisation."""

from __future__ import annotations

import pytest

from thinktest.analysis import patterns
from thinktest.analysis.models import DbCategory, SecurityCategory


class TestDatabaseCategories:
    @pytest.mark.parametrize(
        "name, category",
        [
            ("get_option", DbCategory.OPTIONS),
            ("add_option", DbCategory.OPTIONS),
            ("wp_insert_post", DbCategory.POSTS),
            ("update_post_meta", DbCategory.POSTS),
            ("get_user_meta", DbCategory.USERS),
            ("wp_delete_user", DbCategory.USERS),
            ("wpdb_direct", DbCategory.DIRECT_DATABASE),
        ],
    )
    def test_categorize(self, name, category):
        assert patterns.categorize_database_operation(name) == category

    def test_meta_only_name_is_metadata(self):
        assert patterns.categorize_database_operation("get_term_meta") == DbCategory.METADATA

    def test_unmatched_name_is_general(self):
        assert patterns.categorize_database_operation("wp_cache_get") == DbCategory.GENERAL

    def test_every_allowed_function_is_recognised(self):
        assert all(patterns.is_database_function(n) for n in patterns.DATABASE_FUNCTIONS)
        assert not patterns.is_database_function("get_posts")


class TestSecurityCategories:
    @pytest.mark.parametrize(
        "name, category",
        [
            ("wp_verify_nonce", SecurityCategory.NONCE_VERIFICATION),
            ("check_admin_referer", SecurityCategory.NONCE_VERIFICATION),
            ("sanitize_email", SecurityCategory.DATA_SANITIZATION),
            ("esc_url", SecurityCategory.OUTPUT_ESCAPING),
            ("wp_kses_post", SecurityCategory.OUTPUT_ESCAPING),
            ("current_user_can", SecurityCategory.AUTHORIZATION),
            ("is_admin", SecurityCategory.AUTHORIZATION),
            ("is_user_logged_in", SecurityCategory.AUTHORIZATION),
        ],
    )
    def test_categorize(self, name, category):
        assert patterns.categorize_security_function(name) == category

    def test_unmatched_name_is_general(self):
        assert (
            patterns.categorize_security_function("wp_hash")
            == SecurityCategory.GENERAL_SECURITY
        )

    def test_fallback_list_extends_hook_functions(self):
        assert patterns.FALLBACK_PATTERN_FUNCTIONS[:4] == patterns.HOOK_FUNCTIONS
        assert "wp_enqueue_script" in patterns.FALLBACK_PATTERN_FUNCTIONS
