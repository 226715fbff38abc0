"""Tests for PHP parsing into the reduced AST."""

from __future__ import annotations

import pytest

from thinktest.analysis.php_ast import Node, NodeKind, ParseError, parse_php


def _walk(node: Node):
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _calls(tree: Node) -> list[Node]:
    return [n for n in _walk(tree) if n.kind is NodeKind.FUNC_CALL]


class TestParse:
    def test_function_call_with_literal_arguments(self):
        tree = parse_php("<?php\nadd_action('init', 'boot', 20);\n")
        (call,) = _calls(tree)
        assert call.name == "add_action"
        assert call.line == 2
        assert [a.kind for a in call.args] == [
            NodeKind.STRING_LITERAL,
            NodeKind.STRING_LITERAL,
            NodeKind.INT_LITERAL,
        ]
        assert call.args[0].value == "init"
        assert call.args[2].value == 20

    def test_double_quoted_string_is_literal(self):
        tree = parse_php('<?php do_action("my_plugin_loaded");')
        (call,) = _calls(tree)
        assert call.arg(0).kind is NodeKind.STRING_LITERAL
        assert call.arg(0).value == "my_plugin_loaded"

    def test_interpolated_string_is_not_literal(self):
        tree = parse_php('<?php do_action("save_{$type}");')
        (call,) = _calls(tree)
        assert call.arg(0).kind is not NodeKind.STRING_LITERAL

    def test_array_argument(self):
        tree = parse_php("<?php add_action('init', [$this, 'boot']);")
        (call,) = _calls(tree)
        assert call.arg(1).kind is NodeKind.ARRAY_LITERAL
        assert call.arg(2) is None

    def test_source_without_open_tag_is_php(self):
        tree = parse_php("add_filter('the_title', 'cb');")
        (call,) = _calls(tree)
        assert call.name == "add_filter"
        assert call.line == 1

    def test_declarations_and_variables(self):
        tree = parse_php(
            "<?php\n"
            "class Plugin {\n"
            "    public function boot() { global $wpdb; }\n"
            "}\n"
            "function helper() {}\n"
        )
        nodes = list(_walk(tree))
        classes = [n for n in nodes if n.kind is NodeKind.CLASS_DECL]
        methods = [n for n in nodes if n.kind is NodeKind.METHOD_DECL]
        functions = [n for n in nodes if n.kind is NodeKind.FUNCTION_DECL]
        variables = [n for n in nodes if n.kind is NodeKind.VARIABLE]

        assert [(c.name, c.line) for c in classes] == [("Plugin", 2)]
        assert [m.name for m in methods] == ["boot"]
        assert [(f.name, f.line) for f in functions] == [("helper", 5)]
        assert [v.name for v in variables] == ["wpdb"]

    def test_dynamic_callee_has_no_name(self):
        tree = parse_php("<?php $fn('init');")
        (call,) = _calls(tree)
        assert call.name is None


class TestParseErrors:
    def test_syntax_error_raises(self):
        with pytest.raises(ParseError):
            parse_php("<?php\nfunction broken( {\n")

    def test_unbalanced_braces_raise(self):
        with pytest.raises(ParseError):
            parse_php("<?php\nfunction a() {\n    add_action('init', 'x');\n")

    def test_error_carries_line(self):
        with pytest.raises(ParseError) as info:
            parse_php("<?php\n$a = 1;\n$b = ;\n")
        assert info.value.line is not None
        assert info.value.line >= 1


def _first_arg(source: str) -> Node:
    (call,) = _calls(parse_php(source))
    return call.arg(0)


class TestStringDecoding:
    @pytest.mark.parametrize(
        "literal,expected",
        [
            (r'"wp_ajax_\x66oo"', "wp_ajax_foo"),
            (r'"tab\there"', "tab\there"),
            (r'"line\n"', "line\n"),
            (r'"\101BC"', "ABC"),
            (r'"\u{e9}t\u{e9}"', "été"),
            (r'"cost\$"', "cost$"),
            (r'"say \"hi\""', 'say "hi"'),
            (r'"keep\q"', r"keep\q"),
            (r'"back\\slash"', "back\\slash"),
            (r"'it\'s \n'", r"it's \n"),
            (r"'a\\b'", "a\\b"),
        ],
    )
    def test_escape_sequences(self, literal: str, expected: str):
        arg = _first_arg(f"<?php do_action({literal});")
        assert arg.kind is NodeKind.STRING_LITERAL
        assert arg.value == expected

    def test_nowdoc_is_literal(self):
        arg = _first_arg("<?php\nadd_action(<<<'X'\ninit\\n\nX\n, 'cb');\n")
        assert arg.kind is NodeKind.STRING_LITERAL
        assert arg.value == "init\\n"

    def test_heredoc_decodes_escapes_and_indentation(self):
        arg = _first_arg("<?php\nadd_action(<<<X\n    wp_ajax_\\x66oo\n    X\n, 'cb');\n")
        assert arg.kind is NodeKind.STRING_LITERAL
        assert arg.value == "wp_ajax_foo"

    def test_interpolating_heredoc_is_not_literal(self):
        arg = _first_arg("<?php\nadd_action(<<<X\nsave_{$type}\nX\n, 'cb');\n")
        assert arg.kind is not NodeKind.STRING_LITERAL
