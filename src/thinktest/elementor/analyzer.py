"""Elementor widget analyzer — regex and bracket matching over raw source.

Widget classes follow a rigid convention (``get_name()``, ``get_title()``,
``register_controls()`` ...), so no parse tree is needed. Control
configuration arrays are captured with a small bracket balancer, which keeps
nested arrays (``options``, ``condition``, ``selectors``) intact.
"""

from __future__ import annotations

import logging
import re

from thinktest.elementor.models import (
    Control,
    ControlDefault,
    ControlSection,
    ElementorWidgetAnalysis,
)

logger = logging.getLogger(__name__)

ELEMENTOR_MARKERS: tuple[str, ...] = (
    "Widget_Base",
    "Controls_Manager",
    "Group_Control",
    "Elementor\\Widget_Base",
    "Elementor\\Controls_Manager",
    "get_name()",
    "get_title()",
    "get_icon()",
    "get_categories()",
    "register_controls()",
    "render()",
)

_RETURN_TYPE = r"(?:\s*:\s*\??[\w\\]+)?"
_QUOTED = re.compile(r"['\"]([^'\"]+)['\"]")
_MANAGER_CONSTANT = re.compile(r"Controls_Manager::([A-Z_]+)")
_FIRST_STRING = re.compile(r"^(?:[\w\\]+\s*\(\s*)?(['\"])(.*?)(?<!\\)\1", re.DOTALL)
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_ENTRY = re.compile(r"^\s*(['\"])(.*?)\1\s*=>\s*(.*?)\s*$", re.DOTALL)
_LEADING_COMMENTS = re.compile(r"^(?:\s*(?://[^\n]*|#[^\n]*|/\*.*?\*/))+", re.DOTALL)
_ADD_CONTROL = re.compile(r"\$this->add_control\(\s*['\"]([^'\"]+)['\"]\s*,\s*")
_START_SECTION = re.compile(r"\$this->start_controls_section\(\s*['\"]([^'\"]+)['\"]\s*,\s*")
_RENDER_METHOD = re.compile(r"protected\s+function\s+render\s*\(\s*\)")
_ARRAY_OPEN = re.compile(r"\s*(?:(\[)|array\s*(\())", re.IGNORECASE)

_CLOSERS = {"[": "]", "(": ")"}


def _method_return(method: str) -> re.Pattern[str]:
    return re.compile(
        rf"public\s+function\s+{method}\s*\(\s*\){_RETURN_TYPE}\s*\{{[^}}]*?return\s*"
    )


_STRING_METHODS = {
    name: _method_return(name) for name in ("get_name", "get_title", "get_icon")
}
_ARRAY_METHODS = {
    name: _method_return(name)
    for name in ("get_categories", "get_style_depends", "get_script_depends")
}


def is_elementor_widget(code: str) -> bool:
    """Whether the source mentions any Elementor widget marker."""
    return any(marker in code for marker in ELEMENTOR_MARKERS)


def analyze_elementor_widget(code: str) -> ElementorWidgetAnalysis:
    """Extract widget metadata, controls and sections from widget source."""
    analysis = ElementorWidgetAnalysis(
        is_elementor_widget=is_elementor_widget(code),
        widget_name=_string_return(code, "get_name"),
        widget_title=_string_return(code, "get_title"),
        widget_icon=_string_return(code, "get_icon"),
        widget_categories=_array_return(code, "get_categories"),
        controls=tuple(_extract_controls(code)),
        control_sections=tuple(_extract_sections(code)),
        has_render_method=_RENDER_METHOD.search(code) is not None,
        style_dependencies=_array_return(code, "get_style_depends"),
        script_dependencies=_array_return(code, "get_script_depends"),
    )

    logger.info(
        "Elementor widget analysis completed: %s (%d controls, %d sections)",
        analysis.widget_name,
        len(analysis.controls),
        len(analysis.control_sections),
    )
    return analysis


# ---------------------------------------------------------------------------
# Widget metadata
# ---------------------------------------------------------------------------


def _string_return(code: str, method: str) -> str | None:
    m = _STRING_METHODS[method].search(code)
    if not m:
        return None
    return _first_string(code[m.end() :])


def _array_return(code: str, method: str) -> tuple[str, ...]:
    m = _ARRAY_METHODS[method].search(code)
    if not m:
        return ()
    span = _array_body(code, m.end())
    if span is None:
        return ()
    return tuple(_QUOTED.findall(span[0]))


# ---------------------------------------------------------------------------
# Controls and sections
# ---------------------------------------------------------------------------


def _extract_controls(code: str) -> list[Control]:
    controls = []
    for m in _ADD_CONTROL.finditer(code):
        span = _array_body(code, m.end())
        if span is None:
            continue
        config = _entries(span[0])
        controls.append(
            Control(
                id=m.group(1),
                type=_control_type(config.get("type")),
                label=_first_string(config.get("label")),
                default=_control_default(config.get("default")),
                options=_string_mapping(config.get("options")),
                condition=_string_mapping(config.get("condition")),
            )
        )
    return controls


def _extract_sections(code: str) -> list[ControlSection]:
    sections = []
    for m in _START_SECTION.finditer(code):
        span = _array_body(code, m.end())
        if span is None:
            continue
        config = _entries(span[0])
        sections.append(
            ControlSection(
                id=m.group(1),
                label=_first_string(config.get("label")),
                tab=_control_type(config.get("tab")),
            )
        )
    return sections


def _control_type(raw: str | None) -> str | None:
    if raw is None:
        return None
    m = _MANAGER_CONSTANT.search(raw)
    if m:
        return m.group(1)
    return _first_string(raw)


def _control_default(raw: str | None) -> ControlDefault:
    if raw is None:
        return None
    literal = _first_string(raw)
    if literal is not None:
        return literal
    if _NUMBER.fullmatch(raw):
        if raw.lstrip("+-").isdigit():
            return int(raw)
        try:
            return int(float(raw))
        except OverflowError:
            return raw
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    return raw


def _string_mapping(raw: str | None) -> dict[str, str]:
    """Top-level ``'key' => 'value'`` pairs of an array literal."""
    if raw is None:
        return {}
    span = _array_body(raw, 0)
    if span is None:
        return {}
    mapping = {}
    for key, value in _entries(span[0]).items():
        literal = _first_string(value)
        if literal is not None and _is_plain_string(value):
            mapping[key] = literal
    return mapping


def _first_string(raw: str | None) -> str | None:
    """A quoted literal, possibly wrapped in a call such as ``esc_html__()``."""
    if raw is None:
        return None
    m = _FIRST_STRING.match(raw.strip())
    return m.group(2) if m else None


def _is_plain_string(raw: str) -> bool:
    raw = raw.strip()
    return len(raw) >= 2 and raw[0] in "'\"" and _string_end(raw, 0) == len(raw)


# ---------------------------------------------------------------------------
# Bracket balancing
# ---------------------------------------------------------------------------


def _array_body(text: str, pos: int) -> tuple[str, int] | None:
    """Inner text of the ``[...]`` or ``array(...)`` literal starting at *pos*.

    Returns ``(inner, end)`` where *end* is the index just past the closing
    bracket, or ``None`` when no balanced array literal starts there.
    """
    m = _ARRAY_OPEN.match(text, pos)
    if not m:
        return None
    open_at = m.start(1) if m.group(1) else m.start(2)
    close_at = _matching_bracket(text, open_at)
    if close_at is None:
        return None
    return text[open_at + 1 : close_at], close_at + 1


def _matching_bracket(text: str, start: int) -> int | None:
    stack: list[str] = []
    i = start
    while i < len(text):
        ch = text[i]
        if ch in "'\"":
            i = _string_end(text, i)
            continue
        skip = _comment_end(text, i)
        if skip is not None:
            i = skip
            continue
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ")]":
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return i
        i += 1
    return None


def _string_end(text: str, start: int) -> int:
    """Index just past the quoted string opening at *start*."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return len(text)


def _split_top_level(inner: str) -> list[str]:
    items: list[str] = []
    depth = 0
    last = 0
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch in "'\"":
            i = _string_end(inner, i)
            continue
        skip = _comment_end(inner, i)
        if skip is not None:
            i = skip
            continue
        if ch in "[(":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == "," and depth == 0:
            items.append(inner[last:i])
            last = i + 1
        i += 1
    items.append(inner[last:])
    return [item for item in items if item.strip()]


def _entries(inner: str) -> dict[str, str]:
    """Keyed entries of an array body; the first occurrence of a key wins."""
    entries: dict[str, str] = {}
    for item in _split_top_level(inner):
        m = _ENTRY.match(_LEADING_COMMENTS.sub("", item))
        if m and m.group(2) not in entries:
            entries[m.group(2)] = m.group(3)
    return entries


def _comment_end(text: str, i: int) -> int | None:
    """Index just past a PHP comment starting at *i*, if one does."""
    if text.startswith("//", i) or (text[i] == "#" and not text.startswith("#[", i)):
        end = text.find("\n", i)
        return len(text) if end == -1 else end
    if text.startswith("/*", i):
        end = text.find("*/", i + 2)
        return len(text) if end == -1 else end + 2
    return None
