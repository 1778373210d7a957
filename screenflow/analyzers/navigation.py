"""Outbound navigation target extraction (AST first, pattern scan fallback)."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .syntax import (
    JSX_ELEMENT_TYPES,
    ParsedSource,
    callee_name,
    first_argument,
    grammar_for,
    jsx_attributes,
    jsx_name,
    parse_source,
    string_value,
    walk,
)
from ..logging import get_logger

_LOGGER = get_logger("analyzers.navigation")

NAVIGATION_CALLEES = frozenset(
    {
        "navigate",
        "navigateTo",
        "redirect",
        "push",
        "replace",
        "history.push",
        "history.replace",
        "router.push",
        "router.replace",
        "router.navigate",
        "navigation.navigate",
        "navigation.push",
    }
)

# Element name -> attributes that carry the target path.
_LINK_ATTRIBUTES = {
    "Link": ("to", "href"),
    "NavLink": ("to", "href"),
    "a": ("href",),
}

_FALLBACK_PATTERNS = (
    re.compile(r"router\.(?:push|replace)\s*\(\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"history\.(?:push|replace)\s*\(\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"\bnavigate\s*\(\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"\bnavigateTo\s*\(\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"\bredirect\s*\(\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"href=\{?\s*[\"'`]([^\"'`]+)[\"'`]"),
    re.compile(r"<(?:Nav)?Link\b[^>]*?\sto=\{?\s*[\"'`]([^\"'`]+)[\"'`]"),
)


def is_absolute_path(value: str) -> bool:
    """Keep in-app absolute paths only (no protocol-relative or script URLs)."""
    return (
        value.startswith("/")
        and not value.startswith("//")
        and not value.lower().startswith("/javascript:")
    )


def extract_navigation_links(content: str, path: Optional[str] = None) -> List[str]:
    """Return absolute navigation targets in order of first appearance."""
    links = _links_from_ast(content, path)
    if links:
        return links
    return _links_from_patterns(content)


def _links_from_ast(content: str, path: Optional[str]) -> List[str]:
    parsed = parse_source(content, grammar_for(path) if path else "tsx")
    if parsed is None:
        _LOGGER.debug("Navigation AST unavailable for %s, using patterns", path or "<content>")
        return []

    links: List[str] = []
    for node in walk(parsed.root):
        target: Optional[str] = None
        if node.type == "call_expression":
            target = _call_target(parsed, node)
        elif node.type in JSX_ELEMENT_TYPES:
            target = _link_target(parsed, node)
        if target and is_absolute_path(target) and target not in links:
            links.append(target)
    return links


def _call_target(parsed: ParsedSource, node) -> Optional[str]:  # type: ignore[no-untyped-def]
    name = callee_name(parsed, node)
    if name not in NAVIGATION_CALLEES:
        return None
    return string_value(parsed, first_argument(node))


def _link_target(parsed: ParsedSource, node) -> Optional[str]:  # type: ignore[no-untyped-def]
    attribute_names = _LINK_ATTRIBUTES.get(jsx_name(parsed, node))
    if not attribute_names:
        return None
    attributes = jsx_attributes(parsed, node)
    for attribute in attribute_names:
        if attribute in attributes:
            return string_value(parsed, attributes[attribute])
    return None


def _links_from_patterns(content: str) -> List[str]:
    found: List[Tuple[int, str]] = []
    for pattern in _FALLBACK_PATTERNS:
        for match in pattern.finditer(content):
            found.append((match.start(1), match.group(1)))
    links: List[str] = []
    for _, link in sorted(found):
        if "${" in link:
            continue
        if is_absolute_path(link) and link not in links:
            links.append(link)
    return links


__all__ = ["NAVIGATION_CALLEES", "extract_navigation_links", "is_absolute_path"]
