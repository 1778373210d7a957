"""Nested route recovery for declarative (JSX) and object-config routers.

Route declarations are turned into :class:`RouteEntry` records carrying the
source span of the whole declaration. Full paths are then resolved with plain
interval containment: the smallest span that strictly contains an entry is its
parent. The tree-sitter pass produces exact spans; when a file does not parse,
a tolerant text scanner recovers them by balancing braces and ``<Route>`` tags.

Known limit of the text scanner: braces or ``<Route`` substrings inside string
literals within attribute expressions can skew the balancing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .paths import apply_basename, normalize_route_path
from .syntax import (
    JSX_ELEMENT_TYPES,
    ParsedSource,
    jsx_attributes,
    jsx_child_elements,
    jsx_name,
    parse_source,
    string_value,
    unwrap_expression,
    walk,
)
from ..logging import get_logger

_LOGGER = get_logger("analyzers.routes")

WILDCARD = "*"
REDIRECT_ELEMENTS = frozenset({"Navigate", "Redirect"})
DEFERRED_WRAPPERS = frozenset({"Suspense", "React.Suspense"})
LAYOUT_WRAPPERS = frozenset(
    {"ProtectedRoute", "AdminRoute", "MainLayout", "AdminLayout", "ErrorBoundary"}
)

_ROUTE_OPEN = re.compile(r"<Route\b")
_ROUTE_CLOSE = re.compile(r"</Route\s*>")
_TAG_NAME = re.compile(r"<\s*([A-Za-z_$][\w.$]*)")
_PATH_ATTRIBUTE = re.compile(r"\bpath\s*=\s*")
_ELEMENT_ATTRIBUTE = re.compile(r"\belement\s*=\s*")
_ATTRIBUTE_STRING = re.compile(r"(?:\{\s*)?([\"'`])(.*?)\1", re.DOTALL)
_CONFIG_ROUTE = re.compile(
    r"\{\s*path\s*:\s*[\"'`]([^\"'`]+)[\"'`]\s*,\s*element\s*:\s*\(?\s*<\s*([A-Za-z_$][\w.$]*)"
)
_JSX_BASENAME = re.compile(
    r"<(?:BrowserRouter|HashRouter|Router)\b[^>]*?\bbasename\s*=\s*\{?\s*[\"'`]([^\"'`]+)[\"'`]"
)
_CONFIG_BASENAME = re.compile(r"\bbasename\s*:\s*[\"'`]([^\"'`]+)[\"'`]")


@dataclass
class RouteEntry:
    """One route declaration found in a file, before its full path is known."""

    raw_path: str
    start: int
    end: int
    component_name: Optional[str]
    skip: bool = False
    full_path: Optional[str] = None
    top_level: bool = False

    @property
    def span(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ResolvedRoute:
    """A navigable route with its absolute path."""

    path: str
    component_name: Optional[str]


def classify_element(
    top: Optional[str],
    inner: Optional[str],
    layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS,
) -> Tuple[Optional[str], bool]:
    """Return ``(component_name, skip)`` for the element bound to a route.

    Redirects are skipped, deferred wrappers are unwrapped one level and a
    layout wrapper that resolves to nothing but itself is skipped.
    """
    if top is None:
        return None, False
    if top in REDIRECT_ELEMENTS:
        return None, True
    component: Optional[str] = top
    if top in DEFERRED_WRAPPERS:
        component = inner
    if top in set(layout_wrappers) and (component is None or component == top):
        return component, True
    return component, False


def find_basename(content: str) -> Optional[str]:
    """Return the router basename declared in a file, if any."""
    match = _JSX_BASENAME.search(content)
    if match:
        return match.group(1)
    if "createBrowserRouter" in content or "createHashRouter" in content:
        match = _CONFIG_BASENAME.search(content)
        if match:
            return match.group(1)
    return None


def parse_routes(
    content: str,
    *,
    grammar: str = "tsx",
    layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS,
) -> List[ResolvedRoute]:
    """Recover every navigable route declared in ``content`` in source order."""
    wrappers = frozenset(layout_wrappers)
    basename = find_basename(content)
    parsed = parse_source(content, grammar)
    if parsed is not None:
        return resolve_entries(ast_route_entries(parsed, wrappers), basename)

    _LOGGER.debug("Route AST unavailable, scanning route tags as text")
    routes = resolve_entries(scan_route_entries(content, wrappers), basename)
    for route in config_routes_from_text(content, wrappers, basename):
        if route not in routes:
            routes.append(route)
    return routes


def resolve_entries(entries: Sequence[RouteEntry], basename: Optional[str] = None) -> List[ResolvedRoute]:
    """Resolve parent/child relationships by span containment and build full paths."""
    ordered = sorted(entries, key=lambda entry: (entry.start, -entry.span))
    processed: List[RouteEntry] = []
    for entry in ordered:
        parent = _containing_entry(processed, entry)
        entry.top_level = parent is None
        if parent is None and not entry.raw_path.startswith("/") and entry.raw_path != WILDCARD:
            parent = _implicit_parent(processed, entry)
        entry.full_path = _full_path(parent, entry.raw_path)
        if entry.raw_path == WILDCARD:
            entry.skip = True
        processed.append(entry)

    routes: List[ResolvedRoute] = []
    for entry in processed:
        if entry.skip or entry.full_path is None:
            continue
        route = ResolvedRoute(
            path=apply_basename(basename, entry.full_path),
            component_name=entry.component_name,
        )
        if route not in routes:
            routes.append(route)
    return routes


def _containing_entry(processed: Sequence[RouteEntry], entry: RouteEntry) -> Optional[RouteEntry]:
    best: Optional[RouteEntry] = None
    for candidate in processed:
        if candidate.start < entry.start and candidate.end > entry.end:
            if best is None or candidate.span < best.span:
                best = candidate
    return best


def _implicit_parent(processed: Sequence[RouteEntry], entry: RouteEntry) -> Optional[RouteEntry]:
    for candidate in reversed(processed):
        if (
            candidate.top_level
            and candidate.start < entry.start
            and candidate.raw_path.startswith("/")
            and candidate.raw_path != WILDCARD
        ):
            return candidate
    return None


def _full_path(parent: Optional[RouteEntry], raw_path: str) -> str:
    if raw_path.startswith("/"):
        path = raw_path
    elif parent is not None and parent.full_path is not None:
        path = parent.full_path.rstrip("/") + "/" + raw_path
    else:
        path = "/" + raw_path
    path = normalize_route_path(path)
    if path.endswith("/*"):
        path = normalize_route_path(path[:-2])
    return path


# ---------------------------------------------------------------------------
# Tree-sitter pass
# ---------------------------------------------------------------------------


def ast_route_entries(parsed: ParsedSource, layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS) -> List[RouteEntry]:
    """Collect ``<Route path element>`` elements and ``{ path, element }`` objects."""
    entries: List[RouteEntry] = []
    for node in walk(parsed.root):
        if node.type in JSX_ELEMENT_TYPES and jsx_name(parsed, node) == "Route":
            attributes = jsx_attributes(parsed, node)
            if "path" not in attributes:
                continue
            raw_path = string_value(parsed, attributes["path"])
            element = attributes.get("element")
        elif node.type == "object":
            properties = _object_properties(parsed, node)
            if "path" not in properties or not ({"element", "Component"} & properties.keys()):
                continue
            raw_path = string_value(parsed, properties["path"])
            element = properties.get("element") or properties.get("Component")
        else:
            continue
        if raw_path is None:
            continue
        top, inner = _element_names(parsed, unwrap_expression(element))
        component, skip = classify_element(top, inner, layout_wrappers)
        entries.append(
            RouteEntry(
                raw_path=raw_path.strip(),
                start=node.start_byte,
                end=node.end_byte,
                component_name=component,
                skip=skip,
            )
        )
    return entries


def _object_properties(parsed: ParsedSource, node) -> Dict[str, object]:  # type: ignore[no-untyped-def]
    properties: Dict[str, object] = {}
    for child in node.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        value = child.child_by_field_name("value")
        if key is None or value is None:
            continue
        name = parsed.text(key).strip("\"'`")
        properties.setdefault(name, value)
    return properties


def _element_names(parsed: ParsedSource, node) -> Tuple[Optional[str], Optional[str]]:  # type: ignore[no-untyped-def]
    if node is None:
        return None, None
    if node.type == "identifier":
        name = parsed.text(node)
        # Data routers bind ``Component: Dashboard``; lowercase identifiers are values.
        return (name, None) if name[:1].isupper() else (None, None)
    if node.type not in JSX_ELEMENT_TYPES:
        return None, None
    top = jsx_name(parsed, node) or None
    inner = next((jsx_name(parsed, child) for child in jsx_child_elements(node)), None)
    return top, inner or None


# ---------------------------------------------------------------------------
# Text scanning fallback
# ---------------------------------------------------------------------------


def scan_open_tag(content: str, start: int) -> Tuple[int, bool]:
    """Return ``(end, self_closing)`` for the tag opening at ``start``.

    ``>`` characters inside ``{...}`` attribute expressions or quoted attribute
    values do not close the tag.
    """
    depth = 0
    index = start + 1
    length = len(content)
    while index < length:
        char = content[index]
        if depth == 0 and char in "\"'":
            closing = content.find(char, index + 1)
            if closing < 0:
                return length, False
            index = closing + 1
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == ">" and depth == 0:
            return index + 1, content[index - 1] == "/"
        index += 1
    return length, False


def _route_span_end(content: str, start: int) -> int:
    tag_end, self_closing = scan_open_tag(content, start)
    if self_closing:
        return tag_end
    depth = 1
    position = tag_end
    while depth > 0:
        opening = _ROUTE_OPEN.search(content, position)
        closing = _ROUTE_CLOSE.search(content, position)
        if closing is not None and (opening is None or closing.start() < opening.start()):
            depth -= 1
            position = closing.end()
            continue
        if opening is None:
            return len(content)
        inner_end, inner_self_closing = scan_open_tag(content, opening.start())
        if not inner_self_closing:
            depth += 1
        position = inner_end
    return position


def _mask_expressions(tag: str) -> str:
    """Blank out everything nested in braces so top-level attributes stand alone."""
    masked: List[str] = []
    depth = 0
    for char in tag:
        if char == "{":
            depth += 1
            masked.append(char)
        elif char == "}":
            depth = max(depth - 1, 0)
            masked.append(char)
        else:
            masked.append(char if depth == 0 else " ")
    return "".join(masked)


def _attribute_value_start(masked: str, pattern: re.Pattern[str]) -> Optional[int]:
    match = pattern.search(masked)
    return match.end() if match else None


def _tag_element_names(content: str, tag_start: int, tag_end: int) -> Tuple[Optional[str], Optional[str]]:
    tag = content[tag_start:tag_end]
    offset = _attribute_value_start(_mask_expressions(tag), _ELEMENT_ATTRIBUTE)
    if offset is None or not tag[offset:].startswith("{"):
        return None, None
    top_match = re.compile(r"\{\s*\(?\s*<\s*([A-Za-z_$][\w.$]*)").match(tag, offset)
    if top_match is None:
        return None, None
    top = top_match.group(1)
    wrapper_start = tag_start + top_match.start(1) - 1
    while wrapper_start > tag_start and content[wrapper_start] != "<":
        wrapper_start -= 1
    wrapper_end, wrapper_self_closing = scan_open_tag(content, wrapper_start)
    if wrapper_self_closing or wrapper_end >= tag_end:
        return top, None
    inner_match = _TAG_NAME.search(content, wrapper_end, tag_end)
    return top, inner_match.group(1) if inner_match else None


def scan_route_entries(content: str, layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS) -> List[RouteEntry]:
    """Recover route entries from raw text without a parser."""
    entries: List[RouteEntry] = []
    for match in _ROUTE_OPEN.finditer(content):
        start = match.start()
        tag_end, _ = scan_open_tag(content, start)
        tag = content[start:tag_end]
        offset = _attribute_value_start(_mask_expressions(tag), _PATH_ATTRIBUTE)
        if offset is None:
            continue
        value = _ATTRIBUTE_STRING.match(tag, offset)
        if value is None:
            continue
        top, inner = _tag_element_names(content, start, tag_end)
        component, skip = classify_element(top, inner, layout_wrappers)
        entries.append(
            RouteEntry(
                raw_path=value.group(2).strip(),
                start=start,
                end=_route_span_end(content, start),
                component_name=component,
                skip=skip,
            )
        )
    return entries


def config_routes_from_text(
    content: str,
    layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS,
    basename: Optional[str] = None,
) -> List[ResolvedRoute]:
    """Recognize flat ``{ path: "...", element: <X /> }`` route objects."""
    routes: List[ResolvedRoute] = []
    for match in _CONFIG_ROUTE.finditer(content):
        raw_path, top = match.group(1), match.group(2)
        if raw_path.strip() == WILDCARD:
            continue
        inner: Optional[str] = None
        if top in DEFERRED_WRAPPERS:
            wrapper_start = content.rfind("<", match.start(), match.end())
            wrapper_end, self_closing = scan_open_tag(content, wrapper_start)
            if not self_closing:
                inner_match = _TAG_NAME.search(content, wrapper_end)
                inner = inner_match.group(1) if inner_match else None
        component, skip = classify_element(top, inner, layout_wrappers)
        if skip:
            continue
        path = normalize_route_path(raw_path)
        if path.endswith("/*"):
            path = normalize_route_path(path[:-2])
        route = ResolvedRoute(path=apply_basename(basename, path), component_name=component)
        if route not in routes:
            routes.append(route)
    return routes


__all__ = [
    "DEFERRED_WRAPPERS",
    "LAYOUT_WRAPPERS",
    "REDIRECT_ELEMENTS",
    "ResolvedRoute",
    "RouteEntry",
    "WILDCARD",
    "ast_route_entries",
    "classify_element",
    "config_routes_from_text",
    "find_basename",
    "parse_routes",
    "resolve_entries",
    "scan_open_tag",
    "scan_route_entries",
]
