"""Per-file flow extraction and the file-level flow to screen join.

Two passes run over every file. The pattern scan always runs and works one
source line at a time. The AST pass only runs for script files that parse
cleanly; it refines UI events and fills the call graph of handler functions.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .syntax import (
    JSX_ELEMENT_TYPES,
    ParsedSource,
    callee_name,
    end_line,
    grammar_for,
    is_script_file,
    jsx_attributes,
    jsx_name,
    parse_source,
    start_line,
    string_value,
    walk,
)
from ..logging import get_logger
from ..models import CodeFlow, Screen

_LOGGER = get_logger("analyzers.flows")

UI_EVENT = "ui-event"
FUNCTION_CALL = "function-call"
API_CALL = "api-call"
DB_QUERY = "db-query"

EVENT_ATTRIBUTES = (
    "onClick",
    "onSubmit",
    "onChange",
    "onKeyPress",
    "onKeyDown",
    "onFocus",
    "onBlur",
    "onPress",
    "onTouchStart",
)

SQL_SNIPPET_LENGTH = 60

_EVENT_HANDLER = re.compile(r"\b(" + "|".join(EVENT_ATTRIBUTES) + r")\s*=\s*\{")
_HANDLER_FUNCTION = re.compile(
    r"(?:const|let|var|function)\s+(handle[A-Z]\w*|on[A-Z]\w*)\s*=?\s*(?:async\s*)?\("
)
_HTTP_CALL = re.compile(r"\b(fetch|axios\.(\w+))\s*\(\s*[\"'`]([^\"'`]+)[\"'`]")
_HTTP_METHOD_FIELD = re.compile(r"\bmethod\s*:\s*[\"'`](\w+)[\"'`]")
_AXIOS_VERBS = {"get", "post", "put", "patch", "delete", "head", "options"}
_TABLE_ACCESS = re.compile(r"\b\w+\.from\s*\(\s*[\"'`]([^\"'`]+)[\"'`]\s*\)")
_TABLE_OPERATIONS = (
    ("insert", "INSERT"),
    ("upsert", "INSERT"),
    ("update", "UPDATE"),
    ("delete", "DELETE"),
    ("select", "SELECT"),
)
_RAW_QUERY = re.compile(r"\.(?:query|execute)\s*\(\s*[\"'`]([^\"'`]+)[\"'`]")

_FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function"}
_FUNCTION_DECLARATION_TYPES = {"function_declaration", "generator_function_declaration"}


def analyze_file(path: str, content: str) -> List[CodeFlow]:
    """Return every flow found in one file, ordered by line."""
    flows = scan_patterns(path, content)
    if not is_script_file(path):
        return flows

    parsed = parse_source(content, grammar_for(path))
    if parsed is None:
        _LOGGER.debug("AST pass skipped for %s (parse failed)", path)
        return flows

    events = ast_ui_events(parsed, path, content)
    if events:
        flows = [flow for flow in flows if flow.type != UI_EVENT] + events
    apply_call_graph(flows, call_graph(parsed))
    flows.sort(key=lambda flow: flow.line)
    return _unique(flows)


# ---------------------------------------------------------------------------
# Pattern scan
# ---------------------------------------------------------------------------


def scan_patterns(path: str, content: str) -> List[CodeFlow]:
    """Line-oriented detectors for events, handlers, HTTP and data access."""
    flows: List[CodeFlow] = []
    for index, line in enumerate(content.split("\n")):
        number = index + 1
        code = line.strip()

        for match in _EVENT_HANDLER.finditer(line):
            event = match.group(1)
            flows.append(_flow(f"{path}:{number}:event:{event}", UI_EVENT, event, path, number, code))

        handler = _HANDLER_FUNCTION.search(line)
        if handler:
            name = handler.group(1)
            flows.append(
                _flow(f"{path}:{number}:function:{name}", FUNCTION_CALL, name, path, number, code)
            )

        http = _http_call(line)
        if http is not None:
            flows.append(_flow(f"{path}:{number}:api", API_CALL, http, path, number, code))

        table = _table_access(line)
        if table is not None:
            flows.append(_flow(f"{path}:{number}:db", DB_QUERY, table, path, number, code))

        query = _RAW_QUERY.search(line)
        if query:
            snippet = query.group(1)[:SQL_SNIPPET_LENGTH]
            flows.append(_flow(f"{path}:{number}:sql", DB_QUERY, snippet, path, number, code))
    return _unique(flows)


def _http_call(line: str) -> Optional[str]:
    match = _HTTP_CALL.search(line)
    if not match:
        return None
    verb = match.group(2)
    if verb is not None and verb.lower() not in _AXIOS_VERBS and verb != "request":
        return None
    method = "GET"
    explicit = _HTTP_METHOD_FIELD.search(line)
    if explicit:
        method = explicit.group(1).upper()
    elif verb is not None and verb.lower() in _AXIOS_VERBS:
        method = verb.upper()
    return f"{method} {match.group(3)}"


def _table_access(line: str) -> Optional[str]:
    match = _TABLE_ACCESS.search(line)
    if not match:
        return None
    chain = line[match.end():]
    operation = "SELECT"
    for call, label in _TABLE_OPERATIONS:
        if re.search(r"\." + call + r"\s*\(", chain):
            operation = label
            break
    return f"{operation} {match.group(1)}"


def _flow(flow_id: str, kind: str, name: str, path: str, line: int, code: str) -> CodeFlow:
    return CodeFlow(id=flow_id, type=kind, name=name, file=path, line=line, code=code)


def _unique(flows: Iterable[CodeFlow]) -> List[CodeFlow]:
    seen = set()
    result: List[CodeFlow] = []
    for flow in flows:
        if flow.id in seen:
            continue
        seen.add(flow.id)
        result.append(flow)
    return result


# ---------------------------------------------------------------------------
# AST pass
# ---------------------------------------------------------------------------


def ast_ui_events(parsed: ParsedSource, path: str, content: str) -> List[CodeFlow]:
    """One ui-event per (line, event attribute).

    ``<button>`` elements and ``role="button"`` elements also emit a
    ``file:line:button`` event, unless the line already carries a handler event.
    """
    lines = content.split("\n")
    events: List[CodeFlow] = []
    buttons: List[CodeFlow] = []
    for node in walk(parsed.root):
        if node.type not in JSX_ELEMENT_TYPES:
            continue
        attributes = jsx_attributes(parsed, node)
        for name, value in attributes.items():
            if name not in EVENT_ATTRIBUTES:
                continue
            line = start_line(value) if value is not None else start_line(node)
            events.append(
                _flow(f"{path}:{line}:event:{name}", UI_EVENT, name, path, line, _line_text(lines, line))
            )
        role = attributes.get("role")
        if jsx_name(parsed, node) == "button" or (
            role is not None and string_value(parsed, role) == "button"
        ):
            line = start_line(node)
            buttons.append(
                _flow(f"{path}:{line}:button", UI_EVENT, "button", path, line, _line_text(lines, line))
            )
    handled_lines = {flow.line for flow in events}
    events.extend(flow for flow in buttons if flow.line not in handled_lines)
    events.sort(key=lambda flow: flow.line)
    return _unique(events)


def _line_text(lines: Sequence[str], line: int) -> str:
    if 0 < line <= len(lines):
        return lines[line - 1].strip()
    return ""


def function_scopes(parsed: ParsedSource) -> List[Tuple[str, int, int]]:
    """Named functions as ``(name, first_line, last_line)`` in source order."""
    scopes: List[Tuple[str, int, int]] = []
    for node in walk(parsed.root):
        if node.type in _FUNCTION_DECLARATION_TYPES:
            name = node.child_by_field_name("name")
            if name is not None:
                scopes.append((parsed.text(name), start_line(node), end_line(node)))
        elif node.type == "variable_declarator":
            name = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            if (
                name is not None
                and name.type == "identifier"
                and value is not None
                and value.type in _FUNCTION_VALUE_TYPES
            ):
                scopes.append((parsed.text(name), start_line(node), end_line(value)))
    return scopes


def call_graph(parsed: ParsedSource) -> Dict[Tuple[str, int], List[str]]:
    """Map ``(function name, first line)`` to callee names in first-call order."""
    scopes = function_scopes(parsed)
    graph: Dict[Tuple[str, int], List[str]] = {(name, first): [] for name, first, _ in scopes}
    if not scopes:
        return graph
    for node in walk(parsed.root):
        if node.type != "call_expression":
            continue
        callee = callee_name(parsed, node)
        if not callee:
            continue
        scope = _innermost_scope(scopes, start_line(node))
        if scope is None:
            continue
        callees = graph[(scope[0], scope[1])]
        if callee not in callees:
            callees.append(callee)
    return graph


def _innermost_scope(scopes: Sequence[Tuple[str, int, int]], line: int) -> Optional[Tuple[str, int, int]]:
    best: Optional[Tuple[str, int, int]] = None
    for scope in scopes:
        _, first, last = scope
        if first <= line <= last and (best is None or last - first < best[2] - best[1]):
            best = scope
    return best


def apply_call_graph(flows: Sequence[CodeFlow], graph: Dict[Tuple[str, int], List[str]]) -> None:
    for flow in flows:
        if flow.type != FUNCTION_CALL:
            continue
        callees = graph.get((flow.name, flow.line))
        if callees:
            flow.calls = list(callees)


# ---------------------------------------------------------------------------
# Flow to screen join
# ---------------------------------------------------------------------------


def map_flows_to_screens(
    screens: Sequence[Screen], flows: Sequence[CodeFlow], revision_id: str
) -> List[Screen]:
    """Attach flows to the screens that share their file and stamp the revision."""
    by_file: Dict[str, List[str]] = {}
    for flow in flows:
        by_file.setdefault(flow.file, []).append(flow.id)
    return [
        replace(
            screen,
            flows=list(by_file.get(screen.file_path, [])),
            navigates_to=list(screen.navigates_to),
            last_analyzed_commit=revision_id,
            screenshot_status="none",
        )
        for screen in screens
    ]


__all__ = [
    "API_CALL",
    "DB_QUERY",
    "EVENT_ATTRIBUTES",
    "FUNCTION_CALL",
    "UI_EVENT",
    "analyze_file",
    "apply_call_graph",
    "ast_ui_events",
    "call_graph",
    "function_scopes",
    "map_flows_to_screens",
    "scan_patterns",
]
