"""Tree-sitter parsing helpers for JavaScript/TypeScript sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from ..logging import get_logger

_LOGGER = get_logger("syntax")

_SCRIPT_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx")

_LANGUAGE_FACTORIES = {
    "tsx": tstypescript.language_tsx,
    "typescript": tstypescript.language_typescript,
}

_PARSERS: Dict[str, Parser] = {}


@dataclass(frozen=True)
class ParsedSource:
    """A syntax tree together with the bytes it was parsed from."""

    root: Node
    source: bytes

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def is_script_file(path: str) -> bool:
    """Return True for files the AST passes know how to parse."""
    return path.lower().endswith(_SCRIPT_SUFFIXES)


def grammar_for(path: str) -> str:
    # Plain .ts files use angle-bracket casts that the TSX grammar rejects.
    return "typescript" if path.lower().endswith(".ts") else "tsx"


def parse_source(content: str, grammar: str = "tsx") -> Optional[ParsedSource]:
    """Parse ``content`` and return None when the source does not parse cleanly."""
    parser = _get_parser(grammar)
    if parser is None:
        return None
    try:
        source = content.encode("utf-8")
    except UnicodeEncodeError as exc:
        _LOGGER.debug("Source is not encodable as UTF-8: %s", exc)
        return None
    try:
        tree = parser.parse(source)
    except (ValueError, TypeError) as exc:  # pragma: no cover - binding level failure
        _LOGGER.debug("tree-sitter rejected input: %s", exc)
        return None
    if tree.root_node.has_error:
        return None
    return ParsedSource(root=tree.root_node, source=source)


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in document (pre-)order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def start_line(node: Node) -> int:
    return node.start_point[0] + 1


def end_line(node: Node) -> int:
    return node.end_point[0] + 1


JSX_ELEMENT_TYPES = ("jsx_element", "jsx_self_closing_element")


def jsx_tag(node: Node) -> Optional[Node]:
    """Return the node holding the name and attributes of a JSX element."""
    if node.type == "jsx_self_closing_element" or node.type == "jsx_opening_element":
        return node
    if node.type == "jsx_element":
        tag = node.child_by_field_name("open_tag")
        if tag is not None:
            return tag
        for child in node.children:
            if child.type == "jsx_opening_element":
                return child
    return None


def jsx_name(parsed: ParsedSource, node: Node) -> str:
    """Return the element name (``Link``, ``React.Suspense``) of a JSX node."""
    tag = jsx_tag(node)
    if tag is None:
        return ""
    return parsed.text(tag.child_by_field_name("name"))


def jsx_attributes(parsed: ParsedSource, node: Node) -> Dict[str, Optional[Node]]:
    """Map attribute names to their value nodes (None for bare attributes)."""
    tag = jsx_tag(node)
    attributes: Dict[str, Optional[Node]] = {}
    if tag is None:
        return attributes
    for child in tag.named_children:
        if child.type != "jsx_attribute" or not child.named_children:
            continue
        name = parsed.text(child.named_children[0])
        value = child.named_children[1] if len(child.named_children) > 1 else None
        attributes.setdefault(name, value)
    return attributes


def jsx_child_elements(node: Node) -> Iterator[Node]:
    """Yield the direct JSX element children of an element."""
    if node.type != "jsx_element":
        return
    for child in node.named_children:
        if child.type in JSX_ELEMENT_TYPES:
            yield child


def unwrap_expression(node: Optional[Node]) -> Optional[Node]:
    """Strip ``{...}`` containers and parentheses around an expression."""
    while node is not None and node.type in {"jsx_expression", "parenthesized_expression"}:
        inner = [child for child in node.named_children if child.type != "comment"]
        node = inner[0] if inner else None
    return node


def string_value(parsed: ParsedSource, node: Optional[Node]) -> Optional[str]:
    """Return the literal text of a string-like node, or None when it is dynamic."""
    node = unwrap_expression(node)
    if node is None:
        return None
    if node.type == "string":
        return parsed.text(node)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return parsed.text(node)[1:-1]
    return None


def callee_name(parsed: ParsedSource, call: Node) -> Optional[str]:
    """Return ``name`` or ``object.name`` for a call expression's callee."""
    function = call.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "identifier":
        return parsed.text(function)
    if function.type == "member_expression":
        obj = function.child_by_field_name("object")
        prop = function.child_by_field_name("property")
        if (
            obj is not None
            and prop is not None
            and obj.type == "identifier"
            and prop.type == "property_identifier"
        ):
            return f"{parsed.text(obj)}.{parsed.text(prop)}"
    return None


def first_argument(call: Node) -> Optional[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    for child in arguments.named_children:
        if child.type != "comment":
            return child
    return None


def _get_parser(grammar: str) -> Optional[Parser]:
    parser = _PARSERS.get(grammar)
    if parser is not None:
        return parser
    factory = _LANGUAGE_FACTORIES.get(grammar)
    if factory is None:
        return None
    parser = Parser(Language(factory()))
    _PARSERS[grammar] = parser
    return parser


__all__ = [
    "JSX_ELEMENT_TYPES",
    "ParsedSource",
    "callee_name",
    "end_line",
    "first_argument",
    "grammar_for",
    "is_script_file",
    "jsx_attributes",
    "jsx_child_elements",
    "jsx_name",
    "jsx_tag",
    "parse_source",
    "start_line",
    "string_value",
    "unwrap_expression",
    "walk",
]
