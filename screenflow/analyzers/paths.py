"""Route path and screen name helpers shared by the extraction strategies."""

from __future__ import annotations

import re
from typing import Optional

_GROUP_SEGMENT = re.compile(r"\([^)/]*\)/?")
_DYNAMIC_SEGMENT = re.compile(r"\[\[?(?:\.\.\.)?([^\]]+)\]\]?")
_SCREEN_SUFFIX = re.compile(r"(?:Screen|Page)$")


def normalize_route_path(path: str) -> str:
    """Return a canonical route path: leading slash, no doubled or trailing slash."""
    if not path or path.strip() == "*":
        return "/"
    result = path.strip()
    if not result.startswith("/"):
        result = "/" + result
    result = re.sub(r"/{2,}", "/", result)
    if len(result) > 1 and result.endswith("/"):
        result = result.rstrip("/")
    return result or "/"


def apply_basename(basename: Optional[str], path: str) -> str:
    """Prefix a router basename onto an already normalized path."""
    if not basename:
        return path
    base = basename.rstrip("/")
    if not base:
        return path
    if not base.startswith("/"):
        base = "/" + base
    combined = base + ("" if path == "/" else path)
    return normalize_route_path(combined)


def file_route_path(route: str) -> str:
    """Normalize a file-system router path fragment into a route path.

    Grouping folders such as ``(marketing)`` disappear, ``[slug]`` becomes
    ``:slug`` and an ``index`` leaf collapses onto its parent.
    """
    result = _GROUP_SEGMENT.sub("", route)
    result = normalize_route_path(result)
    if result == "/index":
        return "/"
    if result.endswith("/index"):
        result = result[: -len("/index")] or "/"
    result = _DYNAMIC_SEGMENT.sub(r":\1", result)
    return normalize_route_path(result)


def segment_display_name(path: str, default: str = "Home") -> str:
    """Derive a label from the last non-empty path segment."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return default
    return capitalize(segments[-1])


def screen_name(path: str, component_name: Optional[str]) -> str:
    """Prefer the component name (minus Screen/Page), else the last path segment."""
    if component_name:
        stripped = _SCREEN_SUFFIX.sub("", component_name)
        return stripped or component_name
    segments = [segment for segment in path.split("/") if segment]
    segment = segments[-1] if segments else "index"
    name = segment.lstrip(":").replace("-", " ")
    return capitalize(name)


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


__all__ = [
    "apply_basename",
    "capitalize",
    "file_route_path",
    "normalize_route_path",
    "screen_name",
    "segment_display_name",
]
