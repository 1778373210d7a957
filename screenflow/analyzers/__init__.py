"""Analysis core: framework detection, screen strategies, navigation and flows."""

from __future__ import annotations

from .detection import detect_frameworks
from .flows import analyze_file, map_flows_to_screens
from .navigation import extract_navigation_links
from .screens import ScreenExtraction, extract_screens, strategy_chain

__all__ = [
    "ScreenExtraction",
    "analyze_file",
    "detect_frameworks",
    "extract_navigation_links",
    "extract_screens",
    "map_flows_to_screens",
    "strategy_chain",
]
