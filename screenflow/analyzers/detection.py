"""Routing paradigm detection from package.json, path shapes and source markers."""

from __future__ import annotations

import json
import re
from typing import Dict, List, Optional, Sequence

from ..logging import get_logger
from ..models import FileContent, FrameworkDetectionResult

_LOGGER = get_logger("analyzers.detection")

NEXT = "next.js"
REACT = "react"
REACT_ROUTER = "react-router"
NUXT = "nuxt"
CLI_COMMANDER = "cli-commander"
NEXT_APP_ROUTER = "nextjs-app-router"
NEXT_PAGES_ROUTER = "nextjs-pages-router"

APP_ROUTER_PAGE = re.compile(r"(?:^|/)app/(?:(.*)/)?page\.(?:tsx?|jsx?)$")
PAGES_ROUTER_FILE = re.compile(r"^pages/(.*)\.(?:tsx?|jsx?)$")
NUXT_PAGE_FILE = re.compile(r"^pages/(.*)\.vue$")

_ROUTER_MARKERS = ("createBrowserRouter", "<Routes>", "<Route")
_COMMAND_MARKERS = ("program.command(", "cmd.command(")

# dependency -> (label, confidence); None leaves confidence untouched.
_MANIFEST_SIGNALS = (
    ("next", NEXT, 0.95),
    ("react", REACT, None),
    ("react-dom", REACT, None),
    ("react-router-dom", REACT_ROUTER, 0.85),
    ("react-router", REACT_ROUTER, 0.85),
    ("nuxt", NUXT, 0.95),
    ("commander", CLI_COMMANDER, 0.8),
)


class _Detection:
    def __init__(self) -> None:
        self.detected: List[str] = []
        self.confidence = 0.0

    def add(self, label: str, confidence: Optional[float] = None) -> None:
        if label not in self.detected:
            self.detected.append(label)
        if confidence is not None:
            self.confidence = max(self.confidence, confidence)

    def result(self) -> FrameworkDetectionResult:
        primary = self.detected[0] if self.detected else None
        return FrameworkDetectionResult(
            detected=list(self.detected), primary=primary, confidence=self.confidence
        )


def find_package_json(files: Sequence[FileContent]) -> Optional[FileContent]:
    return next((file for file in files if file.path == "package.json"), None)


def load_package_json(files: Sequence[FileContent]) -> Dict[str, object]:
    """Return the parsed root package.json, or an empty dict when absent or invalid."""
    manifest = find_package_json(files)
    if manifest is None:
        return {}
    try:
        data = json.loads(manifest.content)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Failed to parse package.json: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def manifest_dependencies(package: Dict[str, object]) -> Dict[str, str]:
    """Merge dependencies and devDependencies, ignoring non-string versions."""
    merged: Dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        section = package.get(key)
        if not isinstance(section, dict):
            continue
        for name, version in section.items():
            if isinstance(name, str) and isinstance(version, str):
                merged[name] = version
    return merged


def detect_frameworks(files: Sequence[FileContent]) -> FrameworkDetectionResult:
    """Decide which routing paradigms are in play and how confident we are."""
    detection = _Detection()

    dependencies = manifest_dependencies(load_package_json(files))
    for dependency, label, confidence in _MANIFEST_SIGNALS:
        if dependency in dependencies:
            detection.add(label, confidence)

    paths = [file.path for file in files]
    if any(APP_ROUTER_PAGE.search(path) for path in paths):
        detection.add(NEXT)
        detection.add(NEXT_APP_ROUTER, 0.95)
    if any(PAGES_ROUTER_FILE.match(path) for path in paths):
        detection.add(NEXT)
        detection.add(NEXT_PAGES_ROUTER, 0.95)
    if any(NUXT_PAGE_FILE.match(path) for path in paths):
        detection.add(NUXT, 0.95)

    if any(marker in file.content for file in files for marker in _ROUTER_MARKERS):
        detection.add(REACT_ROUTER, 0.85)
    if any(marker in file.content for file in files for marker in _COMMAND_MARKERS):
        detection.add(CLI_COMMANDER, 0.8)

    result = detection.result()
    _LOGGER.info(
        "Frameworks detected: %s (confidence %.2f)",
        ", ".join(result.detected) or "none",
        result.confidence,
    )
    return result


__all__ = [
    "APP_ROUTER_PAGE",
    "CLI_COMMANDER",
    "NEXT",
    "NEXT_APP_ROUTER",
    "NEXT_PAGES_ROUTER",
    "NUXT",
    "NUXT_PAGE_FILE",
    "PAGES_ROUTER_FILE",
    "REACT",
    "REACT_ROUTER",
    "detect_frameworks",
    "find_package_json",
    "load_package_json",
    "manifest_dependencies",
]
