"""Screen extraction strategies and the priority dispatcher that chooses between them.

Every strategy is a pure function ``Sequence[FileContent] -> List[Screen]``
that returns an empty list instead of raising when it finds nothing usable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .detection import (
    APP_ROUTER_PAGE,
    NEXT_APP_ROUTER,
    NEXT_PAGES_ROUTER,
    NUXT,
    NUXT_PAGE_FILE,
    PAGES_ROUTER_FILE,
    REACT_ROUTER,
    detect_frameworks,
    load_package_json,
)
from .navigation import extract_navigation_links
from .paths import (
    capitalize,
    file_route_path,
    normalize_route_path,
    screen_name,
    segment_display_name,
)
from .routes import LAYOUT_WRAPPERS, parse_routes
from .syntax import grammar_for, is_script_file
from ..config import ScreenflowConfig
from ..logging import get_logger
from ..models import FallbackRoute, FileContent, FrameworkDetectionResult, Screen

_LOGGER = get_logger("analyzers.screens")

ScreenStrategy = Callable[[Sequence[FileContent]], List[Screen]]

_APP_FILE = re.compile(r"(?:^|/)App\.(?:tsx?|jsx?)$")
_ENTRY_FILE = re.compile(r"(?:^|/)(?:App|main)\.(?:tsx?|jsx?)$")
_PAGES_SPECIAL = re.compile(r"(?:^|/)_(?:app|document|error)$|^api(?:/|$)")


@dataclass
class ScreenExtraction:
    """Screens recovered from a repository and the detection that guided them."""

    screens: List[Screen]
    framework: FrameworkDetectionResult


def extract_screens(
    files: Sequence[FileContent],
    config: Optional[ScreenflowConfig] = None,
    hints: Optional[FrameworkDetectionResult] = None,
) -> ScreenExtraction:
    """Run the strategy chain and keep the first non-empty result."""
    config = config or ScreenflowConfig()
    framework = hints if hints is not None else detect_frameworks(files)

    for label, strategy in strategy_chain(framework, config):
        screens = finalize_screens(strategy(files))
        if screens:
            _LOGGER.info("Screens extracted by %s strategy: %d", label, len(screens))
            return ScreenExtraction(screens=screens, framework=framework)
        _LOGGER.debug("Strategy %s produced no screens", label)

    _LOGGER.info("No strategy produced screens")
    return ScreenExtraction(screens=[], framework=framework)


def strategy_chain(
    framework: FrameworkDetectionResult, config: ScreenflowConfig
) -> List[Tuple[str, ScreenStrategy]]:
    """Return strategies in the order they should be tried."""
    chain: List[Tuple[str, ScreenStrategy]] = []
    detected = set(framework.detected)
    if framework.primary is not None:
        detected.add(framework.primary)

    if NEXT_APP_ROUTER in detected:
        chain.append((NEXT_APP_ROUTER, extract_app_router_screens))
    elif NEXT_PAGES_ROUTER in detected:
        chain.append((NEXT_PAGES_ROUTER, extract_pages_router_screens))
    elif REACT_ROUTER in detected:
        wrappers = LAYOUT_WRAPPERS | frozenset(config.analysis.layout_wrappers)
        chain.append((REACT_ROUTER, partial(extract_react_router_screens, layout_wrappers=wrappers)))
    elif NUXT in detected:
        chain.append((NUXT, extract_nuxt_screens))

    chain.append(("react-state", extract_state_screens))
    chain.append(("react-hash", extract_hash_screens))
    chain.append(("cli-commander", extract_cli_screens))
    chain.append(("heuristic", extract_heuristic_screens))
    if config.analysis.single_page_fallback:
        chain.append(("single-page", extract_single_page_screen))
    if config.fallback_routes:
        chain.append(("fallback", partial(fallback_route_screens, routes=config.fallback_routes)))
    return chain


def finalize_screens(screens: Iterable[Screen]) -> List[Screen]:
    """Normalize paths, drop wildcard routes and keep the first screen per id."""
    result: List[Screen] = []
    seen_ids = set()
    for screen in screens:
        if screen.path.strip() == "*":
            continue
        screen.path = normalize_route_path(screen.path)
        if screen.id in seen_ids:
            continue
        seen_ids.add(screen.id)
        result.append(screen)
    return result


# ---------------------------------------------------------------------------
# File-system routers
# ---------------------------------------------------------------------------


def _file_route_screen(file: FileContent, route: str, framework: str) -> Screen:
    path = file_route_path(route)
    return Screen(
        id=f"screen:{file.path}",
        name=segment_display_name(path),
        path=path,
        file_path=file.path,
        type="page",
        framework=framework,
        navigates_to=extract_navigation_links(file.content, file.path),
        component_code=file.content,
    )


def extract_app_router_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Next.js app router: one screen per ``app/**/page.*`` file."""
    screens: List[Screen] = []
    for file in files:
        match = APP_ROUTER_PAGE.search(file.path)
        if match:
            screens.append(_file_route_screen(file, match.group(1) or "", NEXT_APP_ROUTER))
    return screens


def extract_pages_router_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Next.js pages router: one screen per page module, skipping special files and API routes."""
    screens: List[Screen] = []
    for file in files:
        match = PAGES_ROUTER_FILE.match(file.path)
        if match and not _PAGES_SPECIAL.search(match.group(1)):
            screens.append(_file_route_screen(file, match.group(1), NEXT_PAGES_ROUTER))
    return screens


def extract_nuxt_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Nuxt: one screen per ``pages/**/*.vue`` file."""
    screens: List[Screen] = []
    for file in files:
        match = NUXT_PAGE_FILE.match(file.path)
        if match:
            screens.append(_file_route_screen(file, match.group(1), NUXT))
    return screens


# ---------------------------------------------------------------------------
# Declarative and object-config routers
# ---------------------------------------------------------------------------


def extract_react_router_screens(
    files: Sequence[FileContent],
    layout_wrappers: Iterable[str] = LAYOUT_WRAPPERS,
) -> List[Screen]:
    """React Router: nested ``<Route>`` trees and ``{ path, element }`` configs."""
    screens: List[Screen] = []
    seen: set[Tuple[str, str]] = set()
    for file in files:
        if "<Route" not in file.content and "path:" not in file.content:
            continue
        if not is_script_file(file.path):
            continue
        routes = parse_routes(
            file.content,
            grammar=grammar_for(file.path),
            layout_wrappers=layout_wrappers,
        )
        if not routes:
            continue
        navigates_to = extract_navigation_links(file.content, file.path)
        for route in routes:
            name = screen_name(route.path, route.component_name)
            key = (name, route.path)
            if key in seen:
                continue
            seen.add(key)
            screens.append(
                Screen(
                    id=f"screen:{name}:{route.path}",
                    name=name,
                    path=route.path,
                    file_path=file.path,
                    type="page",
                    framework=REACT_ROUTER,
                    navigates_to=list(navigates_to),
                )
            )
    return screens


# ---------------------------------------------------------------------------
# State-variable and hash-fragment switching
# ---------------------------------------------------------------------------

_STATE_DECLARATION = re.compile(
    r"\[\s*(\w+)\s*,\s*\w+\s*\]\s*=\s*(?:React\.)?useState\b"
)
_VIEW_VARIABLE = re.compile(r"^(?:current|active|selected)?(?:view|page|screen|tab|route)$", re.IGNORECASE)
_VIEW_SUFFIX = re.compile(r"(?:Screen|Page|View)$", re.IGNORECASE)


def _view_variables(content: str) -> List[str]:
    return [
        match.group(1)
        for match in _STATE_DECLARATION.finditer(content)
        if _VIEW_VARIABLE.match(match.group(1))
    ]


def _view_cases(content: str, variable: str) -> List[Tuple[str, str]]:
    cases: List[Tuple[str, str]] = []
    if re.search(rf"switch\s*\(\s*{re.escape(variable)}\s*\)", content):
        pattern = re.compile(
            r"case\s+[\"'`]([^\"'`]+)[\"'`]\s*:(?:(?!\bcase\s)[\s\S])*?return\s*\(?\s*<\s*([A-Z][\w.]*)"
        )
        cases.extend((m.group(1), m.group(2)) for m in pattern.finditer(content))
    conditional = re.compile(
        rf"\b{re.escape(variable)}\s*===?\s*[\"'`]([^\"'`]+)[\"'`]\s*&&\s*\(?\s*<\s*([A-Z][\w.]*)"
    )
    cases.extend((m.group(1), m.group(2)) for m in conditional.finditer(content))
    return cases


def extract_state_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Views selected by a ``useState`` variable and a switch/conditional render."""
    screens: List[Screen] = []
    seen_paths: set[str] = set()
    for file in files:
        if not _APP_FILE.search(file.path) or "useState" not in file.content:
            continue
        variables = _view_variables(file.content)
        if not variables:
            continue
        navigates_to = extract_navigation_links(file.content, file.path)
        for variable in variables:
            for segment, component in _view_cases(file.content, variable):
                slug = segment.strip().replace(" ", "-")
                path = normalize_route_path(f"/view/{slug}")
                if not slug or path in seen_paths:
                    continue
                seen_paths.add(path)
                name = _VIEW_SUFFIX.sub("", component.split(".")[-1]) or segment
                screens.append(
                    Screen(
                        id=f"screen:state:{slug}",
                        name=capitalize(name),
                        path=path,
                        file_path=file.path,
                        type="view",
                        framework="react-state",
                        navigates_to=list(navigates_to),
                    )
                )
    return screens


_PAGE_LIST = re.compile(
    r"\b(?:valid|allowed|known)(?:Pages|Routes|Views|Screens)\b[^=\n]*=\s*\[([^\]]*)\]"
)
_HASH_LITERAL = re.compile(r"[\"'`]#/([\w-]+)[\"'`]")


def _hash_pages(content: str) -> List[str]:
    match = _PAGE_LIST.search(content)
    if match:
        items = [item.strip().strip("\"'`") for item in match.group(1).split(",")]
        return [item for item in items if re.fullmatch(r"[\w-]+", item)]
    if "location.hash" in content:
        return [m.group(1) for m in _HASH_LITERAL.finditer(content)]
    return []


def extract_hash_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Pages switched on ``location.hash`` with an allow-list of page names."""
    screens: List[Screen] = []
    seen_paths: set[str] = set()
    for file in files:
        if not is_script_file(file.path):
            continue
        if "location.hash" not in file.content and "hashchange" not in file.content:
            continue
        pages = _hash_pages(file.content)
        if not pages:
            continue
        navigates_to = extract_navigation_links(file.content, file.path)
        for page in pages:
            path = f"/hash/{page}"
            if path in seen_paths:
                continue
            seen_paths.add(path)
            screens.append(
                Screen(
                    id=f"screen:hash:{page}",
                    name=capitalize(page.replace("-", " ")),
                    path=path,
                    file_path=file.path,
                    type="view",
                    framework="react-hash",
                    navigates_to=list(navigates_to),
                )
            )
    return screens


# ---------------------------------------------------------------------------
# Command-tree CLIs
# ---------------------------------------------------------------------------

_COMMAND_CALL = re.compile(r"(?:\b([A-Za-z_$][\w$]*)\s*)?\.command\s*\(\s*[\"'`]([^\"'`]+)[\"'`]")
_ASSIGNMENT_TAIL = re.compile(r"(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*$")
_COMMAND_MARKERS = ("program.command(", "cmd.command(", "new Command(")


def cli_binary_name(files: Sequence[FileContent]) -> str:
    """Return the executable name declared by package.json ``bin``, default ``cli``."""
    package = load_package_json(files)
    binary = package.get("bin")
    if isinstance(binary, dict) and binary:
        return str(next(iter(binary)))
    if isinstance(binary, str):
        name = package.get("name")
        if isinstance(name, str) and name:
            return name.split("/")[-1]
    return "cli"


def _command_paths(content: str) -> List[List[str]]:
    variables: Dict[str, List[str]] = {}
    commands: List[List[str]] = []
    for match in _COMMAND_CALL.finditer(content):
        receiver, declaration = match.group(1), match.group(2)
        token = declaration.strip().split()[0] if declaration.strip() else ""
        if not token or not re.match(r"[\w:-]+$", token):
            continue
        parent = variables.get(receiver or "", [])
        chain = parent + [token]
        line_start = content.rfind("\n", 0, match.start()) + 1
        assignment = _ASSIGNMENT_TAIL.search(content[line_start : match.start()])
        if assignment:
            variables[assignment.group(1)] = chain
        if chain not in commands:
            commands.append(chain)
    return commands


def extract_cli_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Commander-style CLIs: one screen per registered (sub)command."""
    binary = cli_binary_name(files)
    screens: List[Screen] = []
    seen_paths: set[str] = set()
    for file in files:
        if not is_script_file(file.path):
            continue
        if not any(marker in file.content for marker in _COMMAND_MARKERS):
            continue
        for chain in _command_paths(file.content):
            path = normalize_route_path("/" + "/".join([binary] + chain))
            if path in seen_paths:
                continue
            seen_paths.add(path)
            words = [word for part in chain for word in re.split(r"[-\s:]+", part) if word]
            screens.append(
                Screen(
                    id="screen:cli:" + ":".join([binary] + chain),
                    name=" ".join(capitalize(word) for word in words),
                    path=path,
                    file_path=file.path,
                    type="cli-command",
                    framework="cli-commander",
                )
            )
    return screens


# ---------------------------------------------------------------------------
# Heuristic, single-page and configured fallbacks
# ---------------------------------------------------------------------------

_SCREEN_FOLDER_FILE = re.compile(
    r"(?:^|/)(?:screens?|pages?|views?|routes?)/([^/]+?)(?:/index)?\.(?:tsx?|jsx?)$",
    re.IGNORECASE,
)
_COMPONENT_FILE = re.compile(r"/components?/([^/]+)\.(?:tsx?|jsx?)$")
_TEST_FILE = re.compile(r"\.(?:test|spec|stories)\.[jt]sx?$")
_ROUTE_SUFFIX = re.compile(r"(?:screen|page|view)$")


def _heuristic_route(name: str) -> str:
    slug = _ROUTE_SUFFIX.sub("", name.lower())
    if slug in {"", "index"}:
        return "/"
    return normalize_route_path(slug)


def _heuristic_screen(file: FileContent, name: str) -> Screen:
    return Screen(
        id=f"screen:{file.path}",
        name=name,
        path=_heuristic_route(name),
        file_path=file.path,
        type="screen",
        framework="heuristic",
        navigates_to=extract_navigation_links(file.content, file.path),
        component_code=file.content,
    )


def extract_heuristic_screens(files: Sequence[FileContent]) -> List[Screen]:
    """Classify page-like files by folder and component naming conventions."""
    screens: List[Screen] = []
    for file in files:
        if _TEST_FILE.search(file.path):
            continue
        if "/components/" not in file.path:
            match = _SCREEN_FOLDER_FILE.search(file.path)
            if match:
                screens.append(_heuristic_screen(file, capitalize(match.group(1))))
            continue
        if "/components/pages/" in file.path:
            continue
        match = _COMPONENT_FILE.search(file.path)
        if not match:
            continue
        component = match.group(1)
        if component[:1].isupper() and (
            component.endswith(("Screen", "Page", "View")) or len(component) > 8
        ):
            screens.append(_heuristic_screen(file, component))
    return screens


def _display_package_name(files: Sequence[FileContent]) -> str:
    name = load_package_json(files).get("name")
    if not isinstance(name, str) or not name.strip():
        return "App"
    bare = re.sub(r"^@[^/]+/", "", name.strip())
    words = re.sub(r"[-_]+", " ", bare).split()
    return " ".join(capitalize(word) for word in words) or "App"


def extract_single_page_screen(files: Sequence[FileContent]) -> List[Screen]:
    """Last-resort single root screen for apps without any routing signal."""
    entry = next((file for file in files if _ENTRY_FILE.search(file.path)), None)
    return [
        Screen(
            id="screen:single:app",
            name=_display_package_name(files),
            path="/",
            file_path=entry.path if entry else "unknown",
            type="screen",
            framework="single-page",
            navigates_to=extract_navigation_links(entry.content, entry.path) if entry else [],
        )
    ]


def fallback_route_screens(
    files: Sequence[FileContent], routes: Sequence[FallbackRoute] = ()
) -> List[Screen]:
    """Screens for the statically configured fallback routes."""
    return [
        Screen(
            id=f"screen:fallback:{route.path}",
            name=route.name,
            path=normalize_route_path(route.path),
            file_path="unknown",
            type="page",
            framework="fallback",
        )
        for route in routes
    ]


__all__ = [
    "ScreenExtraction",
    "ScreenStrategy",
    "cli_binary_name",
    "extract_app_router_screens",
    "extract_cli_screens",
    "extract_hash_screens",
    "extract_heuristic_screens",
    "extract_nuxt_screens",
    "extract_pages_router_screens",
    "extract_react_router_screens",
    "extract_screens",
    "extract_single_page_screen",
    "extract_state_screens",
    "fallback_route_screens",
    "finalize_screens",
    "strategy_chain",
]
