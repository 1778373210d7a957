"""Screen extraction strategies and the dispatcher that picks between them."""

from __future__ import annotations

import json
import re

from screenflow.analyzers.detection import NEXT_APP_ROUTER, REACT_ROUTER
from screenflow.analyzers.screens import (
    extract_app_router_screens,
    extract_cli_screens,
    extract_hash_screens,
    extract_heuristic_screens,
    extract_nuxt_screens,
    extract_pages_router_screens,
    extract_react_router_screens,
    extract_screens,
    extract_single_page_screen,
    extract_state_screens,
    fallback_route_screens,
    finalize_screens,
    strategy_chain,
)
from screenflow.config import AnalysisConfig, ScreenflowConfig
from screenflow.models import FallbackRoute, FileContent, FrameworkDetectionResult, Screen
from tests._fixtures.repo_builder import file_contents

_PATH_SHAPE = re.compile(r"^/(?:[^/]+(?:/[^/]+)*)?$")


def _assert_normalized(screens: list[Screen]) -> None:
    for screen in screens:
        assert _PATH_SHAPE.match(screen.path), screen.path
    assert len({screen.id for screen in screens}) == len(screens)


def test_app_router_screens_normalize_groups_and_dynamic_segments() -> None:
    files = file_contents(
        {
            "app/page.tsx": "export default function Home() { return <Link href='/blog'>Blog</Link> }",
            "app/(marketing)/about/page.tsx": "export default () => null",
            "app/blog/[slug]/page.tsx": "export default () => null",
            "app/layout.tsx": "export default ({ children }) => children",
        }
    )

    screens = extract_app_router_screens(files)

    assert [(screen.path, screen.name) for screen in screens] == [
        ("/", "Home"),
        ("/about", "About"),
        ("/blog/:slug", ":slug"),
    ]
    assert screens[0].navigates_to == ["/blog"]
    assert screens[0].framework == NEXT_APP_ROUTER
    assert screens[0].component_code is not None
    _assert_normalized(screens)


def test_pages_router_skips_special_files_and_api_routes() -> None:
    files = file_contents(
        {
            "pages/index.tsx": "",
            "pages/_app.tsx": "",
            "pages/api/users.ts": "",
            "pages/settings/profile.tsx": "",
        }
    )

    screens = extract_pages_router_screens(files)

    assert [screen.path for screen in screens] == ["/", "/settings/profile"]


def test_nuxt_pages_become_screens() -> None:
    files = file_contents({"pages/index.vue": "", "pages/users/[id].vue": ""})

    screens = extract_nuxt_screens(files)

    assert [screen.path for screen in screens] == ["/", "/users/:id"]


def test_react_router_screens_carry_names_and_links() -> None:
    files = file_contents(
        {
            "src/App.tsx": """
            export function App() {
              return (
                <Routes>
                  <Route path="/" element={<HomePage />} />
                  <Route path="/settings" element={<SettingsScreen />} />
                  <Route path="/users/:userId" element={<Suspense />} />
                </Routes>
              );
            }
            const go = () => navigate("/settings");
            """
        }
    )

    screens = extract_react_router_screens(files)

    assert [(screen.name, screen.path) for screen in screens] == [
        ("Home", "/"),
        ("Settings", "/settings"),
        ("UserId", "/users/:userId"),
    ]
    assert screens[1].id == "screen:Settings:/settings"
    assert all(screen.navigates_to == ["/settings"] for screen in screens)
    assert all(screen.framework == REACT_ROUTER for screen in screens)


def test_state_screens_from_switch_on_view_variable() -> None:
    files = file_contents(
        {
            "src/App.tsx": """
            export default function App() {
              const [view, setView] = useState("home");
              switch (view) {
                case "home":
                  return <HomeScreen />;
                case "reports":
                  return <ReportsView />;
              }
              return null;
            }
            """
        }
    )

    screens = extract_state_screens(files)

    assert [(screen.path, screen.name, screen.id) for screen in screens] == [
        ("/view/home", "Home", "screen:state:home"),
        ("/view/reports", "Reports", "screen:state:reports"),
    ]
    assert all(screen.type == "view" for screen in screens)


def test_hash_screens_from_allow_list() -> None:
    files = file_contents(
        {
            "src/main.ts": """
            const validPages = ["home", "team-list"];
            window.addEventListener("hashchange", () => render(location.hash));
            """
        }
    )

    screens = extract_hash_screens(files)

    assert [(screen.path, screen.name) for screen in screens] == [
        ("/hash/home", "Home"),
        ("/hash/team-list", "Team list"),
    ]


def test_cli_screens_follow_subcommand_variables() -> None:
    files = file_contents(
        {
            "package.json": json.dumps({"name": "tool", "bin": {"tool": "bin/tool.js"}}),
            "bin/tool.js": """
            const program = new Command();
            program.command("init").action(init);
            const remote = program.command("remote");
            remote.command("add <name>").action(add);
            """,
        }
    )

    screens = extract_cli_screens(files)

    assert [(screen.path, screen.id) for screen in screens] == [
        ("/tool/init", "screen:cli:tool:init"),
        ("/tool/remote", "screen:cli:tool:remote"),
        ("/tool/remote/add", "screen:cli:tool:remote:add"),
    ]
    assert screens[2].name == "Remote Add"
    assert all(screen.type == "cli-command" for screen in screens)


def test_heuristic_screens_from_folders_and_component_names() -> None:
    files = file_contents(
        {
            "src/screens/Dashboard.tsx": "",
            "src/components/UserProfilePage.tsx": "",
            "src/components/Button.tsx": "",
            "src/screens/Dashboard.test.tsx": "",
        }
    )

    screens = extract_heuristic_screens(files)

    assert [(screen.name, screen.path) for screen in screens] == [
        ("Dashboard", "/dashboard"),
        ("UserProfilePage", "/userprofile"),
    ]


def test_single_page_screen_uses_package_name() -> None:
    files = file_contents(
        {
            "package.json": json.dumps({"name": "@acme/my-widget"}),
            "src/main.tsx": "render(<App />)",
        }
    )

    screens = extract_single_page_screen(files)

    assert len(screens) == 1
    assert screens[0].name == "My Widget"
    assert screens[0].path == "/"
    assert screens[0].file_path == "src/main.tsx"


def test_fallback_route_screens() -> None:
    screens = fallback_route_screens([], [FallbackRoute(path="about/", name="About")])

    assert screens[0].path == "/about"
    assert screens[0].file_path == "unknown"


def test_finalize_screens_drops_wildcards_and_duplicate_ids() -> None:
    screens = [
        Screen(id="a", name="A", path="//a/", file_path="x", type="page", framework="f"),
        Screen(id="a", name="A2", path="/a2", file_path="x", type="page", framework="f"),
        Screen(id="b", name="B", path="*", file_path="x", type="page", framework="f"),
    ]

    result = finalize_screens(screens)

    assert [(screen.id, screen.path) for screen in result] == [("a", "/a")]


def test_dispatcher_prefers_detected_router() -> None:
    files = file_contents(
        {
            "package.json": json.dumps({"dependencies": {"next": "14"}}),
            "app/page.tsx": "export default () => null",
            "src/screens/Legacy.tsx": "",
        }
    )

    extraction = extract_screens(files)

    assert extraction.framework.primary == "next.js"
    assert [screen.framework for screen in extraction.screens] == [NEXT_APP_ROUTER]


def test_dispatcher_falls_through_to_heuristics() -> None:
    files = file_contents({"src/pages/Reports.tsx": "export const Reports = () => null"})

    extraction = extract_screens(files)

    assert [screen.framework for screen in extraction.screens] == ["heuristic"]


def test_dispatcher_single_page_is_last_resort() -> None:
    files = file_contents({"src/index.ts": "console.log('hi')"})

    extraction = extract_screens(files)

    assert [screen.id for screen in extraction.screens] == ["screen:single:app"]
    assert extraction.screens[0].file_path == "unknown"


def test_dispatcher_uses_configured_fallback_when_single_page_disabled() -> None:
    config = ScreenflowConfig(
        analysis=AnalysisConfig(single_page_fallback=False),
        fallback_routes=[FallbackRoute(path="/", name="Start")],
    )

    extraction = extract_screens([], config)

    assert [screen.name for screen in extraction.screens] == ["Start"]


def test_dispatcher_returns_nothing_when_all_fallbacks_disabled() -> None:
    config = ScreenflowConfig(analysis=AnalysisConfig(single_page_fallback=False))

    assert extract_screens([], config).screens == []


def test_hints_override_detection() -> None:
    files = file_contents({"app/page.tsx": "export default () => null"})
    hints = FrameworkDetectionResult(detected=["react"], primary="react", confidence=0.1)

    extraction = extract_screens(files, hints=hints)

    assert extraction.framework is hints
    assert all(screen.framework != NEXT_APP_ROUTER for screen in extraction.screens)


def test_strategy_chain_order() -> None:
    framework = FrameworkDetectionResult(detected=[REACT_ROUTER], primary=REACT_ROUTER)

    labels = [label for label, _ in strategy_chain(framework, ScreenflowConfig())]

    assert labels == [
        REACT_ROUTER,
        "react-state",
        "react-hash",
        "cli-commander",
        "heuristic",
        "single-page",
    ]


def test_extraction_is_idempotent() -> None:
    files = file_contents(
        {
            "src/App.tsx": """
            <Routes>
              <Route path="/a" element={<A />} />
              <Route path="/b" element={<B />} />
            </Routes>
            """
        }
    )

    first = extract_screens(files)
    second = extract_screens(files)

    assert [screen.to_dict() for screen in first.screens] == [
        screen.to_dict() for screen in second.screens
    ]
    _assert_normalized(first.screens)


def test_unencodable_source_does_not_break_extraction() -> None:
    files = [FileContent(path="src/A.tsx", content='export const A = () => <Link to="/a">\ud800</Link>;')]

    extraction = extract_screens(files)

    assert extraction.screens
    _assert_normalized(extraction.screens)
