"""Navigation link extraction."""

from __future__ import annotations

from screenflow.analyzers.navigation import extract_navigation_links, is_absolute_path
from tests._fixtures.repo_builder import dedent


def test_ast_links_in_order_of_first_appearance() -> None:
    content = dedent(
        """
        export function Nav() {
          const router = useRouter();
          const open = () => router.push("/reports");
          return (
            <nav>
              <Link to="/settings">Settings</Link>
              <NavLink href="/reports">Reports</NavLink>
              <a href="https://example.com">External</a>
              <a href="//cdn.example.com/x">Cdn</a>
              <Link to={`/users`}>Users</Link>
              <Link to={`/users/${id}`}>User</Link>
            </nav>
          );
        }
        """
    )

    assert extract_navigation_links(content, "src/Nav.tsx") == ["/reports", "/settings", "/users"]


def test_navigation_calls_are_recognised() -> None:
    content = dedent(
        """
        function go() {
          navigate("/home");
          history.replace("/login");
          navigation.navigate("Details");
          redirect("/done");
        }
        """
    )

    assert extract_navigation_links(content, "src/go.js") == ["/home", "/login", "/done"]


def test_pattern_fallback_when_source_does_not_parse() -> None:
    content = dedent(
        """
        <div>
          <Link to="/a">A</Link>
          {router.push('/b')
          <a href="/a">again</a>
          navigate(`/c/${id}`)
        """
    )

    assert extract_navigation_links(content) == ["/a", "/b"]


def test_is_absolute_path() -> None:
    assert is_absolute_path("/x")
    assert not is_absolute_path("//x")
    assert not is_absolute_path("x")
    assert not is_absolute_path("/javascript:alert(1)")


def test_unencodable_source_uses_pattern_fallback() -> None:
    content = 'export const A = () => <Link to="/a">\ud800</Link>;'

    assert extract_navigation_links(content, "src/A.tsx") == ["/a"]
