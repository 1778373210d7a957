"""Route path normalization helpers."""

from __future__ import annotations

import pytest

from screenflow.analyzers.paths import (
    apply_basename,
    file_route_path,
    normalize_route_path,
    screen_name,
    segment_display_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("", "/"), ("*", "/"), ("users//list/", "/users/list"), ("/", "/")],
)
def test_normalize_route_path(raw: str, expected: str) -> None:
    assert normalize_route_path(raw) == expected


@pytest.mark.parametrize(
    ("fragment", "expected"),
    [
        ("index", "/"),
        ("(shop)/cart/index", "/cart"),
        ("blog/[slug]", "/blog/:slug"),
        ("docs/[...parts]", "/docs/:parts"),
        ("docs/[[...slug]]", "/docs/:slug"),
    ],
)
def test_file_route_path(fragment: str, expected: str) -> None:
    assert file_route_path(fragment) == expected


def test_apply_basename() -> None:
    assert apply_basename("/app/", "/") == "/app"
    assert apply_basename("app", "/users") == "/app/users"
    assert apply_basename(None, "/users") == "/users"


def test_names() -> None:
    assert segment_display_name("/") == "Home"
    assert segment_display_name("/team") == "Team"
    assert screen_name("/x", "ProfilePage") == "Profile"
    assert screen_name("/users/:user-id", None) == "User id"
