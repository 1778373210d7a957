"""Source retrieval collaborators that feed file contents to the analysis core."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Sequence

from .errors import RetrievalError
from .logging import get_logger

_LOGGER = get_logger("sources")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "dist",
    "build",
    ".next",
    ".nuxt",
    "coverage",
    ".screenflow",
}

_EXCLUDED_FILES = {".DS_Store", "Thumbs.db"}

LOCAL_REVISION = "local"


class SourceProvider(Protocol):
    """Anything that can list and read the files of a repository revision."""

    def revision(self, repo: str, branch: str) -> str: ...

    def list_files(self, repo: str, branch: str) -> List[str]: ...

    def read_file(self, repo: str, branch: str, path: str) -> str: ...


@dataclass
class IgnoreRule:
    """A single .gitignore style pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored or "/" in self.pattern:
            return fnmatchcase(rel_path, self.pattern) or rel_path.startswith(f"{self.pattern}/")
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None
    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]
    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]
    if not pattern:
        return None
    return IgnoreRule(pattern=pattern, directory_only=directory_only, anchored=anchored, negate=negate)


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RetrievalError(path.name, str(exc)) from exc
    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        rule = build_ignore_rule(line[1:] if negate else line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class LocalSourceProvider:
    """Reads a working tree from disk; ``repo`` is the checkout path.

    The branch argument is accepted for interface parity and otherwise ignored,
    the checkout on disk is analyzed as is.
    """

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self._extra_rules = [
            rule for rule in (build_ignore_rule(pattern) for pattern in exclude_paths) if rule is not None
        ]

    def revision(self, repo: str, branch: str) -> str:
        root = self._root(repo)
        try:
            completed = subprocess.run(
                ["git", "rev-parse", "HEAD"],
                cwd=root,
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            _LOGGER.debug("No git revision for %s: %s", root, exc)
            return LOCAL_REVISION
        sha = completed.stdout.strip()
        return sha or LOCAL_REVISION

    def list_files(self, repo: str, branch: str) -> List[str]:
        root = self._root(repo)
        rules = parse_gitignore(root / ".gitignore") + self._extra_rules
        files = sorted(path.relative_to(root).as_posix() for path in _iter_files(root, rules))
        _LOGGER.debug("Listed %d files under %s", len(files), root)
        return files

    def read_file(self, repo: str, branch: str, path: str) -> str:
        root = self._root(repo)
        target = (root / path).resolve()
        if root not in target.parents:
            raise RetrievalError(path, "path escapes the repository root")
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RetrievalError(path, str(exc)) from exc

    @staticmethod
    def _root(repo: str) -> Path:
        root = Path(repo).expanduser().resolve()
        if not root.is_dir():
            raise RetrievalError(repo, "repository path is not a directory")
        return root


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if name in _EXCLUDED_DIRS or should_ignore(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in filenames:
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


__all__ = [
    "IgnoreRule",
    "LOCAL_REVISION",
    "LocalSourceProvider",
    "SourceProvider",
    "build_ignore_rule",
    "parse_gitignore",
    "should_ignore",
]
