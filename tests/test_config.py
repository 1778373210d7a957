"""Tests for screenflow.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from screenflow.config import AnalysisConfig, ConfigError, ScreenflowConfig, load_config
from screenflow.models import FallbackRoute


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ScreenflowConfig)
    assert config.root == tmp_path.resolve()
    assert config.analysis == AnalysisConfig()
    assert config.analysis.file_limit == 200
    assert config.analysis.progress_log_every == 25
    assert config.analysis.single_page_fallback is True
    assert config.analysis.supported_extensions == ["ts", "tsx", "js", "jsx", "vue"]
    assert config.fallback_routes == []
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".screenflow.yml"
    config_file.write_text(
        """
analysis:
  file_limit: 50
  progress_log_every: 0
  single_page_fallback: false
  supported_extensions: [".TSX", vue]
  layout_wrappers: [ShellLayout]
fallback_routes:
  - {path: "/", name: "Home"}
  - {path: "/about", name: "About"}
  - {path: "/missing-name"}
exclude_paths:
  - "dist/"
  - "coverage/"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.analysis.file_limit == 50
    assert config.analysis.progress_log_every == 0
    assert config.analysis.single_page_fallback is False
    assert config.analysis.supported_extensions == ["tsx", "vue"]
    assert config.analysis.layout_wrappers == ["ShellLayout"]
    assert config.fallback_routes == [
        FallbackRoute(path="/", name="Home"),
        FallbackRoute(path="/about", name="About"),
    ]
    assert config.exclude_paths == ["dist/", "coverage/"]


def test_load_config_ignores_wrongly_typed_values(tmp_path: Path) -> None:
    (tmp_path / ".screenflow.yml").write_text(
        """
analysis:
  file_limit: many
  single_page_fallback: maybe
fallback_routes: "/"
unknown_section: {a: 1}
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.analysis.file_limit == 200
    assert config.analysis.single_page_fallback is True
    assert config.fallback_routes == []


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".screenflow.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".screenflow.yml").write_text("analysis: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / ".screenflow.yml").write_bytes(b"analysis:\n  file_limit: \xff\xfe\n")

    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path)


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".screenflow.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.analysis.file_limit == 200
