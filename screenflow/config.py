"""Configuration loading for screenflow (.screenflow.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .models import FallbackRoute

CONFIG_FILENAME = ".screenflow.yml"

DEFAULT_FILE_LIMIT = 200
DEFAULT_PROGRESS_LOG_EVERY = 25
DEFAULT_SUPPORTED_EXTENSIONS = ("ts", "tsx", "js", "jsx", "vue")


@dataclass
class AnalysisConfig:
    """Limits and switches for a single analysis run."""

    file_limit: int = DEFAULT_FILE_LIMIT
    progress_log_every: int = DEFAULT_PROGRESS_LOG_EVERY
    single_page_fallback: bool = True
    supported_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_EXTENSIONS)
    )
    layout_wrappers: List[str] = field(default_factory=list)


@dataclass
class ScreenflowConfig:
    """Represents the settings defined in .screenflow.yml."""

    root: Optional[Path] = None
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    fallback_routes: List[FallbackRoute] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> ScreenflowConfig:
    """Load configuration from disk, returning defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ScreenflowConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    analysis_data = _as_dict(data.get("analysis"))
    analysis = AnalysisConfig()
    if analysis_data:
        file_limit = _as_int(analysis_data.get("file_limit"))
        if file_limit is not None and file_limit >= 0:
            analysis.file_limit = file_limit
        log_every = _as_int(analysis_data.get("progress_log_every"))
        if log_every is not None and log_every >= 0:
            analysis.progress_log_every = log_every
        single_page = _as_bool(analysis_data.get("single_page_fallback"))
        if single_page is not None:
            analysis.single_page_fallback = single_page
        extensions = _as_str_list(analysis_data.get("supported_extensions"))
        if extensions:
            analysis.supported_extensions = [ext.lower().lstrip(".") for ext in extensions]
        analysis.layout_wrappers = _as_str_list(analysis_data.get("layout_wrappers"))

    fallback_routes = _parse_fallback_routes(data.get("fallback_routes"))
    exclude_paths = _as_str_list(data.get("exclude_paths"))

    return ScreenflowConfig(
        root=root,
        analysis=analysis,
        fallback_routes=fallback_routes,
        exclude_paths=exclude_paths,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _parse_fallback_routes(value: Any) -> List[FallbackRoute]:
    if not isinstance(value, list):
        return []
    routes: List[FallbackRoute] = []
    for item in value:
        entry = _as_dict(item)
        path = _as_str(entry.get("path"))
        name = _as_str(entry.get("name"))
        if not path or not name:
            continue
        routes.append(FallbackRoute(path=path, name=name))
    return routes


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "ScreenflowConfig",
    "load_config",
]
