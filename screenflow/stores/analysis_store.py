"""Storage for finished analysis records keyed by analysis id."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..errors import AnalysisNotFoundError
from ..logging import get_logger
from ..models import AnalysisRecord

_LOGGER = get_logger("stores.analysis")

_STORE_VERSION = 1
_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class AnalysisStore(Protocol):
    def save(self, analysis_id: str, record: AnalysisRecord) -> None: ...

    def get(self, analysis_id: str) -> AnalysisRecord: ...


class InMemoryAnalysisStore:
    """Keeps records for the lifetime of the process."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, object]] = {}

    def save(self, analysis_id: str, record: AnalysisRecord) -> None:
        # Kept serialised; later changes to ``record`` do not leak into the store.
        self._records[analysis_id] = record.to_dict()

    def get(self, analysis_id: str) -> AnalysisRecord:
        payload = self._records.get(analysis_id)
        if payload is None:
            raise AnalysisNotFoundError(analysis_id)
        return AnalysisRecord.from_dict(payload)

    def __contains__(self, analysis_id: object) -> bool:
        return analysis_id in self._records

    def __len__(self) -> int:
        return len(self._records)


class JsonAnalysisStore:
    """Writes one versioned JSON document per analysis under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, analysis_id: str, record: AnalysisRecord) -> None:
        path = self._path_for(analysis_id)
        payload = {"version": _STORE_VERSION, "record": record.to_dict()}
        self._directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        _LOGGER.debug("Stored analysis %s at %s", analysis_id, path)

    def get(self, analysis_id: str) -> AnalysisRecord:
        payload = self._load(self._path_for(analysis_id))
        if payload is None:
            raise AnalysisNotFoundError(analysis_id)
        return AnalysisRecord.from_dict(payload)

    def _path_for(self, analysis_id: str) -> Path:
        if not _SAFE_ID.match(analysis_id):
            raise AnalysisNotFoundError(analysis_id)
        return self._directory / f"{analysis_id}.json"

    def _load(self, path: Path) -> Optional[Dict[str, object]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.warning("Unreadable analysis file %s: %s", path, exc)
            return None
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            _LOGGER.warning("Ignoring analysis file %s with unsupported version", path)
            return None
        record = data.get("record")
        if not isinstance(record, dict):
            return None
        return record


__all__ = ["AnalysisStore", "InMemoryAnalysisStore", "JsonAnalysisStore"]
