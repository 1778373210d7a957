"""Tests for the analysis record stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from screenflow.errors import AnalysisNotFoundError
from screenflow.models import AnalysisRecord, CodeFlow, FrameworkDetectionResult, Screen
from screenflow.stores import InMemoryAnalysisStore, JsonAnalysisStore


def _record(analysis_id: str = "abc-123") -> AnalysisRecord:
    screen = Screen(
        id="screen:/",
        name="Home",
        path="/",
        file_path="app/page.tsx",
        type="page",
        framework="nextjs-app-router",
        flows=["app/page.tsx:3:event:onClick"],
        navigates_to=["/about"],
        last_analyzed_commit="deadbeef",
        screenshot_status="none",
    )
    flow = CodeFlow(
        id="app/page.tsx:3:event:onClick",
        type="ui-event",
        name="onClick",
        file="app/page.tsx",
        line=3,
        code="<button onClick={go}>",
    )
    return AnalysisRecord(
        analysis_id=analysis_id,
        repo="/tmp/repo",
        branch="main",
        commit_sha="deadbeef",
        timestamp="2026-01-01T00:00:00Z",
        files_analyzed=2,
        screens=[screen],
        flows=[flow],
        framework=FrameworkDetectionResult(detected=["next.js"], primary="next.js", confidence=0.95),
    )


def test_in_memory_store_round_trips_records() -> None:
    store = InMemoryAnalysisStore()
    record = _record()

    store.save(record.analysis_id, record)
    record.screens.clear()

    loaded = store.get("abc-123")
    assert loaded.to_dict() == _record().to_dict()
    assert loaded.flows_count == 1
    assert "abc-123" in store
    assert len(store) == 1


def test_in_memory_store_raises_for_unknown_id() -> None:
    with pytest.raises(AnalysisNotFoundError):
        InMemoryAnalysisStore().get("missing")


def test_json_store_writes_versioned_document(tmp_path: Path) -> None:
    store = JsonAnalysisStore(tmp_path / "analyses")
    record = _record()

    store.save(record.analysis_id, record)

    payload = json.loads((tmp_path / "analyses" / "abc-123.json").read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["record"]["screens"][0]["filePath"] == "app/page.tsx"
    assert payload["record"]["flowsCount"] == 1
    assert store.get("abc-123").to_dict() == record.to_dict()


def test_json_store_rejects_unknown_and_unsafe_ids(tmp_path: Path) -> None:
    store = JsonAnalysisStore(tmp_path)

    with pytest.raises(AnalysisNotFoundError):
        store.get("missing")
    with pytest.raises(AnalysisNotFoundError):
        store.get("../escape")


def test_json_store_ignores_unsupported_versions(tmp_path: Path) -> None:
    (tmp_path / "old.json").write_text(json.dumps({"version": 0, "record": {}}), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    store = JsonAnalysisStore(tmp_path)

    with pytest.raises(AnalysisNotFoundError):
        store.get("old")
    with pytest.raises(AnalysisNotFoundError):
        store.get("broken")
