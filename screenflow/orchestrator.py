"""Analysis pipeline: retrieve sources, extract screens and flows, persist the record."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Sequence

from .analyzers.flows import analyze_file, map_flows_to_screens
from .analyzers.screens import extract_screens
from .config import ScreenflowConfig, load_config
from .errors import RetrievalError
from .logging import get_logger
from .models import AnalysisRecord, AnalysisResult, CodeFlow, FileContent
from .sources import LocalSourceProvider, SourceProvider
from .stores import AnalysisStore, InMemoryAnalysisStore

MANIFEST_PATH = "package.json"


class Orchestrator:
    """Coordinates one analysis run across the source provider, the core and the store."""

    def __init__(
        self,
        source: SourceProvider | None = None,
        store: AnalysisStore | None = None,
        config: ScreenflowConfig | None = None,
    ) -> None:
        self._config_override = config
        self._source = source
        self.store = store or InMemoryAnalysisStore()
        self.logger = get_logger("orchestrator")

    def analyze(self, repo: str, branch: str = "main") -> AnalysisResult:
        """Analyze ``repo`` at ``branch`` and store the resulting record."""
        config = self._resolve_config(repo)
        source = self.source_for(config)
        self.logger.info("Starting analysis of %s (%s)", repo, branch)

        revision = source.revision(repo, branch)
        self.logger.debug("Resolved revision %s", revision)

        paths = self.select_paths(source.list_files(repo, branch), config)
        files = self._fetch_files(source, repo, branch, paths, config)

        sources = [file for file in files if file.path != MANIFEST_PATH]
        flows: List[CodeFlow] = []
        for file in sources:
            flows.extend(analyze_file(file.path, file.content))

        extraction = extract_screens(files, config)
        screens = map_flows_to_screens(extraction.screens, flows, revision)

        analysis_id = str(uuid.uuid4())
        record = AnalysisRecord(
            analysis_id=analysis_id,
            repo=repo,
            branch=branch,
            commit_sha=revision,
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            files_analyzed=len(sources),
            screens=screens,
            flows=flows,
            framework=extraction.framework,
        )
        self.store.save(analysis_id, record)
        self.logger.info(
            "Analysis %s complete: %d files, %d screens, %d flows",
            analysis_id,
            len(sources),
            len(screens),
            len(flows),
        )
        return AnalysisResult(
            analysis_id=analysis_id,
            commit_sha=revision,
            screens=screens,
            flows=flows,
            framework=extraction.framework,
        )

    def source_for(self, config: ScreenflowConfig) -> SourceProvider:
        """Return the injected provider, or a local one honouring ``exclude_paths``."""
        if self._source is not None:
            return self._source
        return LocalSourceProvider(config.exclude_paths)

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        """Return a stored record; raises ``AnalysisNotFoundError`` when unknown."""
        return self.store.get(analysis_id)

    @staticmethod
    def select_paths(paths: Sequence[str], config: ScreenflowConfig) -> List[str]:
        """Supported source files capped at ``file_limit``, with package.json first."""
        extensions = tuple(f".{ext.lower()}" for ext in config.analysis.supported_extensions)
        supported = [
            path for path in paths if path != MANIFEST_PATH and path.lower().endswith(extensions)
        ]
        selected = supported[: config.analysis.file_limit]
        if MANIFEST_PATH in paths:
            selected.insert(0, MANIFEST_PATH)
        return selected

    def _fetch_files(
        self, source: SourceProvider, repo: str, branch: str, paths: Sequence[str], config: ScreenflowConfig
    ) -> List[FileContent]:
        files: List[FileContent] = []
        every = config.analysis.progress_log_every
        for index, path in enumerate(paths, start=1):
            try:
                content = source.read_file(repo, branch, path)
            except RetrievalError as exc:
                self.logger.warning("Skipping %s: %s", path, exc.reason)
                continue
            files.append(FileContent(path=path, content=content))
            if every and index % every == 0:
                self.logger.info("Scanned %d/%d files", index, len(paths))
        return files

    def _resolve_config(self, repo: str) -> ScreenflowConfig:
        if self._config_override is not None:
            return self._config_override
        repo_path = Path(repo).expanduser()
        if repo_path.is_dir():
            return load_config(repo_path)
        return ScreenflowConfig()


__all__ = ["MANIFEST_PATH", "Orchestrator"]
