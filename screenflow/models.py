"""Core data models shared across screenflow components."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

SCREEN_TYPES = ("page", "screen", "view", "cli-command")
FLOW_TYPES = ("ui-event", "function-call", "api-call", "db-query")


@dataclass(frozen=True)
class FileContent:
    """One repository file handed to the analysis core."""

    path: str
    content: str


@dataclass
class CodeFlow:
    """Behavioral unit recovered from source (event, function, HTTP or data call)."""

    id: str
    type: str
    name: str
    file: str
    line: int
    code: str
    calls: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Screen:
    """Logical page, view or command exposed by the analyzed application."""

    id: str
    name: str
    path: str
    file_path: str
    type: str
    framework: str
    flows: List[str] = field(default_factory=list)
    navigates_to: List[str] = field(default_factory=list)
    component_code: Optional[str] = None
    last_analyzed_commit: Optional[str] = None
    screenshot_status: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "filePath": self.file_path,
            "type": self.type,
            "flows": list(self.flows),
            "navigatesTo": list(self.navigates_to),
            "framework": self.framework,
        }
        if self.component_code is not None:
            data["componentCode"] = self.component_code
        if self.last_analyzed_commit is not None:
            data["lastAnalyzedCommit"] = self.last_analyzed_commit
        if self.screenshot_status is not None:
            data["screenshotStatus"] = self.screenshot_status
        return data

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Screen":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            path=str(payload.get("path", "/")),
            file_path=str(payload.get("filePath", "unknown")),
            type=str(payload.get("type", "page")),
            framework=str(payload.get("framework", "")),
            flows=[str(item) for item in payload.get("flows", []) or []],
            navigates_to=[str(item) for item in payload.get("navigatesTo", []) or []],
            component_code=payload.get("componentCode"),
            last_analyzed_commit=payload.get("lastAnalyzedCommit"),
            screenshot_status=payload.get("screenshotStatus"),
        )


@dataclass
class FrameworkDetectionResult:
    """Routing paradigms found in a repository and how sure we are about them."""

    detected: List[str] = field(default_factory=list)
    primary: Optional[str] = None
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": list(self.detected),
            "primary": self.primary,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FrameworkDetectionResult":
        detected = [str(item) for item in payload.get("detected", []) or []]
        primary = payload.get("primary")
        return cls(
            detected=detected,
            primary=str(primary) if primary is not None else None,
            confidence=float(payload.get("confidence", 0.0) or 0.0),
        )


@dataclass(frozen=True)
class FallbackRoute:
    """Statically configured route used when nothing else produced a screen."""

    path: str
    name: str


@dataclass
class AnalysisResult:
    """Value returned to callers of an analysis run."""

    analysis_id: str
    commit_sha: str
    screens: List[Screen]
    flows: List[CodeFlow]
    framework: FrameworkDetectionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysisId": self.analysis_id,
            "commitSha": self.commit_sha,
            "screens": [screen.to_dict() for screen in self.screens],
            "flows": [flow.to_dict() for flow in self.flows],
            "framework": self.framework.to_dict(),
        }


@dataclass
class AnalysisRecord:
    """Persisted form of one analysis run."""

    analysis_id: str
    repo: str
    branch: str
    commit_sha: str
    timestamp: str
    files_analyzed: int
    screens: List[Screen]
    flows: List[CodeFlow]
    framework: FrameworkDetectionResult

    @property
    def flows_count(self) -> int:
        return len(self.flows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysisId": self.analysis_id,
            "repo": self.repo,
            "branch": self.branch,
            "commitSha": self.commit_sha,
            "timestamp": self.timestamp,
            "filesAnalyzed": self.files_analyzed,
            "flowsCount": self.flows_count,
            "screens": [screen.to_dict() for screen in self.screens],
            "flows": [flow.to_dict() for flow in self.flows],
            "framework": self.framework.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AnalysisRecord":
        flows: List[CodeFlow] = []
        for raw in payload.get("flows", []) or []:
            if not isinstance(raw, dict):
                continue
            flows.append(
                CodeFlow(
                    id=str(raw.get("id", "")),
                    type=str(raw.get("type", "")),
                    name=str(raw.get("name", "")),
                    file=str(raw.get("file", "")),
                    line=int(raw.get("line", 0) or 0),
                    code=str(raw.get("code", "")),
                    calls=[str(item) for item in raw.get("calls", []) or []],
                )
            )
        screens = [
            Screen.from_dict(raw)
            for raw in payload.get("screens", []) or []
            if isinstance(raw, dict)
        ]
        framework_raw = payload.get("framework")
        framework = (
            FrameworkDetectionResult.from_dict(framework_raw)
            if isinstance(framework_raw, dict)
            else FrameworkDetectionResult()
        )
        return cls(
            analysis_id=str(payload.get("analysisId", "")),
            repo=str(payload.get("repo", "")),
            branch=str(payload.get("branch", "")),
            commit_sha=str(payload.get("commitSha", "")),
            timestamp=str(payload.get("timestamp", "")),
            files_analyzed=int(payload.get("filesAnalyzed", 0) or 0),
            screens=screens,
            flows=flows,
            framework=framework,
        )
