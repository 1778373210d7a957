"""Exception hierarchy for screenflow."""


class ScreenflowError(RuntimeError):
    """Base class for errors raised at screenflow's edges."""


class ConfigError(ScreenflowError):
    """Raised when the configuration file cannot be parsed."""


class RetrievalError(ScreenflowError):
    """Raised by a source provider when a file or revision cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path
        self.reason = reason


class AnalysisNotFoundError(ScreenflowError):
    """Raised when a stored analysis cannot be located."""

    def __init__(self, analysis_id: str) -> None:
        super().__init__(f"Analysis '{analysis_id}' not found")
        self.analysis_id = analysis_id


__all__ = [
    "AnalysisNotFoundError",
    "ConfigError",
    "RetrievalError",
    "ScreenflowError",
]
