"""Persistence collaborators for analysis records."""

from .analysis_store import AnalysisStore, InMemoryAnalysisStore, JsonAnalysisStore

__all__ = ["AnalysisStore", "InMemoryAnalysisStore", "JsonAnalysisStore"]
