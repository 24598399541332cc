"""Stored analyses and the processor that runs them."""

from .processor import AnalysisProcessor
from .store import AnalysisStore, InMemoryAnalysisStore
from .types import (
    COMPLETED,
    FAILED,
    PENDING,
    RUNNING,
    Analysis,
    ConfigurationRecord,
    Project,
)

__all__ = [
    "Project",
    "ConfigurationRecord",
    "Analysis",
    "PENDING",
    "RUNNING",
    "COMPLETED",
    "FAILED",
    "AnalysisStore",
    "InMemoryAnalysisStore",
    "AnalysisProcessor",
]
