"""In-memory project, configuration and analysis store."""

import dataclasses
import logging
import threading
from typing import Dict, List, Optional, Protocol

from .types import Analysis, ConfigurationRecord, Project

logger = logging.getLogger(__name__)


class AnalysisStore(Protocol):
    """Load/save interface the analysis processor depends on."""

    def get_project(self, project_id: str) -> Optional[Project]:
        ...

    def get_configuration(self, configuration_id: str) -> Optional[ConfigurationRecord]:
        ...

    def get_analysis(self, analysis_id: str) -> Optional[Analysis]:
        ...

    def update_analysis(self, analysis_id: str, **changes) -> Optional[Analysis]:
        ...


class InMemoryAnalysisStore:
    """Thread-safe dictionary store.

    Records are replaced whole on update, so readers never observe a
    partially written analysis.
    """

    def __init__(self):
        self._projects: Dict[str, Project] = {}
        self._configurations: Dict[str, ConfigurationRecord] = {}
        self._analyses: Dict[str, Analysis] = {}
        self._lock = threading.Lock()

    # Projects

    def create_project(self, project: Project) -> Project:
        with self._lock:
            self._projects[project.id] = project
        logger.info(f"Created project {project.id} ({len(project.entities)} entities)")
        return project

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            return self._projects.get(project_id)

    def delete_project(self, project_id: str) -> bool:
        with self._lock:
            if project_id not in self._projects:
                return False
            del self._projects[project_id]
        logger.info(f"Deleted project {project_id}")
        return True

    # Configurations

    def create_configuration(self, configuration: ConfigurationRecord) -> ConfigurationRecord:
        with self._lock:
            self._configurations[configuration.id] = configuration
        logger.info(f"Created configuration {configuration.id} for project {configuration.project_id}")
        return configuration

    def get_configuration(self, configuration_id: str) -> Optional[ConfigurationRecord]:
        with self._lock:
            return self._configurations.get(configuration_id)

    def list_configurations(self, project_id: str) -> List[ConfigurationRecord]:
        with self._lock:
            return [c for c in self._configurations.values() if c.project_id == project_id]

    # Analyses

    def create_analysis(self, analysis: Analysis) -> Analysis:
        with self._lock:
            self._analyses[analysis.id] = analysis
        logger.info(f"Created analysis {analysis.id} for project {analysis.project_id}")
        return analysis

    def get_analysis(self, analysis_id: str) -> Optional[Analysis]:
        with self._lock:
            return self._analyses.get(analysis_id)

    def update_analysis(self, analysis_id: str, **changes) -> Optional[Analysis]:
        """
        Replace an analysis with a copy carrying ``changes``.

        Args:
            analysis_id: Analysis ID to update
            **changes: Field values to set

        Returns:
            The new record, or None if the analysis does not exist
        """
        with self._lock:
            current = self._analyses.get(analysis_id)
            if current is None:
                return None
            updated = dataclasses.replace(current, **changes)
            self._analyses[analysis_id] = updated
            return updated

    def list_analyses(self, project_id: Optional[str] = None, status: Optional[str] = None) -> List[Analysis]:
        """List analyses, newest first, optionally filtered."""
        with self._lock:
            analyses = list(self._analyses.values())

        if project_id:
            analyses = [a for a in analyses if a.project_id == project_id]
        if status:
            analyses = [a for a in analyses if a.status == status]

        analyses.sort(key=lambda a: a.created_at, reverse=True)
        return analyses
