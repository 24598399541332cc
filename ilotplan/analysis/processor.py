"""Analysis processor: runs the layout engine for a stored analysis."""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from ..errors import RecordNotFoundError
from ..layout.engine import LayoutEngine
from ..settings import EngineSettings
from .store import AnalysisStore
from .types import COMPLETED, FAILED, RUNNING, Analysis

logger = logging.getLogger(__name__)


class AnalysisProcessor:
    """Loads an analysis with its project and configuration, then runs it."""

    def __init__(
        self,
        store: AnalysisStore,
        engine: Optional[LayoutEngine] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Initialize the processor.

        Args:
            store: Store holding projects, configurations and analyses
            engine: Optional layout engine (creates one if not provided)
            settings: Optional engine settings (defaults when not provided)
        """
        self.store = store
        self.engine = engine or LayoutEngine()
        self.settings = settings or EngineSettings()

    def process(self, analysis_id: str) -> Analysis:
        """
        Run one analysis to completion.

        Args:
            analysis_id: ID of a stored analysis

        Returns:
            The completed analysis record

        Raises:
            RecordNotFoundError: If the analysis, its project or its
                configuration is missing. A found analysis is marked
                failed before the error propagates.
        """
        analysis = self.store.get_analysis(analysis_id)
        if analysis is None:
            raise RecordNotFoundError("analysis", analysis_id)

        self.store.update_analysis(analysis_id, status=RUNNING, error=None)
        logger.info(f"Processing analysis {analysis_id}")

        try:
            project = self.store.get_project(analysis.project_id)
            if project is None:
                raise RecordNotFoundError("project", analysis.project_id)

            configuration = self.store.get_configuration(analysis.configuration_id)
            if configuration is None:
                raise RecordNotFoundError("configuration", analysis.configuration_id)

            config = self.settings.apply(configuration.layout)
            result = self.engine.run(project.entities, config)
        except Exception as e:
            logger.error(f"Analysis {analysis_id} failed: {e}")
            self.store.update_analysis(
                analysis_id,
                status=FAILED,
                error=str(e),
                completed_at=datetime.now(),
            )
            raise

        updated = self.store.update_analysis(
            analysis_id,
            status=COMPLETED,
            result=result.to_dict(),
            completed_at=datetime.now(),
        )
        logger.info(
            f"Analysis {analysis_id} completed: {result.total_ilots} ilots, "
            f"coverage {result.coverage:.1%}"
        )
        return updated

    async def run(self, analysis_id: str) -> Analysis:
        """Run ``process`` in a worker thread."""
        return await asyncio.to_thread(self.process, analysis_id)
