"""Tests for analysis records, the in-memory store and the processor."""

import pytest

from ilotplan.analysis import (
    COMPLETED,
    FAILED,
    PENDING,
    RUNNING,
    Analysis,
    AnalysisProcessor,
    ConfigurationRecord,
    InMemoryAnalysisStore,
    Project,
)
from ilotplan.errors import IlotPlanError, RecordNotFoundError
from ilotplan.layout import LayoutConfiguration
from ilotplan.settings import EngineSettings


OUTLINE = {
    "kind": "Polyline",
    "layerLabel": "A-WALL",
    "vertices": [[0, 0], [40, 0], [40, 30], [0, 30], [0, 0]],
}


@pytest.fixture
def store():
    return InMemoryAnalysisStore()


@pytest.fixture
def stored_analysis(store):
    project = store.create_project(Project(name="Office", entities=[OUTLINE]))
    configuration = store.create_configuration(
        ConfigurationRecord(
            project_id=project.id,
            layout=LayoutConfiguration.from_dict({"seed": 1, "maxConsecutiveFailures": 5}),
        )
    )
    return store.create_analysis(Analysis(project_id=project.id, configuration_id=configuration.id))


class TestRecords:
    """Tests for record serialization."""

    def test_analysis_defaults(self):
        analysis = Analysis(project_id="p1", configuration_id="c1")
        assert analysis.status == PENDING
        assert analysis.result is None
        assert analysis.is_complete is False
        assert analysis.total_ilots == 0

    def test_analysis_round_trip(self):
        analysis = Analysis(project_id="p1", configuration_id="c1", status=FAILED, error="boom")
        restored = Analysis.from_dict(analysis.to_dict())
        assert restored.id == analysis.id
        assert restored.status == FAILED
        assert restored.error == "boom"
        assert restored.created_at == analysis.created_at

    def test_configuration_record_uses_store_keys(self):
        record = ConfigurationRecord.from_dict({
            "id": "cfg",
            "project_id": "p1",
            "name": "Dense",
            "ilotDistribution": {"size0to1": 100, "size1to3": 0, "size3to5": 0, "size5to10": 0},
            "corridorWidth": 2.0,
        })
        assert record.layout.distribution == (100.0, 0.0, 0.0, 0.0)
        assert record.to_dict()["corridorWidth"] == 2.0
        assert record.to_dict()["name"] == "Dense"

    def test_project_round_trip(self):
        project = Project(name="Plan", entities=[OUTLINE], source_file="plan.dxf")
        restored = Project.from_dict(project.to_dict())
        assert restored.entities == [OUTLINE]
        assert restored.source_file == "plan.dxf"


class TestInMemoryAnalysisStore:
    """Tests for InMemoryAnalysisStore."""

    def test_get_missing(self, store):
        assert store.get_analysis("nope") is None
        assert store.get_project("nope") is None
        assert store.get_configuration("nope") is None

    def test_update_replaces_record(self, store):
        analysis = store.create_analysis(Analysis(project_id="p1"))
        updated = store.update_analysis(analysis.id, status=RUNNING)
        assert updated is not analysis
        assert analysis.status == PENDING
        assert store.get_analysis(analysis.id).status == RUNNING

    def test_update_missing(self, store):
        assert store.update_analysis("nope", status=RUNNING) is None

    def test_list_filters(self, store):
        store.create_analysis(Analysis(project_id="p1"))
        store.create_analysis(Analysis(project_id="p1", status=COMPLETED))
        store.create_analysis(Analysis(project_id="p2"))
        assert len(store.list_analyses()) == 3
        assert len(store.list_analyses(project_id="p1")) == 2
        assert len(store.list_analyses(project_id="p1", status=COMPLETED)) == 1

    def test_list_configurations(self, store):
        store.create_configuration(ConfigurationRecord(project_id="p1"))
        store.create_configuration(ConfigurationRecord(project_id="p2"))
        assert len(store.list_configurations("p1")) == 1

    def test_delete_project(self, store):
        project = store.create_project(Project(name="x"))
        assert store.delete_project(project.id) is True
        assert store.delete_project(project.id) is False


class TestAnalysisProcessor:
    """Tests for AnalysisProcessor."""

    def test_process_completes(self, store, stored_analysis):
        analysis = AnalysisProcessor(store).process(stored_analysis.id)
        assert analysis.status == COMPLETED
        assert analysis.completed_at is not None
        assert analysis.error is None
        assert analysis.total_ilots == analysis.result["totalIlots"]
        assert analysis.total_ilots > 0
        assert set(analysis.result["zonesDetected"]) == {"walls", "restricted", "entrances"}
        assert store.get_analysis(stored_analysis.id).status == COMPLETED

    def test_missing_analysis(self, store):
        with pytest.raises(RecordNotFoundError) as exc_info:
            AnalysisProcessor(store).process("missing")
        assert str(exc_info.value) == "Analysis not found: missing"
        assert exc_info.value.error_type == "not_found"

    def test_missing_project_marks_failed(self, store):
        analysis = store.create_analysis(Analysis(project_id="gone", configuration_id="c1"))
        with pytest.raises(RecordNotFoundError, match="Project not found: gone"):
            AnalysisProcessor(store).process(analysis.id)
        failed = store.get_analysis(analysis.id)
        assert failed.status == FAILED
        assert failed.error == "Project not found: gone"
        assert failed.completed_at is not None

    def test_missing_configuration_marks_failed(self, store):
        project = store.create_project(Project(name="Plan"))
        analysis = store.create_analysis(Analysis(project_id=project.id, configuration_id="gone"))
        with pytest.raises(IlotPlanError):
            AnalysisProcessor(store).process(analysis.id)
        assert store.get_analysis(analysis.id).status == FAILED
        assert store.get_analysis(analysis.id).error == "Configuration not found: gone"

    def test_settings_seed_applies_when_config_has_none(self, store):
        project = store.create_project(Project(name="Plan", entities=[OUTLINE]))
        configuration = store.create_configuration(
            ConfigurationRecord(project_id=project.id, layout=LayoutConfiguration(max_consecutive_failures=5))
        )
        processor = AnalysisProcessor(store, settings=EngineSettings(seed=21))
        results = []
        for _ in range(2):
            analysis = store.create_analysis(Analysis(project_id=project.id, configuration_id=configuration.id))
            results.append(processor.process(analysis.id).result["ilotsPlaced"])
        assert results[0] == results[1]

    def test_reprocess_clears_error(self, store, stored_analysis):
        store.update_analysis(stored_analysis.id, status=FAILED, error="earlier failure")
        analysis = AnalysisProcessor(store).process(stored_analysis.id)
        assert analysis.status == COMPLETED
        assert analysis.error is None

    @pytest.mark.asyncio
    async def test_run_async(self, store, stored_analysis):
        analysis = await AnalysisProcessor(store).run(stored_analysis.id)
        assert analysis.status == COMPLETED

    @pytest.mark.asyncio
    async def test_run_async_propagates_errors(self, store):
        with pytest.raises(RecordNotFoundError):
            await AnalysisProcessor(store).run("missing")
