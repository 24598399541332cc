"""Tests for engine settings and the command-line entry point."""

import json
import os
import tempfile

import ezdxf
import pytest

from ilotplan import cli
from ilotplan.layout import LayoutConfiguration
from ilotplan.settings import EngineSettings


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults_from_empty_env(self, monkeypatch):
        for name in ("ILOTPLAN_SEED", "ILOTPLAN_MAX_CONSECUTIVE_FAILURES", "ILOTPLAN_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = EngineSettings.from_env()
        assert settings.seed is None
        assert settings.max_consecutive_failures is None
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ILOTPLAN_SEED", "17")
        monkeypatch.setenv("ILOTPLAN_MAX_CONSECUTIVE_FAILURES", "0")
        monkeypatch.setenv("ILOTPLAN_LOG_LEVEL", "debug")
        settings = EngineSettings.from_env()
        assert settings.seed == 17
        assert settings.max_consecutive_failures == 0
        assert settings.log_level == "DEBUG"

    def test_apply_fills_missing_seed(self):
        config = EngineSettings(seed=5).apply(LayoutConfiguration())
        assert config.seed == 5

    def test_apply_keeps_config_seed(self):
        config = EngineSettings(seed=5).apply(LayoutConfiguration(seed=9))
        assert config.seed == 9

    def test_apply_failure_limit(self):
        settings = EngineSettings(max_consecutive_failures=20)
        assert settings.apply(LayoutConfiguration()).max_consecutive_failures == 20
        assert settings.apply(LayoutConfiguration(max_consecutive_failures=4)).max_consecutive_failures == 4

    def test_apply_keeps_explicit_failure_limit(self):
        settings = EngineSettings(max_consecutive_failures=20)
        explicit = LayoutConfiguration.from_dict({"maxConsecutiveFailures": 100})
        assert settings.apply(explicit).max_consecutive_failures == 100
        disabled = LayoutConfiguration.from_dict({"maxConsecutiveFailures": 0})
        assert settings.apply(disabled).max_consecutive_failures == 0

    def test_apply_without_limits_leaves_unset(self):
        assert EngineSettings().apply(LayoutConfiguration()).max_consecutive_failures is None


def write_entities(entities) -> str:
    fd, path = tempfile.mkstemp(suffix=".json")
    with os.fdopen(fd, "w") as f:
        json.dump(entities, f)
    return path


class TestCli:
    """Tests for the analyze command."""

    CONFIG = json.dumps({
        "ilotDistribution": {"size0to1": 0, "size1to3": 0, "size3to5": 0, "size5to10": 100},
        "maxConsecutiveFailures": 3,
    })

    def test_analyze_json_entities(self, capsys):
        path = write_entities([
            {"kind": "Polyline", "layerLabel": "A-WALL", "vertices": [[0, 0], [30, 0], [30, 30], [0, 30], [0, 0]]},
        ])
        try:
            assert cli.main(["analyze", path, "--config", self.CONFIG, "--seed", "4"]) == 0
        finally:
            os.unlink(path)
        data = json.loads(capsys.readouterr().out)
        assert data["totalIlots"] == len(data["ilotsPlaced"])
        assert data["bounds"] == {"minX": 0, "minY": 0, "maxX": 30, "maxY": 30}

    def test_analyze_dxf_to_output_file(self):
        doc = ezdxf.new("R2010")
        doc.layers.add("A-WALL")
        doc.modelspace().add_lwpolyline(
            [(0, 0), (30, 0), (30, 30), (0, 30)], close=True, dxfattribs={"layer": "A-WALL"}
        )
        fd, drawing = tempfile.mkstemp(suffix=".dxf")
        os.close(fd)
        doc.saveas(drawing)
        fd, output = tempfile.mkstemp(suffix=".json")
        os.close(fd)
        try:
            assert cli.main(["analyze", drawing, "--config", self.CONFIG, "--output", output]) == 0
            with open(output, "r", encoding="utf-8") as f:
                data = json.load(f)
            assert len(data["zonesDetected"]["walls"]) == 1
        finally:
            os.unlink(drawing)
            os.unlink(output)

    def test_config_from_file(self):
        fd, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(fd, "w") as f:
            f.write(self.CONFIG)
        try:
            assert cli._load_config(path)["maxConsecutiveFailures"] == 3
        finally:
            os.unlink(path)

    def test_missing_drawing(self):
        assert cli.main(["analyze", "/nonexistent/plan.dxf"]) == 1

    def test_invalid_config(self):
        path = write_entities([])
        try:
            assert cli.main(["analyze", path, "--config", json.dumps({"corridorWidth": -1})]) == 1
        finally:
            os.unlink(path)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
