"""Tests for pipeline orchestration and stage failure reporting."""

from unittest.mock import MagicMock, patch

import ee
import pytest

import config
import main
from analysis import AnalysisError, analyze_suitability
from export import ExportError
from retrieval import DataUnavailableError
from suitability import SummaryError


@pytest.fixture
def stages():
    """Patch every stage used by main.run_pipeline."""
    with patch("main.load_climate_normals") as normals, \
            patch("main.load_soil_ph") as soil, \
            patch("main.build_suitability") as build, \
            patch("main.create_export_region") as region, \
            patch("main.summarize_suitability") as summarize, \
            patch("main.get_constraint_thumbnails") as thumbs, \
            patch("main.export_suitability") as export, \
            patch("main.wait_for_task") as wait:
        yield {
            "normals": normals,
            "soil": soil,
            "build": build,
            "region": region,
            "summarize": summarize,
            "thumbnails": thumbs,
            "export": export,
            "wait": wait,
        }


class TestRunPipeline:
    def test_stages_run_in_order_with_explicit_config(self, stages):
        results = main.run_pipeline()

        stages["build"].assert_called_once_with(
            stages["normals"].return_value,
            stages["soil"].return_value,
            config.CORN_THRESHOLDS,
        )
        stages["region"].assert_called_once_with(config.EXPORT_REGION)
        stages["export"].assert_called_once_with(
            stages["build"].return_value.suitability,
            config.DEFAULT_EXPORT,
            start_task=True,
        )
        stages["summarize"].assert_not_called()
        stages["thumbnails"].assert_not_called()
        stages["wait"].assert_not_called()
        assert results["export_task"] is stages["export"].return_value
        assert results["suitability"] is stages["build"].return_value.suitability

    def test_optional_steps(self, stages):
        stages["summarize"].return_value = {
            "suitable_pixels": 1, "evaluated_pixels": 2,
            "suitable_fraction": 0.5, "suitable_area_km2": 0.06,
        }
        results = main.run_pipeline(summarize=True, thumbnails=True,
                                    wait_for_export=True)
        assert results["summary"]["suitable_pixels"] == 1
        assert results["thumbnails"] is stages["thumbnails"].return_value
        assert results["export_completed"] is stages["wait"].return_value

    def test_load_failure_stops_before_export(self, stages):
        stages["normals"].side_effect = DataUnavailableError("no PRISM")
        with pytest.raises(DataUnavailableError):
            main.run_pipeline()
        stages["export"].assert_not_called()


class TestMain:
    def test_gee_setup_failure_exits(self):
        with patch("main.setup_gee", return_value=False):
            with pytest.raises(SystemExit) as excinfo:
                main.main([])
        assert excinfo.value.code == 1

    def test_reports_failed_stage(self, capsys):
        with patch("main.setup_gee", return_value=True), \
                patch("main.run_pipeline",
                      side_effect=ExportError("destination unreachable")):
            with pytest.raises(SystemExit) as excinfo:
                main.main([])
        assert excinfo.value.code == 1
        assert "stage 'export'" in capsys.readouterr().out

    def test_dry_run_does_not_start_export(self):
        with patch("main.setup_gee", return_value=True), \
                patch("main.run_pipeline", return_value={}) as run:
            main.main(["--dry-run"])
        assert run.call_args.kwargs["start_export"] is False


class TestAnalyzeSuitability:
    def test_overrides_reach_export_settings(self):
        task = MagicMock()
        task.status.return_value = {"id": "T1", "state": "READY",
                                    "description": "corn"}
        with patch("analysis.run_pipeline",
                   return_value={"export_task": task}) as run:
            output = analyze_suitability(region=[-90, 40, -89, 41], scale=500,
                                         description="corn")

        settings = run.call_args.args[1]
        assert settings.region == (-90, 40, -89, 41)
        assert settings.scale == 500
        assert settings.crs == config.EXPORT_CRS
        assert output["export"]["task"]["id"] == "T1"
        assert output["thresholds"]["kill_temp"] == 4

    def test_stage_errors_wrapped(self):
        with patch("analysis.run_pipeline",
                   side_effect=DataUnavailableError("soil missing")):
            with pytest.raises(AnalysisError) as excinfo:
                analyze_suitability()
        assert excinfo.value.stage == "load"
        assert "soil missing" in str(excinfo.value)


class TestOptionalStepFailures:
    def test_summary_runs_after_export_starts(self, stages):
        def summarize(*args, **kwargs):
            assert stages["export"].called
            return {"suitable_pixels": 0, "evaluated_pixels": 0,
                    "suitable_fraction": 0.0, "suitable_area_km2": 0.0}

        stages["summarize"].side_effect = summarize
        main.run_pipeline(summarize=True)
        stages["summarize"].assert_called_once()

    def test_summary_timeout_reports_stage(self, stages, capsys):
        stages["summarize"].side_effect = SummaryError(
            "Could not summarize suitability: Computation timed out."
        )
        with patch("main.setup_gee", return_value=True):
            with pytest.raises(SystemExit) as excinfo:
                main.main(["--summary"])

        assert excinfo.value.code == 1
        assert "Pipeline failed at stage 'summary'" in capsys.readouterr().out
        stages["export"].assert_called_once()

    def test_wait_failure_reports_export_stage(self, stages, capsys):
        stages["wait"].side_effect = ExportError(
            "Could not read export task status: Too many requests"
        )
        with patch("main.setup_gee", return_value=True):
            with pytest.raises(SystemExit) as excinfo:
                main.main(["--wait"])

        assert excinfo.value.code == 1
        assert "Pipeline failed at stage 'export'" in capsys.readouterr().out

    def test_bare_run_starts_export_without_extras(self, stages):
        with patch("main.setup_gee", return_value=True):
            main.main([])

        assert stages["export"].call_args.kwargs["start_task"] is True
        stages["summarize"].assert_not_called()
        stages["thumbnails"].assert_not_called()
        stages["wait"].assert_not_called()

    def test_api_summary_failure_has_stage(self):
        with patch("analysis.run_pipeline",
                   side_effect=SummaryError("Computation timed out.")):
            with pytest.raises(AnalysisError) as excinfo:
                analyze_suitability(summary=True)
        assert excinfo.value.stage == "summary"

    def test_api_task_status_failure_has_stage(self):
        task = MagicMock()
        task.status.side_effect = ee.EEException("Task not found")
        with patch("analysis.run_pipeline", return_value={"export_task": task}):
            with pytest.raises(AnalysisError) as excinfo:
                analyze_suitability()
        assert excinfo.value.stage == "export"
