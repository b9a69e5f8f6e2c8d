"""Integration tests for the export pipeline on real threads.

Runs ExportCoordinator with its own ThreadPoolExecutor and threading.Timer
debouncing against real SQLite stores.
"""

from __future__ import annotations

import json
import sqlite3
import threading
import zipfile
from pathlib import Path

import pytest

from config.settings import ShareConfig
from logshare import pipeline
from logshare.io.settings_store import SharingSettingsStore
from logshare.models.options import ExportFormat, ExportOptions, SeverityLevel, TimeRange
from logshare.sharing.coordinator import CoordinatorState, ExportCoordinator
from logshare.sharing.presenter import CallbackPresenter, SaveAsPresenter

_TIMEOUT = 10.0


@pytest.fixture
def fast_config(tmp_path):
    return ShareConfig(
        debounce_seconds=0.05,
        temp_root=str(tmp_path / "exports-tmp"),
        settings_path=str(tmp_path / "sharing.json"),
    )


def _live_dirs(config):
    root = Path(config.temp_root)
    return [p for p in root.iterdir() if p.is_dir()] if root.exists() else []


class TestExportScenarios:
    def test_today_errors_as_text(self, scenario_store, fast_config, fixed_builder):
        """3 records today (2 errors) + 5 yesterday -> exactly 2 error blocks."""
        options = ExportOptions(TimeRange.TODAY, SeverityLevel.ERROR, ExportFormat.TEXT)
        with ExportCoordinator(config=fast_config, filter_builder=fixed_builder, options=options) as coord:
            coord.display(scenario_store)
            assert coord.wait_until_idle(_TIMEOUT)

            handle = coord.share_state.result
            text = handle.path.read_text(encoding="utf-8")

        assert text.count("[ERROR]") == 2
        assert "disk almost full" in text and "payment declined" in text
        assert "old message" not in text
        assert handle.path.name.startswith("logs-")
        assert handle.is_released

    def test_empty_store_container(self, empty_store, fast_config):
        options = ExportOptions(TimeRange.ALL, SeverityLevel.TRACE, ExportFormat.CONTAINER)
        with ExportCoordinator(config=fast_config, options=options) as coord:
            coord.display(empty_store)
            assert coord.wait_until_idle(_TIMEOUT)

            handle = coord.share_state.result
            assert handle.size > 0
            assert handle.info is not None
            assert handle.info.message_count == 0
            with zipfile.ZipFile(handle.path) as archive:
                info = json.loads(archive.read("info.json"))
        assert info["message_count"] == 0

    def test_current_session_container(self, scenario_store, fast_config, tmp_path):
        with ExportCoordinator(config=fast_config, options=ExportOptions()) as coord:
            coord.display(scenario_store)
            assert coord.wait_until_idle(_TIMEOUT)
            handle = coord.share_state.result

            extract = tmp_path / "extract"
            with zipfile.ZipFile(handle.path) as archive:
                archive.extractall(extract)

        conn = sqlite3.connect(str(extract / "logs.sqlite"))
        try:
            sessions = conn.execute("SELECT DISTINCT session_id FROM messages").fetchall()
            count = conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]
        finally:
            conn.close()
        assert sessions == [("session-current",)]
        assert count == 3


class TestConcurrentBehaviour:
    def test_format_switch_mid_flight(self, scenario_store, fast_config, fixed_builder, monkeypatch):
        """Result is never shown in the old format once the switch is requested."""
        gate = threading.Event()
        real_prepare = pipeline.prepare_artifact

        def gated_prepare(job, store, directory, **kwargs):
            gate.wait(_TIMEOUT)
            return real_prepare(job, store, directory, **kwargs)

        monkeypatch.setattr("logshare.pipeline.prepare_artifact", gated_prepare)
        observed = []
        options = ExportOptions(TimeRange.ALL, SeverityLevel.TRACE, ExportFormat.CONTAINER)
        with ExportCoordinator(config=fast_config, filter_builder=fixed_builder, options=options) as coord:
            coord.subscribe(observed.append)
            coord.display(scenario_store)
            coord.update_options(options.with_changes(format=ExportFormat.TEXT))
            gate.set()
            assert coord.wait_until_idle(_TIMEOUT)

            final = coord.share_state.result
            assert final.format is ExportFormat.TEXT
            assert len(_live_dirs(fast_config)) == 1

        shown = [s.result for s in observed if s.result is not None]
        assert all(r.format is ExportFormat.TEXT for r in shown)

    def test_burst_of_changes_settles_once(self, scenario_store, tmp_path):
        config = ShareConfig(debounce_seconds=0.3, temp_root=str(tmp_path / "exports-tmp"))
        settings = SharingSettingsStore(tmp_path / "sharing.json")
        options = ExportOptions(TimeRange.ALL, SeverityLevel.TRACE, ExportFormat.TEXT)
        with ExportCoordinator(config=config, settings=settings, options=options) as coord:
            coord.display(scenario_store)
            assert coord.wait_until_idle(_TIMEOUT)
            first_generation = coord.share_state.result.generation

            for level in (SeverityLevel.DEBUG, SeverityLevel.INFO, SeverityLevel.ERROR):
                coord.update_options(coord.current_options_snapshot().with_changes(min_level=level))
            assert coord.wait_until_idle(_TIMEOUT)

            result = coord.share_state.result
            assert result.options.min_level is SeverityLevel.ERROR
            assert result.generation == first_generation + 1
            assert result.path.read_text(encoding="utf-8").count("[ERROR]") == 5

        assert settings.load().min_level is SeverityLevel.ERROR

    def test_at_most_one_live_artifact(self, scenario_store, fast_config):
        options = ExportOptions(TimeRange.ALL, SeverityLevel.TRACE, ExportFormat.TEXT)
        with ExportCoordinator(config=fast_config, options=options) as coord:
            coord.display(scenario_store)
            for _ in range(5):
                coord.prepare()
            assert coord.wait_until_idle(_TIMEOUT)

            assert coord.state is CoordinatorState.IDLE
            assert len(_live_dirs(fast_config)) == 1

        assert _live_dirs(fast_config) == []

    def test_producer_keeps_writing_during_export(self, scenario_store, fast_config):
        stop = threading.Event()

        def produce():
            while not stop.is_set():
                scenario_store.store_message("background noise", level=SeverityLevel.INFO)
                stop.wait(0.001)

        producer = threading.Thread(target=produce)
        producer.start()
        try:
            options = ExportOptions(TimeRange.ALL, SeverityLevel.ERROR, ExportFormat.TEXT)
            with ExportCoordinator(config=fast_config, options=options) as coord:
                coord.display(scenario_store)
                assert coord.wait_until_idle(_TIMEOUT)
                text = coord.share_state.result.path.read_text(encoding="utf-8")
        finally:
            stop.set()
            producer.join()

        assert text.count("[ERROR]") == 5
        assert "background noise" not in text

    def test_share_and_save(self, scenario_store, fast_config, tmp_path):
        presenter = SaveAsPresenter(tmp_path / "saved")
        with ExportCoordinator(config=fast_config, options=ExportOptions()) as coord:
            coord.display(scenario_store)
            assert coord.wait_until_idle(_TIMEOUT)

            assert coord.share(presenter)
            assert coord.share(CallbackPresenter(lambda h: True)) is False

        assert len(presenter.saved_paths) == 1
        assert presenter.saved_paths[0].suffix == ".logarchive"
        assert _live_dirs(fast_config) == []
