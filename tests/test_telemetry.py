"""Unit tests for telemetry recording and export."""

import numpy as np
from numpy.testing import assert_allclose

from maneuver import ManeuverEngine, MissionRecorder, get_level
from maneuver.mission import MissionStatus


def recorded_run(ticks: int = 30) -> MissionRecorder:
    engine = ManeuverEngine(get_level("trans_planetary_injection"))
    engine.begin_alignment()
    recorder = MissionRecorder()
    for _ in range(ticks):
        recorder.record(engine.step())
    return recorder


class TestMissionRecorder:
    """Test snapshot collection."""

    def test_arrays(self):
        recorder = recorded_run()

        assert len(recorder) == 30
        assert_allclose(recorder.tick, np.arange(1, 31))
        assert recorder.anomaly.shape == (30,)
        assert (np.diff(recorder.anomaly) > 0.0).all()
        assert_allclose(recorder.velocity, 10.1)
        assert recorder.statuses == [MissionStatus.ALIGNING] * 30

    def test_clear(self):
        recorder = recorded_run(5)
        recorder.clear()
        assert len(recorder) == 0
        assert recorder.apogee.shape == (0,)

    def test_to_dataframe(self):
        df = recorded_run().to_dataframe()

        assert df.height == 30
        assert {"tick", "anomaly", "apogee", "velocity", "fuel", "status", "failure"} <= set(df.columns)
        assert df["status"].to_list() == ["aligning"] * 30
        assert df["failure"].null_count() == 30


class TestTelemetrySnapshot:
    """Test what a snapshot exposes."""

    def test_snapshot_is_immutable_copy(self):
        engine = ManeuverEngine(get_level("orbit_raising"))
        before = engine.telemetry()

        engine.step()

        assert before.tick == 0
        assert before.orbital_anomaly == 180.0
        assert engine.telemetry().orbital_anomaly > 180.0

    def test_stage_fields(self):
        telemetry = ManeuverEngine(get_level("orbit_raising")).telemetry()

        assert telemetry.stage_label == "Burn 1"
        assert telemetry.stage_target == 40000.0
        assert telemetry.metric == 23500.0
        assert telemetry.selected_burn == "MEDIUM"
        assert not telemetry.undo_available
        assert telemetry.message.text.startswith("Strategy Tip")

    def test_subsystems(self):
        engine = ManeuverEngine(get_level("orbit_injection"))
        assert engine.telemetry().active_subsystems == ()

        engine.toggle_subsystem("TM")

        assert engine.telemetry().active_subsystems == ("TM",)
