"""Unit tests for the tick-driven ManeuverEngine.

Covers the three level variants through the engine's public commands.
"""

import pytest
from numpy.testing import assert_allclose

from maneuver.levels import get_level
from maneuver.mission import (
    ACS_TUMBLED,
    ALIGNMENT_ERROR,
    CRITICAL_OVERSHOOT,
    FUEL_DEPLETED,
    OVERBURN_UNSTABLE,
    TIMING_ERROR,
    VECTOR_MISALIGNED,
    MissionStatus,
)
from maneuver.simulation import RESET_MESSAGE, ManeuverEngine


def raising_engine(anomaly: float = 0.0) -> ManeuverEngine:
    """Orbit-raising engine positioned at `anomaly`."""
    engine = ManeuverEngine(get_level("orbit_raising"))
    engine.state.orbital_anomaly = anomaly
    return engine


def injection_engine(seed: int = 0) -> ManeuverEngine:
    """Injection engine with ACS on, pitch aligned and the engine armed."""
    engine = ManeuverEngine(get_level("orbit_injection"), seed=seed)
    engine.toggle_subsystem("ACS")
    engine.set_alignment(0.0)
    engine.set_armed(True)
    return engine


def escape_engine() -> ManeuverEngine:
    """Trans-planetary engine with the navigation computer locked."""
    engine = ManeuverEngine(get_level("trans_planetary_injection"))
    engine.begin_alignment()
    engine.run(200)
    return engine


# =============================================================================
# Orbit Raising (discrete burns)
# =============================================================================


class TestOrbitRaising:
    """Test discrete burn firing, warp and undo."""

    def test_medium_burn_skips_a_stage(self):
        """23,500 + MEDIUM at perigee lands on Burn 3."""
        engine = raising_engine()
        assert engine.selected_burn == "MEDIUM"

        assert engine.start_burn()

        telemetry = engine.telemetry()
        assert telemetry.apogee == 93500.0
        assert telemetry.fuel == 75.0
        assert telemetry.stage_index == 2
        assert telemetry.stage_target == 100000.0
        assert telemetry.status is MissionStatus.STAGE_COMPLETE
        assert telemetry.undo_available

    def test_critical_overshoot(self):
        """270,000 + STRONG exceeds the 300,000 km ceiling."""
        engine = raising_engine()
        engine.state.apogee = 270000.0
        engine.stage_index = 4
        engine.select_burn_strength("STRONG")

        engine.start_burn()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == CRITICAL_OVERSHOOT
        assert engine.state.apogee == 380000.0
        assert not engine.undo()

    def test_mistimed_burn_is_wasted(self):
        """Firing away from perigee burns half the fuel for nothing."""
        engine = raising_engine(anomaly=180.0)

        assert engine.start_burn()

        assert engine.state.apogee == 23500.0
        assert engine.state.fuel == 87.5
        assert engine.stage_index == 0
        assert engine.message.text.startswith("Burn wasted!")
        assert engine.status is MissionStatus.IDLE

    def test_insufficient_fuel(self):
        """An unaffordable burn is refused without side effects."""
        engine = raising_engine()
        engine.state.fuel = 20.0
        engine.select_burn_strength("STRONG")

        assert not engine.start_burn()

        assert engine.state.fuel == 20.0
        assert engine.state.apogee == 23500.0
        assert not engine.undo_controller.available
        assert engine.message.text == "Insufficient fuel for this burn strength!"

    def test_empty_tanks_fail(self):
        """Pressing fire with empty tanks aborts the mission."""
        engine = raising_engine()
        engine.state.fuel = 0.0

        assert not engine.start_burn()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == FUEL_DEPLETED

    def test_undo_restores_exactly(self):
        """Undo restores the pre-burn snapshot once."""
        engine = raising_engine()
        engine.state.apogee = 40000.0
        engine.state.fuel = 90.0
        engine.stage_index = 1
        engine.select_burn_strength("SMALL")
        engine.start_burn()
        assert engine.state.apogee == 70000.0

        assert engine.undo()

        assert engine.stage_index == 1
        assert engine.state.apogee == 40000.0
        assert engine.state.fuel == 90.0
        assert engine.status is MissionStatus.IDLE
        assert engine.message.text == "Last burn undone. Try again!"
        assert not engine.undo()

    def test_success(self):
        """Crossing the final target ends the mission."""
        engine = raising_engine()
        engine.state.apogee = 253500.0
        engine.stage_index = 4
        engine.select_burn_strength("SMALL")

        engine.start_burn()

        assert engine.status is MissionStatus.SUCCESS
        assert engine.stage_index == 5
        assert engine.telemetry().stage_label == "Final TMI Burn"

    def test_time_warp_stops_at_perigee(self):
        engine = raising_engine(anomaly=180.0)

        assert engine.request_time_warp()
        for _ in range(20):
            telemetry = engine.step()
            if not telemetry.warping:
                break

        assert telemetry.orbital_anomaly == 0.0
        assert telemetry.in_window
        assert telemetry.message.text.startswith("Perigee Reached!")

    def test_time_warp_passes_window_edge(self):
        """Warp stops on the narrow perigee band, not the wider burn window."""
        engine = raising_engine(anomaly=320.0)
        assert engine.request_time_warp()

        telemetry = engine.step()
        assert telemetry.orbital_anomaly == 345.0
        assert telemetry.in_window
        assert telemetry.warping

        telemetry = engine.step()
        assert telemetry.orbital_anomaly == 0.0
        assert not telemetry.warping

    def test_time_warp_at_perigee(self):
        engine = raising_engine()

        assert not engine.request_time_warp()
        assert engine.message.text == "You are already at Perigee!"
        assert not engine.warping

    def test_unknown_burn_strength(self):
        with pytest.raises(ValueError, match="Unknown burn strength"):
            raising_engine().select_burn_strength("HUGE")


# =============================================================================
# Injection (held burns with pitch and ACS)
# =============================================================================


class TestInjection:
    """Test held burns, pre-flight checks and guidance gates."""

    def test_frozen_until_initialized(self):
        """The orbit does not move until ACS is on and pitch aligned."""
        engine = ManeuverEngine(get_level("orbit_injection"))

        telemetry = engine.run(10)

        assert telemetry.orbital_anomaly == 180.0
        assert telemetry.tick == 10
        assert not telemetry.initialized

        engine.toggle_subsystem("ACS")
        engine.set_alignment(2.0)
        telemetry = engine.step()

        assert telemetry.initialized
        assert telemetry.orbital_anomaly > 180.0

    def test_in_window_burn(self):
        engine = injection_engine()
        engine.state.orbital_anomaly = 0.0

        assert engine.start_burn()
        engine.step()

        assert engine.state.apogee == 480.0
        assert_allclose(engine.state.fuel, 99.98)
        assert_allclose(engine.state.delta_v, 0.001)

    def test_out_of_window_burn_idles(self):
        engine = injection_engine()
        engine.state.orbital_anomaly = 90.0

        engine.start_burn()
        engine.step()

        assert engine.state.apogee == 400.0
        assert_allclose(engine.state.fuel, 99.998)

    def test_fuel_depletion_during_burn(self):
        """Fuel 0.01 with a 0.02 per-tick rate empties the tanks on the next tick."""
        engine = injection_engine()
        engine.state.fuel = 0.01
        engine.state.orbital_anomaly = 0.0

        engine.start_burn()
        telemetry = engine.step()

        assert telemetry.fuel == 0.0
        assert telemetry.status is MissionStatus.FAILED
        assert telemetry.failure.code == FUEL_DEPLETED
        assert telemetry.apogee == 400.0
        assert not telemetry.burn_held

    def test_not_armed(self):
        engine = injection_engine()
        engine.set_armed(False)

        assert not engine.start_burn()
        assert engine.status is MissionStatus.IDLE

    def test_acs_off_at_ignition(self):
        engine = injection_engine()
        engine.toggle_subsystem("ACS")

        assert not engine.start_burn()
        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == ACS_TUMBLED

    def test_acs_off_during_burn(self):
        engine = injection_engine()
        engine.start_burn()

        engine.toggle_subsystem("ACS")

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == ACS_TUMBLED

    def test_misaligned_lockout(self):
        """A misaligned ignition is refused for 60 ticks."""
        engine = injection_engine()
        engine.set_alignment(20.0)

        assert not engine.start_burn()
        assert engine.telemetry().lockout
        assert engine.status is MissionStatus.ARMED

        engine.set_alignment(0.0)
        engine.run(59)
        assert not engine.start_burn()
        engine.step()
        assert not engine.telemetry().lockout
        assert engine.start_burn()

    def test_alignment_clamped(self):
        engine = injection_engine()
        engine.set_alignment(90.0)
        assert engine.state.alignment == 45.0

    def test_alignment_accepts_integers(self):
        engine = ManeuverEngine(get_level("orbit_injection"))
        engine.toggle_subsystem("ACS")

        assert engine.set_alignment(0)

        assert engine.state.alignment == 0.0
        assert isinstance(engine.state.alignment, float)
        assert engine.initialized

    def test_alignment_needs_acs(self):
        engine = ManeuverEngine(get_level("orbit_injection"))
        assert not engine.set_alignment(0.0)
        assert engine.state.alignment == -15.0

    def test_alignment_locked_while_burning(self):
        engine = injection_engine()
        engine.start_burn()
        assert not engine.set_alignment(3.0)
        assert engine.state.alignment == 0.0

    def test_stage_complete_knocks_pitch(self):
        """Completing a stage disarms and drifts pitch out of tolerance."""
        engine = injection_engine()
        engine.state.apogee = 15990.0
        engine.state.orbital_anomaly = 0.0

        engine.start_burn()
        engine.step()
        engine.stop_burn()

        telemetry = engine.telemetry()
        assert telemetry.status is MissionStatus.STAGE_COMPLETE
        assert telemetry.stage_index == 1
        assert not telemetry.armed
        assert 8.0 <= abs(telemetry.alignment) <= 20.0

    def test_drift_is_seeded(self):
        """Identical seeds give identical drift."""
        drifts = []
        for _ in range(2):
            engine = injection_engine(seed=42)
            engine.state.apogee = 15990.0
            engine.state.orbital_anomaly = 0.0
            engine.start_burn()
            engine.step()
            engine.stop_burn()
            drifts.append(engine.state.alignment)
        assert drifts[0] == drifts[1]

    def test_overburn(self):
        engine = injection_engine()
        engine.state.apogee = 18450.0
        engine.state.orbital_anomaly = 0.0

        engine.start_burn()
        engine.step()
        engine.stop_burn()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == OVERBURN_UNSTABLE

    def test_below_band_release(self):
        """Releasing short of the band leaves the stage unchanged and stays armed."""
        engine = injection_engine()
        engine.state.orbital_anomaly = 0.0

        engine.start_burn()
        engine.step()
        engine.stop_burn()

        assert engine.status is MissionStatus.ARMED
        assert engine.stage_index == 0

    def test_display_velocity(self):
        telemetry = injection_engine().telemetry()
        assert_allclose(telemetry.display_velocity, 5.7)

    def test_unknown_subsystem(self):
        engine = ManeuverEngine(get_level("orbit_injection"))
        with pytest.raises(ValueError, match="Unknown subsystem"):
            engine.toggle_subsystem("RCS")


# =============================================================================
# Trans-Planetary Injection (escape burn)
# =============================================================================


class TestEscape:
    """Test alignment ramp and the velocity band."""

    def test_alignment_ramp(self):
        engine = ManeuverEngine(get_level("trans_planetary_injection"))
        assert engine.begin_alignment()
        assert engine.status is MissionStatus.ALIGNING

        engine.run(199)
        assert engine.status is MissionStatus.ALIGNING
        assert engine.state.alignment == 99.5

        engine.step()
        assert engine.status is MissionStatus.ARMED
        assert engine.state.alignment == 100.0

    def test_burn_before_lock(self):
        engine = ManeuverEngine(get_level("trans_planetary_injection"))

        assert not engine.start_burn()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == ALIGNMENT_ERROR

    def test_begin_alignment_when_already_aligned(self):
        """A vector set by hand locks immediately and the burn can start."""
        engine = ManeuverEngine(get_level("trans_planetary_injection"))
        assert engine.set_alignment(100.0)

        assert engine.begin_alignment()
        assert engine.status is MissionStatus.ARMED
        assert not engine.aligning

        assert engine.start_burn()
        assert engine.status is MissionStatus.BURNING
        assert engine.machine.burn_held

    def test_manual_alignment_completes_procedure(self):
        """Setting the target mid-ramp locks the vector."""
        engine = ManeuverEngine(get_level("trans_planetary_injection"))
        engine.begin_alignment()
        engine.run(10)

        assert engine.set_alignment(100)

        assert engine.status is MissionStatus.ARMED
        assert engine.state.alignment == 100.0
        assert engine.start_burn()

    def test_release_in_window(self):
        engine = escape_engine()
        engine.state.velocity = 11.15
        engine.state.orbital_anomaly = 0.0

        assert engine.start_burn()
        engine.stop_burn()

        assert engine.status is MissionStatus.SUCCESS

    def test_release_out_of_window(self):
        engine = escape_engine()
        engine.state.velocity = 11.15
        engine.state.orbital_anomaly = 90.0

        engine.start_burn()
        engine.stop_burn()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == TIMING_ERROR

    def test_misaligned_mid_burn(self):
        engine = escape_engine()
        engine.start_burn()

        engine.set_alignment(50.0)
        engine.step()

        assert engine.status is MissionStatus.FAILED
        assert engine.failure.code == VECTOR_MISALIGNED

    def test_out_of_window_efficiency(self):
        engine = escape_engine()
        engine.state.orbital_anomaly = 90.0

        engine.start_burn()
        engine.step()

        assert_allclose(engine.state.velocity, 10.1045)
        assert_allclose(engine.state.fuel, 99.6)

    def test_level_has_no_arm_switch_or_warp(self):
        engine = escape_engine()
        with pytest.raises(ValueError):
            engine.set_armed(True)
        with pytest.raises(ValueError):
            engine.request_time_warp()
        with pytest.raises(ValueError):
            engine.select_burn_strength("SMALL")


# =============================================================================
# Cross-Level Properties
# =============================================================================


class TestEngineProperties:
    """Test reset, determinism and terminal freeze."""

    @pytest.mark.parametrize(
        "level", ["orbit_injection", "orbit_raising", "trans_planetary_injection"],
    )
    def test_reset_twice_equals_once(self, level):
        engine = ManeuverEngine(get_level(level), seed=5)
        engine.run(50)

        once = engine.reset()
        twice = engine.reset()

        assert once == twice
        assert once.message.text == RESET_MESSAGE
        assert once.tick == 0
        assert once.fuel == 100.0
        assert once.status is MissionStatus.IDLE

    def test_reset_leaves_terminal_state(self):
        engine = raising_engine()
        engine.state.fuel = 0.0
        engine.start_burn()
        assert engine.status is MissionStatus.FAILED

        engine.reset()

        assert engine.status is MissionStatus.IDLE
        assert engine.failure is None
        assert engine.state.apogee == 23500.0

    def test_terminal_freezes_step(self):
        engine = raising_engine(anomaly=100.0)
        engine.state.fuel = 0.0
        engine.start_burn()
        before = engine.telemetry()

        after = engine.run(25)

        assert after == before
        assert not engine.start_burn()
        assert not engine.undo()

    def test_determinism(self):
        """Identical command sequences give identical status trajectories."""
        def scripted(engine):
            statuses = []
            for tick in range(400):
                if tick % 40 == 0:
                    if engine.in_window:
                        engine.start_burn()
                    else:
                        engine.request_time_warp()
                statuses.append(engine.step().status)
            return statuses, engine.telemetry()

        first = scripted(ManeuverEngine(get_level("orbit_raising"), seed=3))
        second = scripted(ManeuverEngine(get_level("orbit_raising"), seed=3))

        assert first == second
