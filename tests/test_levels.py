"""Unit tests for level presets and configuration validation."""

import pytest

from maneuver.levels import (
    AlignmentPolicy,
    LevelConfig,
    get_level,
    list_levels,
)
from maneuver.mission import (
    FUEL_DEPLETED,
    FUEL_EXHAUSTED,
    CeilingValidator,
    Failure,
    MissionStage,
    StageTable,
    ToleranceValidator,
    VelocityBandValidator,
)
from maneuver.orbit import OrbitModel, WindowPolicy
from maneuver.propulsion import ContinuousBurn, DiscreteBurn


class TestRegistry:
    """Test level lookup."""

    def test_list_levels(self):
        assert list_levels() == ["orbit_injection", "orbit_raising", "trans_planetary_injection"]

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown level: moon_landing"):
            get_level("moon_landing")

    @pytest.mark.parametrize("name", list_levels())
    def test_presets_are_fresh(self, name):
        """Each lookup builds a new, equal configuration."""
        assert get_level(name) == get_level(name)
        assert get_level(name).name == name


class TestPresets:
    """Test the constants that define each level."""

    def test_orbit_injection(self):
        config = get_level("orbit_injection")

        assert [s.target for s in config.stages.stages] == [16000.0, 20000.0, 23500.0]
        assert [s.tolerance for s in config.stages.stages] == [2500.0, 2000.0, 1000.0]
        assert isinstance(config.burn, ContinuousBurn)
        assert isinstance(config.validator, ToleranceValidator)
        assert config.window.half_width == 15.0
        assert config.required_subsystem == "ACS"
        assert config.requires_initialization
        assert config.depletion.code == FUEL_DEPLETED

        state = config.initial_state()
        assert (state.apogee, state.velocity, state.alignment) == (400.0, 7.2, -15.0)

    def test_orbit_raising(self):
        config = get_level("orbit_raising")

        assert [s.target for s in config.stages.stages] == [
            40000.0, 71600.0, 100000.0, 192000.0, 282000.0,
        ]
        assert isinstance(config.burn, DiscreteBurn)
        assert isinstance(config.validator, CeilingValidator)
        assert config.validator.ceiling == 300000.0
        assert config.window.half_width == 20.0
        assert config.orbit.supports_warp
        assert config.orbit.warp_window.half_width == 15.0
        assert config.undo_enabled
        assert config.initial_state().apogee == 23500.0

    def test_trans_planetary_injection(self):
        config = get_level("trans_planetary_injection")

        assert config.metric == "velocity"
        assert isinstance(config.validator, VelocityBandValidator)
        assert (config.validator.minimum, config.validator.maximum) == (11.1, 11.3)
        assert config.alignment.ramp_rate == 0.5
        assert config.depletion.code == FUEL_EXHAUSTED
        assert not config.orbit.supports_warp
        assert config.initial_state().velocity == 10.1


class TestValidation:
    """Test configuration contract errors."""

    @pytest.fixture
    def parts(self):
        return dict(
            name="custom",
            title="Custom",
            metric="apogee",
            stages=StageTable((MissionStage("Only", 1000.0, 100.0),)),
            orbit=OrbitModel(),
            window=WindowPolicy(),
            burn=ContinuousBurn(gain=10.0, fuel_rate=1.0),
            validator=ToleranceValidator(),
            depletion=Failure(FUEL_DEPLETED),
        )

    def test_minimal_config(self, parts):
        config = LevelConfig(**parts)
        assert not config.is_discrete

    def test_bad_metric(self, parts):
        parts["metric"] = "altitude"
        with pytest.raises(ValueError):
            LevelConfig(**parts)

    def test_required_subsystem_must_exist(self, parts):
        with pytest.raises(ValueError):
            LevelConfig(**parts, subsystems=("TM",), required_subsystem="ACS")

    def test_initialization_needs_alignment(self, parts):
        with pytest.raises(ValueError):
            LevelConfig(**parts, subsystems=("ACS",), required_subsystem="ACS", requires_initialization=True)

    def test_undo_needs_discrete_burns(self, parts):
        with pytest.raises(ValueError):
            LevelConfig(**parts, undo_enabled=True)

    def test_alignment_policy(self):
        policy = AlignmentPolicy(target=0.0, tolerance=5.0)
        assert policy.aligned(-5.0)
        assert not policy.aligned(5.1)
        assert policy.clamp(90.0) == 45.0

        with pytest.raises(ValueError):
            AlignmentPolicy(initial=50.0)
        with pytest.raises(ValueError):
            AlignmentPolicy(misaligned="ignore")
        with pytest.raises(ValueError):
            AlignmentPolicy(tolerance=10.0, drift_on_stage=True)
