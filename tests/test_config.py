from pathlib import Path

import numpy as np
import pytest

from legged_replay.config import load_config
from legged_replay.estimator import (
    NoiseParams,
    RecordingEstimator,
    RobotState,
    create_estimator,
    load_estimator_factory,
)

_DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "config_default.yaml"


def test_defaults_without_file():
    config = load_config()
    assert config["DT_MIN"] == 1e-6
    assert config["DT_MAX"] == 1.0
    np.testing.assert_allclose(config["INITIAL_STATE"]["R0"], np.diag([1.0, -1.0, -1.0]))
    np.testing.assert_allclose(config["INITIAL_STATE"]["p0"], np.zeros(3))
    assert config["NOISE_PARAMS"]["accel"] == 0.1
    assert config["NOISE_PARAMS"]["contact"] == 0.01
    assert config["ESTIMATOR_FACTORY"] is None
    assert config["VERBOSE"] is False
    assert config["SAVE_DEBUG_DATA"] is False


def test_bundled_config_matches_defaults():
    config = load_config(str(_DEFAULT_CONFIG))
    defaults = load_config()
    assert config["DT_MIN"] == defaults["DT_MIN"]
    assert config["DT_MAX"] == defaults["DT_MAX"]
    assert config["NOISE_PARAMS"] == defaults["NOISE_PARAMS"]
    for key in ("R0", "v0", "p0", "bg0", "ba0"):
        np.testing.assert_allclose(config["INITIAL_STATE"][key], defaults["INITIAL_STATE"][key])


def test_partial_yaml_overrides(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "timestep:\n"
        "  dt_max: 0.05\n"
        "initial_state:\n"
        "  position: [1.0, 2.0, 3.0]\n"
        "noise:\n"
        "  gyro: 0.5\n"
        "output:\n"
        "  verbose: true\n"
    )
    config = load_config(str(path))
    assert config["DT_MIN"] == 1e-6
    assert config["DT_MAX"] == 0.05
    np.testing.assert_allclose(config["INITIAL_STATE"]["p0"], [1.0, 2.0, 3.0])
    assert config["NOISE_PARAMS"]["gyro"] == 0.5
    assert config["NOISE_PARAMS"]["accel"] == 0.1
    assert config["VERBOSE"] is True


def test_sections_with_only_comments_use_defaults(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "timestep:\n"
        "  # dt_max: 0.05\n"
        "initial_state:\n"
        "noise:\n"
        "estimator:\n"
        "  # factory: pkg:make\n"
        "output:\n"
    )
    config = load_config(str(path))
    defaults = load_config()
    assert config["DT_MIN"] == defaults["DT_MIN"]
    assert config["DT_MAX"] == defaults["DT_MAX"]
    assert config["NOISE_PARAMS"] == defaults["NOISE_PARAMS"]
    np.testing.assert_allclose(config["INITIAL_STATE"]["R0"], defaults["INITIAL_STATE"]["R0"])
    assert config["ESTIMATOR_FACTORY"] is None
    assert config["VERBOSE"] is False


def test_empty_window_is_rejected(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("timestep:\n  dt_min: 0.5\n  dt_max: 0.5\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_bad_rotation_shape_is_rejected(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("initial_state:\n  rotation: [1.0, 0.0, 0.0]\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_create_estimator_default_is_recording():
    est = create_estimator(load_config())
    assert isinstance(est, RecordingEstimator)
    assert isinstance(est.get_state(), RobotState)
    assert est.get_noise_params() == NoiseParams()


def test_create_estimator_from_factory_path():
    config = load_config()
    config["ESTIMATOR_FACTORY"] = "legged_replay.estimator:RecordingEstimator"
    est = create_estimator(config)
    assert isinstance(est, RecordingEstimator)
    assert est.get_noise_params().gyro == 0.01


@pytest.mark.parametrize("path", ["legged_replay.estimator", ":RecordingEstimator", "mod:"])
def test_malformed_factory_path(path):
    with pytest.raises(ValueError):
        load_estimator_factory(path)


def test_factory_must_be_callable():
    with pytest.raises(TypeError):
        load_estimator_factory("legged_replay.config:DT_MAX")
