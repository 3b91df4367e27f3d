"""
Legged-Robot Measurement Log Replay Package

Replays a timestamped IMU / CONTACT / KINEMATIC measurement log and drives a
state estimator through it in file order.

Version: 1.0.0

Structural errors stop the replay and are reported in the ReplaySummary
instead of exiting the process (--strict re-raises). Unknown record tags
and blank lines are skipped.

Submodules:
- config: YAML configuration loading and defaults
- math_utils: Quaternion normalization, homogeneous transforms
- records: Record kinds, typed measurements, replay cursor
- parser: Tokenize / classify / validate / decode one log line
- sequencer: Timestep gate and cursor advance
- dispatcher: Route decoded records to estimator operations
- estimator: Estimator contract, initial conditions, RecordingEstimator
- output_utils: Progress lines, state dump, dispatch trace CSV
- replay: ReplayRunner and replay_lines()

Usage:
    from legged_replay.config import load_config
    from legged_replay.replay import ReplayRunner, replay_lines
    from legged_replay.parser import parse_line, RecordFormatError
    from legged_replay.estimator import RecordingEstimator

Author: Replay project
"""

__version__ = "1.0.0"

# Lazy module imports - access as legged_replay.parser, etc.
import importlib

_SUBMODULES = {
    "config", "math_utils", "records", "parser", "sequencer",
    "dispatcher", "estimator", "output_utils", "replay",
}


def __getattr__(name):
    """Lazy module loading to avoid importing all dependencies at once."""
    if name in _SUBMODULES:
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module 'legged_replay' has no attribute '{name}'")


def __dir__():
    """List available submodules."""
    return list(_SUBMODULES)


__all__ = list(_SUBMODULES)
