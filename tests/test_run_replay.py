from pathlib import Path

from run_replay import main

_ROOT = Path(__file__).resolve().parents[1]
_SAMPLE_LOG = _ROOT / "data" / "imu_kinematic_measurements.txt"
_DEFAULT_CONFIG = _ROOT / "configs" / "config_default.yaml"


def test_sample_log_replays_cleanly(tmp_path, capsys):
    rc = main([
        "--log", str(_SAMPLE_LOG),
        "--config", str(_DEFAULT_CONFIG),
        "--output", str(tmp_path),
        "--save_debug_data",
        "--verbose",
    ])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Replay completed successfully" in out
    assert "[KINEMATIC]" in out
    assert (tmp_path / "dispatch_trace.csv").exists()


def test_missing_log_exit_code(tmp_path):
    assert main(["--log", str(tmp_path / "missing.txt")]) == 1


def test_malformed_log_exit_code(tmp_path):
    log_path = tmp_path / "bad.txt"
    log_path.write_text("IMU 0.0 0 0 0 0 0 9.81\nCONTACT 0.1 0\n")
    assert main(["--log", str(log_path)]) == 1
    assert main(["--log", str(log_path), "--strict"]) == 1


def test_trace_analysis_script(tmp_path, capsys):
    from analyze_replay_trace import main as analyze_main

    main(["--log", str(_SAMPLE_LOG), "--output", str(tmp_path), "--save_debug_data"])
    capsys.readouterr()
    assert analyze_main([str(tmp_path / "dispatch_trace.csv")]) == 0
    out = capsys.readouterr().out
    assert "PROPAGATE: 5" in out
    assert "CORRECT: 2" in out
    assert analyze_main([str(tmp_path / "missing.csv")]) == 1
