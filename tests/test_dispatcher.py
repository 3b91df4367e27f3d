import numpy as np

from legged_replay.dispatcher import dispatch
from legged_replay.estimator import RecordingEstimator
from legged_replay.parser import parse_line
from legged_replay.records import RecordKind, ReplayCursor
from legged_replay.sequencer import advance_cursor, gate_interval

DT_MIN = 1e-6
DT_MAX = 1.0


def _run(lines, estimator=None, cursor=None):
    estimator = estimator if estimator is not None else RecordingEstimator()
    cursor = cursor if cursor is not None else ReplayCursor()
    outcomes = []
    for line in lines:
        cursor, outcome = dispatch(parse_line(line), cursor, estimator, DT_MIN, DT_MAX)
        outcomes.append(outcome)
    return estimator, cursor, outcomes


def test_gate_is_open_interval():
    cursor = ReplayCursor(t=1.0, t_prev=1.0)
    assert gate_interval(cursor, 1.0, DT_MIN, DT_MAX) is None
    assert gate_interval(ReplayCursor(), DT_MIN, DT_MIN, DT_MAX) is None
    assert gate_interval(cursor, 2.0, DT_MIN, DT_MAX) is None
    assert gate_interval(cursor, 0.5, DT_MIN, DT_MAX) is None
    assert abs(gate_interval(cursor, 1.5, DT_MIN, DT_MAX) - 0.5) < 1e-12


def test_cursor_starts_at_zero():
    cursor = ReplayCursor()
    assert cursor.t == 0.0
    assert cursor.t_prev == 0.0
    np.testing.assert_array_equal(cursor.imu_prev, np.zeros(6))


def test_advance_cursor_only_imu_replaces_sample():
    cursor = advance_cursor(ReplayCursor(), parse_line("IMU 0.1 1 2 3 4 5 6"))
    np.testing.assert_allclose(cursor.imu_prev, [1, 2, 3, 4, 5, 6])
    assert cursor.t_prev == 0.1

    cursor = advance_cursor(cursor, parse_line("CONTACT 0.2 0 1"))
    assert cursor.t_prev == 0.2
    np.testing.assert_allclose(cursor.imu_prev, [1, 2, 3, 4, 5, 6])

    cursor = advance_cursor(cursor, parse_line("FOO bar"))
    assert cursor.t_prev == 0.2


def test_first_imu_is_gated_against_zero_then_propagates_previous_sample():
    est, cursor, outcomes = _run([
        "IMU 0.0 0 0 0 0 0 9.81",
        "IMU 0.1 0 0 0 0 0 9.81",
    ])
    assert outcomes[0].action == "SKIP_DT"
    assert outcomes[1].action == "PROPAGATE"
    props = est.calls_of("propagate")
    assert len(props) == 1
    sample, dt = props[0]
    np.testing.assert_allclose(sample, [0, 0, 0, 0, 0, 9.81])
    assert abs(dt - 0.1) < 1e-12


def test_propagation_uses_previous_not_current_sample():
    est, _, _ = _run([
        "IMU 0.01 1 1 1 1 1 1",
        "IMU 0.02 2 2 2 2 2 2",
        "IMU 0.03 3 3 3 3 3 3",
    ])
    props = est.calls_of("propagate")
    # First record: dt = 0.01 from the zero cursor, zero sample
    assert len(props) == 3
    np.testing.assert_allclose(props[0][0], np.zeros(6))
    np.testing.assert_allclose(props[1][0], np.ones(6))
    np.testing.assert_allclose(props[2][0], 2 * np.ones(6))
    for _, dt in props:
        assert abs(dt - 0.01) < 1e-12


def test_out_of_window_dt_skips_but_cursor_advances():
    est, cursor, outcomes = _run([
        "IMU 0.5 1 1 1 1 1 1",
        "IMU 0.5 2 2 2 2 2 2",   # dt = 0
        "IMU 0.4 3 3 3 3 3 3",   # dt < 0
        "IMU 5.0 4 4 4 4 4 4",   # gap
        "IMU 5.1 5 5 5 5 5 5",
    ])
    assert [o.action for o in outcomes] == [
        "PROPAGATE", "SKIP_DT", "SKIP_DT", "SKIP_DT", "PROPAGATE"]
    props = est.calls_of("propagate")
    assert len(props) == 2
    np.testing.assert_allclose(props[1][0], 4 * np.ones(6))
    assert abs(props[1][1] - 0.1) < 1e-12
    assert cursor.t_prev == 5.1


def test_contact_between_imu_shortens_dt_and_keeps_imu_sample():
    est, _, _ = _run([
        "IMU 1.00 1 1 1 1 1 1",
        "CONTACT 1.03 0 1",
        "IMU 1.05 2 2 2 2 2 2",
    ])
    props = est.calls_of("propagate")
    assert len(props) == 1
    sample, dt = props[0]
    np.testing.assert_allclose(sample, np.ones(6))
    assert abs(dt - 0.02) < 1e-12


def test_contacts_and_kinematics_are_applied_unconditionally():
    kin = "KINEMATIC 0.0 7 1 0 0 0 0 0 0 " + " ".join(["0"] * 36)
    est, _, outcomes = _run([
        "CONTACT 0.0 0 1 1 0",
        "CONTACT 0.0 1 1",
        kin,
        kin,
    ])
    assert [o.action for o in outcomes] == ["SET_CONTACTS", "SET_CONTACTS", "CORRECT", "CORRECT"]
    assert est.calls_of("set_contacts") == [[(0, True), (1, False)], [(1, True)]]
    assert est.contacts == {0: True, 1: True}
    batches = est.calls_of("correct_kinematics")
    assert len(batches) == 2
    assert len(batches[0]) == 1
    body_id, pose, cov = batches[0][0]
    assert body_id == 7
    assert pose.shape == (4, 4)
    assert cov.shape == (6, 6)
    assert est.calls_of("propagate") == []


def test_kinematic_batch_is_one_call():
    block = "1 1 0 0 0 0.1 0.2 0.3 " + " ".join(["0"] * 36)
    est, _, outcomes = _run([f"KINEMATIC 0.5 {block} {block} {block}"])
    assert outcomes[0].n_items == 3
    assert len(est.calls_of("correct_kinematics")) == 1
    assert len(est.calls_of("correct_kinematics")[0]) == 3
    assert len(est.last_kinematics) == 3
    assert [body_id for body_id, _, _ in est.last_kinematics] == [1, 1, 1]

    block_b = "2 1 0 0 0 0 0 0 " + " ".join(["0"] * 36)
    _run([f"KINEMATIC 0.6 {block_b}"], estimator=est)
    assert [body_id for body_id, _, _ in est.last_kinematics] == [2]
    assert len(est.calls_of("correct_kinematics")) == 2


def test_unrecognized_record_makes_no_call_and_advances_timestamp():
    est, cursor, outcomes = _run(["UNKNOWN 1.0 5 6 7"])
    assert outcomes[0].kind == RecordKind.UNRECOGNIZED
    assert outcomes[0].action == "IGNORE"
    assert outcomes[0].called_estimator is False
    assert est.calls == []
    assert cursor.t_prev == 1.0
