import io
import math

import pytest

from armorsight.diagnostics import TrackerArmor
from armorsight.tracker import Tracker, normalize_angle, yaw_from_rotation_matrix


def _long(x=0.0, y=0.1, z=2.0, yaw=0.0):
    return TrackerArmor(type="long", yaw=yaw, position=(x, y, z))


def _short(x=0.3, y=0.3, z=2.3, yaw=0.2):
    return TrackerArmor(type="short", yaw=yaw, position=(x, y, z))


def _initialized_tracker(**kwargs):
    tracker = Tracker(**kwargs)
    tracker.update([_long(), _short()], 0.01, 1)
    return tracker


def test_normalize_angle_keeps_in_range_values():
    assert normalize_angle(0.5) == pytest.approx(0.5)
    assert normalize_angle(-1.2) == pytest.approx(-1.2)


def test_normalize_angle_wraps():
    assert normalize_angle(0.5 + 2 * math.pi) == pytest.approx(0.5)
    assert abs(normalize_angle(3 * math.pi)) == pytest.approx(math.pi)


def test_yaw_from_identity_is_zero():
    identity = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
    assert yaw_from_rotation_matrix(identity) == pytest.approx(0.0)


def test_yaw_from_rotation_about_vertical_axis():
    a = 0.4
    r = (
        (math.cos(a), 0.0, math.sin(a)),
        (0.0, 1.0, 0.0),
        (-math.sin(a), 0.0, math.cos(a)),
    )
    assert yaw_from_rotation_matrix(r) == pytest.approx(a)


def test_non_positive_dt_does_nothing():
    tracker = Tracker()
    assert tracker.update([_long(), _short()], 0.0, 1) is None
    assert tracker.initialized is False


def test_single_armor_does_not_initialize():
    tracker = Tracker()
    assert tracker.update([_long()], 0.01, 1) is None
    assert tracker.initialized is False


def test_two_armors_of_same_type_do_not_initialize():
    tracker = Tracker()
    tracker.update([_long(), _long(x=0.5)], 0.01, 1)
    assert tracker.initialized is False


def test_initialization_sets_state_invariants():
    tracker = _initialized_tracker()
    s = tracker.state
    assert tracker.initialized is True
    assert len(s) == 8
    assert s[2] == pytest.approx(0.0)
    assert s[3:6] == (0.0, 0.0, 0.0)
    assert s[6] >= s[7]
    for r in s[6:]:
        assert Tracker.MIN_RADIUS <= r <= Tracker.MAX_RADIUS
    assert tracker.last_observed_y == pytest.approx((0.1 + 0.3) / 2)


def test_initialization_returns_debug_record():
    tracker = Tracker()
    debug = tracker.update([_long(), _short()], 0.01, 7)
    assert debug.frame_id == 7
    assert debug.state_begin == (0.0,) * 8
    assert debug.state_final == tracker.state


def test_predict_uninitialized_is_zero():
    assert Tracker().predict_armor_position("long", 10.0) == (0.0, 0.0, 0.0)


def test_predict_armor_lies_on_radius():
    tracker = _initialized_tracker()
    s = tracker.state
    lx, ly, lz = tracker.predict_armor_position("long", 0.0)
    sx, sy, sz = tracker.predict_armor_position("short", 0.0)
    assert math.hypot(lx - s[0], lz - s[1]) == pytest.approx(s[6])
    assert math.hypot(sx - s[0], sz - s[1]) == pytest.approx(s[7])
    assert ly == sy == tracker.last_observed_y


def test_empty_frame_coasts_with_zero_velocity():
    tracker = _initialized_tracker()
    before = tracker.state
    debug = tracker.update([], 0.01, 2)
    assert debug.match_success is False
    assert tracker.state == pytest.approx(before)
    assert tracker.frames_since_last_update == 1
    tracker.update([], 0.01, 3)
    assert tracker.frames_since_last_update == 2


def test_single_armor_match():
    tracker = _initialized_tracker()
    debug = tracker.update([_long()], 0.01, 2)
    assert debug.match_success is True
    assert debug.match_type == "单板匹配"
    assert len(debug.hypotheses) == 4
    assert tracker.frames_since_last_update == 0
    assert debug.final_observation[2] == pytest.approx(0.0)


def test_dual_armor_match_keeps_radius_invariants():
    tracker = _initialized_tracker()
    debug = tracker.update([_long(), _short()], 0.01, 2)
    assert debug.match_type == "双板匹配"
    s = tracker.state
    assert s[6] >= s[7]
    for r in s[6:]:
        assert Tracker.MIN_RADIUS <= r <= Tracker.MAX_RADIUS


def test_far_observation_triggers_maneuver_mode():
    tracker = _initialized_tracker()
    before = tracker.state
    debug = tracker.update([_long(x=5.0, z=10.0)], 0.01, 2)
    assert debug.decision_pos == "机动模式"
    assert math.hypot(*debug.pos_innovation) > Tracker.MANEUVER_THRESHOLD_POS
    after = tracker.state
    # The estimate moves towards the observation.
    assert after[0] > before[0]
    assert after[1] > before[1]


def test_last_observed_y_follows_first_armor():
    tracker = _initialized_tracker()
    tracker.update([_long(y=0.9)], 0.01, 2)
    assert tracker.last_observed_y == pytest.approx(0.9)


def test_raw_debug_writes_to_stream():
    stream = io.StringIO()
    tracker = _initialized_tracker(raw_debug=True, stream=stream)
    tracker.update([_long()], 0.01, 42)
    text = stream.getvalue()
    assert "帧 42 开始" in text
    assert "单板匹配" not in text or "主长轴" in text or "对称长轴" in text
    assert "[步骤 6] 帧结束状态" in text


def test_performance_debug_reports_lost_track():
    stream = io.StringIO()
    tracker = _initialized_tracker(performance_debug=True, stream=stream)
    tracker.update([], 0.01, 5)
    assert "| 状态: 跟丢 (无观测)" in stream.getvalue()