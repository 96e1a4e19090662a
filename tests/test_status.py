from collections import namedtuple

import pytest

from armorsight.status import (
    AxesState,
    EnemyColor,
    RobotState,
    SpinHeading,
    color_from_name,
    point_dist,
)

P = namedtuple("P", "x y")


def test_point_dist_pythagorean():
    assert point_dist(P(0.0, 0.0), P(3.0, 4.0)) == pytest.approx(5.0)


def test_point_dist_symmetric_and_zero():
    a, b = P(1.5, -2.0), P(-7.25, 4.0)
    assert point_dist(a, b) == pytest.approx(point_dist(b, a))
    assert point_dist(a, a) == 0.0


def test_point_dist_triangle_inequality():
    a, b, c = P(0.0, 0.0), P(2.0, 5.0), P(-3.0, 1.0)
    assert point_dist(a, c) <= point_dist(a, b) + point_dist(b, c)


def test_color_from_name_red():
    assert color_from_name("RED") is EnemyColor.RED


@pytest.mark.parametrize("name", ["BLUE", "red", "", "GREEN"])
def test_color_from_name_other_is_blue(name):
    assert color_from_name(name) is EnemyColor.BLUE


def test_enums_roundtrip_from_values():
    assert SpinHeading(SpinHeading.CLOCKWISE.value) is SpinHeading.CLOCKWISE
    assert AxesState(AxesState.SHORT.value) is AxesState.SHORT
    assert EnemyColor(1) is EnemyColor.RED


def test_robot_state_defaults():
    state = RobotState()
    assert state.quaternion == (0.0, 0.0, 0.0, 0.0)
    assert state.bullet_speed == 0.0


def test_robot_state_rejects_bad_quaternion():
    with pytest.raises(ValueError):
        RobotState(quaternion=(1.0, 0.0, 0.0))