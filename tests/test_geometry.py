import pytest

from armorsight.geometry import LightBar, Point, RotatedRect


def test_point_norm():
    assert Point(3.0, 4.0).norm() == pytest.approx(5.0)


def test_point_arithmetic_roundtrip():
    p, q = Point(1.5, -2.0), Point(0.25, 7.0)
    assert (p + q) - q == p
    assert (p * 2.0) / 2.0 == p
    assert -(-p) == p


def test_point_dot_invariants():
    p = Point(2.0, -3.0)
    assert p.dot(p) == pytest.approx(p.norm() ** 2)
    assert p.dot(Point(3.0, 2.0)) == 0.0


def test_points_centroid_is_center():
    rect = RotatedRect(Point(50.0, 40.0), 6.0, 20.0, 15.0)
    pts = rect.points()
    cx = sum(p.x for p in pts) / 4
    cy = sum(p.y for p in pts) / 4
    assert cx == pytest.approx(50.0)
    assert cy == pytest.approx(40.0)


def test_points_side_lengths_match_size():
    rect = RotatedRect(Point(5.0, 5.0), 6.0, 20.0, 33.0)
    p0, p1, p2, p3 = rect.points()
    sides = sorted([(p0 - p1).norm(), (p1 - p2).norm()])
    assert sides == pytest.approx([6.0, 20.0])
    assert (p0 - p1).dot(p1 - p2) == pytest.approx(0.0, abs=1e-9)


def test_area():
    assert RotatedRect(Point(0.0, 0.0), 4.0, 2.0, 45.0).area() == pytest.approx(8.0)


def test_from_points_roundtrip():
    rect = RotatedRect(Point(50.0, 40.0), 6.0, 20.0, 15.0)
    p0, p1, p2, _ = rect.points()
    rebuilt = RotatedRect.from_points(p0, p1, p2)
    assert rebuilt.center.x == pytest.approx(rect.center.x)
    assert rebuilt.center.y == pytest.approx(rect.center.y)
    assert rebuilt.area() == pytest.approx(rect.area())
    key = lambda p: (round(p.x, 6), round(p.y, 6))
    assert sorted(map(key, rebuilt.points())) == sorted(map(key, rect.points()))


def test_from_points_rejects_non_rectangle():
    with pytest.raises(ValueError):
        RotatedRect.from_points(Point(0.0, 0.0), Point(1.0, 0.0), Point(3.0, 2.0))


def test_bounding_rect_covers_all_points():
    rect = RotatedRect(Point(10.5, 20.25), 4.0, 2.0, 30.0)
    x, y, w, h = rect.bounding_rect()
    assert all(isinstance(v, int) for v in (x, y, w, h))
    for p in rect.points():
        assert x <= p.x <= x + w - 1
        assert y <= p.y <= y + h - 1


def test_lightbar_vertical():
    box = RotatedRect(Point(100.0, 200.0), 2.0, 10.0, 0.0)
    bar = LightBar.from_rotated_rect(box)
    assert bar.angle == 90.0
    assert bar.top.y < bar.bottom.y
    assert bar.height == pytest.approx(10.0)
    assert bar.width == pytest.approx(2.0)
    assert bar.light_color == 0


def test_lightbar_tilted():
    box = RotatedRect(Point(100.0, 200.0), 2.0, 10.0, 10.0)
    bar = LightBar.from_rotated_rect(box)
    assert bar.top.x > bar.bottom.x
    assert bar.angle == pytest.approx(90.0 + box.angle)
    assert bar.height == pytest.approx(box.height)
    assert (bar.top + bar.bottom).x / 2 == pytest.approx(box.center.x)