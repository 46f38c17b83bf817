import pytest

from maptracker.navigation.geometry import calc_delta_rotation, calc_target_rotation, distance


@pytest.mark.parametrize("to, expected", [
    ((0, -10), 0),
    ((10, 0), 90),
    ((0, 10), 180),
    ((-10, 0), 270),
    ((10, -10), 45),
    ((-10, -10), 315),
])
def test_target_rotation_compass(to, expected):
    assert calc_target_rotation(0, 0, *to) == expected


def test_target_rotation_same_point_is_north():
    assert calc_target_rotation(5, 5, 5, 5) == 0


def test_target_rotation_near_north_wraps_to_zero():
    # a bearing just west of north rounds to 360, which folds back to 0
    assert calc_target_rotation(0, 0, -0.0001, -1000) == 0


@pytest.mark.parametrize("cur, tgt, expected", [
    (0, 90, 90),
    (90, 0, -90),
    (350, 10, 20),
    (10, 350, -20),
    (0, 180, 180),
    (180, 0, 180),
    (0, 0, 0),
    (270, 90, 180),
])
def test_delta_rotation(cur, tgt, expected):
    assert calc_delta_rotation(cur, tgt) == expected


def test_delta_rotation_range_and_congruence():
    for cur in range(0, 360, 7):
        for tgt in range(0, 360, 11):
            d = calc_delta_rotation(cur, tgt)
            assert -180 < d <= 180
            assert (cur + d - tgt) % 360 == 0


def test_distance():
    assert distance(0, 0, 3, 4) == 5.0
