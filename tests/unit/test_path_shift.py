"""Tests for shifting routed paths apart."""

from ortholink.geometry import is_orthogonal_path
from ortholink.path_shift import shift_path


class TestShiftPath:
    """Tests for shift_path."""

    def test_endpoints_never_move(self):
        path = [(0, 0), (10, 0), (10, 10), (20, 10), (20, 20)]
        shift_path(path, (3, 3))
        assert path[0] == (0, 0)
        assert path[-1] == (20, 20)

    def test_two_bend_path(self):
        path = [(0, 0), (0, 10), (20, 10), (20, 20)]
        shift_path(path, (3, 3))
        assert path == [(0, 0), (0, 13), (20, 13), (20, 20)]

    def test_interior_points_move_fully(self):
        path = [(0, 0), (10, 0), (10, 10), (20, 10), (20, 20)]
        shift_path(path, (3, 3))
        assert path == [(0, 0), (13, 0), (13, 13), (20, 13), (20, 20)]

    def test_shifted_path_stays_orthogonal(self):
        path = [(0, 5), (10, 5), (10, 30), (40, 30), (40, 12), (60, 12)]
        shift_path(path, (6, 6))
        assert is_orthogonal_path(path)
        assert path[0] == (0, 5)
        assert path[-1] == (60, 12)

    def test_single_bend_is_left_alone(self):
        path = [(0, 0), (10, 0), (10, 10)]
        shift_path(path, (3, 3))
        assert path == [(0, 0), (10, 0), (10, 10)]

    def test_straight_path_is_left_alone(self):
        path = [(0, 0), (10, 0)]
        shift_path(path, (3, 3))
        assert path == [(0, 0), (10, 0)]

    def test_zero_translation(self):
        path = [(0, 0), (0, 10), (20, 10), (20, 20)]
        shift_path(path, (0, 0))
        assert path == [(0, 0), (0, 10), (20, 10), (20, 20)]
