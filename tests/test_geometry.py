"""Tests for board geometry tables."""

import pytest

from chainreaction.geometry import (
    critical_mass,
    get_geometry,
    is_adjacent_including_diagonal,
    manhattan_distance,
    neighbors,
)


class TestCriticalMass:
    def test_nine_by_nine(self) -> None:
        assert critical_mass(0, 0, 9, 9) == 2
        assert critical_mass(0, 4, 9, 9) == 3
        assert critical_mass(4, 4, 9, 9) == 4

    def test_matches_neighbor_count_everywhere(self) -> None:
        geo = get_geometry(9, 7)
        for idx in range(geo.size):
            assert geo.critical_masses[idx] == len(geo.neighbor_indices[idx])

    def test_array_matches_tuple(self) -> None:
        geo = get_geometry(5, 6)
        assert list(geo.critical_mass_array) == list(geo.critical_masses)


class TestNeighbors:
    def test_interior_order_is_up_right_down_left(self) -> None:
        assert neighbors(4, 4, 9, 9) == [(3, 4), (4, 5), (5, 4), (4, 3)]

    def test_corner(self) -> None:
        assert neighbors(0, 0, 9, 9) == [(0, 1), (1, 0)]
        assert neighbors(8, 8, 9, 9) == [(7, 8), (8, 7)]

    def test_block_includes_self_and_diagonals(self) -> None:
        geo = get_geometry(3, 3)
        assert sorted(geo.block_indices[geo.index(1, 1)]) == list(range(9))
        assert sorted(geo.block_indices[geo.index(0, 0)]) == [0, 1, 3, 4]


class TestMasks:
    def test_corner_and_edge_counts(self) -> None:
        geo = get_geometry(9, 9)
        assert int(geo.corner_mask.sum()) == 4
        assert int(geo.edge_mask.sum()) == 28
        assert not (geo.corner_mask & geo.edge_mask).any()

    def test_tables_are_read_only(self) -> None:
        geo = get_geometry(9, 9)
        with pytest.raises(ValueError):
            geo.corner_mask[0] = False

    def test_geometry_is_cached(self) -> None:
        assert get_geometry(9, 7) is get_geometry(9, 7)


def test_chebyshev_adjacency() -> None:
    assert is_adjacent_including_diagonal((0, 0), (1, 1))
    assert is_adjacent_including_diagonal((2, 2), (2, 2))
    assert not is_adjacent_including_diagonal((0, 0), (0, 2))


def test_manhattan_distance() -> None:
    assert manhattan_distance((0, 0), (3, 4)) == 7
