"""Board geometry: critical mass, adjacency and positional masks.

Tables are pre-computed once per ``(rows, cols)`` and cached, so the
cascade and the AI work on flat indices instead of Position objects.

Usage:
    from chainreaction.geometry import get_geometry

    geo = get_geometry(9, 9)
    geo.critical_masses[geo.index(0, 0)]   # 2
    geo.neighbor_indices[geo.index(4, 4)]  # up, right, down, left
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np

# Type aliases for clarity
Coord = tuple[int, int]

# Cascade adjacency, in distribution order: up, right, down, left.
ORTHOGONAL_DIRECTIONS: list[Coord] = [(-1, 0), (0, 1), (1, 0), (0, -1)]

# 3x3 block around a cell, including the cell itself.
BLOCK_OFFSETS: list[Coord] = [
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1)
]


class BoardGeometry:
    """Pre-computed geometry tables for one board size."""

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self.size = rows * cols

        neighbor_indices: list[tuple[int, ...]] = []
        block_indices: list[tuple[int, ...]] = []
        for idx in range(self.size):
            row, col = divmod(idx, cols)
            neighbor_indices.append(tuple(
                (row + dr) * cols + (col + dc)
                for dr, dc in ORTHOGONAL_DIRECTIONS
                if self.in_bounds(row + dr, col + dc)
            ))
            block_indices.append(tuple(
                (row + dr) * cols + (col + dc)
                for dr, dc in BLOCK_OFFSETS
                if self.in_bounds(row + dr, col + dc)
            ))
        self.neighbor_indices: tuple[tuple[int, ...], ...] = tuple(neighbor_indices)
        self.block_indices: tuple[tuple[int, ...], ...] = tuple(block_indices)
        self.critical_masses: tuple[int, ...] = tuple(
            len(n) for n in neighbor_indices
        )

        row_idx, col_idx = np.divmod(np.arange(self.size), cols)
        on_row_edge = (row_idx == 0) | (row_idx == rows - 1)
        on_col_edge = (col_idx == 0) | (col_idx == cols - 1)
        self.critical_mass_array = np.asarray(self.critical_masses, dtype=np.int32)
        self.corner_mask = on_row_edge & on_col_edge
        self.edge_mask = (on_row_edge | on_col_edge) & ~self.corner_mask
        self.center_distance = (
            np.abs(row_idx - rows / 2) + np.abs(col_idx - cols / 2)
        )
        self.center_mask = (
            (np.abs(row_idx - rows / 2) <= 1) & (np.abs(col_idx - cols / 2) <= 1)
        )
        for arr in (
            self.critical_mass_array,
            self.corner_mask,
            self.edge_mask,
            self.center_distance,
            self.center_mask,
        ):
            arr.setflags(write=False)

    def index(self, row: int, col: int) -> int:
        return row * self.cols + col

    def position(self, idx: int) -> Coord:
        return divmod(idx, self.cols)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


@lru_cache(maxsize=32)
def get_geometry(rows: int, cols: int) -> BoardGeometry:
    """Return the cached geometry tables for a board size."""
    return BoardGeometry(rows, cols)


def critical_mass(row: int, col: int, rows: int, cols: int) -> int:
    """Units at which a cell explodes: 2 in corners, 3 on edges, 4 inside."""
    geo = get_geometry(rows, cols)
    return geo.critical_masses[geo.index(row, col)]


def neighbors(row: int, col: int, rows: int, cols: int) -> list[Coord]:
    """Orthogonal in-bounds neighbors in the order up, right, down, left."""
    geo = get_geometry(rows, cols)
    return [geo.position(n) for n in geo.neighbor_indices[geo.index(row, col)]]


def is_adjacent_including_diagonal(a: Coord, b: Coord) -> bool:
    """True when two cells are within Chebyshev distance 1 (a cell is
    adjacent to itself)."""
    return abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1


def manhattan_distance(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
