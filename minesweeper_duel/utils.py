"""Grid geometry helpers for row-major indexed boards."""

from typing import List, Tuple


def index_to_coords(index: int, cols: int) -> Tuple[int, int]:
    """Return (row, col) for a row-major index."""
    return divmod(index, cols)


def coords_to_index(row: int, col: int, cols: int) -> int:
    """Return the row-major index of (row, col)."""
    return row * cols + col


def get_neighborhoods(rows: int, cols: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute 8-connected neighbor indices for every cell in a grid.

    Args:
        rows: Number of rows. Must be positive.
        cols: Number of columns. Must be positive.

    Returns:
        A tuple where entry i holds the neighbor indices of cell i in
        ascending order (nw, n, ne, w, e, sw, s, se). Neighbors never wrap
        around row edges.

    Raises:
        ValueError: If rows or cols is non-positive.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be positive.")

    neighborhoods: List[Tuple[int, ...]] = []
    for row in range(rows):
        for col in range(cols):
            nbrs: List[int] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = row + dr, col + dc
                    if 0 <= nr < rows and 0 <= nc < cols:
                        nbrs.append(coords_to_index(nr, nc, cols))
            neighborhoods.append(tuple(nbrs))

    return tuple(neighborhoods)
