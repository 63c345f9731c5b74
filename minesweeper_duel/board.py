"""Minesweeper board: geometry, mine placement, numbering, reveal and flags."""

import logging
import random
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from .constants import DEFAULT_BOARD_SIDE
from .utils import get_neighborhoods, index_to_coords

logger = logging.getLogger(__name__)


@dataclass
class Cell:
    """One board position. `adjacent_mine_count` is None until numbering."""

    index: int
    is_mine: bool = False
    adjacent_mine_count: Optional[int] = None
    is_revealed: bool = False
    is_flagged: bool = False


@dataclass(frozen=True)
class CellView:
    """
    Player-visible projection of a cell.

    `number` is set only for revealed non-mine cells; `mine_exposed` is True
    only for a revealed mine. Hidden cells carry no mine information.
    """

    index: int
    is_revealed: bool
    is_flagged: bool
    number: Optional[int]
    mine_exposed: bool = False

    @property
    def is_hidden(self) -> bool:
        """True for cells that are neither revealed nor flagged."""
        return not self.is_revealed and not self.is_flagged


@dataclass(frozen=True)
class RevealResult:
    hit_mine: bool
    revealed: Tuple[int, ...] = ()


@dataclass(frozen=True)
class FlagResult:
    index: int
    changed: bool
    now_flagged: bool


class Board:
    """Grid of cells stored row-major in a flat list."""

    def __init__(
        self,
        rows: int = DEFAULT_BOARD_SIDE,
        cols: Optional[int] = None,
        mine_count: int = 0,
    ) -> None:
        """
        Create an empty board with no mines placed.

        Args:
            rows: Number of rows, must be > 0.
            cols: Number of columns; defaults to `rows` (square board).
            mine_count: Number of mines `place_mines` commits by default.

        Raises:
            ValueError: If dimensions are invalid or mine_count is negative.
        """
        if cols is None:
            cols = rows
        if rows <= 0 or cols <= 0:
            raise ValueError("Board dimensions must be positive.")
        if mine_count < 0:
            raise ValueError("mine_count must be non-negative.")

        self.rows: int = rows
        self.cols: int = cols
        self.mine_count: int = mine_count
        self.cells: List[Cell] = [Cell(index=i) for i in range(rows * cols)]
        self.mines_placed: bool = False
        self.numbers_computed: bool = False

        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(
            rows, cols
        )

    @classmethod
    def from_mines(
        cls, rows: int, cols: Optional[int], mine_indices: Iterable[int]
    ) -> "Board":
        """Build a numbered board with mines at exactly the given indices."""
        board = cls(rows, cols)
        mines = set(mine_indices)
        for index in mines:
            board._check_index(index)
            board.cells[index].is_mine = True
        board.mine_count = len(mines)
        board.mines_placed = True
        board.compute_numbers()
        return board

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexError(f"Cell index {index} is outside the board.")

    def cell(self, index: int) -> Cell:
        self._check_index(index)
        return self.cells[index]

    def neighbors(self, index: int) -> Tuple[int, ...]:
        """Return the neighbor indices of a cell in ascending order."""
        self._check_index(index)
        return self._neighborhoods[index]

    def adjacent_cells(self, index: int) -> List[Cell]:
        return [self.cells[n] for n in self.neighbors(index)]

    def available_cells(self) -> List[Cell]:
        """All cells neither revealed nor flagged, in index order."""
        return [c for c in self.cells if not c.is_revealed and not c.is_flagged]

    def mine_indices(self) -> FrozenSet[int]:
        return frozenset(c.index for c in self.cells if c.is_mine)

    def place_mines(
        self,
        excluded_index: int,
        excluded: Iterable[int],
        count: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Place mines uniformly at random (one-time), keeping a safe zone free.

        Args:
            excluded_index: The first revealed cell; never a mine.
            excluded: Further indices that must stay free (its neighbors).
            count: Number of mines; defaults to the board's mine_count.
            rng: Random source; defaults to the module-level generator.

        Raises:
            ValueError: If mines are already placed or the safe zone leaves
                too few cells for `count` mines.
        """
        if self.mines_placed:
            raise ValueError("Mines have already been placed on this board.")
        self._check_index(excluded_index)

        if count is None:
            count = self.mine_count
        safe: Set[int] = set(excluded) | {excluded_index}
        eligible: List[int] = [i for i in range(self.size) if i not in safe]
        if count < 0 or count > len(eligible):
            raise ValueError(
                f"Cannot place {count} mines outside a safe zone of {len(safe)} cells."
            )

        # Sampling without replacement: every eligible cell equally likely.
        chooser = rng if rng is not None else random
        for index in chooser.sample(eligible, count):
            self.cells[index].is_mine = True

        self.mine_count = count
        self.mines_placed = True
        logger.debug("Placed %d mines avoiding %d safe cells", count, len(safe))

    def compute_numbers(self) -> None:
        """Populate every non-mine cell with its adjacent mine count."""
        if not self.mines_placed:
            raise ValueError("Mines must be placed before numbering the board.")
        for cell in self.cells:
            if cell.is_mine:
                cell.adjacent_mine_count = None
                continue
            cell.adjacent_mine_count = sum(
                1 for n in self._neighborhoods[cell.index] if self.cells[n].is_mine
            )
        self.numbers_computed = True

    def reveal(self, index: int) -> RevealResult:
        """
        Reveal a cell, flood-filling from zero-count cells.

        Revealed or flagged targets are a no-op. A mine is marked revealed and
        reported through `hit_mine`. Flood fill never reveals flagged cells or
        mines and visits each cell at most once.

        Returns:
            RevealResult with `hit_mine` and the newly revealed indices.
        """
        self._check_index(index)
        if not self.numbers_computed:
            raise ValueError("Mines must be placed and numbered before revealing.")

        target = self.cells[index]
        if target.is_revealed or target.is_flagged:
            return RevealResult(hit_mine=False)

        if target.is_mine:
            target.is_revealed = True
            return RevealResult(hit_mine=True, revealed=(index,))

        # Iterative flood fill so the largest boards cannot hit recursion limits.
        revealed: List[int] = []
        stack: List[int] = [index]
        while stack:
            current = self.cells[stack.pop()]
            if current.is_revealed or current.is_flagged or current.is_mine:
                continue

            current.is_revealed = True
            revealed.append(current.index)

            if current.adjacent_mine_count == 0:
                for n in self._neighborhoods[current.index]:
                    if not self.cells[n].is_revealed:
                        stack.append(n)

        return RevealResult(hit_mine=False, revealed=tuple(sorted(revealed)))

    def toggle_flag(self, index: int) -> FlagResult:
        """Flip the flag on a hidden cell; revealed cells are left untouched."""
        cell = self.cell(index)
        if cell.is_revealed:
            return FlagResult(index=index, changed=False, now_flagged=False)
        cell.is_flagged = not cell.is_flagged
        return FlagResult(index=index, changed=True, now_flagged=cell.is_flagged)

    def is_winning_state(self, correctly_flagged_mine_count: int) -> bool:
        """A game is won once every mine carries a flag."""
        return correctly_flagged_mine_count == self.mine_count

    def view(self, index: int) -> CellView:
        cell = self.cell(index)
        exposed = cell.is_revealed and cell.is_mine
        return CellView(
            index=index,
            is_revealed=cell.is_revealed,
            is_flagged=cell.is_flagged,
            number=None if exposed or not cell.is_revealed else cell.adjacent_mine_count,
            mine_exposed=exposed,
        )

    def snapshot(self) -> Tuple[CellView, ...]:
        """Player-visible state of every cell, in index order."""
        return tuple(self.view(i) for i in range(self.size))

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying numbers.
            color: If False, omit ANSI escape codes.

        Returns:
            A grid with column (x) labels on top and row (y) labels on the left.
            Hidden cells are '.', flags 'F', mines 'M'.
        """
        coord = self._c if color else str
        mine = self._m if color else str

        def cell_str(index: int) -> str:
            cell = self.cells[index]
            if cell.is_flagged and not reveal_all:
                return "F"
            if reveal_all or cell.is_revealed:
                if cell.is_mine:
                    return mine("M")
                if cell.adjacent_mine_count is None:
                    return "?"
                return str(cell.adjacent_mine_count)
            return "."

        header_cells = " ".join(f"{x:2d}" for x in range(self.cols))
        out = [coord("   ") + coord(header_cells)]
        out.append(coord("   " + "-" * (3 * self.cols - 1)))

        for y in range(self.rows):
            row_cells = " ".join(
                f" {cell_str(y * self.cols + x)}" for x in range(self.cols)
            )
            out.append(coord(f"{y:2d} ") + coord("|") + row_cells)

        return "\n".join(out)

    def describe(self, index: int) -> str:
        """Human-readable coordinates of a cell, e.g. "(x=3, y=1)"."""
        row, col = index_to_coords(index, self.cols)
        return f"(x={col}, y={row})"
