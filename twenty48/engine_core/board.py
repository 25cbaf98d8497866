"""
Board - The N x N tile grid and its geometric transforms.

Design principles:
- Immutable: every transform returns a new Board
- Direction-agnostic: the move engine only ever compresses left,
  the other three directions are reduced to it via rotate/flip
- Tile ids are for UI identity only, never for game logic
"""

from __future__ import annotations
from dataclasses import dataclass
from copy import deepcopy
from enum import Enum
from typing import Iterator


BOARD_SIZE = 4

Cell = tuple[int, int]


class Direction(Enum):
    """Directional input for a move."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, raw: str | Direction) -> Direction:
        """
        Resolve user input to a Direction.

        Accepts direction names, browser arrow key names
        ("ArrowLeft", ...) and the usual wasd / hjkl keys.
        Raises ValueError for anything else.
        """
        if isinstance(raw, Direction):
            return raw
        key = raw.strip()
        if key in _KEY_ALIASES:
            return _KEY_ALIASES[key]
        lowered = key.lower()
        if lowered in _KEY_ALIASES:
            return _KEY_ALIASES[lowered]
        raise ValueError(f"Unknown direction: {raw!r}")


_KEY_ALIASES: dict[str, Direction] = {
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
    "up": Direction.UP,
    "down": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
    "ArrowUp": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
    "w": Direction.UP,
    "s": Direction.DOWN,
    "h": Direction.LEFT,
    "l": Direction.RIGHT,
    "k": Direction.UP,
    "j": Direction.DOWN,
}


@dataclass(frozen=True)
class Tile:
    """
    A single numbered piece on the board.

    `tile_id` gives the UI a stable identity across re-renders.
    `value` is always a positive power of two.
    """
    tile_id: int
    value: int

    def doubled(self) -> Tile:
        """Return the merge product, keeping this tile's id."""
        return Tile(tile_id=self.tile_id, value=self.value * 2)


Row = tuple["Tile | None", ...]


@dataclass(frozen=True)
class Board:
    """
    Square grid of optional tiles.

    Equality (==) compares ids and values. Use same_values()
    when only the game-relevant content matters.
    """
    rows: tuple[Row, ...]

    def __post_init__(self):
        size = len(self.rows)
        if size == 0:
            raise ValueError("Board must have at least one row")
        for row in self.rows:
            if len(row) != size:
                raise ValueError(
                    f"Board must be square: got a row of {len(row)} in a {size}-row board"
                )

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def empty(cls, size: int = BOARD_SIZE) -> Board:
        """Create a board with every cell empty."""
        if size < 1:
            raise ValueError(f"Board size must be positive, got {size}")
        return cls(rows=tuple(tuple(None for _ in range(size)) for _ in range(size)))

    @classmethod
    def from_values(cls, values: list[list[int]]) -> Board:
        """
        Build a board from a grid of ints (0 = empty).

        Tile ids are assigned row-major starting at 1.
        """
        next_id = 1
        rows = []
        for value_row in values:
            row = []
            for value in value_row:
                if value:
                    row.append(Tile(tile_id=next_id, value=value))
                    next_id += 1
                else:
                    row.append(None)
            rows.append(tuple(row))
        return cls(rows=tuple(rows))

    def clone(self) -> Board:
        """Deep copy the board."""
        return deepcopy(self)

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def size(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def get(self, row: int, col: int) -> Tile | None:
        """Get the tile at (row, col), or None if empty."""
        return self.rows[row][col]

    def with_tile(self, row: int, col: int, tile: Tile | None) -> Board:
        """Return new board with one cell replaced."""
        new_rows = list(self.rows)
        new_row = list(new_rows[row])
        new_row[col] = tile
        new_rows[row] = tuple(new_row)
        return Board(rows=tuple(new_rows))

    def values(self) -> list[list[int]]:
        """Grid of tile values, 0 for empty cells."""
        return [[tile.value if tile else 0 for tile in row] for row in self.rows]

    def tiles(self) -> list[Tile]:
        """All tiles in row-major order."""
        return [tile for row in self.rows for tile in row if tile is not None]

    def tile_count(self) -> int:
        return len(self.tiles())

    def max_value(self) -> int:
        """Largest tile value on the board (0 if empty)."""
        return max((tile.value for tile in self.tiles()), default=0)

    def same_values(self, other: Board) -> bool:
        """True if both boards hold the same values in the same cells."""
        return self.values() == other.values()

    # =========================================================================
    # Transforms
    # =========================================================================

    def rotate_right(self) -> Board:
        """Rotate 90 degrees clockwise: (r, c) -> (c, N-1-r)."""
        n = self.size
        return Board(rows=tuple(
            tuple(self.rows[n - 1 - c][r] for c in range(n))
            for r in range(n)
        ))

    def rotate_left(self) -> Board:
        """Rotate 90 degrees counter-clockwise."""
        return self.rotate_right().rotate_right().rotate_right()

    def flip_horizontal(self) -> Board:
        """Mirror each row left-to-right."""
        return Board(rows=tuple(tuple(reversed(row)) for row in self.rows))

    # =========================================================================
    # Queries
    # =========================================================================

    def empty_cells(self) -> list[Cell]:
        """Unoccupied (row, col) positions in row-major order."""
        return [
            (r, c)
            for r, row in enumerate(self.rows)
            for c, tile in enumerate(row)
            if tile is None
        ]

    def has_any_legal_move(self) -> bool:
        """
        True if an empty cell exists or two orthogonal neighbours match.

        Only right and down neighbours are checked; left/up pairs are
        the same pairs seen from the other side.
        """
        if self.empty_cells():
            return True
        n = self.size
        for r in range(n):
            for c in range(n):
                value = self.rows[r][c].value
                if c + 1 < n and self.rows[r][c + 1].value == value:
                    return True
                if r + 1 < n and self.rows[r + 1][c].value == value:
                    return True
        return False

    def render(self) -> str:
        """Plain-text grid for terminals and logs."""
        width = max(4, len(str(self.max_value())))
        lines = []
        for row in self.values():
            cells = [f"{v if v else '.':>{width}}" for v in row]
            lines.append(" ".join(cells))
        return "\n".join(lines)
