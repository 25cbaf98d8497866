"""
Move Engine - Applies a directional move to a board.

Design principles:
- Pure function: (board, direction) -> MoveResult
- Every direction is reduced to "compress left" by orienting the
  board first and restoring the orientation afterwards
- A move that changes nothing returns the original board object
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .board import Board, Direction, Row, Tile


@dataclass
class LineResult:
    """Result of compressing a single line towards index 0."""
    line: Row
    gained: int = 0
    changed: bool = False
    merged_values: list[int] = field(default_factory=list)


@dataclass
class MoveResult:
    """
    Result of applying a move to a board.

    `board` is the input board itself when `moved` is False.
    `merged_values` lists the value of every tile created by a merge.
    """
    board: Board
    gained: int = 0
    moved: bool = False
    merged_values: list[int] = field(default_factory=list)


def compress_line(line: Row) -> LineResult:
    """
    Slide tiles towards index 0 and merge equal neighbours.

    A merged tile keeps the first tile's id and is skipped by the
    scan, so it cannot merge again in the same pass.
    """
    tiles = [tile for tile in line if tile is not None]
    merged: list[Tile | None] = []
    merged_values: list[int] = []
    gained = 0

    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i].value == tiles[i + 1].value:
            product = tiles[i].doubled()
            merged.append(product)
            merged_values.append(product.value)
            gained += product.value
            i += 2
        else:
            merged.append(tiles[i])
            i += 1

    merged.extend([None] * (len(line) - len(merged)))

    changed = any(
        (before is None) != (after is None)
        or (before is not None and after is not None and before.value != after.value)
        for before, after in zip(line, merged)
    )

    return LineResult(
        line=tuple(merged),
        gained=gained,
        changed=changed,
        merged_values=merged_values,
    )


def _orient(board: Board, direction: Direction) -> Board:
    """Turn the board so `direction` becomes left."""
    if direction == Direction.RIGHT:
        return board.flip_horizontal()
    if direction == Direction.UP:
        return board.rotate_left()
    if direction == Direction.DOWN:
        return board.rotate_right()
    return board


def _restore(board: Board, direction: Direction) -> Board:
    """Undo _orient()."""
    if direction == Direction.RIGHT:
        return board.flip_horizontal()
    if direction == Direction.UP:
        return board.rotate_right()
    if direction == Direction.DOWN:
        return board.rotate_left()
    return board


def move_board(board: Board, direction: Direction) -> MoveResult:
    """
    Apply a move in `direction` to `board`.

    Returns the new board, the score gained by merges and whether
    anything changed. No tile is spawned here.
    """
    working = _orient(board.clone(), direction)

    new_rows = []
    gained = 0
    moved = False
    merged_values: list[int] = []

    for row in working.rows:
        result = compress_line(row)
        new_rows.append(result.line)
        gained += result.gained
        moved = moved or result.changed
        merged_values.extend(result.merged_values)

    if not moved:
        return MoveResult(board=board, gained=0, moved=False)

    new_board = _restore(Board(rows=tuple(new_rows)), direction)
    return MoveResult(
        board=new_board,
        gained=gained,
        moved=True,
        merged_values=merged_values,
    )


def available_moves(board: Board) -> list[Direction]:
    """Directions that would change the board."""
    return [d for d in Direction if move_board(board, d).moved]
