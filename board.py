# board.py - mutable packing area plus remaining shape budget
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from config import FILLED, EMPTY
from models import BoardError, Cell, InvalidPlacementError, Shape, ShapeId


def _as_int(value, message: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise BoardError(message)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise BoardError(message)


class Board:
    """Row-major grid of cells (``0`` empty, ``1`` filled) and per-type counts.

    ``remaining`` keeps the catalogue order it was built with; the search walks
    shape types in that order.
    """

    def __init__(self, width: int, height: int, counts: Optional[Mapping[ShapeId, int]] = None):
        message = f"Bad board: dimensions must be integers, got {width!r}x{height!r}"
        width = _as_int(width, message)
        height = _as_int(height, message)
        if width <= 0 or height <= 0:
            raise BoardError(f"Bad board: dimensions must be positive, got {width}x{height}")

        remaining: Dict[ShapeId, int] = {}
        for shape_id, count in (counts or {}).items():
            n = _as_int(count, f"Bad demand: count for shape {shape_id!r} is not an integer")
            if n < 0:
                raise BoardError(f"Bad demand: negative count for shape {shape_id!r}")
            remaining[shape_id] = n

        self.width = width
        self.height = height
        self.cells = bytearray(width * height)
        self.remaining = remaining
        self._filled = 0

    # ---------------- queries ----------------

    def __repr__(self) -> str:
        return f"Board({self.width}x{self.height}, filled={self._filled}, remaining={self.remaining})"

    def is_filled(self, x: int, y: int) -> bool:
        return bool(self.cells[y * self.width + x])

    @property
    def filled_area(self) -> int:
        return self._filled

    @property
    def open_area(self) -> int:
        return self.width * self.height - self._filled

    def is_done(self) -> bool:
        return all(n == 0 for n in self.remaining.values())

    def required_area(self, catalogue: Mapping[ShapeId, Shape]) -> int:
        return sum(n * catalogue[sid].area for sid, n in self.remaining.items() if n > 0)

    def open_positions(self) -> List[Cell]:
        w = self.width
        return [(i % w, i // w) for i, v in enumerate(self.cells) if not v]

    def first_open(self) -> Optional[Cell]:
        idx = self.cells.find(0)
        if idx == -1:
            return None
        return idx % self.width, idx // self.width

    def shape_fits(self, shape: Shape, x: int, y: int) -> bool:
        W, H = self.width, self.height
        cells = self.cells
        for dx, dy in shape.cells:
            bx = x + dx
            by = y + dy
            if bx < 0 or by < 0 or bx >= W or by >= H:
                return False
            if cells[by * W + bx]:
                return False
        return True

    # ---------------- mutation ----------------

    def place(self, shape: Shape, shape_id: ShapeId, x: int, y: int) -> None:
        if self.remaining.get(shape_id, 0) <= 0:
            raise InvalidPlacementError(f"No remaining demand for shape {shape_id!r}")
        if not self.shape_fits(shape, x, y):
            raise InvalidPlacementError(f"Shape {shape_id!r} does not fit at ({x}, {y})")
        W = self.width
        for dx, dy in shape.cells:
            self.cells[(y + dy) * W + x + dx] = 1
        self._filled += shape.area
        self.remaining[shape_id] -= 1

    def unplace(self, shape: Shape, shape_id: ShapeId, x: int, y: int) -> None:
        """Undo a :meth:`place` with the same arguments."""
        W = self.width
        for dx, dy in shape.cells:
            idx = (y + dy) * W + x + dx
            if not self.cells[idx]:
                raise InvalidPlacementError(f"Shape {shape_id!r} is not placed at ({x}, {y})")
            self.cells[idx] = 0
        self._filled -= shape.area
        self.remaining[shape_id] += 1

    def mark(self, x: int, y: int, value: bool) -> None:
        """Set a single cell; the search uses this to retire holes."""
        idx = y * self.width + x
        if bool(self.cells[idx]) == bool(value):
            raise InvalidPlacementError(f"Cell ({x}, {y}) already {'filled' if value else 'empty'}")
        self.cells[idx] = 1 if value else 0
        self._filled += 1 if value else -1

    def clone(self) -> "Board":
        other = Board.__new__(Board)
        other.width = self.width
        other.height = self.height
        other.cells = bytearray(self.cells)
        other.remaining = dict(self.remaining)
        other._filled = self._filled
        return other

    def to_rows(self, filled: str = FILLED, empty: str = EMPTY) -> List[str]:
        W = self.width
        return [
            "".join(filled if self.cells[y * W + x] else empty for x in range(W))
            for y in range(self.height)
        ]


def board_from_counts(width: int, height: int, shape_ids: Iterable[ShapeId], counts: Iterable[int]) -> Board:
    """Zip positional region counts onto catalogue ids."""
    ids: Tuple[ShapeId, ...] = tuple(shape_ids)
    values = list(counts)
    if len(values) != len(ids):
        raise BoardError(f"Bad demand: expected {len(ids)} counts, got {len(values)}")
    return Board(width, height, dict(zip(ids, values)))
