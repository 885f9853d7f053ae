
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, FrozenSet, Hashable, List, Optional, Sequence, Tuple
from config import FILLED, EMPTY

ShapeId = Hashable
Cell = Tuple[int, int]


class PackingInputError(ValueError):
    """Malformed catalogue, board or region description."""


class ShapeError(PackingInputError):
    pass


class BoardError(PackingInputError):
    pass


class PuzzleFormatError(PackingInputError):
    pass


class InvalidPlacementError(RuntimeError):
    """A placement was committed where it does not fit (a solver bug)."""


class SearchTimeout(RuntimeError):
    """The search ran out of budget before reaching a verdict."""


@dataclass(frozen=True)
class Shape:
    grid: Tuple[Tuple[bool, ...], ...]
    name: Optional[str] = None

    def __post_init__(self):
        if not self.grid or not self.grid[0]:
            raise ShapeError(f"Shape {self.name!r} has no rows or columns")
        width = len(self.grid[0])
        if any(len(row) != width for row in self.grid):
            raise ShapeError(f"Shape {self.name!r} has rows of different lengths")
        if not any(any(row) for row in self.grid):
            raise ShapeError(f"Shape {self.name!r} has no filled cells")

    @classmethod
    def from_rows(cls, rows: Sequence[str], name: Optional[str] = None,
                  filled: str = FILLED, empty: str = EMPTY) -> "Shape":
        grid = []
        for row in rows:
            for ch in row:
                if ch != filled and ch != empty:
                    raise ShapeError(f"Shape {name!r}: unexpected character {ch!r}")
            grid.append(tuple(ch == filled for ch in row))
        return cls(tuple(grid), name)

    @property
    def width(self) -> int:
        return len(self.grid[0])

    @property
    def height(self) -> int:
        return len(self.grid)

    @cached_property
    def cells(self) -> FrozenSet[Cell]:
        return frozenset(
            (x, y)
            for y, row in enumerate(self.grid)
            for x, on in enumerate(row)
            if on
        )

    @property
    def area(self) -> int:
        return len(self.cells)

    @cached_property
    def key(self) -> Tuple[Cell, ...]:
        """Filled-cell pattern translated so the bounding box starts at (0, 0)."""
        min_x = min(x for x, _ in self.cells)
        min_y = min(y for _, y in self.cells)
        return tuple(sorted((x - min_x, y - min_y) for x, y in self.cells))

    @cached_property
    def first_cell(self) -> Cell:
        """First filled cell in row-major order."""
        x, y = min(self.cells, key=lambda c: (c[1], c[0]))
        return x, y

    def same_pattern(self, other: "Shape") -> bool:
        return self.key == other.key

    def rotate90(self) -> "Shape":
        # clockwise: new row x reads old column x bottom to top
        h = self.height
        grid = tuple(
            tuple(self.grid[y][x] for y in range(h - 1, -1, -1))
            for x in range(self.width)
        )
        return Shape(grid, self.name)

    def flip_horizontal(self) -> "Shape":
        return Shape(tuple(tuple(reversed(row)) for row in self.grid), self.name)

    @cached_property
    def _orientations(self) -> Tuple["Shape", ...]:
        found: List[Shape] = []
        current = self
        for _ in range(4):
            for variant in (current, current.flip_horizontal()):
                if not any(variant.same_pattern(s) for s in found):
                    found.append(variant)
            current = current.rotate90()
        return tuple(found)

    def orientations(self) -> Tuple["Shape", ...]:
        return self._orientations

    def to_rows(self, filled: str = FILLED, empty: str = EMPTY) -> List[str]:
        return ["".join(filled if on else empty for on in row) for row in self.grid]


@dataclass(frozen=True)
class Placement:
    shape_id: ShapeId
    shape: Shape
    x: int
    y: int

    def board_cells(self) -> List[Cell]:
        return sorted(
            ((self.x + dx, self.y + dy) for dx, dy in self.shape.cells),
            key=lambda c: (c[1], c[0]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape_id,
            "x": self.x,
            "y": self.y,
            "rows": self.shape.to_rows(),
        }


@dataclass
class PackResult:
    ok: bool
    placements: List[Placement] = field(default_factory=list)
    reason: Optional[str] = None
    timed_out: bool = False
    nodes: int = 0
    strategy: str = ""
    meta: Dict[str, Any] = field(default_factory=dict)
