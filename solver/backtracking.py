# solver/backtracking.py
"""Depth-first polyomino packer.

The search always works on the first open cell in row-major order.  Every
remaining shape type is tried there in catalogue order, each orientation
anchored so that its first filled cell lands on that open cell.  When nothing
can cover the cell it is retired as a hole, but only while the board still has
slack (open area beyond what the remaining shapes need); with zero slack the
cell must be covered or the branch fails.

The traversal is iterative: one board is mutated in place and every frame on
the explicit stack remembers the move it applied, so unwinding (on success,
exhaustion or an expired budget) restores the board exactly.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Mapping, Optional, Tuple

from board import Board
from models import (
    PackingInputError,
    PackResult,
    Placement,
    SearchTimeout,
    Shape,
    ShapeId,
)

log = logging.getLogger(__name__)

# (shape_id, orientation, anchor_x, anchor_y); a hole is (None, None, x, y)
Move = Tuple[Optional[ShapeId], Optional[Shape], int, int]

_CLOCK_EVERY = 256


def validate_catalogue(board: Board, catalogue: Mapping[ShapeId, Shape]) -> None:
    for shape_id, count in board.remaining.items():
        if count > 0 and shape_id not in catalogue:
            raise PackingInputError(f"Bad demand: shape {shape_id!r} is not in the catalogue")


def area_prune_reason(board: Board, catalogue: Mapping[ShapeId, Shape], *, exact: bool = False) -> Optional[str]:
    """Return a reason when the area alone rules the board out, else ``None``.

    Only ever proves impossibility; enough area says nothing about success.
    """
    required = board.required_area(catalogue)
    available = board.open_area
    if required > available:
        return f"Insufficient area: shapes need {required} cells, {available} open"
    if exact and required != available:
        return f"Exact cover impossible: shapes need {required} cells, {available} open"
    return None


class _Frame:
    __slots__ = ("x", "y", "candidates", "index", "hole_ok", "move")

    def __init__(self, x: int, y: int, candidates: List[Move], hole_ok: bool):
        self.x = x
        self.y = y
        self.candidates = candidates
        self.index = 0
        self.hole_ok = hole_ok
        self.move: Optional[Move] = None

    def next_move(self) -> Optional[Move]:
        if self.index < len(self.candidates):
            move = self.candidates[self.index]
            self.index += 1
            return move
        if self.hole_ok:
            self.hole_ok = False
            return (None, None, self.x, self.y)
        return None


class PackingSearch:
    """In-place search over ``board``; the board is restored when :meth:`run` returns."""

    def __init__(self, board: Board, catalogue: Mapping[ShapeId, Shape], *, exact: bool = False):
        validate_catalogue(board, catalogue)
        self.board = board
        self.catalogue = catalogue
        self.exact = bool(exact)
        self.nodes = 0
        self.holes = 0
        self._required = board.required_area(catalogue)
        self._variants: Dict[ShapeId, Tuple[Tuple[Shape, int, int], ...]] = {
            sid: tuple((o, o.first_cell[0], o.first_cell[1]) for o in shape.orientations())
            for sid, shape in catalogue.items()
        }

    # ---------------- helpers ----------------

    def _slack(self) -> int:
        return self.board.open_area - self._required

    def _solved(self) -> bool:
        if not self.board.is_done():
            return False
        return not self.exact or self.board.open_area == 0

    def _make_frame(self) -> Optional[_Frame]:
        pos = self.board.first_open()
        if pos is None:
            return None
        x, y = pos
        board = self.board
        candidates: List[Move] = []
        for sid in self.catalogue:
            if board.remaining.get(sid, 0) <= 0:
                continue
            for orient, fx, fy in self._variants[sid]:
                ax = x - fx
                ay = y - fy
                if board.shape_fits(orient, ax, ay):
                    candidates.append((sid, orient, ax, ay))
        hole_ok = not self.exact and self._slack() > 0
        return _Frame(x, y, candidates, hole_ok)

    def _apply(self, move: Move) -> None:
        sid, orient, x, y = move
        if orient is None:
            self.board.mark(x, y, True)
            self.holes += 1
        else:
            self.board.place(orient, sid, x, y)
            self._required -= orient.area
        self.nodes += 1

    def _undo(self, move: Move) -> None:
        sid, orient, x, y = move
        if orient is None:
            self.board.mark(x, y, False)
            self.holes -= 1
        else:
            self.board.unplace(orient, sid, x, y)
            self._required += orient.area

    # ---------------- main loop ----------------

    def run(self, *, deadline: Optional[float] = None, node_limit: Optional[int] = None) -> PackResult:
        t0 = time.time()
        reason = area_prune_reason(self.board, self.catalogue, exact=self.exact)
        if reason is not None:
            return PackResult(False, [], reason, strategy="backtracking", meta={"pruned": "area"})

        if self._solved():
            return PackResult(True, [], None, strategy="backtracking")

        stack: List[_Frame] = []
        ok = False
        timed_out = False
        plan: List[Placement] = []
        try:
            root = self._make_frame()
            if root is not None:
                stack.append(root)
            ticks = 0
            while stack:
                if node_limit is not None and self.nodes >= node_limit:
                    timed_out = True
                    break
                ticks += 1
                if deadline is not None and ticks % _CLOCK_EVERY == 1 and time.time() >= deadline:
                    timed_out = True
                    break

                frame = stack[-1]
                if frame.move is not None:
                    self._undo(frame.move)
                    frame.move = None
                move = frame.next_move()
                if move is None:
                    stack.pop()
                    continue
                self._apply(move)
                frame.move = move

                if self._solved():
                    ok = True
                    break
                if self._slack() < 0:
                    continue
                child = self._make_frame()
                if child is not None:
                    stack.append(child)

            if ok:
                plan = [
                    Placement(f.move[0], f.move[1], f.move[2], f.move[3])
                    for f in stack
                    if f.move is not None and f.move[1] is not None
                ]
        finally:
            for frame in reversed(stack):
                if frame.move is not None:
                    self._undo(frame.move)
                    frame.move = None

        elapsed = time.time() - t0
        meta = {"elapsed": round(elapsed, 6), "exact": self.exact}
        if ok:
            reason = None
        elif timed_out:
            reason = f"Search budget exhausted after {self.nodes:,} nodes"
        else:
            reason = "No packing exists"
        log.debug("backtracking ok=%s timed_out=%s nodes=%d elapsed=%.3fs", ok, timed_out, self.nodes, elapsed)
        return PackResult(ok, plan, reason, timed_out=timed_out, nodes=self.nodes,
                          strategy="backtracking", meta=meta)


def search(
    board: Board,
    catalogue: Mapping[ShapeId, Shape],
    *,
    exact: bool = False,
    deadline: Optional[float] = None,
    node_limit: Optional[int] = None,
) -> PackResult:
    """Pack ``board`` and report the plan; the caller's board is left untouched."""
    return PackingSearch(board.clone(), catalogue, exact=exact).run(deadline=deadline, node_limit=node_limit)


def can_pack(
    board: Board,
    catalogue: Mapping[ShapeId, Shape],
    *,
    exact: bool = False,
    deadline: Optional[float] = None,
    node_limit: Optional[int] = None,
) -> bool:
    result = search(board, catalogue, exact=exact, deadline=deadline, node_limit=node_limit)
    if result.timed_out:
        raise SearchTimeout(result.reason)
    return result.ok


__all__ = ["PackingSearch", "area_prune_reason", "can_pack", "search", "validate_catalogue"]
