# puzzle_input.py - catalogue / region parser and JSON demand coercion
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from board import Board, board_from_counts
from config import CFG, STRATEGIES
from models import PackingInputError, PuzzleFormatError, Shape, ShapeError

_HEADER_RE = re.compile(r"^(?P<id>\d+):$")
_REGION_RE = re.compile(r"^(?P<w>-?\d+)\s*[xX]\s*(?P<h>-?\d+)\s*:(?P<counts>.*)$")


@dataclass(frozen=True)
class Region:
    width: int
    height: int
    counts: Tuple[int, ...]
    line: int = 0

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}"

    def board(self, shape_ids) -> Board:
        return board_from_counts(self.width, self.height, shape_ids, self.counts)


@dataclass
class Puzzle:
    catalogue: Dict[int, Shape] = field(default_factory=dict)
    regions: List[Region] = field(default_factory=list)


def _parse_region(m: "re.Match[str]", lineno: int, n_shapes: int) -> Region:
    w = int(m.group("w"))
    h = int(m.group("h"))
    if w <= 0 or h <= 0:
        raise PuzzleFormatError(f"line {lineno}: region {w}x{h} must have positive dimensions")
    tokens = m.group("counts").split()
    counts: List[int] = []
    for tok in tokens:
        try:
            n = int(tok)
        except ValueError:
            raise PuzzleFormatError(f"line {lineno}: count {tok!r} is not an integer")
        if n < 0:
            raise PuzzleFormatError(f"line {lineno}: negative count {n}")
        counts.append(n)
    if len(counts) != n_shapes:
        raise PuzzleFormatError(
            f"line {lineno}: expected {n_shapes} counts, got {len(counts)}"
        )
    return Region(w, h, tuple(counts), lineno)


def parse_puzzle(text: str) -> Puzzle:
    """Parse ``N:`` shape drawings followed by ``WxH: c0 c1 ...`` region lines.

    The i-th count on a region line belongs to the i-th shape in the file.
    """
    puzzle = Puzzle()
    current_id: Optional[int] = None
    current_rows: List[str] = []
    header_line = 0

    def _flush() -> None:
        nonlocal current_id, current_rows
        if current_id is None:
            return
        if not current_rows:
            raise PuzzleFormatError(f"line {header_line}: shape {current_id} has no drawing")
        try:
            puzzle.catalogue[current_id] = Shape.from_rows(
                current_rows, name=str(current_id),
                filled=CFG.FILLED_CHAR, empty=CFG.EMPTY_CHAR,
            )
        except ShapeError as e:
            raise PuzzleFormatError(f"line {header_line}: {e}")
        current_id = None
        current_rows = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            _flush()
            continue

        region = _REGION_RE.match(line)
        if region:
            _flush()
            puzzle.regions.append(_parse_region(region, lineno, len(puzzle.catalogue)))
            continue

        header = _HEADER_RE.match(line)
        if header:
            _flush()
            if puzzle.regions:
                raise PuzzleFormatError(f"line {lineno}: shape defined after region lines")
            sid = int(header.group("id"))
            if sid in puzzle.catalogue:
                raise PuzzleFormatError(f"line {lineno}: duplicate shape id {sid}")
            current_id = sid
            header_line = lineno
            continue

        if current_id is None:
            raise PuzzleFormatError(f"line {lineno}: unexpected content {line!r}")
        current_rows.append(line)

    _flush()
    return puzzle


def load_puzzle(path: Union[str, Path]) -> Puzzle:
    return parse_puzzle(Path(path).read_text(encoding="utf-8"))

# ---------------- JSON demand ----------------

def _to_int(x: Any, what: str) -> int:
    if isinstance(x, bool) or (isinstance(x, float) and not x.is_integer()):
        raise PackingInputError(f"Bad demand: {what} must be an integer, got {x!r}")
    try:
        return int(x)
    except (TypeError, ValueError, OverflowError):
        raise PackingInputError(f"Bad demand: {what} must be an integer, got {x!r}")


def _coerce_catalogue(raw: Any) -> Dict[str, Shape]:
    if isinstance(raw, list):
        raw = {str(i): rows for i, rows in enumerate(raw)}
    if not isinstance(raw, Mapping) or not raw:
        raise PackingInputError("Bad demand: 'shapes' must be a non-empty mapping or list")
    catalogue: Dict[str, Shape] = {}
    for key, rows in raw.items():
        if isinstance(rows, str):
            rows = rows.splitlines()
        if not isinstance(rows, (list, tuple)) or not all(isinstance(r, str) for r in rows):
            raise PackingInputError(f"Bad demand: shape {key!r} must be a list of strings")
        catalogue[str(key)] = Shape.from_rows(
            [r.strip() for r in rows if r.strip()], name=str(key),
            filled=CFG.FILLED_CHAR, empty=CFG.EMPTY_CHAR,
        )
    return catalogue


def parse_demand(payload: Any) -> Tuple[Dict[str, Shape], Board, Dict[str, Any]]:
    """Turn a ``/solve`` JSON payload into ``(catalogue, board, options)``.

    ``counts`` may be a mapping keyed by shape id or a list aligned with the
    catalogue order.  ``options`` holds the solve flags (``exact``, ``strategy``, ``seconds``).
    """
    if not isinstance(payload, Mapping):
        raise PackingInputError("Bad demand: expected a JSON object")

    catalogue = _coerce_catalogue(payload.get("shapes"))

    width = _to_int(payload.get("width"), "width")
    height = _to_int(payload.get("height"), "height")

    raw_counts = payload.get("counts")
    if isinstance(raw_counts, list):
        if len(raw_counts) != len(catalogue):
            raise PackingInputError(
                f"Bad demand: expected {len(catalogue)} counts, got {len(raw_counts)}"
            )
        counts = {sid: _to_int(n, f"count for {sid}") for sid, n in zip(catalogue, raw_counts)}
    elif isinstance(raw_counts, Mapping):
        counts = {}
        for sid, n in raw_counts.items():
            key = str(sid)
            if key not in catalogue:
                raise PackingInputError(f"Bad demand: unknown shape id {key!r}")
            counts[key] = _to_int(n, f"count for {key}")
    else:
        raise PackingInputError("Bad demand: 'counts' must be a mapping or list")

    strategy = str(payload.get("strategy") or CFG.STRATEGY)
    if strategy not in STRATEGIES:
        raise PackingInputError(f"Bad demand: unknown strategy {strategy!r}")

    seconds = payload.get("seconds")
    if isinstance(seconds, bool):
        raise PackingInputError(f"Bad demand: seconds must be a number, got {seconds!r}")
    if seconds is not None:
        try:
            seconds = float(seconds)
        except (TypeError, ValueError):
            raise PackingInputError(f"Bad demand: seconds must be a number, got {seconds!r}")
        if not math.isfinite(seconds) or seconds <= 0:
            raise PackingInputError("Bad demand: seconds must be a positive finite number")

    exact = payload.get("exact", False)
    if not isinstance(exact, bool):
        raise PackingInputError(f"Bad demand: exact must be true or false, got {exact!r}")

    board = Board(width, height, counts)
    options = {
        "exact": exact,
        "strategy": strategy,
        "seconds": seconds,
    }
    return catalogue, board, options


__all__ = ["Puzzle", "Region", "load_puzzle", "parse_demand", "parse_puzzle"]
