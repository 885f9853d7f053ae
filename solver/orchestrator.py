# solver/orchestrator.py - runs the packing backends in order
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from board import Board
from config import CFG, STRATEGIES
from models import PackingInputError, PackResult, Shape, ShapeId
from progress import (
    log_attempt_detail,
    region_finished,
    set_attempt,
    set_done,
    set_message,
    set_nodes,
    start_run,
)
from puzzle_input import Puzzle
from solver.backtracking import search, validate_catalogue
from solver.cp_sat import try_pack_cp_sat

log = logging.getLogger(__name__)


def _attempt_record(result: PackResult, seconds: float) -> Dict[str, Any]:
    return {
        "strategy": result.strategy,
        "ok": result.ok,
        "timed_out": result.timed_out,
        "nodes": result.nodes,
        "reason": result.reason,
        "seconds": round(seconds, 6),
    }


def _run_backtracking(board, catalogue, *, exact, deadline, node_limit, label) -> PackResult:
    set_attempt(label, "backtracking")
    t0 = time.time()
    result = search(board, catalogue, exact=exact, deadline=deadline, node_limit=node_limit)
    set_nodes(result.nodes)
    log_attempt_detail(
        "Backtracking finished",
        attempt=label,
        ok=result.ok,
        timed_out=result.timed_out,
        nodes=result.nodes,
        duration=f"{time.time() - t0:.2f}s",
    )
    return result


def _run_cp_sat(board, catalogue, *, exact, seconds, label) -> PackResult:
    set_attempt(label, "cp_sat")
    t0 = time.time()
    result = try_pack_cp_sat(board, catalogue, exact=exact, max_seconds=seconds)
    log_attempt_detail(
        "CP-SAT finished",
        attempt=label,
        ok=result.ok,
        timed_out=result.timed_out,
        status=result.meta.get("status"),
        candidates=result.meta.get("candidates"),
        duration=f"{time.time() - t0:.2f}s",
    )
    return result


def solve_region(
    board: Board,
    catalogue: Mapping[ShapeId, Shape],
    *,
    exact: bool = False,
    strategy: Optional[str] = None,
    seconds: Optional[float] = None,
    label: str = "",
) -> PackResult:
    """Answer one region.

    ``auto`` runs backtracking under ``CFG.BACKTRACK_NODE_LIMIT`` and a share of
    the time box, then hands whatever time is left to CP-SAT if backtracking
    was inconclusive.  A ``timed_out`` result means "unknown", not "impossible".
    """
    strategy = strategy or CFG.STRATEGY
    if strategy not in STRATEGIES:
        raise PackingInputError(f"Unknown strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")
    validate_catalogue(board, catalogue)

    budget = float(seconds if seconds is not None else CFG.TIME_LIMIT)
    label = label or f"{board.width}x{board.height}"
    t0 = time.time()
    deadline = t0 + budget
    attempts: List[Dict[str, Any]] = []

    if strategy == "cp_sat":
        result = _run_cp_sat(board, catalogue, exact=exact, seconds=budget, label=label)
        attempts.append(_attempt_record(result, time.time() - t0))
    elif strategy == "backtracking":
        result = _run_backtracking(board, catalogue, exact=exact, deadline=deadline,
                                   node_limit=None, label=label)
        attempts.append(_attempt_record(result, time.time() - t0))
    else:
        share = min(1.0, max(0.0, float(CFG.BACKTRACK_TIME_SHARE)))
        result = _run_backtracking(
            board, catalogue, exact=exact,
            deadline=t0 + budget * share,
            node_limit=int(CFG.BACKTRACK_NODE_LIMIT),
            label=label,
        )
        attempts.append(_attempt_record(result, time.time() - t0))
        if result.timed_out:
            remaining = deadline - time.time()
            if remaining > 0:
                set_message(f"{label}: backtracking inconclusive, trying CP-SAT")
                t1 = time.time()
                rescue = _run_cp_sat(board, catalogue, exact=exact, seconds=remaining, label=label)
                attempts.append(_attempt_record(rescue, time.time() - t1))
                rescue.nodes += result.nodes
                result = rescue

    result.meta["attempts"] = attempts
    result.meta["elapsed"] = round(time.time() - t0, 6)
    log.debug("region %s ok=%s strategy=%s reason=%s", label, result.ok, result.strategy, result.reason)
    return result


def solve_puzzle(
    puzzle: Puzzle,
    *,
    exact: bool = False,
    strategy: Optional[str] = None,
    seconds: Optional[float] = None,
) -> List[PackResult]:
    ids = list(puzzle.catalogue)
    start_run(len(puzzle.regions))
    results: List[PackResult] = []
    try:
        for i, region in enumerate(puzzle.regions):
            result = solve_region(
                region.board(ids), puzzle.catalogue,
                exact=exact, strategy=strategy, seconds=seconds,
                label=f"region {i}: {region.label}",
            )
            region_finished(result.ok)
            results.append(result)
    except Exception as exc:
        set_done(False, message=f"{type(exc).__name__}: {exc}")
        raise
    set_done(True, message=f"{count_packable(results)}/{len(results)} regions packable")
    return results


def count_packable(results: Iterable[PackResult]) -> int:
    return sum(1 for r in results if r.ok)


__all__ = ["STRATEGIES", "count_packable", "solve_puzzle", "solve_region"]
