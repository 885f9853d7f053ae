import time
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Tuple
from ortools.sat.python import cp_model as _cp

from board import Board
from config import CFG
from models import PackResult, Placement, Shape, ShapeId
from solver.backtracking import area_prune_reason, validate_catalogue

# (shape_id, orientation, anchor_x, anchor_y)
Candidate = Tuple[ShapeId, Shape, int, int]

# ---------------- helpers ----------------

def _anchor_range(shape: Shape, W: int, H: int) -> Tuple[range, range]:
    xs = [dx for dx, _ in shape.cells]
    ys = [dy for _, dy in shape.cells]
    return range(-min(xs), W - max(xs)), range(-min(ys), H - max(ys))


def enumerate_candidates(
    board: Board,
    catalogue: Mapping[ShapeId, Shape],
    limit: Optional[int] = None,
) -> Tuple[List[Candidate], bool]:
    """Every fitting (type, orientation, anchor) on the board.

    Returns ``(candidates, capped)``; ``capped`` is set when ``limit`` stopped
    the enumeration early.
    """
    out: List[Candidate] = []
    for sid, shape in catalogue.items():
        if board.remaining.get(sid, 0) <= 0:
            continue
        for orient in shape.orientations():
            xs, ys = _anchor_range(orient, board.width, board.height)
            for ay in ys:
                for ax in xs:
                    if board.shape_fits(orient, ax, ay):
                        out.append((sid, orient, ax, ay))
                        if limit is not None and len(out) > limit:
                            return out, True
    return out, False


def _plan_order(p: Placement) -> Tuple[int, int]:
    fx, fy = p.shape.first_cell
    return (p.y + fy, p.x + fx)

# ---------------- main solve ----------------

def try_pack_cp_sat(
    board: Board,
    catalogue: Mapping[ShapeId, Shape],
    *,
    exact: bool = False,
    max_seconds: float = 30.0,
) -> PackResult:
    """Pose the packing as a 0/1 model: at most one shape per cell, exact counts per type."""

    validate_catalogue(board, catalogue)
    t0 = time.time()
    meta: Dict[str, object] = {"exact": bool(exact)}

    reason = area_prune_reason(board, catalogue, exact=exact)
    if reason is not None:
        meta["pruned"] = "area"
        return PackResult(False, [], reason, strategy="cp_sat", meta=meta)
    if board.is_done() and (not exact or board.open_area == 0):
        return PackResult(True, [], None, strategy="cp_sat", meta=meta)

    limit = int(getattr(CFG, "MAX_CANDIDATES", 200000))
    cands, capped = enumerate_candidates(board, catalogue, limit=limit)
    meta["candidates"] = len(cands)
    if capped:
        meta["error"] = "model_capped"
        return PackResult(
            False, [], f"Model capped: more than {limit:,} candidate placements",
            timed_out=True, strategy="cp_sat", meta=meta,
        )

    by_type: Dict[ShapeId, List[int]] = defaultdict(list)
    by_cell: Dict[int, List[int]] = defaultdict(list)
    W = board.width
    for i, (sid, orient, ax, ay) in enumerate(cands):
        by_type[sid].append(i)
        for dx, dy in orient.cells:
            by_cell[(ay + dy) * W + ax + dx].append(i)

    for sid, count in board.remaining.items():
        if count > 0 and not by_type.get(sid):
            meta["error"] = "shape_never_fits"
            return PackResult(False, [], f"Shape {sid!r} fits nowhere on the board",
                              strategy="cp_sat", meta=meta)

    m = _cp.CpModel()
    p = [m.NewBoolVar(f"p{i}") for i in range(len(cands))]

    for sid, idxs in by_type.items():
        m.Add(sum(p[i] for i in idxs) == int(board.remaining[sid]))

    if exact:
        for cell, v in enumerate(board.cells):
            if v:
                continue
            idxs = by_cell.get(cell)
            if not idxs:
                meta["error"] = "cell_uncoverable"
                return PackResult(False, [], f"Cell ({cell % W}, {cell // W}) cannot be covered",
                                  strategy="cp_sat", meta=meta)
            m.AddExactlyOne([p[i] for i in idxs])
    else:
        for idxs in by_cell.values():
            if len(idxs) > 1:
                m.AddAtMostOne([p[i] for i in idxs])

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = max(0.01, float(max_seconds))
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.num_workers = max(1, int(getattr(CFG, "WORKERS", 1)))
    solver.parameters.random_seed = int(getattr(CFG, "RANDOM_SEED", 0))
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)
    meta["status"] = solver.StatusName(res)
    meta["elapsed"] = round(time.time() - t0, 6)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        plan = [
            Placement(sid, orient, ax, ay)
            for i, (sid, orient, ax, ay) in enumerate(cands)
            if solver.BooleanValue(p[i])
        ]
        plan.sort(key=_plan_order)
        return PackResult(True, plan, None, strategy="cp_sat", meta=meta)
    if res == _cp.INFEASIBLE:
        return PackResult(False, [], "Proven infeasible", strategy="cp_sat", meta=meta)
    if res == _cp.MODEL_INVALID:
        raise RuntimeError(f"CP-SAT rejected the packing model: {meta['status']}")
    return PackResult(False, [], "Stopped before solution (timebox)", timed_out=True,
                      strategy="cp_sat", meta=meta)


__all__ = ["enumerate_candidates", "try_pack_cp_sat"]
