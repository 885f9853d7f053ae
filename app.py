# app.py - JSON front end for the packer
from __future__ import annotations
import os
import time
from typing import Any, Dict

from flask import Flask, jsonify, request, send_from_directory

from config import CFG
from io_files import write_layout_view_html, write_plan
from models import PackingInputError, PackResult
from progress import (
    reset as progress_reset,
    snapshot as progress_json,
    fmt_elapsed, start_run, region_finished, set_done,
)
from render import render_result, render_text
from solver.orchestrator import solve_region
from puzzle_input import parse_demand

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
OUTPUT_DIR = os.getenv("PK_OUTPUT_DIR", BASE_DIR)

LAST_RESULT: Dict[str, Any] = {"ok": False, "plan_path": "", "layout_path": ""}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _result_payload(result: PackResult, W: int, H: int, elapsed: float) -> Dict[str, Any]:
    return {
        "ok": result.ok,
        "reason": result.reason,
        "strategy": result.strategy,
        "timed_out": result.timed_out,
        "nodes": result.nodes,
        "width": W,
        "height": H,
        "placements": [p.to_dict() for p in result.placements],
        "grid": render_text(result.placements, W, H) if result.ok else [],
        "elapsed_str": fmt_elapsed(elapsed),
    }


def _write_outputs(result: PackResult, W: int, H: int) -> None:
    LAST_RESULT.update({"ok": result.ok, "plan_path": "", "layout_path": ""})
    if not result.ok:
        return
    LAST_RESULT["plan_path"] = write_plan(result.placements, W, H, OUTPUT_DIR)
    svg, legend = render_result(result.placements, W, H)
    LAST_RESULT["layout_path"] = write_layout_view_html(svg, legend, OUTPUT_DIR, grid_label=f"{W}x{H}")


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    payload = request.get_json(silent=True)
    try:
        catalogue, board, options = parse_demand(payload)
    except PackingInputError as e:
        set_done(False, message=str(e))
        return jsonify({"ok": False, "error": str(e)}), 400

    t0 = time.time()
    start_run(1)
    try:
        result = solve_region(
            board, catalogue,
            exact=options["exact"],
            strategy=options["strategy"],
            seconds=options["seconds"],
        )
    except PackingInputError as e:
        set_done(False, message=str(e))
        return jsonify({"ok": False, "error": str(e)}), 400
    region_finished(result.ok)
    set_done(True, message=result.reason or "packed")

    _write_outputs(result, board.width, board.height)
    return jsonify(_result_payload(result, board.width, board.height, time.time() - t0))


@app.route("/download/plan")
def download_plan():
    path = LAST_RESULT.get("plan_path") or os.path.join(OUTPUT_DIR, CFG.PLAN_OUT)
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/download/html")
def download_html():
    path = LAST_RESULT.get("layout_path") or os.path.join(OUTPUT_DIR, CFG.LAYOUT_HTML)
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
