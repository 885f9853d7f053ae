from __future__ import annotations

import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_file_path() -> Path:
    configured = os.environ.get("PK_ATTEMPT_LOG")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "packer_attempts.log"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("packer.attempt_log")
    if logger.handlers:
        return logger

    log_path = _log_file_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # An unwritable log directory must not stop the solver.
        logger.handlers.clear()
    return logger


ATTEMPT_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(ATTEMPT_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    return f"{float(seconds):.2f}s"


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        ATTEMPT_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        ATTEMPT_LOGGER.info("%s", event)


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Write a free-form line to the attempt log."""
    with PROGRESS_LOCK:
        _emit_log(event, **fields)


LOG_STATE: Dict[str, Any] = {
    "run_start": None,
    "attempt": "",
    "attempt_start": None,
}

# Single source of truth for /progress
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "strategy": "",            # backtracking | cp_sat
    "attempt": "",             # e.g. "region 3: 12x5"
    "regions_done": 0,
    "regions_total": 0,
    "packable": 0,             # regions proven packable so far
    "nodes": 0,                # search nodes of the last attempt
    "percent": 0.0,            # 0..100 float
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,
}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()


def fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)


def _finalize_attempt_locked(now: float, *, reason: Optional[str] = None) -> None:
    attempt = LOG_STATE.get("attempt")
    if not attempt:
        return
    start = LOG_STATE.get("attempt_start")
    duration = None
    if isinstance(start, (int, float)):
        duration = max(0.0, now - float(start))
    _emit_log(
        "Attempt finished",
        attempt=attempt,
        strategy=PROGRESS.get("strategy") or "",
        nodes=PROGRESS.get("nodes"),
        duration=_fmt_seconds(duration),
        reason=reason,
    )
    LOG_STATE["attempt"] = ""
    LOG_STATE["attempt_start"] = None


def reset() -> None:
    with PROGRESS_LOCK:
        now = _now()
        _finalize_attempt_locked(now, reason="reset")
        new_run_id = int(PROGRESS.get("run_id", 0)) + 1
        PROGRESS.update({
            "status": "Idle",
            "strategy": "",
            "attempt": "",
            "regions_done": 0,
            "regions_total": 0,
            "packable": 0,
            "nodes": 0,
            "percent": 0.0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": new_run_id,
        })
        LOG_STATE.update({"run_start": None, "attempt": "", "attempt_start": None})
        _emit_log("Progress reset", run_id=new_run_id)


def start_run(regions_total: int = 0) -> None:
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS["status"] = "Solving"
        PROGRESS["elapsed_start"] = now
        PROGRESS["elapsed"] = 0.0
        PROGRESS["regions_total"] = max(0, int(regions_total))
        LOG_STATE["run_start"] = now
        _emit_log("Run started", regions=PROGRESS["regions_total"])

# ------------------------------
# Setters
# ------------------------------

def set_attempt(label: Any, strategy: Any = None) -> None:
    with PROGRESS_LOCK:
        now = _now()
        label_str = "" if label is None else str(label)
        if label_str != LOG_STATE.get("attempt"):
            _finalize_attempt_locked(now, reason="switch")
        PROGRESS["attempt"] = label_str
        if strategy is not None:
            PROGRESS["strategy"] = str(strategy)
        PROGRESS["nodes"] = 0
        if label_str:
            LOG_STATE["attempt"] = label_str
            LOG_STATE["attempt_start"] = now
            _emit_log("Attempt started", attempt=label_str, strategy=PROGRESS["strategy"])


def set_nodes(n: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["nodes"] = max(0, int(n))
        _touch_elapsed_locked()


def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)


def region_finished(ok: bool) -> None:
    with PROGRESS_LOCK:
        PROGRESS["regions_done"] = int(PROGRESS["regions_done"]) + 1
        if ok:
            PROGRESS["packable"] = int(PROGRESS["packable"]) + 1
        total = int(PROGRESS["regions_total"])
        if total > 0:
            PROGRESS["percent"] = max(0.0, min(100.0, 100.0 * PROGRESS["regions_done"] / total))
        _touch_elapsed_locked()
        _finalize_attempt_locked(_now(), reason="packed" if ok else "not packable")


def set_done(ok: Any = None, *, message: Any = None) -> None:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        if ok is None:
            ok_flag = True
        else:
            ok_flag = bool(ok)
        PROGRESS["status"] = "Solved" if ok_flag else "Error"
        PROGRESS["ok"] = ok_flag
        PROGRESS["done"] = True
        PROGRESS["percent"] = 100.0
        if message is not None:
            PROGRESS["message"] = str(message)
        _finalize_attempt_locked(now, reason="run_complete")
        run_start = LOG_STATE.get("run_start")
        total = max(0.0, now - float(run_start)) if isinstance(run_start, (int, float)) else None
        LOG_STATE["run_start"] = None
        _emit_log(
            "Run finished",
            status=PROGRESS["status"],
            packable=PROGRESS["packable"],
            regions=PROGRESS["regions_done"],
            duration=_fmt_seconds(total),
            message=PROGRESS["message"],
        )

# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = fmt_elapsed(PROGRESS["elapsed"])
        return snap
