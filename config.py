# config.py
import os

# ======= Solver selection =======
STRATEGIES           = ("auto", "backtracking", "cp_sat")
STRATEGY             = os.getenv("PK_STRATEGY", "auto")   # one of STRATEGIES
TIME_LIMIT           = float(os.getenv("PK_TIME_LIMIT", "30"))

# ======= Backtracking guards =======
# The node budget keeps the first pass cheap; when it runs out the
# orchestrator hands the remaining time to CP-SAT.
BACKTRACK_NODE_LIMIT = int(os.getenv("PK_BACKTRACK_NODE_LIMIT", "2000000"))
BACKTRACK_TIME_SHARE = float(os.getenv("PK_BACKTRACK_TIME_SHARE", "0.5"))

# ======= CP-SAT knobs =======
WORKERS              = int(os.getenv("PK_WORKERS", "1"))
MAX_MEMORY_MB        = int(os.getenv("PK_MAX_MEMORY_MB", "2048"))
RANDOM_SEED          = int(os.getenv("PK_RANDOM_SEED", "0"))
MAX_CANDIDATES       = int(os.getenv("PK_MAX_CANDIDATES", "200000"))

# ======= Input / output characters =======
FILLED_CHAR          = os.getenv("PK_FILLED_CHAR", "#")
EMPTY_CHAR           = os.getenv("PK_EMPTY_CHAR", ".")

# ======= Output names =======
PLAN_OUT    = os.getenv("PK_PLAN_OUT", "plan.txt")
LAYOUT_HTML = os.getenv("PK_LAYOUT_HTML", "layout_view.html")


class CFG:
    STRATEGY   = STRATEGY
    TIME_LIMIT = TIME_LIMIT

    BACKTRACK_NODE_LIMIT = BACKTRACK_NODE_LIMIT
    BACKTRACK_TIME_SHARE = BACKTRACK_TIME_SHARE

    WORKERS        = WORKERS
    MAX_MEMORY_MB  = MAX_MEMORY_MB
    RANDOM_SEED    = RANDOM_SEED
    MAX_CANDIDATES = MAX_CANDIDATES

    FILLED_CHAR = FILLED_CHAR
    EMPTY_CHAR  = EMPTY_CHAR

    PLAN_OUT    = PLAN_OUT
    LAYOUT_HTML = LAYOUT_HTML


# shorthands used as defaults for rendering
FILLED = CFG.FILLED_CHAR
EMPTY  = CFG.EMPTY_CHAR

__all__ = ["CFG", "FILLED", "EMPTY", "STRATEGIES"]
