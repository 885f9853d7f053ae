#!/usr/bin/env python
"""
Command-line packer for a puzzle file of shapes and regions.

Typical usage from the project root
-----------------------------------

    python cli.py input.txt
    python cli.py input.txt --strategy backtracking --seconds 5
    python cli.py input.txt --exact --show

Prints one line per region and, last, the number of packable regions.
Exit code 2 means the input file is malformed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from config import CFG
from models import PackingInputError
from puzzle_input import load_puzzle
from render import render_text
from solver.orchestrator import STRATEGIES, count_packable, solve_puzzle


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Decide which regions can hold their required polyomino shapes.",
    )
    parser.add_argument("input", help="Puzzle file: shape drawings followed by WxH region lines.")
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=CFG.STRATEGY,
        help="Backend to use (default: %(default)s).",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=CFG.TIME_LIMIT,
        help="Time box per region in seconds (default: %(default)s).",
    )
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Require the shapes to cover every cell of the region.",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the filled grid for every packable region.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        puzzle = load_puzzle(args.input)
    except PackingInputError as e:
        print(f"[packer] Bad input: {e}", file=sys.stderr)
        return 2

    results = solve_puzzle(puzzle, exact=args.exact, strategy=args.strategy, seconds=args.seconds)

    for i, (region, result) in enumerate(zip(puzzle.regions, results)):
        if result.ok:
            verdict = "yes"
        elif result.timed_out:
            verdict = "unknown"
        else:
            verdict = "no"
        detail = f" ({result.reason})" if result.reason else ""
        print(f"region {i} {region.label}: {verdict} [{result.strategy}]{detail}")
        if args.show and result.ok:
            for row in render_text(result.placements, region.width, region.height):
                print(f"    {row}")

    print(f"packable: {count_packable(results)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
