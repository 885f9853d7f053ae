"""Helpers for writing packing plans to disk."""

from __future__ import annotations

import os
from typing import Sequence

from config import CFG
from models import Placement
from render import render_text


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_plan(placements: Sequence[Placement], W: int, H: int, base_dir: str) -> str:
    """Write the placement list and the filled grid to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.PLAN_OUT, "plan.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not placements:
            f.write("No placements\n")
            return path
        for p in placements:
            f.write(f"shape {p.shape_id} @ ({p.x},{p.y}) {'/'.join(p.shape.to_rows())}\n")
        f.write("\n")
        for row in render_text(placements, W, H):
            f.write(row + "\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str, grid_label: str = "") -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    title = f"Layout View {grid_label}".strip()
    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>{title}</title></head>
<body>
<h1>{title}</h1>
<section>{svg}</section>
<section><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["write_plan", "write_layout_view_html"]
