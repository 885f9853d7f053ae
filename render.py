
import random
import string
from typing import Dict, List, Sequence, Tuple
from config import EMPTY
from models import Placement

_LABELS = string.ascii_uppercase + string.ascii_lowercase + string.digits


def _color(name: str) -> str:
    rng = random.Random(name)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"


def render_text(placements: Sequence[Placement], W: int, H: int, empty: str = EMPTY) -> List[str]:
    """One letter per placement, cycling when there are more than 62."""
    grid = [[empty] * W for _ in range(H)]
    for i, p in enumerate(placements):
        ch = _LABELS[i % len(_LABELS)]
        for x, y in p.board_cells():
            grid[y][x] = ch
    return ["".join(row) for row in grid]


def render_result(placements: Sequence[Placement], W: int, H: int) -> Tuple[str, str]:
    palette: Dict[str, str] = {}
    for p in placements:
        key = str(p.shape_id)
        palette.setdefault(key, _color(key))

    scale = 24
    svg_w = W * scale + 2
    svg_h = H * scale + 2

    cells = []
    for i, p in enumerate(placements):
        fill = palette[str(p.shape_id)]
        for x, y in p.board_cells():
            cells.append(
                f'<rect x="{x * scale + 1}" y="{y * scale + 1}" width="{scale}" height="{scale}" '
                f'fill="{fill}" stroke="black" stroke-width="1" data-placement="{i}"/>'
            )
    frame = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{frame}{"".join(cells)}</svg>'
    )

    legend = "".join(
        f"<li><span class='swatch' style='background:{c}'></span>shape {n}</li>"
        for n, c in palette.items()
    )
    return svg, legend
