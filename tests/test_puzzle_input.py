import pytest

from models import BoardError, PackingInputError, PuzzleFormatError
from puzzle_input import load_puzzle, parse_demand, parse_puzzle

TWO_SHAPES = """\
0:
##
#.

1:
#

2x2: 1 1
3x3:0 4
"""


def test_parse_puzzle_reads_catalogue_and_regions():
    puzzle = parse_puzzle(TWO_SHAPES)
    assert list(puzzle.catalogue) == [0, 1]
    assert puzzle.catalogue[0].to_rows() == ["##", "#."]
    assert puzzle.catalogue[0].name == "0"
    assert [(r.width, r.height, r.counts) for r in puzzle.regions] == [(2, 2, (1, 1)), (3, 3, (0, 4))]
    assert puzzle.regions[0].label == "2x2"
    assert puzzle.regions[1].line == 9


def test_region_board_binds_counts_to_shape_ids():
    puzzle = parse_puzzle(TWO_SHAPES)
    ids = list(puzzle.catalogue)
    first, second = (r.board(ids) for r in puzzle.regions)
    assert first.remaining == {0: 1, 1: 1}
    assert (second.width, second.height) == (3, 3)
    assert second.remaining == {0: 0, 1: 4}
    with pytest.raises(BoardError):
        puzzle.regions[0].board([0])


def test_load_puzzle_reads_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(TWO_SHAPES, encoding="utf-8")
    assert len(load_puzzle(path).regions) == 2


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("0:\n#\n\n0x2: 1\n", "positive"),
        ("0:\n#\n\n2x2: a\n", "not an integer"),
        ("0:\n#\n\n2x2: -1\n", "negative"),
        ("0:\n#\n\n2x2: 1 1\n", "expected 1 counts"),
        ("0:\n#\n\n0:\n##\n", "duplicate"),
        ("0:\n#\n\n2x2: 1\n1:\n#\n", "after region"),
        ("##\n", "unexpected content"),
        ("0:\n\n1:\n#\n", "no drawing"),
        ("0:\n#x\n", "line 1"),
    ],
)
def test_malformed_puzzles_are_rejected(text, fragment):
    with pytest.raises(PuzzleFormatError) as exc:
        parse_puzzle(text)
    assert fragment in str(exc.value)
    assert isinstance(exc.value, PackingInputError)


def test_parse_demand_with_mapping_counts():
    catalogue, board, options = parse_demand({
        "shapes": {"L": ["##", "#."], "m": ["#"]},
        "width": 2,
        "height": 2,
        "counts": {"L": 1, "m": 1},
    })
    assert list(catalogue) == ["L", "m"]
    assert (board.width, board.height) == (2, 2)
    assert board.remaining == {"L": 1, "m": 1}
    assert options == {"exact": False, "strategy": "auto", "seconds": None}


def test_parse_demand_with_list_shapes_and_counts():
    catalogue, board, options = parse_demand({
        "shapes": [["##"], "#\n#"],
        "width": 3,
        "height": 1,
        "counts": [1, 0],
        "exact": True,
        "strategy": "backtracking",
        "seconds": "2.5",
    })
    assert list(catalogue) == ["0", "1"]
    assert catalogue["1"].to_rows() == ["#", "#"]
    assert board.remaining == {"0": 1, "1": 0}
    assert options == {"exact": True, "strategy": "backtracking", "seconds": 2.5}


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"shapes": {}, "width": 2, "height": 2, "counts": {}},
        {"shapes": {"m": ["#"]}, "width": "wide", "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": ["#"]}, "width": True, "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": ["#"]}, "width": 0, "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"x": 1}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": [1, 2]},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": -1}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": 3},
        {"shapes": {"m": ["#?"]}, "width": 2, "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": [1]}, "width": 2, "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "strategy": "greedy"},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "seconds": 0},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "seconds": "soon"},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "seconds": float("nan")},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "seconds": float("inf")},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "seconds": True},
        {"shapes": {"m": ["#"]}, "width": 2.7, "height": 2, "counts": {"m": 1}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1.5}},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": [0.5]},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "exact": "false"},
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"m": 1}, "exact": 1},
    ],
)
def test_bad_demands_are_input_errors(payload):
    with pytest.raises(PackingInputError):
        parse_demand(payload)


def test_whole_floats_are_accepted_as_integers():
    _, board, options = parse_demand({
        "shapes": {"m": ["#"]},
        "width": 3.0,
        "height": 2,
        "counts": {"m": 2.0},
        "exact": False,
    })
    assert (board.width, board.height) == (3, 2)
    assert board.remaining == {"m": 2}
    assert options["exact"] is False
