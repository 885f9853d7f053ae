import pytest

pytest.importorskip("ortools")

from cli import main

PUZZLE = """\
0:
##
#.

1:
#

2x2: 1 1
2x2: 2 0
3x1: 0 2
"""


def test_reports_each_region_and_total(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_text(PUZZLE, encoding="utf-8")

    assert main([str(path), "--strategy", "backtracking", "--show"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "region 0 2x2: yes [backtracking]"
    assert any(line.startswith("region 1 2x2: no [backtracking]") for line in out)
    assert any(line.startswith("region 2 3x1: yes") for line in out)
    assert out[-1] == "packable: 2"


def test_exact_flag_rejects_partial_cover(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_text(PUZZLE, encoding="utf-8")

    assert main([str(path), "--strategy", "backtracking", "--exact"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "packable: 1"


def test_malformed_input_exits_with_2(tmp_path, capsys):
    path = tmp_path / "broken.txt"
    path.write_text("0:\n#\n\n2x2: 1 1\n", encoding="utf-8")

    assert main([str(path)]) == 2
    assert "Bad input" in capsys.readouterr().err
