from progress import (
    fmt_elapsed,
    region_finished,
    reset,
    set_attempt,
    set_done,
    set_message,
    set_nodes,
    snapshot,
    start_run,
)


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True


def test_set_done_failure_keeps_message():
    reset()
    start_run(2)
    set_done(False, message="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["percent"] == 100.0
    assert snap["message"] == "boom"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert isinstance(second, int)
    assert second == first + 1


def test_regions_drive_percent_and_packable_count():
    reset()
    start_run(4)
    assert snapshot()["status"] == "Solving"
    region_finished(True)
    region_finished(False)
    snap = snapshot()
    assert snap["regions_done"] == 2
    assert snap["regions_total"] == 4
    assert snap["packable"] == 1
    assert snap["percent"] == 50.0
    assert snap["done"] is False


def test_attempt_resets_node_counter():
    reset()
    set_attempt("region 0: 4x4", "backtracking")
    set_nodes(123)
    assert snapshot()["nodes"] == 123
    set_attempt("region 1: 5x5", "cp_sat")
    snap = snapshot()
    assert snap["attempt"] == "region 1: 5x5"
    assert snap["strategy"] == "cp_sat"
    assert snap["nodes"] == 0


def test_snapshot_hides_internal_clock():
    reset()
    start_run(1)
    set_message("working")
    snap = snapshot()
    assert "elapsed_start" not in snap
    assert snap["message"] == "working"
    assert snap["elapsed_str"].endswith("s")


def test_fmt_elapsed_scales_units():
    assert fmt_elapsed(0.4) == "0s"
    assert fmt_elapsed(59) == "59s"
    assert fmt_elapsed(61) == "1m 1s"
    assert fmt_elapsed(3725) == "1h 2m"
