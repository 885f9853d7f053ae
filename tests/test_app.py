import pytest

pytest.importorskip("flask")
pytest.importorskip("ortools")

import app as app_module


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "OUTPUT_DIR", str(tmp_path))
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_solve_returns_plan_and_grid(client, tmp_path):
    resp = client.post("/solve", json={
        "shapes": {"L": ["##", "#."], "m": ["#"]},
        "width": 2,
        "height": 2,
        "counts": {"L": 1, "m": 1},
        "strategy": "backtracking",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["strategy"] == "backtracking"
    assert (data["width"], data["height"]) == (2, 2)
    assert sorted(p["shape"] for p in data["placements"]) == ["L", "m"]
    assert len(data["grid"]) == 2
    assert all("." not in row for row in data["grid"])
    assert (tmp_path / "plan.txt").exists()
    assert (tmp_path / "layout_view.html").exists()

    download = client.get("/download/plan")
    assert download.status_code == 200
    assert b"shape L" in download.data


def test_unpackable_demand_is_not_an_error(client):
    resp = client.post("/solve", json={
        "shapes": {"sq": ["##", "##"]},
        "width": 3,
        "height": 3,
        "counts": {"sq": 2},
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is False
    assert data["timed_out"] is False
    assert data["grid"] == []


@pytest.mark.parametrize(
    "payload",
    [
        {"shapes": {"m": ["#"]}, "width": 2, "height": 2, "counts": {"zz": 1}},
        {"shapes": {"m": ["#"]}, "width": -2, "height": 2, "counts": {"m": 1}},
    ],
)
def test_bad_demand_returns_400(client, payload):
    resp = client.post("/solve", json=payload)
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["ok"] is False
    assert data["error"]


def test_non_json_body_returns_400(client):
    resp = client.post("/solve", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_progress_reports_finished_run(client):
    client.post("/solve", json={
        "shapes": {"m": ["#"]},
        "width": 1,
        "height": 1,
        "counts": {"m": 1},
    })
    resp = client.get("/progress")
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"].startswith("no-store")
    snap = resp.get_json()
    assert snap["done"] is True
    assert snap["packable"] == 1
    assert snap["regions_total"] == 1
