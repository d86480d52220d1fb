"""Tests for API endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from huepoint.main import app
from tests.conftest import SQUARE, SQUARE_CENTER, make_red_square, make_uniform, to_base64_png


client = TestClient(app)

RED_SQUARE_B64 = to_base64_png(make_red_square())


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert set(data["modes"]) == {"streaming", "precision", "hybrid"}


def test_segment_red_square():
    response = client.post("/api/segment", json={"image": RED_SQUARE_B64, "mode": "streaming"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"]
    assert data["mode"] == "streaming"
    names = [s["color"]["name"] for s in data["segments"]]
    assert "red" in names
    red = data["segments"][names.index("red")]
    assert red["bbox"] == dict(zip(("x", "y", "width", "height"), SQUARE))
    assert red["color"]["hex"] == "#FF0000"


def test_segment_repeat_is_cached():
    image = to_base64_png(make_red_square(160))
    first = client.post("/api/segment", json={"image": image, "mode": "hybrid"}).json()
    second = client.post("/api/segment", json={"image": image, "mode": "hybrid"}).json()
    assert not first["cached"]
    assert second["cached"]
    assert second["segments"] == first["segments"]


def test_segment_accepts_data_url():
    image = "data:image/png;base64," + to_base64_png(make_uniform(64))
    response = client.post("/api/segment", json={"image": image})
    assert response.status_code == 200
    assert response.json()["success"]


def test_segment_precision_has_contours():
    data = client.post("/api/segment", json={"image": RED_SQUARE_B64, "mode": "precision"}).json()
    assert data["success"]
    assert any(len(s["contour"]) >= 4 for s in data["segments"])


def test_segment_bad_base64():
    response = client.post("/api/segment", json={"image": "not base64!"})
    assert response.status_code == 400


def test_segment_not_an_image():
    response = client.post("/api/segment", json={"image": "aGVsbG8gd29ybGQ="})
    assert response.status_code == 400


def test_segment_unknown_mode():
    response = client.post("/api/segment", json={"image": RED_SQUARE_B64, "mode": "turbo"})
    assert response.status_code == 422


def test_point_on_red_square():
    x, y = SQUARE_CENTER
    response = client.post("/api/segment/point", json={
        "image": RED_SQUARE_B64, "x": x, "y": y, "sensitivity": 20, "mode": "streaming",
    })
    assert response.status_code == 200
    data = response.json()
    segment = data["segment"]
    assert segment["id"] == 0
    assert segment["color"]["name"] == "red"
    assert segment["area"] == 1600
    assert data["processing_time_ms"] >= 0


def test_point_outside_image():
    response = client.post("/api/segment/point", json={"image": RED_SQUARE_B64, "x": 200, "y": 200})
    assert response.status_code == 200
    assert response.json()["segment"] is None


def test_point_sensitivity_out_of_range():
    response = client.post("/api/segment/point", json={"image": RED_SQUARE_B64, "x": 1, "y": 1, "sensitivity": 101})
    assert response.status_code == 422


def test_color_describe():
    response = client.post("/api/color", json={"rgb": [255, 0, 0]})
    assert response.status_code == 200
    data = response.json()
    assert data["color"]["name"] == "red"
    assert data["color"]["hex"] == "#FF0000"
    assert data["vision"] == "normal"
    assert data["adapted_name"] == "red"
    assert data["simulated_rgb"] == [255, 0, 0]
    assert data["distinguishable"] is None


def test_color_vision_comparison():
    response = client.post("/api/color", json={
        "rgb": [255, 0, 0], "vision": "achromatopsia", "compare_with": [0, 0, 255],
    })
    data = response.json()
    assert "as seen with" in data["adapted_name"]
    r, g, b = data["simulated_rgb"]
    assert r == g == b
    assert isinstance(data["distinguishable"], bool)


def test_color_rejects_bad_channel():
    response = client.post("/api/color", json={"rgb": [256, 0, 0]})
    assert response.status_code == 422
