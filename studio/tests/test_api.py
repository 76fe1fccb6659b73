from __future__ import annotations

from fastapi.testclient import TestClient
from PIL import Image

from studio import api
from studio.src.pixel_pipeline.errors import ExtractionError
from studio.src.pixel_pipeline.models import SampledColor


def test_extract_endpoint_returns_color_fields(monkeypatch):
    class FakeSession:
        def extract_dominant_colors(self, image_url: str, count: int):
            assert image_url == "https://example.com/image.jpg"
            assert count == 2
            return [SampledColor(rgb=(18, 52, 86)), SampledColor(rgb=(255, 0, 0))]

    monkeypatch.setattr(api, "_build_session", lambda method: FakeSession())

    client = TestClient(api.app)
    response = client.post(
        "/extract", json={"image_url": "https://example.com/image.jpg", "count": 2}
    )

    assert response.status_code == 200
    colors = response.json()["colors"]
    assert len(colors) == 2
    assert colors[0] == {
        "hex": "#123456",
        "rgb": "rgb(18, 52, 86)",
        "hsl": "hsl(210, 65%, 20%)",
    }


def test_extract_endpoint_maps_failures_to_400(monkeypatch):
    class FailingSession:
        def extract_dominant_colors(self, image_url: str, count: int):
            raise ExtractionError("could not extract colors: 404")

    monkeypatch.setattr(api, "_build_session", lambda method: FailingSession())

    client = TestClient(api.app)
    response = client.post("/extract", json={"image_url": "https://example.com/x.png"})

    assert response.status_code == 400
    assert "failed_to_extract_colors" in response.json()["detail"]


def test_export_endpoint_renders_css():
    client = TestClient(api.app)
    response = client.post(
        "/export",
        json={"palette": ["#ff0000"], "dominant": ["#00FF00"], "format": "css"},
    )

    assert response.status_code == 200
    content = response.json()["content"]
    assert "--palette-1: #FF0000;" in content
    assert "--dominant-1: #00FF00;" in content


def test_export_endpoint_rejects_bad_hex():
    client = TestClient(api.app)
    response = client.post("/export", json={"palette": ["#nothex"]})

    assert response.status_code == 400


def test_extract_endpoint_refuses_local_paths(tmp_path):
    secret = tmp_path / "secret.png"
    Image.new("RGB", (16, 16), (120, 40, 200)).save(secret)

    client = TestClient(api.app)
    response = client.post("/extract", json={"image_url": str(secret)})

    assert response.status_code == 400
    assert "http(s)" in response.json()["detail"]
