# tests/test_api.py
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from fastapi_app import app
from fastapi_app.routes import get_pipeline


@pytest.fixture
def client(pipeline):
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "Image Compositor API"}


def test_compose_png(client, scenario_a):
    r = client.post("/api/compose", json=scenario_a)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert 'filename="Jane_Doe.png"' in r.headers["content-disposition"]
    img = Image.open(BytesIO(r.content))
    assert img.format == "PNG"
    assert img.size == (1080, 1920)


def test_compose_png_fetches_each_asset_once(client, scenario_a, fake_fetch):
    client.post("/api/compose", json=scenario_a)
    urls = [url for _, url in fake_fetch.calls]
    assert sorted(urls) == sorted(set(urls))
    assert len(urls) == 4


def test_missing_fields_rejected_before_fetch(client, fake_fetch):
    r = client.post("/api/compose", json={"full_name": "Jane Doe"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Missing required fields"
    assert body["missing"] == ["profile_photo_url", "product_image_url", "whatsapp_number"]
    assert "full_name" in body["required"]
    assert fake_fetch.calls == []


def test_empty_body_rejected(client):
    r = client.post("/api/compose")
    assert r.status_code == 400
    assert len(r.json()["missing"]) == 4


def test_unreachable_asset_is_502(client, scenario_a):
    scenario_a["tc_logo_url"] = "https://cdn.example.com/nope.png"
    r = client.post("/api/compose", json=scenario_a)
    assert r.status_code == 502
    body = r.json()
    assert body["category"] == "asset_fetch"
    assert "https://cdn.example.com/nope.png" in body["details"]


def test_undecodable_asset_is_422(client, scenario_a, asset_bytes):
    asset_bytes[scenario_a["product_image_url"]] = b"definitely not an image"
    r = client.post("/api/compose", json=scenario_a)
    assert r.status_code == 422
    assert r.json()["category"] == "asset_decode"


def test_unknown_template_is_400(client, scenario_a):
    scenario_a["template"] = "holiday"
    r = client.post("/api/compose", json=scenario_a)
    assert r.status_code == 400
    assert r.json()["category"] == "validation"


def test_compose_pdf(client, scenario_a):
    r = client.post("/api/compose/pdf", json=scenario_a)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")
    assert "Jane_Doe.pdf" in r.headers["content-disposition"]


def test_compose_video_cleans_work_dir(client, scenario_a, fake_encoder, work_root):
    r = client.post("/api/compose/video", json=scenario_a)
    assert r.status_code == 200
    assert r.headers["content-type"] == "video/mp4"
    assert "Jane_Doe.mp4" in r.headers["content-disposition"]
    assert r.content[4:8] == b"ftyp"
    # 10 fps x 0.5 s
    assert fake_encoder.frames_seen == [5]
    assert list(work_root.iterdir()) == []


def test_compose_video_encoder_failure(client, scenario_a, fake_encoder, work_root):
    fake_encoder.fail_codecs.add("libx264")
    r = client.post("/api/compose/video", json=scenario_a)
    assert r.status_code == 500
    assert r.json()["category"] == "encode"
    assert list(work_root.iterdir()) == []


def test_templates_listing(client):
    r = client.get("/api/templates")
    assert r.status_code == 200
    names = [t["name"] for t in r.json()]
    assert names == ["classic", "framed", "verified", "spotlight", "story"]
    assert [t["name"] for t in r.json() if t["default"]] == ["verified"]


def test_compose_png_required_fields_only(client, fake_fetch):
    body = {
        "profile_photo_url": "https://cdn.example.com/jane.jpg",
        "product_image_url": "https://cdn.example.com/product.png",
        "full_name": "Jane Doe",
        "whatsapp_number": "+1 555 0100",
    }
    r = client.post("/api/compose", json=body)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.headers["content-disposition"] == 'attachment; filename="Jane_Doe.png"'
    assert Image.open(BytesIO(r.content)).size == (1080, 1920)
    assert sorted(role for role, _ in fake_fetch.calls) == ["product", "profile"]


@pytest.mark.parametrize("path", ["/api/compose", "/api/compose/pdf", "/api/compose/video"])
def test_non_ascii_name_download_header(client, scenario_a, path, work_root):
    scenario_a["full_name"] = "李雷 Wang"
    r = client.post(path, json=scenario_a)
    assert r.status_code == 200
    disposition = r.headers["content-disposition"]
    assert disposition.startswith("attachment;")
    assert "filename*=utf-8''%e6%9d%8e%e9%9b%b7_wang." in disposition.lower()
    assert list(work_root.iterdir()) == []


def test_download_header_ascii_fallback():
    from fastapi_app.routes import _disposition

    assert _disposition("Jane_Doe.png") == {"Content-Disposition": 'attachment; filename="Jane_Doe.png"'}
    header = _disposition("李雷_Wang.pdf")["Content-Disposition"]
    assert header == "attachment; filename=\"Wang.pdf\"; filename*=UTF-8''%E6%9D%8E%E9%9B%B7_Wang.pdf"
    header.encode("latin-1")
