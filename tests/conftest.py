"""
Test configuration and fixtures.

- No test reaches the network: requests is blocked for every test and asset
  bytes come from in-memory images served by a fake fetch.
- Encoder tests inject a fake runner unless they explicitly need ffmpeg.
"""

import os
import sys
from io import BytesIO
from pathlib import Path

import pytest
import requests
from PIL import Image

# Ensure repo root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from compositor.assets import AssetLoader
from compositor.core import AssetsCfg, GlobalCfg, StorageCfg, VideoCfg
from compositor.errors import AssetFetchError
from compositor.pipeline import CompositionPipeline
from compositor.template import ROLE_BADGE, ROLE_LOGO, ROLE_PRODUCT, ROLE_PROFILE

PROFILE_URL = "https://cdn.example.com/jane.jpg"
PRODUCT_URL = "https://cdn.example.com/product.png"
LOGO_URL = "https://cdn.example.com/logo.png"
BADGE_URL = "https://cdn.example.com/badge.png"

PROFILE_COLOR = (220, 20, 60)
PRODUCT_COLOR = (16, 185, 129)


def png_bytes(size=(64, 64), color=(255, 0, 0), mode="RGB", fmt="PNG") -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def mock_network(*args, **kwargs):
    """requests must never be called from tests"""
    raise RuntimeError(
        "Network request attempted from a test! "
        f"URL: {args[1] if len(args) > 1 else kwargs.get('url', 'unknown')}"
    )


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    monkeypatch.setattr(requests.Session, "request", mock_network)
    monkeypatch.setattr(requests, "get", mock_network)
    monkeypatch.setattr(requests, "post", mock_network)


@pytest.fixture
def asset_bytes():
    """URL -> encoded image served by the fake fetch"""
    return {
        PROFILE_URL: png_bytes((300, 200), PROFILE_COLOR, fmt="JPEG"),
        PRODUCT_URL: png_bytes((800, 600), PRODUCT_COLOR),
        LOGO_URL: png_bytes((120, 120), (255, 255, 255, 0), mode="RGBA"),
        BADGE_URL: png_bytes((48, 48), (59, 130, 246)),
    }


@pytest.fixture
def fake_fetch(asset_bytes):
    calls = []

    def fetch(session, url, *, timeout, role=None):
        calls.append((role, url))
        if url not in asset_bytes:
            raise AssetFetchError(url, "HTTP 404", role=role)
        return asset_bytes[url]

    fetch.calls = calls
    return fetch


@pytest.fixture
def decoded_assets():
    """Already-decoded assets by role, for painter and sequencer tests"""
    return {
        ROLE_PROFILE: Image.new("RGBA", (300, 200), PROFILE_COLOR + (255,)),
        ROLE_PRODUCT: Image.new("RGBA", (800, 600), PRODUCT_COLOR + (255,)),
        ROLE_LOGO: Image.new("RGBA", (120, 120), (0, 0, 0, 255)),
        ROLE_BADGE: Image.new("RGBA", (48, 48), (59, 130, 246, 255)),
    }


@pytest.fixture
def scenario_a():
    """The reference request body"""
    return {
        "profile_photo_url": PROFILE_URL,
        "product_image_url": PRODUCT_URL,
        "full_name": "Jane Doe",
        "whatsapp_number": "+1 555 0100",
        "tc_logo_url": LOGO_URL,
        "verified_badge_url": BADGE_URL,
        "tc_ref_code": "TC-001",
    }


class FakeEncoder:
    """Stands in for run_streamed: records each command and writes a stub artifact"""

    def __init__(self, fail_codecs=(), timeout=False, write_output=True):
        self.fail_codecs = set(fail_codecs)
        self.timeout = timeout
        self.write_output = write_output
        self.calls = []
        self.frames_seen = []

    def __call__(self, cmd, log_path=None, timeout=None, check=True, **kwargs):
        from compositor.utils.subproc import CommandError

        self.calls.append(list(cmd))
        pattern = cmd[cmd.index("-i") + 1]
        codec = cmd[cmd.index("-c:v") + 1]
        self.frames_seen.append(len(list(Path(pattern).parent.glob("frame_*.png"))))
        if self.timeout:
            raise CommandError("Command timed out", None, "", timed_out=True)
        if codec in self.fail_codecs:
            raise CommandError(f"Command failed (rc=1): {codec}", 1, "Unknown encoder")
        if self.write_output:
            Path(cmd[-1]).write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64)
        return 0


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


@pytest.fixture
def work_root(tmp_path):
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def pipeline(fake_fetch, fake_encoder, work_root):
    """Pipeline wired to in-memory assets and the fake encoder, with short videos"""
    cfg = GlobalCfg(
        assets=AssetsCfg(timeout_sec=5),
        video=VideoCfg(fps=10, duration_sec=0.5, codecs=["libx264"]),
        storage=StorageCfg(work_dir=str(work_root)),
    )
    loader = AssetLoader(cfg.assets, fetch=fake_fetch)
    return CompositionPipeline(cfg, loader=loader, runner=fake_encoder)
