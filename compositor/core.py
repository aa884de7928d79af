import logging
import logging.handlers
import os
import sys
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# ---------------- Logging ----------------


def get_logger(name="compositor", log_file=None):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    fmt = logging.Formatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","step":"%(name)s","msg":"%(message)s"}'
    )
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)
    if log_file:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


log = get_logger("compositor")

# ---------------- Config Models ----------------


class RenderCfg(BaseModel):
    variant: str = "verified"
    font_path: Optional[str] = None
    font_bold_path: Optional[str] = None


class AssetsCfg(BaseModel):
    timeout_sec: float = 30.0
    max_workers: int = 4
    user_agent: str = "promo-compositor/0.1"


class VideoCfg(BaseModel):
    fps: int = 30
    duration_sec: float = 5.0
    crf: int = 23  # Quality setting (18-28 range, lower = better quality)
    pix_fmt: str = "yuv420p"
    codecs: List[str] = Field(default_factory=list)  # empty = platform default
    ffmpeg_bin: str = "ffmpeg"
    timeout_sec: float = 120.0

    @property
    def frame_count(self) -> int:
        return max(1, int(round(self.fps * self.duration_sec)))


class DocumentCfg(BaseModel):
    page_size: str = "A4"
    dpi: int = 150
    margin_mm: float = 0.0


class StorageCfg(BaseModel):
    work_dir: Optional[str] = None  # None = system temp dir
    logs_dir: str = "logs"


class GlobalCfg(BaseModel):
    render: RenderCfg = Field(default_factory=RenderCfg)
    assets: AssetsCfg = Field(default_factory=AssetsCfg)
    video: VideoCfg = Field(default_factory=VideoCfg)
    document: DocumentCfg = Field(default_factory=DocumentCfg)
    storage: StorageCfg = Field(default_factory=StorageCfg)


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _env_overlay(raw: dict) -> dict:
    if os.getenv("COMPOSITOR_VARIANT"):
        raw.setdefault("render", {})["variant"] = os.getenv("COMPOSITOR_VARIANT")
    if os.getenv("FFMPEG_BIN"):
        raw.setdefault("video", {})["ffmpeg_bin"] = os.getenv("FFMPEG_BIN")
    if os.getenv("COMPOSITOR_WORK_DIR"):
        raw.setdefault("storage", {})["work_dir"] = os.getenv("COMPOSITOR_WORK_DIR")
    if os.getenv("ASSET_TIMEOUT_SEC"):
        try:
            raw.setdefault("assets", {})["timeout_sec"] = float(os.getenv("ASSET_TIMEOUT_SEC") or 0)
        except ValueError:
            log.warning(f"Ignoring non-numeric ASSET_TIMEOUT_SEC={os.getenv('ASSET_TIMEOUT_SEC')!r}")
    return raw


def load_config(path: Optional[str] = None) -> GlobalCfg:
    """
    Load conf/global.yaml (or the example file) on top of the model defaults.
    Environment variables from .env and the process win over YAML.
    """
    load_env()
    if path is None:
        path = os.path.join(BASE, "conf", "global.yaml")
        if not os.path.exists(path):
            path = os.path.join(BASE, "conf", "global.example.yaml")
    raw = load_yaml(path) if os.path.exists(path) else {}
    raw = _env_overlay(raw)

    try:
        cfg = GlobalCfg(**raw)
    except ValidationError as e:
        log.error(f"Config validation failed: {e}")
        raise
    return cfg


# ---------------- Env ----------------


def load_env() -> dict:
    load_dotenv(os.path.join(BASE, ".env"))
    return dict(os.environ)
