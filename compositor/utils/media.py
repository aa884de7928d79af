# compositor/utils/media.py
from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Optional


def sanitize_text_for_pillow(text: str) -> str:
    """
    Replace Unicode ellipsis with ASCII to avoid missing glyphs in PIL fonts.
    """
    if text is None:
        return ""
    return str(text).replace("…", "...")


def ffprobe_json(path: Path, ffprobe_bin: str = "ffprobe") -> dict:
    """
    Return ffprobe JSON (streams + format). Requires ffprobe on PATH.
    """
    cmd = [
        ffprobe_bin,
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_streams",
        "-show_format",
        str(path),
    ]
    # Short-lived; capture_output is acceptable here
    proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    if proc.returncode != 0:
        raise RuntimeError(f"ffprobe failed for {path}: {proc.stderr}")
    try:
        return json.loads(proc.stdout or "{}")
    except json.JSONDecodeError:
        return {}


def probe_duration(path: Path, ffprobe_bin: str = "ffprobe") -> Optional[float]:
    fmt = ffprobe_json(path, ffprobe_bin).get("format") or {}
    try:
        return float(fmt["duration"])
    except (KeyError, TypeError, ValueError):
        return None
