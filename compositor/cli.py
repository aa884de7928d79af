#!/usr/bin/env python3
"""Render a creative locally: python -m compositor.cli --request req.json --format png"""

import argparse
import json
import sys
from pathlib import Path

from .core import get_logger, load_config
from .errors import CompositorError
from .models import CompositionRequest
from .pipeline import CompositionPipeline
from .utils.slug import attachment_filename

log = get_logger("cli")

FORMATS = ("png", "pdf", "mp4")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Render a branded promo creative")
    ap.add_argument("--request", required=True, help="Path to a JSON request body")
    ap.add_argument("--format", choices=FORMATS, default="png", help="Output format")
    ap.add_argument("--out", default=None, help="Output path (default: <Full_Name>.<ext>)")
    ap.add_argument("--config", default=None, help="Path to global YAML config")
    ap.add_argument("--template", default=None, help="Template variant override")
    ap.add_argument("--fps", type=int, default=None, help="Video frame rate override")
    ap.add_argument("--frames", type=int, default=None, help="Video frame count override")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    payload = json.loads(Path(args.request).read_text(encoding="utf-8"))
    if args.template:
        payload["template"] = args.template

    try:
        request = CompositionRequest.from_payload(payload)
        pipeline = CompositionPipeline(load_config(args.config))
        if args.format == "png":
            data = pipeline.render_png(request)
        elif args.format == "pdf":
            data = pipeline.render_pdf(request)
        else:
            data = pipeline.render_video_bytes(request, fps=args.fps, frame_count=args.frames)
    except CompositorError as e:
        log.error(f"{e.category}: {e.detail}")
        return 1

    out = Path(args.out or attachment_filename(request.full_name, args.format))
    out.write_bytes(data)
    log.info(f"Wrote {out} ({len(data)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
