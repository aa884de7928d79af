#!/usr/bin/env python3
"""
Frame Sequencer

Drives the painter once per output frame. The sequence is a generator: lazy,
forward-only and consumed exactly once by the encoder. Assets are decoded once
per request and shared by every frame; only paint cost is paid per frame.
"""

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from PIL import Image

from compositor.core import get_logger

from .painter import FontBook, new_canvas, paint
from .sdk import LayoutPlan, TextContent
from .timeline import frame_progress, state_at

log = get_logger("sequencer")


@dataclass(frozen=True)
class Frame:
    index: int
    progress: float
    image: Image.Image


def generate_sequence(
    layout: LayoutPlan,
    assets: Mapping[str, Image.Image],
    text: TextContent,
    frame_count: int,
    fonts: Optional[FontBook] = None,
) -> Iterator[Frame]:
    """
    Yield `frame_count` frames in index order. Frame i is painted at progress
    (i + 1) / frame_count, so the first frame is never fully blank and the last
    one lands exactly on the final layout.
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be >= 1, got {frame_count}")

    width, height = layout.canvas.width, layout.canvas.height
    log.info(f"Generating {frame_count} frames at {width}x{height} (variant={layout.canvas.variant})")
    for index in range(frame_count):
        progress = frame_progress(index, frame_count)
        canvas = new_canvas(width, height)
        paint(canvas, layout, assets, state_at(progress), text, fonts)
        yield Frame(index=index, progress=progress, image=canvas)
