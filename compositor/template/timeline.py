#!/usr/bin/env python3
"""
Animation Timeline

Maps a global progress value in [0, 1] to per-element overrides. Each element
group reveals on its own sub-range of progress, clamped to [0, 1] and eased
with a cubic ease-out, giving the reveal order
product -> CTA -> ref code -> name -> number.
"""

from .sdk import ElementState, TimelineState

PRODUCT_RATE = 2.5
PRODUCT_ZOOM = 0.05

CTA_START = 0.3
CTA_RATE = 2.5
CTA_RISE_PX = 100.0

BOTTOM_START = 0.5
BOTTOM_RATE = 2.0

LINE_RATE = 3.0
REF_CODE_START = 0.55
NAME_START = 0.60
NUMBER_START = 0.65


def clamp01(t: float) -> float:
    return max(0.0, min(1.0, t))


def ease_out_cubic(t: float) -> float:
    """f(t) = 1 - (1 - t)^3"""
    return 1.0 - (1.0 - t) ** 3


def sub_progress(progress: float, start: float, rate: float) -> float:
    return clamp01((progress - start) * rate)


def state_at(progress: float) -> TimelineState:
    p = clamp01(progress)

    product_e = ease_out_cubic(sub_progress(p, 0.0, PRODUCT_RATE))
    cta_e = ease_out_cubic(sub_progress(p, CTA_START, CTA_RATE))
    bottom_e = ease_out_cubic(sub_progress(p, BOTTOM_START, BOTTOM_RATE))

    return TimelineState(
        product=ElementState(opacity=product_e, scale=1.0 + PRODUCT_ZOOM * (1.0 - product_e)),
        cta=ElementState(opacity=cta_e, translate_y=CTA_RISE_PX * (1.0 - cta_e)),
        bottom=ElementState(opacity=bottom_e),
        ref_code_opacity=ease_out_cubic(sub_progress(p, REF_CODE_START, LINE_RATE)) * bottom_e,
        name_opacity=ease_out_cubic(sub_progress(p, NAME_START, LINE_RATE)) * bottom_e,
        number_opacity=ease_out_cubic(sub_progress(p, NUMBER_START, LINE_RATE)) * bottom_e,
    )


def frame_progress(index: int, frame_count: int) -> float:
    """Progress of frame `index` (zero-based) of `frame_count`: (i + 1) / N."""
    if frame_count < 1:
        raise ValueError(f"frame_count must be >= 1, got {frame_count}")
    return (index + 1) / frame_count
