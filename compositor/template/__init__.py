"""
Promo Template

Layout, painting and animation for the branded marketing template.
"""

from .layout_engine import compute_layout
from .painter import FontBook, fit_cover, new_canvas, paint, render_still
from .sdk import (
    DEFAULT_VARIANT,
    REFERENCE_H,
    REFERENCE_W,
    ROLE_BADGE,
    ROLE_LOGO,
    ROLE_PRODUCT,
    ROLE_PROFILE,
    VARIANTS,
    CanvasSpec,
    Circle,
    ElementState,
    FillStyle,
    FontSpec,
    LayoutPlan,
    Rect,
    ShadowStyle,
    TextContent,
    TextLine,
    TimelineState,
    Variant,
    get_variant,
)
from .sequencer import Frame, generate_sequence
from .timeline import ease_out_cubic, frame_progress, state_at
