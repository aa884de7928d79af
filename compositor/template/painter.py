#!/usr/bin/env python3
"""
Compositor for the Promo Template

Paints one frame of a creative onto an RGBA canvas in a fixed z-order:
background, product, CTA, profile (border then image), badge, logo, text.

Every draw call receives its style explicitly (fill, shadow, font, opacity).
Elements are rendered into small transparent tiles and alpha-composited onto
the canvas, so per-group opacity never leaks into the next call.
"""

from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFilter, ImageFont

from compositor.utils.media import sanitize_text_for_pillow

from .sdk import (
    ROLE_BADGE,
    ROLE_LOGO,
    ROLE_PRODUCT,
    ROLE_PROFILE,
    ElementState,
    FillStyle,
    FontSpec,
    LayoutPlan,
    Rect,
    ShadowStyle,
    TextContent,
    TextLine,
    TimelineState,
)

SUPERSAMPLE = 4

_REGULAR_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]
_BOLD_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
]


class FontBook:
    """Resolves FontSpecs to Pillow fonts, caching by spec."""

    def __init__(self, regular_path: Optional[str] = None, bold_path: Optional[str] = None):
        self.regular_path = regular_path
        self.bold_path = bold_path
        self._cache: Dict[FontSpec, ImageFont.ImageFont] = {}

    def get(self, spec: FontSpec):
        font = self._cache.get(spec)
        if font is None:
            font = self._load(spec)
            self._cache[spec] = font
        return font

    def _load(self, spec: FontSpec):
        preferred = self.bold_path if spec.bold else self.regular_path
        candidates = ([preferred] if preferred else []) + (_BOLD_FONTS if spec.bold else _REGULAR_FONTS)
        for font_file in candidates:
            if not Path(font_file).exists():
                continue
            try:
                return ImageFont.truetype(font_file, size=spec.size)
            except OSError:
                continue
        # Pillow's bundled font scales when FreeType is available
        return ImageFont.load_default(size=spec.size)


_default_fonts = FontBook()


def new_canvas(width: int, height: int) -> Image.Image:
    return Image.new("RGBA", (width, height), (0, 0, 0, 0))


def paint(
    canvas: Image.Image,
    layout: LayoutPlan,
    assets: Mapping[str, Image.Image],
    states: TimelineState,
    text: TextContent,
    fonts: Optional[FontBook] = None,
) -> None:
    """
    Paint one frame onto `canvas` in place.

    Args:
        canvas: RGBA image sized to layout.canvas
        layout: Geometry from compute_layout
        assets: Decoded images by role; optional roles may be missing
        states: Per-element opacity/scale/translation overrides
        text: Display strings
        fonts: Font resolver, defaults to system fonts
    """
    fonts = fonts or _default_fonts
    w, h = canvas.size

    ImageDraw.Draw(canvas).rectangle([0, 0, w, h], fill=_rgba(layout.canvas.background))

    product = assets.get(ROLE_PRODUCT)
    if product is not None and states.product.opacity > 0:
        tile = _zoomed_stretch(product, layout.product, states.product.scale)
        x0, y0, _, _ = layout.product.box
        _composite(canvas, tile, (x0, y0 + int(round(states.product.translate_y))), states.product.opacity)

    if states.cta.opacity > 0:
        _paint_cta(canvas, layout, states.cta, fonts)

    # Nothing from the bottom block is drawn until it starts to reveal.
    if states.bottom.opacity <= 0:
        return

    # The bottom block is one group: painted on its own layer, then scaled
    # about its graphics center and shifted as a whole.
    layer = new_canvas(w, h)
    pivot = _paint_bottom_graphics(layer, layout, assets, states.bottom.opacity)

    strings = {"ref_code": text.ref_code, "name": text.name, "number": text.number}
    for line in layout.text_lines:
        value = strings.get(line.role)
        opacity = states.line_opacity(line.role)
        if not value or opacity <= 0:
            continue
        draw_text(layer, line, sanitize_text_for_pillow(value), fonts, opacity)

    _composite_group(canvas, layer, pivot, states.bottom)


def render_still(
    layout: LayoutPlan,
    assets: Mapping[str, Image.Image],
    text: TextContent,
    fonts: Optional[FontBook] = None,
) -> Image.Image:
    canvas = new_canvas(layout.canvas.width, layout.canvas.height)
    paint(canvas, layout, assets, TimelineState.static(), text, fonts)
    return canvas


# ---------------- Element painters ----------------


def _paint_cta(canvas, layout: LayoutPlan, state: ElementState, fonts: FontBook) -> None:
    translate_y = state.translate_y
    v_shadow = layout.cta_shadow
    margin = int(v_shadow.blur * 3) + max(abs(v_shadow.offset_x), abs(v_shadow.offset_y))
    rect = layout.cta.translated(dy=translate_y)
    x0, y0, x1, y1 = rect.box
    origin = (x0 - margin, y0 - margin)
    tile = Image.new("RGBA", (x1 - x0 + 2 * margin, y1 - y0 + 2 * margin), (0, 0, 0, 0))

    local = Rect(margin, margin, x1 - x0, y1 - y0)
    draw_rounded_rect(tile, local, layout.cta_radius, fill=FillStyle(_rgba(layout.cta_fill)), shadow=v_shadow)

    label = layout.cta_label
    local_label = TextLine(label.role, label.x - origin[0], label.y + translate_y - origin[1], label.font, label.color)
    draw_text(tile, local_label, layout.cta_text, fonts, 1.0, anchor="mm")

    if state.scale != 1.0:
        tile, origin = _scale_about(tile, origin, rect.center, state.scale)
    _composite(canvas, tile, origin, state.opacity)


def _paint_bottom_graphics(canvas, layout: LayoutPlan, assets, opacity: float) -> Tuple[int, int, int, int]:
    """Profile, badge and logo at `opacity`; returns their combined box."""
    profile = layout.profile
    bw = layout.border_width
    parts = [Rect(profile.cx - profile.r - bw, profile.cy - profile.r - bw, 2 * (profile.r + bw), 2 * (profile.r + bw))]
    if layout.badge is not None and assets.get(ROLE_BADGE) is not None:
        parts.append(layout.badge)
    if layout.logo is not None and assets.get(ROLE_LOGO) is not None:
        parts.append(layout.logo)
    bx0, by0, bx1, by1 = _union_box(parts)
    tile = Image.new("RGBA", (bx1 - bx0, by1 - by0), (0, 0, 0, 0))

    def local(r: Rect) -> Rect:
        return r.translated(-bx0, -by0)

    # Border ring first so it sits around the image, not under it.
    if bw > 0:
        ring = Rect(profile.cx - profile.r - bw - bx0, profile.cy - profile.r - bw - by0, 2 * (profile.r + bw), 2 * (profile.r + bw))
        mask = _shape_mask(ring, lambda d, box: d.ellipse(box, fill=0, outline=255, width=bw * SUPERSAMPLE))
        _fill_mask(tile, mask, ring, _rgba(layout.border_color))

    photo = assets.get(ROLE_PROFILE)
    if photo is not None:
        bounds = local(profile.bounds)
        size = int(round(bounds.w))
        fitted = fit_cover(photo, size)
        mask = _shape_mask(Rect(0, 0, size, size), lambda d, box: d.ellipse(box, fill=255))
        fitted.putalpha(ImageChops.multiply(fitted.getchannel("A"), mask))
        _composite(tile, fitted, bounds.box[:2], 1.0)

    badge = assets.get(ROLE_BADGE)
    if layout.badge is not None and badge is not None:
        box = local(layout.badge).box
        _composite(tile, badge.convert("RGBA").resize((box[2] - box[0], box[3] - box[1]), Image.LANCZOS), box[:2], 1.0)

    logo = assets.get(ROLE_LOGO)
    if layout.logo is not None and logo is not None:
        box = local(layout.logo).box
        _composite(tile, logo.convert("RGBA").resize((box[2] - box[0], box[3] - box[1]), Image.LANCZOS), box[:2], 1.0)

    _composite(canvas, tile, (bx0, by0), opacity)
    return bx0, by0, bx1, by1


# ---------------- Draw primitives (explicit style per call) ----------------


def draw_rounded_rect(
    target: Image.Image,
    rect: Rect,
    radius: int,
    fill: FillStyle,
    shadow: Optional[ShadowStyle] = None,
) -> None:
    mask = _shape_mask(rect, lambda d, box: d.rounded_rectangle(box, radius=radius * SUPERSAMPLE, fill=255))
    if shadow is not None:
        # Room for the blur to spread past the shape
        pad = int(shadow.blur * 3)
        shadow_mask = Image.new("L", (mask.width + 2 * pad, mask.height + 2 * pad), 0)
        shadow_mask.paste(mask, (pad, pad))
        if shadow.blur > 0:
            shadow_mask = shadow_mask.filter(ImageFilter.GaussianBlur(shadow.blur))
        spread = Rect(rect.x - pad + shadow.offset_x, rect.y - pad + shadow.offset_y, rect.w + 2 * pad, rect.h + 2 * pad)
        _fill_mask(target, shadow_mask, spread, shadow.color)
    _fill_mask(target, mask, rect, fill.color)


def draw_text(
    target: Image.Image,
    line: TextLine,
    value: str,
    fonts: FontBook,
    opacity: float,
    anchor: str = "ms",
) -> None:
    """Draw one line centered on line.x; anchor "ms" puts line.y on the baseline."""
    font = fonts.get(line.font)
    measure = ImageDraw.Draw(Image.new("L", (1, 1)))
    left, top, right, bottom = measure.textbbox((line.x, line.y), value, font=font, anchor=anchor)
    x0, y0 = int(left) - 2, int(top) - 2
    size = (int(right) - x0 + 4, int(bottom) - y0 + 4)
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).text((line.x - x0, line.y - y0), value, font=font, fill=255, anchor=anchor)
    tile = Image.new("RGBA", size, _rgba(line.color))
    tile.putalpha(mask)
    _composite(target, tile, (x0, y0), opacity)


def fit_cover(img: Image.Image, size: int) -> Image.Image:
    """
    Scale so the shorter side equals `size`, then center-crop the longer side:
    a landscape image fits its height and loses width, a portrait one the reverse.
    """
    w, h = img.size
    if w / h > 1:
        new_w, new_h = max(size, int(round(size * w / h))), size
    else:
        new_w, new_h = size, max(size, int(round(size * h / w)))
    resized = img.convert("RGBA").resize((new_w, new_h), Image.LANCZOS)
    left = (new_w - size) // 2
    top = (new_h - size) // 2
    return resized.crop((left, top, left + size, top + size))


# ---------------- Helpers ----------------


def _zoomed_stretch(img: Image.Image, rect: Rect, scale: float) -> Image.Image:
    # Stretched to the rectangle (source aspect ignored), zoomed about its center.
    # Zoom in is cropped to the rectangle; zoom out leaves a transparent margin.
    x0, y0, x1, y1 = rect.box
    w, h = x1 - x0, y1 - y0
    sw, sh = max(1, int(round(w * scale))), max(1, int(round(h * scale)))
    resized = img.convert("RGBA").resize((sw, sh), Image.LANCZOS)
    if (sw, sh) == (w, h):
        return resized
    if sw >= w and sh >= h:
        left, top = (sw - w) // 2, (sh - h) // 2
        return resized.crop((left, top, left + w, top + h))
    tile = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    tile.alpha_composite(resized.crop((0, 0, min(sw, w), min(sh, h))), dest=(max(0, (w - sw) // 2), max(0, (h - sh) // 2)))
    return tile


def _scale_about(tile: Image.Image, origin: Tuple[float, float], center: Tuple[float, float], scale: float):
    """Resize `tile` placed at `origin` by `scale` about `center`; returns (tile, new origin)."""
    size = (max(1, int(round(tile.width * scale))), max(1, int(round(tile.height * scale))))
    scaled = tile.resize(size, Image.LANCZOS)
    ox = center[0] + (origin[0] - center[0]) * scale
    oy = center[1] + (origin[1] - center[1]) * scale
    return scaled, (int(round(ox)), int(round(oy)))


def _composite_group(canvas: Image.Image, layer: Image.Image, pivot_box, state: ElementState) -> None:
    """Composite a full-canvas group layer with its scale (about pivot_box center) and translate_y."""
    box = layer.getbbox()
    if box is None:
        return
    tile, origin = layer.crop(box), (box[0], box[1])
    if state.scale != 1.0:
        center = ((pivot_box[0] + pivot_box[2]) / 2, (pivot_box[1] + pivot_box[3]) / 2)
        tile, origin = _scale_about(tile, origin, center, state.scale)
    _composite(canvas, tile, (origin[0], origin[1] + int(round(state.translate_y))), 1.0)


def _shape_mask(rect: Rect, draw_fn) -> Image.Image:
    """Antialiased L mask sized to rect, drawn supersampled then reduced."""
    x0, y0, x1, y1 = rect.box
    w, h = max(1, x1 - x0), max(1, y1 - y0)
    big = Image.new("L", (w * SUPERSAMPLE, h * SUPERSAMPLE), 0)
    draw_fn(ImageDraw.Draw(big), [0, 0, w * SUPERSAMPLE - 1, h * SUPERSAMPLE - 1])
    return big.resize((w, h), Image.LANCZOS)


def _fill_mask(target: Image.Image, mask: Image.Image, rect: Rect, color: Tuple[int, int, int, int]) -> None:
    tile = Image.new("RGBA", mask.size, color[:3] + (255,))
    alpha = mask if color[3] == 255 else mask.point(lambda a: a * color[3] // 255)
    tile.putalpha(alpha)
    _composite(target, tile, rect.box[:2], 1.0)


def _composite(target: Image.Image, tile: Image.Image, xy: Tuple[int, int], opacity: float) -> None:
    """Alpha-composite `tile` at `xy`, clipped to the target, scaled by opacity."""
    if opacity <= 0:
        return
    if opacity < 1:
        tile = tile.copy()
        tile.putalpha(tile.getchannel("A").point(lambda a: int(round(a * opacity))))
    x, y = int(xy[0]), int(xy[1])
    src_x, src_y = max(0, -x), max(0, -y)
    dst_x, dst_y = max(0, x), max(0, y)
    w = min(tile.width - src_x, target.width - dst_x)
    h = min(tile.height - src_y, target.height - dst_y)
    if w <= 0 or h <= 0:
        return
    target.alpha_composite(tile, dest=(dst_x, dst_y), source=(src_x, src_y, src_x + w, src_y + h))


def _union_box(rects) -> Tuple[int, int, int, int]:
    boxes = [r.box for r in rects]
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


def _rgba(color: str) -> Tuple[int, int, int, int]:
    rgb = ImageColor.getrgb(color)
    return tuple(rgb) if len(rgb) == 4 else tuple(rgb) + (255,)

