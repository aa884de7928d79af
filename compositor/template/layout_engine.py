#!/usr/bin/env python3
"""
Layout Engine for the Promo Template

Deterministic geometry for every element of a creative. The plan is a pure
function of the CanvasSpec, its variant's constants, and which optional
elements are present; asset pixels never influence placement.

All units in pixels.
"""

from typing import List

from .sdk import (
    REFERENCE_H,
    CanvasSpec,
    Circle,
    LayoutPlan,
    Rect,
    TextLine,
    get_variant,
)


def compute_layout(
    canvas: CanvasSpec,
    *,
    has_logo: bool = True,
    has_badge: bool = True,
    has_ref_code: bool = True,
) -> LayoutPlan:
    """
    Compute the LayoutPlan for a canvas.

    Args:
        canvas: Canvas dimensions and variant name
        has_logo: Whether a logo will be painted
        has_badge: Whether a verified badge will be painted
        has_ref_code: Whether the reference-code line will be painted

    Returns:
        LayoutPlan with product, CTA, profile, badge, logo and text geometry
    """
    v = get_variant(canvas.variant)
    w, h = canvas.width, canvas.height

    padding = w * v.padding_frac
    product_height = v.product_height * (h / REFERENCE_H)
    product = Rect(padding, padding, w - padding * 2, product_height - padding * 2)

    cta_center_y = product_height + v.cta_offset
    cta = Rect((w - v.cta_width) / 2, cta_center_y - v.cta_height / 2, v.cta_width, v.cta_height)
    cta_label = TextLine("cta", w / 2, cta_center_y, v.cta_font, v.cta_text_color)

    r = v.profile_size / 2
    profile = Circle(v.profile_margin_x + r, h - v.profile_margin_bottom - r, r)

    badge = None
    if has_badge:
        outset = v.badge_size * v.badge_outset
        badge = Rect(profile.cx - r - outset, profile.cy - r - outset, v.badge_size, v.badge_size)

    logo = None
    if has_logo:
        logo = Rect(
            w - v.logo_margin_x - v.logo_size,
            h - v.logo_margin_bottom - v.logo_size,
            v.logo_size,
            v.logo_size,
        )

    # No logo: the text block centers on the profile circle instead.
    if logo is not None:
        text_center_y = (profile.cy + logo.center[1]) / 2
    else:
        text_center_y = profile.cy

    text_lines = _stack_text_lines(v, w / 2, text_center_y, has_ref_code)

    return LayoutPlan(
        canvas=canvas,
        product=product,
        cta=cta,
        cta_radius=v.cta_radius,
        cta_label=cta_label,
        cta_text=v.cta_label,
        cta_fill=v.cta_fill,
        cta_shadow=v.cta_shadow,
        profile=profile,
        border_width=v.border_width,
        border_color=v.border_color,
        text_center_y=text_center_y,
        text_lines=tuple(text_lines),
        logo=logo,
        badge=badge,
    )


def _stack_text_lines(v, x: float, center_y: float, has_ref_code: bool) -> List[TextLine]:
    # (role, gap to previous baseline) top to bottom
    rows = []
    if has_ref_code:
        rows.append(("ref_code", 0, v.ref_font, v.ref_color))
    rows.append(("name", v.ref_gap if has_ref_code else 0, v.name_font, v.name_color))
    rows.append(("number", v.number_gap, v.number_font, v.number_color))

    span = sum(gap for _, gap, _, _ in rows)
    y = center_y - span / 2
    lines = []
    for role, gap, font, color in rows:
        y += gap
        lines.append(TextLine(role, x, y, font, color))
    return lines
