#!/usr/bin/env python3
"""
Core SDK for the Promo Template

Single source of truth for geometry types, per-element animation state and the
template variant table. A variant is a named set of layout constants; adding a
template means adding a row to VARIANTS, never a new drawing routine.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# ============================================================================
# CONSTANTS
# ============================================================================

REFERENCE_W = 1080
REFERENCE_H = 1920

ROLE_PROFILE = "profile"
ROLE_PRODUCT = "product"
ROLE_LOGO = "logo"
ROLE_BADGE = "badge"

RGBA = Tuple[int, int, int, int]


# ============================================================================
# STYLE & GEOMETRY
# ============================================================================


@dataclass(frozen=True)
class FontSpec:
    size: int
    bold: bool = False


@dataclass(frozen=True)
class FillStyle:
    color: RGBA = (0, 0, 0, 255)


@dataclass(frozen=True)
class ShadowStyle:
    """Drop shadow applied to a single draw call; there is no ambient shadow state."""

    color: RGBA = (0, 0, 0, 77)
    blur: float = 10.0
    offset_x: int = 0
    offset_y: int = 4


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Integer (x0, y0, x1, y1) for Pillow calls."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x + self.w)),
            int(round(self.y + self.h)),
        )

    def translated(self, dx: float = 0.0, dy: float = 0.0) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.w, self.h)


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float

    @property
    def bounds(self) -> Rect:
        return Rect(self.cx - self.r, self.cy - self.r, 2 * self.r, 2 * self.r)


@dataclass(frozen=True)
class TextLine:
    role: str  # "ref_code" | "name" | "number"
    x: float
    y: float  # baseline
    font: FontSpec
    color: str


# ============================================================================
# VARIANTS
# ============================================================================


@dataclass(frozen=True)
class Variant:
    """Layout constants for one template, in reference-resolution pixels."""

    name: str
    width: int = REFERENCE_W
    height: int = REFERENCE_H
    background: str = "#FFFFFF"
    padding_frac: float = 0.05
    product_height: int = 1400

    cta_width: int = 600
    cta_height: int = 100
    cta_radius: int = 50
    cta_offset: int = 0  # CTA center relative to the product region's bottom edge
    cta_fill: str = "#1e40af"
    cta_label: str = "CONTACT ME"
    cta_font: FontSpec = FontSpec(42, bold=True)
    cta_text_color: str = "#FFFFFF"
    cta_shadow: ShadowStyle = ShadowStyle()

    profile_size: int = 140
    profile_margin_x: int = 80
    profile_margin_bottom: int = 290
    border_width: int = 0
    border_color: str = "#1e40af"

    badge_size: int = 48
    badge_outset: float = 0.25  # fraction of badge size hanging outside the circle's box

    logo_size: int = 120
    logo_margin_x: int = 60
    logo_margin_bottom: int = 300

    ref_font: FontSpec = FontSpec(28)
    name_font: FontSpec = FontSpec(40, bold=True)
    number_font: FontSpec = FontSpec(32)
    ref_color: str = "#6b7280"
    name_color: str = "#1e40af"
    number_color: str = "#000000"
    ref_gap: int = 50  # ref code baseline -> name baseline
    number_gap: int = 60  # name baseline -> number baseline


VARIANTS: Dict[str, Variant] = {
    v.name: v
    for v in (
        Variant(name="classic"),
        Variant(
            name="framed",
            padding_frac=0.04,
            product_height=1380,
            cta_width=620,
            cta_height=110,
            cta_radius=55,
            profile_size=160,
            profile_margin_x=70,
            profile_margin_bottom=120,
            border_width=6,
            logo_size=130,
            logo_margin_x=70,
            logo_margin_bottom=135,
            name_font=FontSpec(42, bold=True),
            number_font=FontSpec(34),
            number_gap=56,
        ),
        Variant(
            name="verified",
            padding_frac=0.03,
            product_height=1350,
            cta_width=640,
            cta_height=110,
            cta_radius=55,
            cta_shadow=ShadowStyle(color=(0, 0, 0, 90), blur=12.0, offset_y=6),
            profile_size=180,
            profile_margin_x=60,
            profile_margin_bottom=110,
            border_width=8,
            badge_size=56,
            badge_outset=0.2,
            logo_size=140,
            logo_margin_x=60,
            logo_margin_bottom=130,
            ref_font=FontSpec(30),
            name_font=FontSpec(44, bold=True),
            number_font=FontSpec(36),
            ref_gap=52,
            number_gap=56,
        ),
        Variant(
            name="spotlight",
            background="#F8FAFC",
            padding_frac=0.04,
            product_height=1300,
            cta_width=660,
            cta_height=110,
            cta_radius=30,
            cta_offset=10,
            cta_fill="#16a34a",
            cta_label="CHAT WITH ME",
            cta_font=FontSpec(44, bold=True),
            cta_shadow=ShadowStyle(color=(0, 0, 0, 100), blur=14.0, offset_y=8),
            profile_size=170,
            profile_margin_x=70,
            profile_margin_bottom=120,
            border_width=10,
            border_color="#16a34a",
            badge_size=52,
            logo_size=150,
            logo_margin_x=70,
            logo_margin_bottom=130,
            ref_font=FontSpec(30),
            name_font=FontSpec(46, bold=True),
            number_font=FontSpec(36),
            name_color="#14532d",
            ref_gap=54,
            number_gap=58,
        ),
        Variant(
            name="story",
            padding_frac=0.03,
            product_height=1420,
            cta_width=560,
            cta_height=96,
            cta_radius=48,
            cta_font=FontSpec(40, bold=True),
            cta_fill="#111827",
            profile_size=150,
            profile_margin_x=50,
            profile_margin_bottom=90,
            border_width=6,
            border_color="#111827",
            badge_size=44,
            logo_size=120,
            logo_margin_x=50,
            logo_margin_bottom=105,
            ref_font=FontSpec(26),
            name_font=FontSpec(38, bold=True),
            number_font=FontSpec(30),
            name_color="#111827",
            ref_gap=46,
            number_gap=50,
        ),
    )
}

DEFAULT_VARIANT = "verified"


def get_variant(name: str) -> Variant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown template variant: {name!r} (known: {', '.join(VARIANTS)})")


@dataclass(frozen=True)
class CanvasSpec:
    width: int
    height: int
    variant: str = DEFAULT_VARIANT
    background: str = "#FFFFFF"

    @classmethod
    def for_variant(cls, name: str) -> "CanvasSpec":
        v = get_variant(name)
        return cls(width=v.width, height=v.height, variant=v.name, background=v.background)


@dataclass(frozen=True)
class LayoutPlan:
    canvas: CanvasSpec
    product: Rect
    cta: Rect
    cta_radius: int
    cta_label: TextLine
    cta_text: str
    cta_fill: str
    cta_shadow: ShadowStyle
    profile: Circle
    border_width: int
    border_color: str
    text_center_y: float
    text_lines: Tuple[TextLine, ...] = ()
    logo: Optional[Rect] = None
    badge: Optional[Rect] = None

    def line(self, role: str) -> Optional[TextLine]:
        for line in self.text_lines:
            if line.role == role:
                return line
        return None


# ============================================================================
# ANIMATION STATE
# ============================================================================


@dataclass(frozen=True)
class ElementState:
    opacity: float = 1.0
    scale: float = 1.0
    translate_y: float = 0.0


@dataclass(frozen=True)
class TimelineState:
    product: ElementState = field(default_factory=ElementState)
    cta: ElementState = field(default_factory=ElementState)
    bottom: ElementState = field(default_factory=ElementState)
    ref_code_opacity: float = 1.0
    name_opacity: float = 1.0
    number_opacity: float = 1.0

    @classmethod
    def static(cls) -> "TimelineState":
        return cls()

    def line_opacity(self, role: str) -> float:
        return {
            "ref_code": self.ref_code_opacity,
            "name": self.name_opacity,
            "number": self.number_opacity,
        }.get(role, self.bottom.opacity)


@dataclass(frozen=True)
class TextContent:
    """Strings painted on the template, already in display form."""

    name: str
    number: str
    ref_code: Optional[str] = None
