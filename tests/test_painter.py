# tests/test_painter.py
from PIL import Image

from compositor.template import (
    ROLE_BADGE,
    ROLE_LOGO,
    CanvasSpec,
    ElementState,
    FontBook,
    TextContent,
    TimelineState,
    compute_layout,
    fit_cover,
    new_canvas,
    paint,
    render_still,
    state_at,
)
from compositor.template.painter import _composite

from conftest import PRODUCT_COLOR, PROFILE_COLOR

TEXT = TextContent(name="JANE DOE", number="+1 555 0100", ref_code="TC-001")


def _px(img, x, y):
    return img.getpixel((int(x), int(y)))[:3]


def test_static_render_places_product_cta_and_profile(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    img = render_still(layout, decoded_assets, TEXT, FontBook())
    assert img.size == (1080, 1920)
    assert img.mode == "RGBA"

    # Product fills its rectangle (left of the CTA band)
    assert _px(img, layout.product.x + 20, layout.product.y + 20) == PRODUCT_COLOR
    # CTA body, inside the rounded corner but clear of the label
    assert _px(img, layout.cta.x + layout.cta_radius + 10, layout.cta.y + 12) == (30, 64, 175)
    # Profile photo inside its circle
    assert _px(img, layout.profile.cx, layout.profile.cy) == PROFILE_COLOR
    # Background outside every element
    assert _px(img, 540, 1900) == (255, 255, 255)


def test_render_is_idempotent(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("spotlight"))
    fonts = FontBook()
    a = render_still(layout, decoded_assets, TEXT, fonts)
    b = render_still(layout, decoded_assets, TEXT, fonts)
    assert a.tobytes() == b.tobytes()


def test_missing_optional_assets_render(decoded_assets):
    assets = {k: v for k, v in decoded_assets.items() if k not in (ROLE_LOGO, ROLE_BADGE)}
    layout = compute_layout(CanvasSpec.for_variant("classic"), has_logo=False, has_badge=False, has_ref_code=False)
    img = render_still(layout, assets, TextContent(name="JANE DOE", number="123"))
    assert img.size == (1080, 1920)
    assert _px(img, layout.profile.cx, layout.profile.cy) == PROFILE_COLOR


def test_progress_zero_paints_only_background(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    canvas = new_canvas(1080, 1920)
    paint(canvas, layout, decoded_assets, state_at(0.0), TEXT)
    assert canvas.getcolors() == [(1080 * 1920, (255, 255, 255, 255))]


def test_cta_rises_into_place(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("classic"))
    x = layout.cta.x + layout.cta_radius + 10
    top = layout.cta.y + 5
    canvas = new_canvas(1080, 1920)
    paint(canvas, layout, decoded_assets, state_at(0.35), TEXT)
    # Still offset downward: nothing blue at its final top edge yet
    assert _px(canvas, x, top) != (30, 64, 175)


def test_fit_cover_crops_landscape_and_portrait():
    landscape = Image.new("RGBA", (400, 200), (255, 0, 0, 255))
    landscape.paste((0, 0, 255, 255), (0, 0, 100, 200))  # left quarter blue
    out = fit_cover(landscape, 100)
    assert out.size == (100, 100)
    # Scaled to 200x100 then center-cropped: the blue quarter is cut off
    assert out.getpixel((10, 50))[:3] == (255, 0, 0)

    portrait = Image.new("RGB", (50, 300), (0, 255, 0))
    assert fit_cover(portrait, 80).size == (80, 80)


def test_composite_clips_to_canvas():
    target = Image.new("RGBA", (10, 10), (0, 0, 0, 255))
    tile = Image.new("RGBA", (6, 6), (255, 255, 255, 255))
    _composite(target, tile, (-3, 7), 1.0)
    assert target.getpixel((0, 9)) == (255, 255, 255, 255)
    assert target.getpixel((3, 9)) == (0, 0, 0, 255)
    assert target.getpixel((0, 6)) == (0, 0, 0, 255)


def test_composite_scales_by_opacity():
    target = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
    tile = Image.new("RGBA", (4, 4), (255, 255, 255, 255))
    _composite(target, tile, (0, 0), 0.5)
    r, g, b, a = target.getpixel((1, 1))
    assert 120 <= r <= 135 and a == 255


def _painted(layout, assets, states, text=TEXT):
    canvas = new_canvas(layout.canvas.width, layout.canvas.height)
    paint(canvas, layout, assets, states, text)
    return canvas


def test_group_overrides_change_pixels(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    base = _painted(layout, decoded_assets, TimelineState()).tobytes()
    overrides = {
        "cta scale": TimelineState(cta=ElementState(scale=1.5)),
        "bottom scale": TimelineState(bottom=ElementState(scale=0.5)),
        "bottom shift": TimelineState(bottom=ElementState(translate_y=40)),
        "product zoom out": TimelineState(product=ElementState(scale=0.8)),
    }
    for label, states in overrides.items():
        assert _painted(layout, decoded_assets, states).tobytes() != base, label


def test_product_zoom_out_shrinks_inside_rect(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("classic"))
    img = _painted(layout, decoded_assets, TimelineState(product=ElementState(scale=0.8)))
    # Corner of the rectangle is uncovered, the center still shows the product
    assert _px(img, layout.product.x + 5, layout.product.y + 5) == (255, 255, 255)
    cx, cy = layout.product.center
    assert _px(img, cx, cy - 300) == PRODUCT_COLOR


def test_bottom_shift_moves_profile(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    img = _painted(layout, decoded_assets, TimelineState(bottom=ElementState(translate_y=-300)))
    assert _px(img, layout.profile.cx, layout.profile.cy - 300) == PROFILE_COLOR
    assert _px(img, layout.profile.cx, layout.profile.cy) == (255, 255, 255)


def test_cta_scale_grows_about_center(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("classic"))
    # Just outside the button's left edge, at mid height
    x, y = layout.cta.x - 40, layout.cta.center[1]
    assert _px(_painted(layout, decoded_assets, TimelineState()), x, y) != (30, 64, 175)
    assert _px(_painted(layout, decoded_assets, TimelineState(cta=ElementState(scale=1.5))), x, y) == (30, 64, 175)


def test_upper_cased_name_is_painted(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("classic"))
    line = layout.line("name")
    region = (int(line.x) - 150, int(line.y) - 40, int(line.x) + 150, int(line.y) + 5)

    with_name = render_still(layout, decoded_assets, TEXT).crop(region)
    without = render_still(layout, decoded_assets, TextContent(name="", number=TEXT.number, ref_code=TEXT.ref_code)).crop(region)

    assert without.convert("RGB").getcolors() == [(300 * 45, (255, 255, 255))]
    assert with_name.tobytes() != without.tobytes()
    colors = {c for _, c in with_name.convert("RGB").getcolors(300 * 45)}
    assert (30, 64, 175) in colors
