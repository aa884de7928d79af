# tests/test_slug.py
from compositor.utils.media import sanitize_text_for_pillow
from compositor.utils.slug import attachment_filename


def test_attachment_filename_collapses_whitespace():
    assert attachment_filename("Jane Doe", "png") == "Jane_Doe.png"
    assert attachment_filename("  Mary   Ann\tLee ", ".pdf") == "Mary_Ann_Lee.pdf"


def test_attachment_filename_strips_header_breakers():
    assert attachment_filename('Jane "JD" Doe', "png") == "Jane_JD_Doe.png"
    assert attachment_filename("a/b\\c;d", "mp4") == "abcd.mp4"


def test_attachment_filename_fallback():
    assert attachment_filename("", "png") == "creative.png"
    assert attachment_filename('";', "png") == "creative.png"


def test_sanitize_ellipsis():
    assert sanitize_text_for_pillow("Hello… world") == "Hello... world"
    assert sanitize_text_for_pillow(None) == ""
