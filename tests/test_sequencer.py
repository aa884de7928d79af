# tests/test_sequencer.py
import types

import pytest

from compositor.template import CanvasSpec, TextContent, compute_layout, generate_sequence

TEXT = TextContent(name="JANE DOE", number="+1 555 0100", ref_code="TC-001")


def test_sequence_is_lazy_and_ordered(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    seq = generate_sequence(layout, decoded_assets, TEXT, 6)
    assert isinstance(seq, types.GeneratorType)

    frames = list(seq)
    assert [f.index for f in frames] == list(range(6))
    assert frames[0].progress == pytest.approx(1 / 6)
    assert frames[-1].progress == 1.0
    assert all(f.image.size == (1080, 1920) for f in frames)
    # Consumed exactly once
    assert list(seq) == []


def test_last_frame_matches_static_render(decoded_assets):
    from compositor.template import render_still

    layout = compute_layout(CanvasSpec.for_variant("classic"))
    *_, last = generate_sequence(layout, decoded_assets, TEXT, 3)
    assert last.image.tobytes() == render_still(layout, decoded_assets, TEXT).tobytes()


def test_single_frame_sequence_is_final_layout(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("story"))
    frames = list(generate_sequence(layout, decoded_assets, TEXT, 1))
    assert len(frames) == 1 and frames[0].progress == 1.0


def test_empty_sequence_rejected(decoded_assets):
    layout = compute_layout(CanvasSpec.for_variant("verified"))
    with pytest.raises(ValueError):
        next(generate_sequence(layout, decoded_assets, TEXT, 0))
