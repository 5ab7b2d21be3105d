import pytest

from app.services import pdf_layout
from app.services.pdf_layout import A4_GEOMETRY, Cursor


def test_geometry_defaults():
    assert A4_GEOMETRY.content_width == 170
    assert A4_GEOMETRY.content_bottom == 257
    assert A4_GEOMETRY.page_capacity == 237


def test_block_that_fits_stays_on_page():
    placement = pdf_layout.place_block(Cursor(y=100), 30)

    assert not placement.page_break
    assert placement.start == Cursor(y=100)
    assert placement.end == Cursor(y=130)


def test_block_that_overflows_moves_to_next_page():
    placement = pdf_layout.place_block(Cursor(y=240, page=2), 30, spacing_after=5)

    assert placement.page_break
    assert placement.start == Cursor(y=20, page=3)
    assert placement.end == Cursor(y=55, page=3)


def test_oversized_block_at_page_top_does_not_break_again():
    placement = pdf_layout.reserve(Cursor(y=20, page=4), 500)

    assert not placement.page_break
    assert placement.start.page == 4


def test_short_text_moves_whole_to_next_page():
    chunks = pdf_layout.split_lines(Cursor(y=250), 3)

    assert len(chunks) == 1
    assert chunks[0].placement.page_break
    assert chunks[0].placement.start == Cursor(y=20, page=2)
    assert (chunks[0].first, chunks[0].last) == (0, 3)


def test_long_text_starts_on_fresh_page_and_continues():
    per_page = int(A4_GEOMETRY.page_capacity // A4_GEOMETRY.line_height)  # 39
    chunks = pdf_layout.split_lines(Cursor(y=200), 100)

    assert sum(chunk.last - chunk.first for chunk in chunks) == 100
    assert [chunk.first for chunk in chunks] == [0, per_page, 2 * per_page]
    assert [chunk.placement.start.page for chunk in chunks] == [2, 3, 4]
    assert all(chunk.placement.page_break for chunk in chunks)
    for chunk in chunks:
        assert chunk.placement.end.y <= A4_GEOMETRY.content_bottom


def test_long_text_at_page_top_uses_current_page():
    chunks = pdf_layout.split_lines(Cursor(y=20), 50)

    assert [chunk.placement.start.page for chunk in chunks] == [1, 2]
    assert not chunks[0].placement.page_break
    assert chunks[1].placement.page_break
    assert chunks[1].first == 39


def test_no_lines_no_chunks():
    assert pdf_layout.split_lines(Cursor(y=20), 0) == []


def test_wrap_text_respects_width():
    text = "word " * 200
    lines = pdf_layout.wrap_text(text, 50)

    assert len(lines) > 1
    assert " ".join(lines).split() == text.split()
    assert pdf_layout.wrap_text("", 50) == []


@pytest.mark.parametrize("text,limit,expected", [
    ("short", 10, "short"),
    ("abcdefghijklmnop", 10, "abcdefg..."),
    ("", 10, ""),
])
def test_truncate(text, limit, expected):
    assert pdf_layout.truncate(text, limit) == expected


def test_comment_block_height_includes_signature_box():
    without = pdf_layout.comment_block_height(2, with_signature=False)
    with_box = pdf_layout.comment_block_height(2, with_signature=True)

    assert without == 4 * 6 + 4
    assert with_box - without == pdf_layout.SIGNATURE_BOX[1] + 2


def test_fit_image_keeps_aspect_ratio_inside_box():
    assert pdf_layout.fit_image(400, 100) == pytest.approx((40, 10))
    assert pdf_layout.fit_image(100, 100) == pytest.approx((15, 15))
    assert pdf_layout.fit_image(0, 0) == pdf_layout.SIGNATURE_BOX


def test_lines_without_keep_together_start_on_current_page():
    chunks = pdf_layout.split_lines(Cursor(y=250), 3, keep_together=False)

    assert [chunk.placement.start.page for chunk in chunks] == [1, 2]
    assert not chunks[0].placement.page_break
    assert (chunks[0].first, chunks[0].last) == (0, 1)
    assert chunks[1].placement.start == Cursor(y=20, page=2)
