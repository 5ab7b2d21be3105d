"""
Vertical cursor layout for fixed-width paginated documents.

All measurements are millimetres from the top-left corner of the page.
Nothing here touches a canvas: each function takes the current ``Cursor``
and a block size and returns a ``Placement`` telling the renderer where
the block starts, where the cursor ends up and whether a new page had to
be started first.
"""

from dataclasses import dataclass
from typing import List, Tuple

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit


@dataclass(frozen=True)
class PageGeometry:
    width: float = 210.0
    height: float = 297.0
    margin_x: float = 20.0
    top: float = 20.0
    bottom_reserve: float = 40.0
    line_height: float = 6.0
    footer_offset: float = 10.0

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin_x

    @property
    def content_bottom(self) -> float:
        return self.height - self.bottom_reserve

    @property
    def page_capacity(self) -> float:
        return self.content_bottom - self.top


A4_GEOMETRY = PageGeometry()

SIGNATURE_BOX = (40.0, 15.0)  # width, height


@dataclass(frozen=True)
class Cursor:
    y: float
    page: int = 1


@dataclass(frozen=True)
class Placement:
    start: Cursor
    end: Cursor
    page_break: bool = False


@dataclass(frozen=True)
class LineChunk:
    """A run of lines ``[first, last)`` that lands on a single page."""
    placement: Placement
    first: int
    last: int


def start_cursor(geometry: PageGeometry = A4_GEOMETRY) -> Cursor:
    return Cursor(y=geometry.top, page=1)


def advance(cursor: Cursor, delta: float) -> Cursor:
    return Cursor(y=cursor.y + delta, page=cursor.page)


def new_page(cursor: Cursor, geometry: PageGeometry = A4_GEOMETRY) -> Cursor:
    return Cursor(y=geometry.top, page=cursor.page + 1)


def at_page_top(cursor: Cursor, geometry: PageGeometry = A4_GEOMETRY) -> bool:
    return cursor.y <= geometry.top


def fits(cursor: Cursor, height: float, geometry: PageGeometry = A4_GEOMETRY) -> bool:
    return cursor.y + height <= geometry.content_bottom


def reserve(cursor: Cursor, needed: float, geometry: PageGeometry = A4_GEOMETRY) -> Placement:
    """
    Make sure ``needed`` mm are free below the cursor.

    Breaks to a new page when they are not, unless the cursor already sits
    at the top of a page (a fresh page cannot offer more room).
    """
    if fits(cursor, needed, geometry) or at_page_top(cursor, geometry):
        return Placement(start=cursor, end=cursor, page_break=False)
    fresh = new_page(cursor, geometry)
    return Placement(start=fresh, end=fresh, page_break=True)


def place_block(
    cursor: Cursor,
    height: float,
    geometry: PageGeometry = A4_GEOMETRY,
    spacing_after: float = 0.0,
) -> Placement:
    """Place an unbreakable block of ``height`` mm, moving it to a new page if needed."""
    room = reserve(cursor, height, geometry)
    return Placement(
        start=room.start,
        end=advance(room.start, height + spacing_after),
        page_break=room.page_break,
    )


def split_lines(
    cursor: Cursor,
    line_count: int,
    geometry: PageGeometry = A4_GEOMETRY,
    line_height: float = None,
    keep_together: bool = True,
) -> List[LineChunk]:
    """
    Lay out ``line_count`` text lines.

    With ``keep_together`` the whole block moves to a fresh page when it does
    not fit in the space left. Lines that still do not fit continue on the
    following pages.
    """
    line_height = line_height or geometry.line_height
    if line_count <= 0:
        return []

    if keep_together:
        first = reserve(cursor, line_count * line_height, geometry)
        current, page_break = first.start, first.page_break
    else:
        current, page_break = cursor, False
    chunks = []
    index = 0
    while index < line_count:
        room = int((geometry.content_bottom - current.y) // line_height)
        if room <= 0:
            current = new_page(current, geometry)
            page_break = True
            room = max(1, int(geometry.page_capacity // line_height))
        take = min(room, line_count - index)
        end = advance(current, take * line_height)
        chunks.append(LineChunk(Placement(start=current, end=end, page_break=page_break), index, index + take))
        index += take
        current = end
        page_break = False
    return chunks


def wrap_text(text: str, width: float, font_name: str = "Helvetica", font_size: float = 10) -> List[str]:
    """Word-wrap ``text`` to ``width`` mm using the font's real glyph widths."""
    if not text:
        return []
    return simpleSplit(text, font_name, font_size, width * mm)


def truncate(text: str, limit: int) -> str:
    if not text or limit <= 0 or len(text) <= limit:
        return text
    return text[: max(0, limit - 3)].rstrip() + "..."


def label_value_height(value_lines: int, geometry: PageGeometry = A4_GEOMETRY) -> float:
    return max(1, value_lines) * geometry.line_height + 2


def comment_block_height(text_lines: int, with_signature: bool, geometry: PageGeometry = A4_GEOMETRY) -> float:
    """Author line, role line, the text and, optionally, the signature box."""
    height = (2 + text_lines) * geometry.line_height + 4
    if with_signature:
        height += SIGNATURE_BOX[1] + 2
    return height


def fit_image(image_width: float, image_height: float, box: Tuple[float, float] = SIGNATURE_BOX) -> Tuple[float, float]:
    """Scale an image to fit inside ``box`` keeping its aspect ratio."""
    box_width, box_height = box
    if image_width <= 0 or image_height <= 0:
        return box_width, box_height
    scale = min(box_width / image_width, box_height / image_height)
    return image_width * scale, image_height * scale
