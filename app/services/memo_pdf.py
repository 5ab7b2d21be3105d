"""
Memo PDF Rendering Service

Renders a memo with its recipients, approval chain and comments/minutes
into an A4 PDF. Layout decisions come from ``pdf_layout``; this module
only turns placements into reportlab canvas calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Callable, Dict, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle
from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.core.exceptions import NotFound, UpstreamFailure
from app.models.memo import Memo, MemoType, MemoPriority
from app.services import pdf_layout
from app.services.pdf_layout import A4_GEOMETRY, Cursor, PageGeometry, Placement
from app.services.signature_store import fetch_signature

logger = logging.getLogger(__name__)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

PRIORITY_COLORS = {
    MemoPriority.URGENT: colors.Color(220 / 255, 38 / 255, 38 / 255),
    MemoPriority.HIGH: colors.Color(234 / 255, 179 / 255, 8 / 255),
    MemoPriority.MEDIUM: colors.Color(59 / 255, 130 / 255, 246 / 255),
    MemoPriority.LOW: colors.Color(156 / 255, 163 / 255, 175 / 255),
}
HEADER_FILL = colors.Color(59 / 255, 130 / 255, 246 / 255)
RULE_COLOR = colors.Color(200 / 255, 200 / 255, 200 / 255)
MUTED_TEXT = colors.Color(128 / 255, 128 / 255, 128 / 255)

DOCUMENT_LABELS = {
    MemoType.APPROVAL: "MEMORANDUM",
    MemoType.INTERNAL: "MEMORANDUM",
    MemoType.EXTERNAL_LETTER: "EXTERNAL LETTER",
    MemoType.AUDIT_LETTER: "AUDIT LETTER",
    MemoType.CIRCULAR: "CIRCULAR",
}

# Proportions of the content width: # | Approver | Role | Department | Status | Date | Comments
APPROVAL_COLUMNS = (0.05, 0.18, 0.13, 0.14, 0.13, 0.12, 0.25)
APPROVAL_HEADERS = ["#", "Approver", "Role", "Department", "Status", "Date", "Comments"]

CELL_STYLE = ParagraphStyle("ApprovalCell", fontName=FONT, fontSize=9, leading=11)

LOGO_BOX = (20.0, 20.0)


def humanize(value) -> str:
    raw = value.value if hasattr(value, "value") else str(value)
    return raw.replace("_", " ")


def format_long_date(value: datetime) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def format_short_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


class FooterCanvas(canvas.Canvas):
    """
    Canvas that holds back every page until ``save`` so each one can be
    stamped with "Page N of M" once M is known.
    """

    def __init__(self, *args, generated_on: str = "", geometry: PageGeometry = A4_GEOMETRY, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._generated_on = generated_on
        self._geometry = geometry
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, start=1):
            self.__dict__.update(state)
            self.draw_footer(number, total)
            canvas.Canvas.showPage(self)
        self.page_count = total
        canvas.Canvas.save(self)

    def draw_footer(self, number: int, total: int) -> None:
        self.saveState()
        self.setFont(FONT, 8)
        self.setFillColor(MUTED_TEXT)
        self.drawCentredString(
            self._geometry.width * mm / 2,
            self._geometry.footer_offset * mm,
            f"Generated on {self._generated_on} | Page {number} of {total}",
        )
        self.restoreState()


class MemoPdfRenderer:
    """Single-pass renderer for one memo; create a new instance per document."""

    def __init__(
        self,
        memo: Memo,
        geometry: PageGeometry = A4_GEOMETRY,
        compact: bool = False,
        signature_loader: Callable[[str], bytes] = fetch_signature,
        generated_at: Optional[datetime] = None,
        page_compression: Optional[bool] = None,
        invariant: Optional[bool] = None,
    ):
        self.memo = memo
        self.geometry = geometry
        self.compact = compact
        self.signature_loader = signature_loader
        self.generated_at = generated_at or datetime.utcnow()
        self.page_compression = settings.PDF_PAGE_COMPRESSION if page_compression is None else page_compression
        self.invariant = settings.PDF_INVARIANT if invariant is None else invariant
        self.cursor: Cursor = pdf_layout.start_cursor(geometry)
        self.page_count = 0
        self.missing_signatures = []
        self._signature_cache: Dict[str, Optional[ImageReader]] = {}
        self.canvas: Optional[FooterCanvas] = None

    # ---------------------------
    # Public entry point
    # ---------------------------
    def render(self) -> bytes:
        buffer = BytesIO()
        self.canvas = FooterCanvas(
            buffer,
            pagesize=(self.geometry.width * mm, self.geometry.height * mm),
            pageCompression=1 if self.page_compression else 0,
            invariant=1 if self.invariant else 0,
            generated_on=format_long_date(self.generated_at),
            geometry=self.geometry,
        )
        self.canvas.setTitle(f"Memo {self.memo.reference_number}")
        self.canvas.setAuthor(settings.ORGANIZATION_NAME)
        self.canvas.setSubject(self.memo.subject)

        self.draw_header()
        self.draw_metadata()
        self.draw_subject_and_body()
        if self.memo.approvals:
            self.draw_approvals()
        if self.memo.comments:
            self.draw_comments()

        self.canvas.showPage()
        self.canvas.save()
        self.page_count = self.canvas.page_count
        return buffer.getvalue()

    # ---------------------------
    # Cursor / canvas plumbing
    # ---------------------------
    def _apply(self, placement: Placement) -> Cursor:
        """Sync the canvas with a placement and move the cursor to its end."""
        if placement.page_break:
            self.canvas.showPage()
        self.cursor = placement.end
        return placement.start

    def _break_page(self) -> None:
        fresh = pdf_layout.new_page(self.cursor, self.geometry)
        self._apply(Placement(start=fresh, end=fresh, page_break=True))

    def _advance(self, delta: float) -> None:
        self.cursor = pdf_layout.advance(self.cursor, delta)

    def _y(self, y_mm: float) -> float:
        return (self.geometry.height - y_mm) * mm

    def _text(self, x_mm: float, y_mm: float, text: str, font: str = FONT, size: float = 10,
              align: str = "left", color=colors.black) -> None:
        c = self.canvas
        c.setFont(font, size)
        c.setFillColor(color)
        if align == "center":
            c.drawCentredString(x_mm * mm, self._y(y_mm), text)
        elif align == "right":
            c.drawRightString(x_mm * mm, self._y(y_mm), text)
        else:
            c.drawString(x_mm * mm, self._y(y_mm), text)

    def _rule(self, y_mm: float) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(RULE_COLOR)
        c.setLineWidth(0.5)
        c.line(self.geometry.margin_x * mm, self._y(y_mm),
               (self.geometry.width - self.geometry.margin_x) * mm, self._y(y_mm))
        c.restoreState()

    def _lines(self, x_mm: float, lines, font: str = FONT, size: float = 10) -> None:
        """Flow wrapped lines from the cursor, continuing on new pages as needed. Callers reserve room first."""
        chunks = pdf_layout.split_lines(self.cursor, len(lines), self.geometry, keep_together=False)
        for chunk in chunks:
            start = self._apply(chunk.placement)
            for offset, line in enumerate(lines[chunk.first:chunk.last]):
                self._text(x_mm, start.y + offset * self.geometry.line_height, line, font, size)

    # ---------------------------
    # Sections
    # ---------------------------
    def draw_header(self) -> None:
        g = self.geometry
        start = self._apply(pdf_layout.place_block(self.cursor, 40, g))
        center = g.width / 2

        logo = self._load_image(settings.ORGANIZATION_LOGO_PATH, "organization logo")
        if logo is not None:
            width, height = pdf_layout.fit_image(*logo.getSize(), box=LOGO_BOX)
            self.canvas.drawImage(logo, g.margin_x * mm, self._y(start.y - 8 + height),
                                  width=width * mm, height=height * mm, mask="auto")

        self._text(center, start.y, settings.ORGANIZATION_NAME, FONT_BOLD, 16, align="center")
        self._text(center, start.y + 10, settings.ORGANIZATION_SHORT_NAME, FONT, 12, align="center")
        self._text(center, start.y + 25, DOCUMENT_LABELS.get(self.memo.type, "MEMORANDUM"),
                   FONT_BOLD, 14, align="center")

    def draw_metadata(self) -> None:
        g = self.geometry
        memo = self.memo

        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._text(g.margin_x, start.y, f"Reference: {memo.reference_number}")
        self._text(g.width - g.margin_x, start.y, f"Type: {humanize(memo.type)}", align="right")

        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._priority_badge(start.y)

        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._text(g.margin_x, start.y, f"Status: {humanize(memo.status)}")

        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._rule(start.y)

        creator = memo.created_by
        creator_department = creator.department_name if creator else None
        sender = f"{creator.full_name} ({creator_department or 'N/A'})" if creator else "N/A"
        recipients = ", ".join(
            f"{r.user.full_name} ({r.user.department_name or 'N/A'})" for r in memo.recipients if r.user
        ) or "All Departments"

        self._label_value("FROM:", sender)
        self._label_value("DATE:", format_long_date(memo.created_at) if memo.created_at else "-")
        self._label_value("TO:", recipients)

        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._rule(start.y)

    def _priority_badge(self, y_mm: float) -> None:
        g = self.geometry
        c = self.canvas
        fill = PRIORITY_COLORS.get(self.memo.priority, PRIORITY_COLORS[MemoPriority.LOW])
        c.saveState()
        c.setFillColor(fill)
        c.roundRect(g.margin_x * mm, self._y(y_mm + 3), 25 * mm, 6 * mm, 2 * mm, stroke=0, fill=1)
        c.restoreState()
        self._text(g.margin_x + 12.5, y_mm + 1, self.memo.priority.value, FONT_BOLD, 8,
                   align="center", color=colors.white)

    def _label_value(self, label: str, value: str) -> None:
        g = self.geometry
        value_x = g.margin_x + 25
        lines = pdf_layout.wrap_text(value, g.width - g.margin_x - value_x) or ["-"]
        start = self._apply(pdf_layout.place_block(self.cursor, pdf_layout.label_value_height(len(lines), g), g))
        self._text(g.margin_x, start.y, label, FONT_BOLD)
        for offset, line in enumerate(lines):
            self._text(value_x, start.y + offset * g.line_height, line)

    def draw_subject_and_body(self) -> None:
        g = self.geometry
        subject_lines = pdf_layout.wrap_text(self.memo.subject, g.content_width)
        self._apply(pdf_layout.reserve(self.cursor, 8 + len(subject_lines) * g.line_height, g))
        start = self._apply(pdf_layout.place_block(self.cursor, 8, g))
        self._text(g.margin_x, start.y, "SUBJECT:", FONT_BOLD)
        self._lines(g.margin_x, subject_lines)
        self._advance(4)

        body_lines = pdf_layout.wrap_text(self.memo.body, g.content_width)
        # Labels move with their text when the text needs a new page
        self._apply(pdf_layout.reserve(self.cursor, 8 + len(body_lines) * g.line_height, g))
        start = self._apply(pdf_layout.place_block(self.cursor, 8, g))
        self._text(g.margin_x, start.y, "MESSAGE:", FONT_BOLD)
        self._lines(g.margin_x, body_lines)
        self._advance(9)

    def _approval_table(self) -> Table:
        rows = [APPROVAL_HEADERS]
        for index, approval in enumerate(self.memo.approvals, start=1):
            approver = approval.approver
            cells = [
                str(index),
                approver.full_name if approver else "-",
                humanize(approver.role) if approver else "-",
                (approver.department_name if approver else None) or "N/A",
                humanize(approval.status),
                format_short_date(approval.approved_at) if approval.approved_at else "-",
                approval.comments or "-",
            ]
            rows.append([Paragraph(escape(cell), CELL_STYLE) for cell in cells])

        width = self.geometry.content_width * mm
        table = Table(rows, colWidths=[width * share for share in APPROVAL_COLUMNS], repeatRows=1)
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, RULE_COLOR),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 3),
            ("RIGHTPADDING", (0, 0), (-1, -1), 3),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        return table

    def _draw_table_part(self, table: Table, height_pt: float) -> None:
        table.drawOn(self.canvas, self.geometry.margin_x * mm, self._y(self.cursor.y) - height_pt)
        self._advance(height_pt / mm)

    def draw_approvals(self) -> None:
        g = self.geometry
        self._apply(pdf_layout.reserve(self.cursor, 50, g))
        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._text(g.margin_x, start.y, "APPROVAL WORKFLOW", FONT_BOLD, 12)

        width = g.content_width * mm
        remaining = self._approval_table()
        _, height = remaining.wrapOn(self.canvas, width, g.page_capacity * mm)
        # Whole table on a fresh page when it would fit there but not here
        if height <= g.page_capacity * mm:
            self._apply(pdf_layout.reserve(self.cursor, height / mm, g))

        while remaining is not None:
            available = (g.content_bottom - self.cursor.y) * mm
            _, height = remaining.wrapOn(self.canvas, width, available)
            if height <= available:
                self._draw_table_part(remaining, height)
                remaining = None
                continue

            parts = remaining.split(width, available)
            if len(parts) >= 2:
                _, first_height = parts[0].wrapOn(self.canvas, width, available)
                self._draw_table_part(parts[0], first_height)
                self._break_page()
                remaining = parts[1]
            elif not pdf_layout.at_page_top(self.cursor, g):
                self._break_page()
            else:
                # A single row taller than a page: let it overflow rather than loop
                self._draw_table_part(remaining, height)
                remaining = None

        self._advance(10)

    def draw_comments(self) -> None:
        g = self.geometry
        self._apply(pdf_layout.reserve(self.cursor, 50, g))
        start = self._apply(pdf_layout.place_block(self.cursor, 10, g))
        self._text(g.margin_x, start.y, "COMMENTS/MINUTES", FONT_BOLD, 12)

        for index, comment in enumerate(self.memo.comments, start=1):
            self._draw_comment(index, comment)

    def _draw_comment(self, index: int, comment) -> None:
        g = self.geometry
        author = comment.user
        text = comment.comment or ""
        if self.compact:
            text = pdf_layout.truncate(text, settings.PDF_COMMENT_COMPACT_CHARS)
        text_lines = pdf_layout.wrap_text(text, g.content_width - 4)

        signature = self._load_signature(author)
        height = pdf_layout.comment_block_height(len(text_lines), signature is not None, g)
        self._apply(pdf_layout.reserve(self.cursor, height, g))

        name = author.full_name if author else "Unknown"
        role = humanize(author.role) if author and author.role else "-"
        department = (author.department_name if author else None) or "N/A"
        posted = format_long_date(comment.created_at) if comment.created_at else "-"

        start = self._apply(pdf_layout.place_block(self.cursor, g.line_height, g))
        self._text(g.margin_x, start.y, f"{index}. {name}", FONT_BOLD)
        self._text(g.width - g.margin_x, start.y, posted, FONT, 9, align="right", color=MUTED_TEXT)

        start = self._apply(pdf_layout.place_block(self.cursor, g.line_height, g))
        self._text(g.margin_x + 4, start.y, f"{role} | {department}", FONT, 9, color=MUTED_TEXT)

        self._lines(g.margin_x + 4, text_lines)

        if signature is not None:
            box_width, box_height = pdf_layout.SIGNATURE_BOX
            start = self._apply(pdf_layout.place_block(self.cursor, box_height + 2, g))
            width, image_height = pdf_layout.fit_image(*signature.getSize(), box=pdf_layout.SIGNATURE_BOX)
            # Text baselines sit on start.y, so the box hangs from the previous line's baseline
            self.canvas.drawImage(
                signature,
                (g.margin_x + 4) * mm,
                self._y(start.y - 4 + image_height),
                width=width * mm,
                height=image_height * mm,
                mask="auto",
            )

        start = self._apply(pdf_layout.place_block(self.cursor, 4, g))
        self._rule(start.y - 2)

    # ---------------------------
    # Images
    # ---------------------------
    def _load_signature(self, author) -> Optional[ImageReader]:
        reference = author.signature_path if author else None
        if not reference:
            return None
        image = self._load_image(reference, f"signature of user {author.id}")
        if image is None:
            self.missing_signatures.append(reference)
        return image

    def _load_image(self, reference: Optional[str], description: str) -> Optional[ImageReader]:
        """Fetch and decode an image; any failure is logged and yields None."""
        if not reference:
            return None
        if reference in self._signature_cache:
            return self._signature_cache[reference]

        image = None
        try:
            data = self.signature_loader(reference)
            head = data.lstrip()[:5].lower()
            if reference.lower().endswith(".svg") or head in (b"<?xml", b"<svg "):
                raise UpstreamFailure("SVG images cannot be embedded")
            image = ImageReader(BytesIO(data))
            image.getSize()
        except UpstreamFailure as e:
            logger.warning(f"📄 MEMO PDF: skipping {description}: {e.message}")
            image = None
        except Exception as e:
            logger.warning(f"📄 MEMO PDF: could not decode {description} ({reference}): {e}")
            image = None

        self._signature_cache[reference] = image
        return image


@dataclass
class RenderedMemo:
    content: bytes
    filename: str
    page_count: int


def render_memo_document(db: Session, memo_id: int, compact: bool = False) -> RenderedMemo:
    """Load a memo with all its children and render it to PDF bytes."""
    memo = crud.memo.get_with_children(db, memo_id=memo_id)
    if not memo:
        raise NotFound("Memo not found")

    logger.info(f"📄 MEMO PDF: rendering {memo.reference_number} "
                f"({len(memo.approvals)} approvals, {len(memo.comments)} comments)")
    renderer = MemoPdfRenderer(memo, compact=compact)
    content = renderer.render()
    logger.info(f"📄 MEMO PDF: {memo.reference_number} rendered, {renderer.page_count} page(s), {len(content)} bytes")
    return RenderedMemo(
        content=content,
        filename=f"memo-{memo.reference_number}.pdf",
        page_count=renderer.page_count,
    )
