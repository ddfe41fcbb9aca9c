"""
Shared reportlab drawing helpers for the PDF exports.
"""
import io
from typing import Callable, List, Optional

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from pickup_manager.core.config import settings
from pickup_manager.utils.datetime_handler import DateTimeHandler

PAGE_SIZES = {"letter": letter, "a4": A4}

MARGIN = 18 * mm
LINE_HEIGHT = 13
HEADER_BAND_HEIGHT = 22 * mm

BRAND_COLOR = colors.Color(0.114, 0.306, 0.847)
LIGHT_FILL = colors.Color(0.95, 0.96, 0.98)
RULE_COLOR = colors.Color(0.8, 0.82, 0.86)


def page_size(name: Optional[str] = None):
    return PAGE_SIZES.get((name or settings.PDF_PAGE_SIZE).lower(), letter)


def wrap_text(value: str, max_width: float, font_name: str = "Helvetica", font_size: float = 10) -> List[str]:
    """Wrap text on word boundaries to fit a width; long words are split."""
    lines: List[str] = []
    for paragraph in (value or "").splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            while pdfmetrics.stringWidth(word, font_name, font_size) > max_width and len(word) > 1:
                cut = len(word)
                while cut > 1 and pdfmetrics.stringWidth(word[:cut], font_name, font_size) > max_width:
                    cut -= 1
                if current:
                    lines.append(current)
                    current = ""
                lines.append(word[:cut])
                word = word[cut:]
            candidate = f"{current} {word}".strip()
            if current and pdfmetrics.stringWidth(candidate, font_name, font_size) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


class NumberedCanvas(canvas.Canvas):
    """Canvas that stamps every page with its number and the page total."""

    def __init__(self, *args, **kwargs):
        self.footer_text = kwargs.pop("footer_text", "")
        super().__init__(*args, **kwargs)
        self._saved_pages = []

    def showPage(self):
        self._saved_pages.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_pages)
        for state in self._saved_pages:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int):
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        self.drawString(MARGIN, MARGIN / 2, self.footer_text)
        self.drawRightString(width - MARGIN, MARGIN / 2, f"Page {self._pageNumber} of {total}")


class PdfDocument:
    """
    A page cursor over a NumberedCanvas. Content is drawn top-down and a new
    page is started whenever the next block would not fit.
    """

    def __init__(self, title: str, size_name: Optional[str] = None):
        self.buffer = io.BytesIO()
        self.size = page_size(size_name)
        self.width, self.height = self.size
        self.title = title
        generated = DateTimeHandler.format_datetime(DateTimeHandler.get_current_datetime())
        self.pdf = NumberedCanvas(
            self.buffer,
            pagesize=self.size,
            footer_text=f"Generated {generated} UTC - {settings.PROJECT_NAME}",
        )
        self.pdf.setTitle(title)
        self.on_new_page: Optional[Callable[[], None]] = None
        self.y = self.height - MARGIN

    @property
    def content_width(self) -> float:
        return self.width - 2 * MARGIN

    def header_band(self, subtitle: str = "") -> None:
        """Colored title band at the top of the current page."""
        top = self.height - MARGIN
        self.pdf.setFillColor(BRAND_COLOR)
        self.pdf.rect(MARGIN, top - HEADER_BAND_HEIGHT, self.content_width, HEADER_BAND_HEIGHT, stroke=0, fill=1)
        self.pdf.setFillColor(colors.white)
        self.pdf.setFont("Helvetica-Bold", 16)
        self.pdf.drawString(MARGIN + 4 * mm, top - 10 * mm, self.title)
        if subtitle:
            self.pdf.setFont("Helvetica", 10)
            self.pdf.drawString(MARGIN + 4 * mm, top - 16 * mm, subtitle)
        self.pdf.setFillColor(colors.black)
        self.y = top - HEADER_BAND_HEIGHT - 8 * mm

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = self.height - MARGIN
        if self.on_new_page:
            self.on_new_page()

    def ensure_space(self, needed: float) -> None:
        if self.y - needed < MARGIN + LINE_HEIGHT:
            self.new_page()

    def heading(self, text: str, size: int = 12) -> None:
        self.ensure_space(LINE_HEIGHT * 3)
        self.pdf.setFont("Helvetica-Bold", size)
        self.pdf.drawString(MARGIN, self.y, text)
        self.y -= LINE_HEIGHT + 3

    def label_value(self, label: str, value: str, x: float = MARGIN) -> None:
        self.ensure_space(LINE_HEIGHT)
        self.pdf.setFont("Helvetica-Bold", 10)
        self.pdf.drawString(x, self.y, f"{label}:")
        self.pdf.setFont("Helvetica", 10)
        self.pdf.drawString(x + 32 * mm, self.y, value or "-")
        self.y -= LINE_HEIGHT

    def paragraph(self, text: str, font_size: int = 10) -> None:
        self.pdf.setFont("Helvetica", font_size)
        for line in wrap_text(text, self.content_width, "Helvetica", font_size):
            self.ensure_space(LINE_HEIGHT)
            self.pdf.setFont("Helvetica", font_size)
            self.pdf.drawString(MARGIN, self.y, line)
            self.y -= LINE_HEIGHT

    def boxed_text(self, title: str, text: str) -> None:
        """A titled, shaded box; falls back to plain lines when it would not fit a page."""
        lines = wrap_text(text, self.content_width - 8 * mm)
        box_height = (len(lines) + 1) * LINE_HEIGHT + 6 * mm
        if box_height > self.height - 2 * MARGIN - 2 * LINE_HEIGHT:
            self.heading(title, size=10)
            self.paragraph(text)
            return

        self.ensure_space(box_height + LINE_HEIGHT)
        bottom = self.y - box_height + LINE_HEIGHT
        self.pdf.setFillColor(LIGHT_FILL)
        self.pdf.setStrokeColor(RULE_COLOR)
        self.pdf.rect(MARGIN, bottom, self.content_width, box_height, stroke=1, fill=1)
        self.pdf.setFillColor(colors.black)
        self.pdf.setFont("Helvetica-Bold", 10)
        self.y -= 2 * mm
        self.pdf.drawString(MARGIN + 4 * mm, self.y, title)
        self.y -= LINE_HEIGHT
        self.pdf.setFont("Helvetica", 10)
        for line in lines:
            self.pdf.drawString(MARGIN + 4 * mm, self.y, line)
            self.y -= LINE_HEIGHT
        self.y = bottom - LINE_HEIGHT

    def table(self, columns: List[tuple], rows: List[List[str]]) -> None:
        """
        Draw a simple table; columns are (title, width ratio, align) tuples.
        The header row is repeated on every page the table spans.
        """
        widths = [ratio * self.content_width for _, ratio, _ in columns]

        def draw_header():
            self.pdf.setFillColor(LIGHT_FILL)
            self.pdf.rect(MARGIN, self.y - 4, self.content_width, LINE_HEIGHT + 2, stroke=0, fill=1)
            self.pdf.setFillColor(colors.black)
            self.pdf.setFont("Helvetica-Bold", 9)
            self._draw_row([title for title, _, _ in columns], widths, columns)
            self.y -= LINE_HEIGHT + 2
            self.pdf.setFont("Helvetica", 9)

        self.ensure_space(LINE_HEIGHT * 3)
        draw_header()
        for row in rows:
            cells = [wrap_text(str(value), width - 4, "Helvetica", 9) for value, width in zip(row, widths)]
            height = max(len(lines) for lines in cells) * LINE_HEIGHT
            if self.y - height < MARGIN + LINE_HEIGHT:
                self.new_page()
                draw_header()
            for index in range(max(len(lines) for lines in cells)):
                self._draw_row([lines[index] if index < len(lines) else "" for lines in cells], widths, columns)
                self.y -= LINE_HEIGHT
            self.pdf.setStrokeColor(RULE_COLOR)
            self.pdf.line(MARGIN, self.y + LINE_HEIGHT - 4, MARGIN + self.content_width, self.y + LINE_HEIGHT - 4)
        self.y -= 4

    def _draw_row(self, values: List[str], widths: List[float], columns: List[tuple]) -> None:
        x = MARGIN
        for value, width, (_, _, align) in zip(values, widths, columns):
            if align == "right":
                self.pdf.drawRightString(x + width - 2, self.y, value)
            elif align == "center":
                self.pdf.drawCentredString(x + width / 2, self.y, value)
            else:
                self.pdf.drawString(x + 2, self.y, value)
            x += width

    def qr_code(self, value: str, size: float, x: float, y: float) -> None:
        widget = QrCodeWidget(value)
        left, bottom, right, top = widget.getBounds()
        drawing = Drawing(size, size, transform=[size / (right - left), 0, 0, size / (top - bottom), 0, 0])
        drawing.add(widget)
        renderPDF.draw(drawing, self.pdf, x, y)

    def render(self) -> bytes:
        self.pdf.showPage()
        self.pdf.save()
        self.buffer.seek(0)
        return self.buffer.getvalue()
