from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from reportlab.pdfgen import canvas as pdf_canvas

from pdfpost.errors import RenderError
from pdfpost.fonts import FONT_FALLBACK_MAIN
from pdfpost.layout.models import Document, DrawCommand


logger = logging.getLogger(__name__)

UNDERLINE_OFFSET_RATIO = 0.12
UNDERLINE_WIDTH_RATIO = 0.06


@dataclass(frozen=True)
class PageHandle:
    index: int
    width: float
    height: float


def _safe_canvas_font(canvas, font_name: str, size: float) -> None:
    for candidate in (str(font_name or '').strip(), FONT_FALLBACK_MAIN):
        if not candidate:
            continue
        try:
            canvas.setFont(candidate, size)
            return
        except Exception:
            logger.warning('Font %s is not registered; trying fallback', candidate)
            continue
    raise RenderError(f'no usable font for {font_name!r}')


class PdfRenderer:
    """Writes draw commands onto an in-memory reportlab canvas.

    Pages are strictly sequential: commands can only target the page opened
    by the most recent ``new_page`` call.
    """

    def __init__(self, *, title: str | None = None, author: str | None = None):
        self.title = title
        self.author = author
        self._buffer = io.BytesIO()
        self._canvas = None
        self._page_index = -1

    @property
    def page_count(self) -> int:
        return self._page_index + 1

    def new_page(self, width: float, height: float) -> PageHandle:
        try:
            if self._canvas is None:
                self._canvas = pdf_canvas.Canvas(self._buffer, pagesize=(width, height), pageCompression=1)
                if self.title:
                    self._canvas.setTitle(self.title)
                if self.author:
                    self._canvas.setAuthor(self.author)
            else:
                self._canvas.showPage()
                self._canvas.setPageSize((width, height))
        except Exception as exc:
            raise RenderError(f'failed to open page: {exc}') from exc
        self._page_index += 1
        return PageHandle(index=self._page_index, width=float(width), height=float(height))

    def draw_text(self, handle: PageHandle, command: DrawCommand) -> None:
        if self._canvas is None or handle.index != self._page_index:
            raise RenderError(
                f'draw command targets page {handle.index}, current page is {self._page_index}'
            )
        c = self._canvas
        try:
            c.saveState()
            c.setFillColorRGB(*command.color)
            _safe_canvas_font(c, command.font_name, command.size)
            if command.skew:
                c.translate(command.x, command.y)
                c.skew(0, command.skew)
                c.drawString(0, 0, command.text)
            else:
                c.drawString(command.x, command.y, command.text)
            c.restoreState()

            if command.underline and command.width > 0:
                underline_y = command.y - command.size * UNDERLINE_OFFSET_RATIO
                c.saveState()
                c.setStrokeColorRGB(*command.color)
                c.setLineWidth(max(0.5, command.size * UNDERLINE_WIDTH_RATIO))
                c.line(command.x, underline_y, command.x + command.width, underline_y)
                c.restoreState()
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f'failed to draw text on page {handle.index}: {exc}') from exc

    def serialize(self) -> bytes:
        if self._canvas is None:
            raise RenderError('cannot serialize a document without pages')
        try:
            self._canvas.showPage()
            self._canvas.save()
        except Exception as exc:
            raise RenderError(f'failed to serialize PDF: {exc}') from exc
        return self._buffer.getvalue()


def render_document(document: Document, *, title: str | None = None, author: str | None = None) -> bytes:
    renderer = PdfRenderer(title=title, author=author)
    for page in document.pages:
        handle = renderer.new_page(document.page_width, page.height)
        for command in document.commands_for_page(page.page_index):
            renderer.draw_text(handle, command)
    return renderer.serialize()
