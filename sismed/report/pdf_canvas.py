from __future__ import annotations

import io
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas as ReportLabPdfCanvas

from ..config import Settings
from .canvas import Align, BODY, TextStyle


logger = logging.getLogger(__name__)


def page_size_mm(pagesize: tuple[float, float] = A4) -> tuple[float, float]:
    return pagesize[0] / mm, pagesize[1] / mm


def _safe_canvas_font(canvas: ReportLabPdfCanvas, font_name: str, size: float) -> None:
    for candidate in (str(font_name or '').strip(), 'Helvetica'):
        if not candidate:
            continue
        try:
            canvas.setFont(candidate, size)
            return
        except Exception:
            logger.debug('PDF font %s unavailable, trying fallback', candidate)
            continue


class ReportLabCanvas:
    """Canvas backed by a ReportLab PDF canvas writing into memory.

    Output is built with ReportLab's invariant mode so identical drawing calls
    always yield identical bytes.
    """

    def __init__(
        self,
        *,
        pagesize: tuple[float, float] = A4,
        font_name: str = 'Helvetica',
        bold_font_name: str = 'Helvetica-Bold',
        title: str = 'Receita Médica',
        producer: str = 'SISMED',
    ) -> None:
        self._buffer = io.BytesIO()
        self._pdf = ReportLabPdfCanvas(self._buffer, pagesize=pagesize, invariant=1)
        self._pdf.setTitle(title)
        self._pdf.setAuthor(producer)
        self._pdf.setCreator(producer)
        self._pdf.setProducer(producer)
        self._width_pt, self._height_pt = pagesize
        self._font_name = font_name
        self._bold_font_name = bold_font_name
        self._pages = 0
        self._finished = False

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportLabCanvas:
        return cls(
            font_name=settings.pdf_font_name,
            bold_font_name=settings.pdf_bold_font_name,
            title=settings.document_title,
            producer=settings.pdf_producer,
        )

    @property
    def page_count(self) -> int:
        return self._pages

    def _require_open_page(self) -> None:
        if self._finished:
            raise RuntimeError('canvas already finished')
        if self._pages == 0:
            raise RuntimeError('new_page() must be called before drawing')

    def _y(self, y: float) -> float:
        return self._height_pt - y * mm

    def new_page(self) -> None:
        if self._finished:
            raise RuntimeError('canvas already finished')
        if self._pages > 0:
            self._pdf.showPage()
        self._pages += 1

    def text(self, x: float, y: float, value: str, style: TextStyle = BODY) -> None:
        self._require_open_page()
        font = self._bold_font_name if style.bold else self._font_name
        _safe_canvas_font(self._pdf, font, style.size)
        px = x * mm
        py = self._y(y)
        if style.align == Align.center:
            self._pdf.drawCentredString(px, py, value)
        elif style.align == Align.right:
            self._pdf.drawRightString(px, py, value)
        else:
            self._pdf.drawString(px, py, value)

    def hline(self, x1: float, x2: float, y: float) -> None:
        self._require_open_page()
        self._pdf.setLineWidth(0.6)
        py = self._y(y)
        self._pdf.line(x1 * mm, py, x2 * mm, py)

    def page_dimensions(self) -> tuple[float, float]:
        return page_size_mm((self._width_pt, self._height_pt))

    def finish(self) -> bytes:
        if self._finished:
            raise RuntimeError('canvas already finished')
        if self._pages > 0:
            self._pdf.showPage()
        self._pdf.save()
        self._finished = True
        return self._buffer.getvalue()
