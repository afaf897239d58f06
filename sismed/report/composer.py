from __future__ import annotations

import math
import textwrap
from datetime import date
from typing import Sequence

from ..config import LayoutSettings
from ..types import MedicineLine, Page, Patient, Region, RegionKind, format_date
from .canvas import Align, BODY, BODY_BOLD, SMALL, Canvas, TextStyle


HEADER_EMPHASIS = TextStyle(size=14, bold=True, align=Align.center)
HEADER_NORMAL = TextStyle(size=12, align=Align.center)
TITLE = TextStyle(size=16, bold=True, align=Align.center)
PAGE_MARKER = TextStyle(size=10, bold=True, align=Align.right)


class PageComposer:
    """Draws the fixed blocks of a prescription page onto a canvas.

    Every ``write_*`` call takes the cursor returned by the previous one and
    returns the cursor below what it drew, so blocks stack without overlap.
    The regions drawn since ``begin_page`` are returned by ``finish_page``.
    """

    def __init__(self, canvas: Canvas, layout: LayoutSettings | None = None) -> None:
        self.canvas = canvas
        self.layout = layout or LayoutSettings()
        self._regions: list[Region] = []
        self._page_index = 0
        self._total_pages = 0

    @property
    def page_width(self) -> float:
        return self.canvas.page_dimensions()[0]

    @property
    def page_height(self) -> float:
        return self.canvas.page_dimensions()[1]

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.layout.margin

    # Reserved heights, shared with the overflow planner.

    @property
    def header_height(self) -> float:
        layout = self.layout
        steps = max(len(layout.header_lines) - 1, 0)
        last_line_y = layout.header_top + steps * layout.header_line_step
        return last_line_y + layout.rule_gap + layout.title_gap + layout.marker_gap + layout.section_gap

    @property
    def patient_block_height(self) -> float:
        return self.layout.patient_line_step * self.layout.patient_fields + self.layout.patient_block_gap

    @property
    def medicines_heading_height(self) -> float:
        return self.layout.medicines_heading_height

    @property
    def entry_height(self) -> float:
        return self.layout.entry_lines * self.layout.line_height + self.layout.entry_gap

    def observation_lines(self, observations: str | None) -> list[str]:
        if not observations:
            return []
        width = max(int(self.content_width / self.layout.char_width), 1)
        wrapped: list[str] = []
        for paragraph in observations.splitlines():
            if not paragraph.strip():
                wrapped.append('')
                continue
            wrapped.extend(textwrap.wrap(paragraph.strip(), width=width, break_long_words=True) or [''])
        return wrapped

    def footer_height(self, observations: str | None) -> float:
        layout = self.layout
        height = layout.section_gap + layout.signature_offset
        lines = self.observation_lines(observations)
        if lines:
            height += layout.observations_heading_height + len(lines) * layout.line_height + layout.section_gap
        return height

    def medicine_block_end(self, cursor_y: float, count: int) -> float:
        return cursor_y + self.medicines_heading_height + count * self.entry_height

    def observation_room(self, cursor_y: float) -> int:
        """Wrapped observation lines that fit below ``cursor_y`` with the signature still on the page."""
        layout = self.layout
        available = (
            self.page_height
            - layout.signature_offset
            - cursor_y
            - 2 * layout.section_gap
            - layout.observations_heading_height
        )
        return max(int(math.floor(available / layout.line_height + 1e-9)), 0)

    # Drawing.

    def _record(self, kind: RegionKind, top: float, bottom: float, **extra) -> None:
        self._regions.append(Region(kind=kind, top=top, bottom=bottom, **extra))

    def begin_page(self, page_index: int, total_pages: int) -> float:
        if page_index < 1 or page_index > max(total_pages, 1):
            raise ValueError(f'page {page_index} outside 1..{total_pages}')

        self.canvas.new_page()
        self._regions = []
        self._page_index = page_index
        self._total_pages = total_pages

        layout = self.layout
        center_x = self.page_width / 2
        y = layout.header_top
        for position, line in enumerate(layout.header_lines):
            style = HEADER_EMPHASIS if position < layout.header_emphasis_lines else HEADER_NORMAL
            self.canvas.text(center_x, y, line, style)
            y += layout.header_line_step
        y -= layout.header_line_step if layout.header_lines else 0

        rule_y = y + layout.rule_gap
        self.canvas.hline(layout.margin, self.page_width - layout.margin, rule_y)

        title_y = rule_y + layout.title_gap
        self.canvas.text(center_x, title_y, layout.document_title, TITLE)

        marker_y = title_y + layout.marker_gap
        if total_pages > 1:
            self.canvas.text(
                self.page_width - layout.margin,
                marker_y,
                f'Página {page_index} de {total_pages}',
                PAGE_MARKER,
            )

        bottom = marker_y + layout.section_gap
        self._record(RegionKind.header, 0.0, bottom)
        return bottom

    def write_patient_block(self, cursor_y: float, patient: Patient, issue_date: date) -> float:
        layout = self.layout
        x = layout.margin
        step = layout.patient_line_step

        self.canvas.text(x, cursor_y, 'DADOS DO PACIENTE:', BODY_BOLD)
        fields = (
            f'Nome: {patient.name}',
            f'CPF/Cartão SUS: {patient.identifier}',
            f'Data de Nascimento: {format_date(patient.birth_date)}',
            f'Data da Receita: {format_date(issue_date)}',
        )
        for offset, value in enumerate(fields, start=1):
            self.canvas.text(x, cursor_y + offset * step, value, BODY)

        bottom = cursor_y + self.patient_block_height
        self._record(RegionKind.patient, cursor_y, bottom)
        return bottom

    def write_medicine_block(
        self,
        cursor_y: float,
        lines: Sequence[MedicineLine],
        *,
        start_number: int = 1,
        continued: bool = False,
    ) -> float:
        layout = self.layout
        heading = 'MEDICAMENTOS PRESCRITOS (continuação):' if continued else 'MEDICAMENTOS PRESCRITOS:'
        self.canvas.text(layout.margin, cursor_y, heading, BODY_BOLD)
        y = cursor_y + self.medicines_heading_height
        self._record(RegionKind.medicines, cursor_y, y)

        x = layout.margin + layout.entry_indent
        step = layout.line_height
        for number, medicine in enumerate(lines, start=start_number):
            bottom = y + self.entry_height
            title = f'{number}. {medicine.name} {medicine.dosage}'.rstrip()
            self.canvas.text(x, y, title, BODY_BOLD)
            self.canvas.text(x, y + step, f'   Apresentação: {medicine.presentation}', BODY)
            self.canvas.text(x, y + 2 * step, f'   Posologia: {medicine.instructions}', BODY)
            if medicine.controlled:
                self.canvas.text(x, y + 3 * step, f'   {layout.controlled_caption}', BODY_BOLD)

            self._record(RegionKind.medicine, y, bottom, medicine=medicine, number=number)
            y = bottom

        return y

    def write_footer(self, cursor_y: float, observations: str | None = None) -> float:
        y = self.write_observations(cursor_y, self.observation_lines(observations))
        return self.write_signature(y)

    def write_observations(self, cursor_y: float, lines: Sequence[str], *, continued: bool = False) -> float:
        layout = self.layout
        y = cursor_y + layout.section_gap
        if not lines:
            return y

        heading = 'OBSERVAÇÕES (continuação):' if continued else 'OBSERVAÇÕES:'
        self.canvas.text(layout.margin, y, heading, BODY_BOLD)
        text_y = y + layout.observations_heading_height
        for offset, line in enumerate(lines):
            if line:
                self.canvas.text(layout.margin, text_y + offset * layout.line_height, line, BODY)
        bottom = text_y + len(lines) * layout.line_height + layout.section_gap
        self._record(RegionKind.observations, y, bottom)
        return bottom

    def write_signature(self, cursor_y: float) -> float:
        # Anchored near the bottom edge, pushed down only by what is already drawn.
        layout = self.layout
        signature_y = max(cursor_y, self.page_height - layout.signature_offset)
        caption_y = signature_y + layout.signature_caption_gap

        center_x = self.page_width / 2
        self.canvas.hline(center_x, self.page_width - layout.margin, signature_y)
        self.canvas.text(center_x + 10, caption_y, layout.signature_caption, SMALL)
        self._record(RegionKind.signature, signature_y, caption_y)
        return signature_y

    def finish_page(self) -> Page:
        page = Page(index=self._page_index, total=self._total_pages, regions=tuple(self._regions))
        self._regions = []
        return page
