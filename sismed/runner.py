from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from sismed.config import Settings, get_settings
from sismed.report.canvas import Canvas, PlanningCanvas
from sismed.report.composer import PageComposer
from sismed.report.overflow import capacities
from sismed.report.pdf_canvas import ReportLabCanvas, page_size_mm
from sismed.report.replicator import MonthReplicator
from sismed.report.serializer import OutputSerializer, suggest_filename
from sismed.storage import FilesystemSink, Sink
from sismed.types import PrescriptionDocument, RenderedPrescription


logger = logging.getLogger(__name__)


def _build_canvas(settings: Settings) -> ReportLabCanvas:
    return ReportLabCanvas.from_settings(settings)


def _build_sink(settings: Settings, output_dir: Path | None = None) -> FilesystemSink:
    return FilesystemSink(output_dir or settings.output_dir)


def render_prescription(
    document: PrescriptionDocument,
    *,
    generated_at: datetime | date,
    canvas: Canvas | None = None,
    settings: Settings | None = None,
) -> RenderedPrescription:
    """Lay out every monthly copy of ``document`` and serialize it.

    The canvas is private to this call; if any page fails to compose the
    exception propagates and nothing is returned.
    """
    settings = settings or get_settings()
    surface = canvas if canvas is not None else _build_canvas(settings)

    composer = PageComposer(surface, settings.layout())
    copies = MonthReplicator(composer).generate(document)
    content = OutputSerializer(surface).serialize(copies)
    filename = suggest_filename(document.patient, generated_at)
    return RenderedPrescription(copies=copies, content=content, filename=filename)


def save_prescription(rendered: RenderedPrescription, sink: Sink) -> Path:
    return sink.write(rendered.content, rendered.filename)


def render_and_save(
    document: PrescriptionDocument,
    *,
    generated_at: datetime | date,
    output_dir: Path | None = None,
    settings: Settings | None = None,
) -> tuple[RenderedPrescription, Path]:
    settings = settings or get_settings()
    rendered = render_prescription(document, generated_at=generated_at, settings=settings)
    path = save_prescription(rendered, _build_sink(settings, output_dir))
    logger.info(
        'Prescription for %s saved to %s (%s copies, %s pages)',
        document.patient.name,
        path,
        len(rendered.copies),
        rendered.page_count,
    )
    return rendered, path


def plan_prescription(document: PrescriptionDocument, *, settings: Settings | None = None) -> dict[str, Any]:
    """Page plan of ``document`` without producing any output."""
    settings = settings or get_settings()
    composer = PageComposer(PlanningCanvas(*page_size_mm()), settings.layout())
    planned = capacities(composer, document.observations)
    copies = MonthReplicator(composer).generate(document)

    return {
        'patient': document.patient.name,
        'medicines': len(document.medicines),
        'capacities': {'first': planned.first, 'later': planned.later},
        'pages_per_copy': copies[0].page_count,
        'total_pages': sum(copy.page_count for copy in copies),
        'copies': [
            {'issue_date': copy.issue_date.isoformat(), 'pages': copy.page_count}
            for copy in copies
        ],
    }
