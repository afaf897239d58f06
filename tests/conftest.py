from __future__ import annotations

from datetime import date

import pytest

from sismed.config import LayoutSettings, Settings
from sismed.report.canvas import BODY, TextStyle
from sismed.report.composer import PageComposer
from sismed.types import MedicineLine, Patient, PrescriptionDocument


class RecordingCanvas:
    """In-memory canvas that keeps every drawing call per page."""

    def __init__(self, width: float = 210.0, height: float = 297.0) -> None:
        self.width = width
        self.height = height
        self.pages: list[list[tuple]] = []
        self.finished = False

    def new_page(self) -> None:
        self.pages.append([])

    def text(self, x: float, y: float, value: str, style: TextStyle = BODY) -> None:
        self.pages[-1].append(('text', x, y, value, style))

    def hline(self, x1: float, x2: float, y: float) -> None:
        self.pages[-1].append(('hline', x1, x2, y))

    def page_dimensions(self) -> tuple[float, float]:
        return self.width, self.height

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def finish(self) -> bytes:
        self.finished = True
        return repr(self.pages).encode('utf-8')

    def texts(self, page: int) -> list[str]:
        return [op[3] for op in self.pages[page] if op[0] == 'text']

    def hlines(self, page: int) -> list[tuple]:
        return [op for op in self.pages[page] if op[0] == 'hline']


def make_medicines(count: int, *, controlled_at: tuple[int, ...] = ()) -> tuple[MedicineLine, ...]:
    return tuple(
        MedicineLine(
            name=f'Medicamento {index + 1}',
            dosage=f'{(index + 1) * 5}mg',
            presentation='Comprimido',
            instructions='Tomar 1 comprimido ao dia',
            controlled=index in controlled_at,
        )
        for index in range(count)
    )


def make_document(
    count: int = 2,
    *,
    months: int = 1,
    issue_date: date = date(2024, 1, 31),
    observations: str | None = None,
    controlled_at: tuple[int, ...] = (),
) -> PrescriptionDocument:
    return PrescriptionDocument(
        patient=Patient(name='Maria da Silva', identifier='123.456.789-00', birth_date=date(1980, 5, 17)),
        medicines=make_medicines(count, controlled_at=controlled_at),
        observations=observations,
        issue_date=issue_date,
        replication_count=months,
    )


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def layout() -> LayoutSettings:
    return LayoutSettings()


@pytest.fixture
def composer(canvas: RecordingCanvas, layout: LayoutSettings) -> PageComposer:
    return PageComposer(canvas, layout)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)
