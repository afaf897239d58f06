from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date, datetime
from typing import Sequence

from ..errors import LayoutInvariantError
from ..types import Copy, Patient
from .canvas import Canvas


logger = logging.getLogger(__name__)

DOCUMENT_PREFIX = 'Receita'
DOCUMENT_EXTENSION = '.pdf'

_WHITESPACE_PATTERN = re.compile(r'\s+')
_UNSAFE_FILENAME_PATTERN = re.compile(r'[^\w.-]+')


def _sanitize_name(name: str) -> str:
    normalized = unicodedata.normalize('NFC', str(name or '')).strip()
    normalized = _WHITESPACE_PATTERN.sub('_', normalized)
    normalized = _UNSAFE_FILENAME_PATTERN.sub('', normalized)
    normalized = normalized.strip('._')
    return normalized or 'paciente'


def suggest_filename(patient: Patient, generation_timestamp: datetime | date) -> str:
    if isinstance(generation_timestamp, datetime):
        day = generation_timestamp.date()
    else:
        day = generation_timestamp
    return f'{DOCUMENT_PREFIX}_{_sanitize_name(patient.name)}_{day.isoformat()}{DOCUMENT_EXTENSION}'


class OutputSerializer:
    def __init__(self, canvas: Canvas) -> None:
        self.canvas = canvas

    def serialize(self, copies: Sequence[Copy]) -> bytes:
        expected = sum(copy.page_count for copy in copies)
        if expected == 0:
            raise LayoutInvariantError('nothing to serialize: no pages were composed')
        if self.canvas.page_count != expected:
            raise LayoutInvariantError(
                f'canvas holds {self.canvas.page_count} page(s) but the copies describe {expected}'
            )

        content = self.canvas.finish()
        logger.info('Serialized %s copy(ies), %s page(s), %s bytes', len(copies), expected, len(content))
        return content

    suggest_filename = staticmethod(suggest_filename)
