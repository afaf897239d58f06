from __future__ import annotations

import calendar
import logging
from datetime import date

from ..errors import InvalidDate, LayoutInvariantError
from ..types import Copy, PrescriptionDocument
from .composer import PageComposer
from .overflow import capacities, observation_chunks, page_count, split


logger = logging.getLogger(__name__)


def add_calendar_months(value: date, offset: int) -> date:
    """Shift ``value`` by ``offset`` calendar months.

    The day is clamped to the last day of the target month, so Jan 31 + 1
    month is the last day of February.
    """
    month_index = value.year * 12 + (value.month - 1) + offset
    year, month_zero = divmod(month_index, 12)
    if year < 1 or year > 9999:
        raise InvalidDate(value, f'shifting by {offset} months leaves the supported range')
    month = month_zero + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


class MonthReplicator:
    def __init__(self, composer: PageComposer) -> None:
        self.composer = composer

    def generate(self, document: PrescriptionDocument) -> tuple[Copy, ...]:
        copies = []
        for month_offset in range(document.replication_count):
            copy_date = add_calendar_months(document.issue_date, month_offset)
            copies.append(self._compose_copy(document, month_offset, copy_date))
        return tuple(copies)

    def _compose_copy(self, document: PrescriptionDocument, month_offset: int, copy_date: date) -> Copy:
        composer = self.composer
        planned = capacities(composer, document.observations)
        chunks = split(document.medicines, planned.first, planned.later)
        if len(chunks) != page_count(len(document.medicines), planned.first, planned.later) or any(
            len(chunk) > (planned.first if position == 0 else planned.later)
            for position, chunk in enumerate(chunks)
        ):
            raise LayoutInvariantError(
                f'medicine chunks {[len(chunk) for chunk in chunks]} disagree with capacities '
                f'first={planned.first} later={planned.later}'
            )

        # Where the last medicines page ends decides how much of the observations it can hold.
        last_top = composer.header_height + (composer.patient_block_height if len(chunks) == 1 else 0)
        notes = observation_chunks(
            composer,
            composer.observation_lines(document.observations),
            composer.medicine_block_end(last_top, len(chunks[-1])),
        )
        total = len(chunks) + len(notes) - 1

        pages = []
        number = 1
        for position, chunk in enumerate(chunks):
            page_index = position + 1
            cursor = composer.begin_page(page_index, total)
            if page_index == 1:
                cursor = composer.write_patient_block(cursor, document.patient, copy_date)
            cursor = composer.write_medicine_block(
                cursor,
                chunk,
                start_number=number,
                continued=page_index > 1,
            )
            number += len(chunk)
            if page_index == len(chunks):
                cursor = composer.write_observations(cursor, notes[0])
                if len(notes) == 1:
                    composer.write_signature(cursor)
            pages.append(composer.finish_page())

        for position, portion in enumerate(notes[1:], start=1):
            cursor = composer.begin_page(len(chunks) + position, total)
            cursor = composer.write_observations(cursor, portion, continued=True)
            if position == len(notes) - 1:
                composer.write_signature(cursor)
            pages.append(composer.finish_page())

        copy = Copy(month_offset=month_offset, issue_date=copy_date, pages=tuple(pages))
        if copy.medicines != document.medicines:
            raise LayoutInvariantError(
                f'copy {month_offset + 1} lost or reordered medicines while paginating'
            )

        logger.info(
            'Composed copy %s/%s dated %s: %s page(s), %s medicine(s), capacities first=%s later=%s',
            month_offset + 1,
            document.replication_count,
            copy_date.isoformat(),
            total,
            len(document.medicines),
            planned.first,
            planned.later,
        )
        return copy
