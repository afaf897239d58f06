from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, TypeVar

from ..errors import LayoutCapacityExhausted
from .composer import PageComposer


logger = logging.getLogger(__name__)

T = TypeVar('T')


class PageKind(str, Enum):
    first = 'first'
    continuation = 'continuation'


@dataclass(frozen=True)
class PageCapacities:
    first: int
    later: int


def capacity_for(
    page_kind: PageKind,
    page_height: float,
    reserved_top: float,
    reserved_bottom: float,
    item_height: float,
) -> int:
    """Number of entries of ``item_height`` fitting between the reserved regions.

    Never less than 1, so splitting always makes progress.
    """
    if item_height <= 0:
        raise ValueError(f'item height must be positive, got {item_height}')

    available = page_height - reserved_top - reserved_bottom
    capacity = math.floor(available / item_height + 1e-9)
    if capacity < 1:
        logger.warning(
            'Clamping %s page capacity to 1 (available %.1fmm, entry %.1fmm)',
            page_kind.value,
            available,
            item_height,
        )
        return 1
    return capacity


def capacities(composer: PageComposer, observations: str | None = None) -> PageCapacities:
    # Every page keeps room for the footer, so whichever page ends up last can carry it.
    # Observations too tall to share a page with one entry continue on pages of their own.
    page_height = composer.page_height
    item_height = composer.entry_height
    reserved_bottom = composer.footer_height(observations)
    if composer.header_height + composer.medicines_heading_height + item_height + reserved_bottom > page_height:
        reserved_bottom = composer.footer_height(None)

    first = capacity_for(
        PageKind.first,
        page_height,
        composer.header_height + composer.patient_block_height + composer.medicines_heading_height,
        reserved_bottom,
        item_height,
    )
    later = capacity_for(
        PageKind.continuation,
        page_height,
        composer.header_height + composer.medicines_heading_height,
        reserved_bottom,
        item_height,
    )
    return PageCapacities(first=first, later=later)


def split(lines: Sequence[T], first_capacity: int, later_capacity: int) -> tuple[tuple[T, ...], ...]:
    if first_capacity < 1 or later_capacity < 1:
        raise LayoutCapacityExhausted(
            f'page capacities must be at least 1, got first={first_capacity} later={later_capacity}'
        )

    items = tuple(lines)
    chunks: list[tuple[T, ...]] = [items[:first_capacity]]
    start = first_capacity
    while start < len(items):
        chunks.append(items[start:start + later_capacity])
        start += later_capacity
    return tuple(chunks)


def page_count(total_lines: int, first_capacity: int, later_capacity: int) -> int:
    if total_lines <= first_capacity:
        return 1
    return 1 + math.ceil((total_lines - first_capacity) / later_capacity)


def observation_chunks(
    composer: PageComposer,
    lines: Sequence[str],
    cursor_y: float,
) -> tuple[tuple[str, ...], ...]:
    """Split wrapped observation lines between the last medicines page and footer-only pages.

    Chunk 0 goes below ``cursor_y`` and may be empty; each further chunk fills
    a page of its own under the header. The signature follows the final chunk.
    """
    items = tuple(lines)
    first_room = composer.observation_room(cursor_y)
    if len(items) <= first_room:
        return (items,)

    later_room = composer.observation_room(composer.header_height)
    if later_room < 1:
        logger.warning('Clamping observation lines per page to 1 (page height %.1fmm)', composer.page_height)
        later_room = 1

    chunks: list[tuple[str, ...]] = [items[:first_room]]
    start = first_room
    while start < len(items):
        chunks.append(items[start:start + later_room])
        start += later_room
    return tuple(chunks)
