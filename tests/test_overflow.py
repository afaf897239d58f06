from __future__ import annotations

import math

import pytest

from conftest import RecordingCanvas, make_medicines
from sismed.errors import LayoutCapacityExhausted
from sismed.report.composer import PageComposer
from sismed.report.overflow import PageKind, capacities, capacity_for, observation_chunks, page_count, split


def test_capacity_for_counts_whole_entries():
    assert capacity_for(PageKind.first, 297, 142, 70, 27) == 3
    assert capacity_for(PageKind.continuation, 297, 97, 70, 27) == 4


def test_capacity_for_clamps_degenerate_pages_to_one():
    assert capacity_for(PageKind.first, 50, 40, 30, 27) == 1
    assert capacity_for(PageKind.continuation, 297, 290, 70, 27) == 1


def test_capacity_for_rejects_non_positive_item_height():
    with pytest.raises(ValueError):
        capacity_for(PageKind.first, 297, 100, 70, 0)


def test_capacities_distinguish_first_and_continuation_pages(composer):
    planned = capacities(composer)
    assert planned.first == 3
    assert planned.later == 4
    assert planned.first < planned.later


def test_observations_reduce_capacity(composer):
    plain = capacities(composer)
    with_notes = capacities(composer, 'Retornar em 30 dias.\nManter dieta.')
    assert with_notes.first <= plain.first
    assert with_notes.later < plain.later


def test_tiny_page_still_gets_one_entry_per_page():
    composer = PageComposer(RecordingCanvas(width=100, height=120))
    planned = capacities(composer)
    assert planned.first == 1
    assert planned.later == 1


def test_split_single_chunk_when_everything_fits():
    lines = make_medicines(3)
    chunks = split(lines, 3, 4)
    assert chunks == (lines,)


def test_split_empty_list_gives_one_empty_chunk():
    assert split((), 3, 4) == ((),)


@pytest.mark.parametrize('count', [4, 7, 8, 10, 23])
def test_split_respects_capacities_and_preserves_order(count):
    lines = make_medicines(count)
    chunks = split(lines, 3, 4)

    assert len(chunks[0]) == 3
    assert all(1 <= len(chunk) <= 4 for chunk in chunks[1:])
    assert len(chunks) == 1 + math.ceil((count - 3) / 4)
    assert tuple(line for chunk in chunks for line in chunk) == lines


def test_split_refuses_zero_capacity():
    with pytest.raises(LayoutCapacityExhausted):
        split(make_medicines(2), 0, 4)


@pytest.mark.parametrize(
    ('count', 'expected'),
    [(0, 1), (3, 1), (4, 2), (7, 2), (8, 3), (11, 3), (12, 4)],
)
def test_page_count(count, expected):
    assert page_count(count, 3, 4) == expected


def test_observations_too_tall_for_a_page_do_not_shrink_capacity(composer):
    notes = '\n'.join(f'linha {index}' for index in range(30))
    assert capacities(composer, notes) == capacities(composer)


def test_observation_chunks_fit_below_last_entries(composer):
    lines = [f'linha {index}' for index in range(5)]
    assert observation_chunks(composer, lines, 142) == (tuple(lines),)


def test_observation_chunks_spill_onto_footer_pages(composer):
    lines = [f'linha {index}' for index in range(30)]
    chunks = observation_chunks(composer, lines, 196)

    assert [len(chunk) for chunk in chunks] == [2, 20, 8]
    assert tuple(line for chunk in chunks for line in chunk) == tuple(lines)


def test_observation_chunks_first_portion_may_be_empty(composer):
    lines = [f'linha {index}' for index in range(5)]
    assert observation_chunks(composer, lines, 230) == ((), tuple(lines))


def test_observation_chunks_clamp_to_one_line_on_tiny_pages():
    composer = PageComposer(RecordingCanvas(width=100, height=150))
    assert observation_chunks(composer, ['a', 'b', 'c'], 140) == ((), ('a',), ('b',), ('c',))
