from __future__ import annotations


class PrescriptionError(Exception):
    """Base class for failures surfaced by the prescription composer."""


class InvalidDate(PrescriptionError, ValueError):
    def __init__(self, value: object, reason: str = 'invalid date') -> None:
        self.value = value
        self.reason = reason
        super().__init__(f'{reason}: {value!r}')


class LayoutCapacityExhausted(PrescriptionError):
    """A page could not hold what was planned for it.

    The planner clamps every capacity to at least one entry and moves
    observations that do not fit onto pages of their own, so reaching this
    means the planned chunks and the capacities disagree.
    """


class LayoutInvariantError(LayoutCapacityExhausted):
    pass


class SinkWriteFailure(PrescriptionError):
    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f'failed to write {filename}: {reason}')
