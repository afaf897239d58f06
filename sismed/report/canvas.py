from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Align(str, Enum):
    left = 'left'
    center = 'center'
    right = 'right'


@dataclass(frozen=True)
class TextStyle:
    size: float = 12
    bold: bool = False
    align: Align = Align.left


BODY = TextStyle()
BODY_BOLD = TextStyle(bold=True)
SMALL = TextStyle(size=10)


class Canvas(Protocol):
    """Drawing surface the composer writes to.

    Coordinates are millimetres from the top-left corner of the current page.
    """

    def new_page(self) -> None: ...

    def text(self, x: float, y: float, value: str, style: TextStyle = BODY) -> None: ...

    def hline(self, x1: float, x2: float, y: float) -> None: ...

    def page_dimensions(self) -> tuple[float, float]: ...

    @property
    def page_count(self) -> int: ...

    def finish(self) -> bytes: ...


class PlanningCanvas:
    """Canvas of a given size that counts pages and draws nothing.

    Lets the pagination run for a page plan without building a document.
    """

    def __init__(self, width: float, height: float) -> None:
        self._width = width
        self._height = height
        self._pages = 0

    @property
    def page_count(self) -> int:
        return self._pages

    def new_page(self) -> None:
        self._pages += 1

    def text(self, x: float, y: float, value: str, style: TextStyle = BODY) -> None:
        pass

    def hline(self, x1: float, x2: float, y: float) -> None:
        pass

    def page_dimensions(self) -> tuple[float, float]:
        return self._width, self._height

    def finish(self) -> bytes:
        return b''
