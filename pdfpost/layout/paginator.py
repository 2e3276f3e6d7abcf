from __future__ import annotations

from typing import Sequence

from .models import Line, Page


def paginate(
    lines: Sequence[Line],
    *,
    page_height: float,
    margin: float,
    line_height: float,
    top_margin: float | None = None,
    bottom_margin: float | None = None,
) -> list[Page]:
    top = float(page_height) - float(margin if top_margin is None else top_margin)
    bottom = float(margin if bottom_margin is None else bottom_margin)
    pages: list[Page] = []
    page_lines: list[Line] = []
    offsets: list[float] = []
    cursor = top

    def _seal() -> None:
        pages.append(
            Page(
                lines=tuple(page_lines),
                offsets=tuple(offsets),
                height=float(page_height),
                page_index=len(pages),
            )
        )
        page_lines.clear()
        offsets.clear()

    for line in lines:
        if cursor < bottom and page_lines:
            _seal()
            cursor = top
        page_lines.append(line)
        offsets.append(cursor)
        cursor -= line_height

    if page_lines or not pages:
        _seal()
    return pages
