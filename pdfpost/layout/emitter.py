from __future__ import annotations

from typing import Iterable

from pdfpost.fonts import LayoutFonts

from .models import DrawCommand, Page


def emit(
    pages: Iterable[Page],
    *,
    margin: float,
    fonts: LayoutFonts,
    color: tuple[float, float, float] = (0.0, 0.0, 0.0),
    italic_skew: float = 12.0,
) -> list[DrawCommand]:
    commands: list[DrawCommand] = []
    for page in pages:
        for line, y in page.placed_lines():
            x = float(margin)
            for run in line.runs:
                if run.text.strip():
                    commands.append(
                        DrawCommand(
                            page=page.page_index,
                            x=x,
                            y=y,
                            text=run.text,
                            font=run.style.font,
                            font_name=fonts.font_name_for(run.style),
                            size=run.style.size,
                            color=color,
                            skew=italic_skew if run.style.italic else 0.0,
                            underline=run.style.underline,
                            width=run.width,
                        )
                    )
                x += run.width
    return commands
