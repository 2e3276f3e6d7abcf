from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable

from pdfpost.errors import ConfigError

from .models import Line, LineRun, StyleRecord, StyleRun

WidthFn = Callable[[str, StyleRecord], float]

_CHUNK_PATTERN = re.compile(r'\s+|\S+')


@dataclass
class _Word:
    fragments: list[tuple[str, StyleRecord]] = field(default_factory=list)
    separator_style: StyleRecord | None = None


def split_paragraphs(runs: Iterable[StyleRun]) -> list[list[tuple[str, StyleRecord]]]:
    paragraphs: list[list[tuple[str, StyleRecord]]] = [[]]
    for run in runs:
        for token in run.tokens:
            for index, part in enumerate(token.content.split('\n')):
                if index > 0:
                    paragraphs.append([])
                if part:
                    paragraphs[-1].append((part, run.style))
    return paragraphs


def _split_words(pieces: list[tuple[str, StyleRecord]]) -> list[_Word]:
    words: list[_Word] = []
    current = _Word()
    pending_separator: StyleRecord | None = None

    for text, style in pieces:
        for chunk in _CHUNK_PATTERN.findall(text):
            if chunk.isspace():
                if current.fragments:
                    words.append(current)
                    current = _Word()
                pending_separator = style
                continue
            if not current.fragments:
                current.separator_style = pending_separator
            current.fragments.append((chunk, style))

    if current.fragments:
        words.append(current)
    return words


class _LineBuilder:
    def __init__(self):
        self.runs: list[LineRun] = []
        self.width = 0.0

    def add(self, text: str, style: StyleRecord, width: float) -> None:
        if self.runs and self.runs[-1].style == style:
            previous = self.runs[-1]
            self.runs[-1] = LineRun(text=previous.text + text, style=style, width=previous.width + width)
        else:
            self.runs.append(LineRun(text=text, style=style, width=width))
        self.width += width

    def build(self, line_index: int) -> Line:
        return Line(runs=tuple(self.runs), width=self.width, line_index=line_index)


def wrap(runs: Iterable[StyleRun], max_width: float, width_of: WidthFn) -> list[Line]:
    if max_width is None or max_width <= 0:
        raise ConfigError(f'max_width must be > 0, got {max_width}')

    lines: list[Line] = []

    for paragraph in split_paragraphs(runs):
        words = _split_words(paragraph)
        if not words:
            lines.append(Line(runs=(), width=0.0, line_index=len(lines)))
            continue

        builder = _LineBuilder()
        for word in words:
            measured = [(text, style, width_of(text, style)) for text, style in word.fragments]
            word_width = sum(width for _, _, width in measured)

            if builder.runs:
                space_style = word.separator_style or measured[0][1]
                space_width = width_of(' ', space_style)
                if builder.width + space_width + word_width < max_width:
                    builder.add(' ', space_style, space_width)
                else:
                    lines.append(builder.build(len(lines)))
                    builder = _LineBuilder()

            for text, style, width in measured:
                builder.add(text, style, width)

        lines.append(builder.build(len(lines)))

    return lines
