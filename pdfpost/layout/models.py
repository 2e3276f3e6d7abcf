from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TagKind(str, Enum):
    bold = 'bold'
    italic = 'italic'
    underline = 'underline'


class TokenKind(str, Enum):
    text = 'text'
    emoji = 'emoji'


class FontSelector(str, Enum):
    main = 'main'
    emoji = 'emoji'


@dataclass(frozen=True)
class Token:
    content: str
    styles: frozenset[TagKind] = frozenset()
    kind: TokenKind | None = None

    @property
    def is_emoji(self) -> bool:
        return self.kind == TokenKind.emoji


@dataclass(frozen=True)
class StyleRecord:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font: FontSelector = FontSelector.main
    size: float = 12.0


@dataclass(frozen=True)
class StyleRun:
    tokens: tuple[Token, ...]
    style: StyleRecord

    @property
    def text(self) -> str:
        return ''.join(token.content for token in self.tokens)


@dataclass(frozen=True)
class LineRun:
    text: str
    style: StyleRecord
    width: float


@dataclass(frozen=True)
class Line:
    runs: tuple[LineRun, ...]
    width: float
    line_index: int

    @property
    def text(self) -> str:
        return ''.join(run.text for run in self.runs)

    @property
    def is_empty(self) -> bool:
        return not self.runs


@dataclass(frozen=True)
class Page:
    lines: tuple[Line, ...]
    offsets: tuple[float, ...]
    height: float
    page_index: int

    def placed_lines(self) -> list[tuple[Line, float]]:
        return list(zip(self.lines, self.offsets))


@dataclass(frozen=True)
class DrawCommand:
    page: int
    x: float
    y: float
    text: str
    font: FontSelector
    font_name: str
    size: float
    color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    skew: float = 0.0
    underline: bool = False
    width: float = 0.0

    def to_dict(self) -> dict:
        return {
            'page': self.page,
            'x': round(self.x, 3),
            'y': round(self.y, 3),
            'text': self.text,
            'font': self.font.value,
            'font_name': self.font_name,
            'size': self.size,
            'color': list(self.color),
            'skew': self.skew,
            'underline': self.underline,
            'width': round(self.width, 3),
        }


@dataclass
class Document:
    tokens: tuple[Token, ...]
    runs: tuple[StyleRun, ...]
    lines: tuple[Line, ...]
    pages: tuple[Page, ...]
    commands: tuple[DrawCommand, ...]
    page_width: float
    metadata: dict = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def commands_for_page(self, page_index: int) -> list[DrawCommand]:
        return [command for command in self.commands if command.page == page_index]
