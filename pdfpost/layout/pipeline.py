from __future__ import annotations

import logging

from pdfpost.fonts import FontBook, LayoutFonts, get_font_book

from . import emitter, paginator, wrapper
from .config import LayoutConfig, LayoutFeatures
from .emoji_segmenter import segment
from .markup import parse
from .models import Document, StyleRecord, Token
from .sanitizer import sanitize
from .styles import StyleResolver


logger = logging.getLogger(__name__)


def tokenize(text: str, *, features: LayoutFeatures) -> list[Token]:
    if features.markup:
        tokens = parse(text, keep_emoji=features.emoji)
    else:
        tokens = [Token(content=text)] if text else []
    return segment(tokens, enabled=features.emoji)


def layout_text(
    raw: str,
    *,
    config: LayoutConfig | None = None,
    features: LayoutFeatures | None = None,
    fonts: LayoutFonts | None = None,
    font_book: FontBook | None = None,
) -> Document:
    """Lay out one text blob into pages of draw commands.

    ``ConfigError`` is raised before any token is produced; malformed markup
    and unsupported characters are recovered silently.
    """
    config = (config or LayoutConfig()).validate()
    features = features or LayoutFeatures()
    book = font_book or get_font_book()
    if fonts is None:
        fonts = book.resolve_fonts(custom_font=features.custom_font)

    text = sanitize(raw, keep_emoji=features.emoji)
    tokens = tokenize(text, features=features)

    resolver = StyleResolver(
        base_font_size=config.base_font_size,
        bold_size_delta=config.bold_size_delta,
        emoji_font_size=config.emoji_font_size,
    )
    runs = resolver.group_runs(tokens)

    def width_of(value: str, style: StyleRecord) -> float:
        return book.width_of_text_at_size(value, style.size, fonts.font_name_for(style))

    lines = wrapper.wrap(runs, config.content_width, width_of)
    pages = paginator.paginate(
        lines,
        page_height=config.page_height,
        margin=config.margin,
        line_height=config.line_height,
        top_margin=config.top,
        bottom_margin=config.bottom,
    )
    commands = emitter.emit(
        pages,
        margin=config.left,
        fonts=fonts,
        color=config.rgb(),
        italic_skew=config.italic_skew_degrees,
    )

    logger.debug(
        'Laid out %d chars into %d tokens, %d lines, %d pages',
        len(text),
        len(tokens),
        len(lines),
        len(pages),
    )
    return Document(
        tokens=tuple(tokens),
        runs=tuple(runs),
        lines=tuple(lines),
        pages=tuple(pages),
        commands=tuple(commands),
        page_width=float(config.page_width),
        metadata={'fonts': fonts},
    )
