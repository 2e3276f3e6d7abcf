from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from pdfpost.errors import FontEmbedError
from pdfpost.layout.models import FontSelector, StyleRecord


logger = logging.getLogger(__name__)

FONT_MAIN_NAME = 'PP-Main'
FONT_MAIN_BOLD_NAME = 'PP-Main-Bold'
FONT_EMOJI_NAME = 'PP-Emoji'
FONT_FALLBACK_MAIN = 'Helvetica'
FONT_FALLBACK_BOLD = 'Helvetica-Bold'

FONT_MAIN_CANDIDATES = (
    Path('assets/fonts/DejaVuSans.ttf'),
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf'),
    Path('/usr/share/fonts/dejavu/DejaVuSans.ttf'),
)
FONT_MAIN_BOLD_CANDIDATES = (
    Path('assets/fonts/DejaVuSans-Bold.ttf'),
    Path('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf'),
    Path('/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf'),
)
FONT_EMOJI_CANDIDATES = (
    Path('assets/fonts/NotoEmoji-Regular.ttf'),
    Path('/usr/share/fonts/truetype/noto/NotoEmoji-Regular.ttf'),
    Path('/usr/share/fonts/noto/NotoEmoji-Regular.ttf'),
)


@dataclass(frozen=True)
class FontHandle:
    name: str
    embedded: bool


@dataclass(frozen=True)
class LayoutFonts:
    main: str
    bold: str
    emoji: str

    def font_name_for(self, style: StyleRecord) -> str:
        if style.font == FontSelector.emoji:
            return self.emoji
        if style.bold:
            return self.bold
        return self.main


def _safe_file(path: Path | None) -> Path | None:
    if path is None:
        return None
    if path.exists() and path.is_file():
        return path
    return None


def _first_existing(candidates: Iterable[Path]) -> Path | None:
    for candidate in candidates:
        resolved = _safe_file(candidate)
        if resolved is not None:
            return resolved
    return None


class FontBook:
    """Process-wide font registry and width oracle.

    Registration mutates reportlab's global font table, so it happens under a
    lock; measuring afterwards is read-only.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._resolved: dict[tuple, LayoutFonts] = {}

    def is_registered(self, font_name: str) -> bool:
        return font_name in pdfmetrics.getRegisteredFontNames() or font_name in pdfmetrics.standardFonts

    def embed(self, font_bytes: bytes, name: str) -> FontHandle:
        if not font_bytes:
            raise FontEmbedError(f'empty font data for {name}')
        with self._lock:
            if self.is_registered(name):
                return FontHandle(name=name, embedded=True)
            try:
                pdfmetrics.registerFont(TTFont(name, io.BytesIO(font_bytes)))
            except Exception as exc:
                raise FontEmbedError(f'failed to embed font {name}: {exc}') from exc
        logger.info('Registered PDF font %s (%d bytes)', name, len(font_bytes))
        return FontHandle(name=name, embedded=True)

    def embed_file(self, path: Path, name: str) -> FontHandle:
        try:
            font_bytes = Path(path).read_bytes()
        except OSError as exc:
            raise FontEmbedError(f'cannot read font file {path}: {exc}') from exc
        return self.embed(font_bytes, name)

    def width_of_text_at_size(self, text: str, size: float, font_name: str) -> float:
        value = str(text or '')
        if not value:
            return 0.0
        try:
            return float(pdfmetrics.stringWidth(value, font_name, size))
        except Exception as exc:
            logger.debug('stringWidth failed for font %s: %s', font_name, exc)

        width = 0.0
        for char in value:
            if char.isspace():
                width += size * 0.45
            elif ord(char) > 127:
                width += size * 0.98
            else:
                width += size * 0.56
        return width

    def _embed_configured(self, path: Path | None, name: str) -> str | None:
        if path is None:
            return None
        if _safe_file(Path(path)) is None:
            raise FontEmbedError(f'configured font file not found: {path}')
        return self.embed_file(Path(path), name).name

    def _embed_candidate(self, candidates: Iterable[Path], name: str) -> str | None:
        path = _first_existing(candidates)
        if path is None:
            return None
        try:
            return self.embed_file(path, name).name
        except FontEmbedError as exc:
            logger.warning('Skipped PDF font %s from %s: %s', name, path, exc)
            return None

    def resolve_fonts(
        self,
        *,
        custom_font: bool = True,
        main_path: Path | None = None,
        bold_path: Path | None = None,
        emoji_path: Path | None = None,
    ) -> LayoutFonts:
        key = (bool(custom_font), str(main_path or ''), str(bold_path or ''), str(emoji_path or ''))
        cached = self._resolved.get(key)
        if cached is not None:
            return cached

        if not custom_font:
            fonts = LayoutFonts(main=FONT_FALLBACK_MAIN, bold=FONT_FALLBACK_BOLD, emoji=FONT_FALLBACK_MAIN)
            self._resolved[key] = fonts
            return fonts

        main = self._embed_configured(main_path, FONT_MAIN_NAME) or self._embed_candidate(
            FONT_MAIN_CANDIDATES, FONT_MAIN_NAME
        )
        bold = self._embed_configured(bold_path, FONT_MAIN_BOLD_NAME) or self._embed_candidate(
            FONT_MAIN_BOLD_CANDIDATES, FONT_MAIN_BOLD_NAME
        )
        emoji = self._embed_configured(emoji_path, FONT_EMOJI_NAME) or self._embed_candidate(
            FONT_EMOJI_CANDIDATES, FONT_EMOJI_NAME
        )

        if main is None:
            logger.warning('No Unicode TTF font found; falling back to %s (no Cyrillic glyphs)', FONT_FALLBACK_MAIN)
            main = FONT_FALLBACK_MAIN
            bold = bold or FONT_FALLBACK_BOLD
        if bold is None:
            bold = main
        if emoji is None:
            logger.info('No emoji font found; emoji will be drawn with %s', main)
            emoji = main

        fonts = LayoutFonts(main=main, bold=bold, emoji=emoji)
        self._resolved[key] = fonts
        return fonts


@lru_cache(maxsize=1)
def get_font_book() -> FontBook:
    return FontBook()
