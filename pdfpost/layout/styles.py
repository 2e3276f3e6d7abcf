from __future__ import annotations

from typing import Iterable

from .models import FontSelector, StyleRecord, StyleRun, TagKind, Token, TokenKind


class StyleResolver:
    """Maps a token's (kind, tag set) to a concrete StyleRecord.

    Bold raises the point size by ``bold_size_delta`` (and selects the bold
    face at render time), italic becomes a skew flag and underline a rule
    flag. Emoji always use the emoji font at ``emoji_font_size`` and ignore
    bold/italic.
    """

    def __init__(
        self,
        *,
        base_font_size: float,
        bold_size_delta: float = 2.0,
        emoji_font_size: float | None = None,
    ):
        self.base_font_size = float(base_font_size)
        self.bold_size_delta = float(bold_size_delta)
        self.emoji_font_size = float(emoji_font_size) if emoji_font_size else self.base_font_size
        self._cache: dict[tuple[TokenKind | None, frozenset[TagKind]], StyleRecord] = {}

    def resolve(self, token: Token) -> StyleRecord:
        key = (token.kind, token.styles)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        underline = TagKind.underline in token.styles
        if token.is_emoji:
            record = StyleRecord(
                underline=underline,
                font=FontSelector.emoji,
                size=self.emoji_font_size,
            )
        else:
            bold = TagKind.bold in token.styles
            record = StyleRecord(
                bold=bold,
                italic=TagKind.italic in token.styles,
                underline=underline,
                font=FontSelector.main,
                size=self.base_font_size + (self.bold_size_delta if bold else 0.0),
            )
        self._cache[key] = record
        return record

    def group_runs(self, tokens: Iterable[Token]) -> list[StyleRun]:
        runs: list[StyleRun] = []
        for token in tokens:
            style = self.resolve(token)
            if runs and runs[-1].style == style:
                runs[-1] = StyleRun(tokens=runs[-1].tokens + (token,), style=style)
                continue
            runs.append(StyleRun(tokens=(token,), style=style))
        return runs
