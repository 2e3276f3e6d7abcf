from __future__ import annotations

from typing import Iterable

import emoji

from .models import Token, TokenKind


def _is_text_presentation(match_text: str) -> bool:
    # ©, ® and friends are in the emoji database but the main font draws them.
    return len(match_text) == 1 and ord(match_text) < 0x100


def find_emoji_spans(text: str) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    for item in emoji.emoji_list(text):
        start = int(item['match_start'])
        end = int(item['match_end'])
        if end <= start or _is_text_presentation(text[start:end]):
            continue
        if spans and start < spans[-1][1]:
            continue
        spans.append((start, end))
    return spans


def split_token(token: Token) -> list[Token]:
    content = token.content
    spans = find_emoji_spans(content)
    if not spans:
        return [Token(content=content, styles=token.styles, kind=TokenKind.text)]

    parts: list[Token] = []
    cursor = 0
    for start, end in spans:
        if start > cursor:
            parts.append(Token(content=content[cursor:start], styles=token.styles, kind=TokenKind.text))
        parts.append(Token(content=content[start:end], styles=token.styles, kind=TokenKind.emoji))
        cursor = end
    if cursor < len(content):
        parts.append(Token(content=content[cursor:], styles=token.styles, kind=TokenKind.text))
    return parts


def segment(tokens: Iterable[Token], *, enabled: bool = True) -> list[Token]:
    segmented: list[Token] = []
    for token in tokens:
        if not enabled:
            segmented.append(Token(content=token.content, styles=token.styles, kind=TokenKind.text))
            continue
        segmented.extend(split_token(token))
    return segmented
