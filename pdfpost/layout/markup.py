from __future__ import annotations

import html
import re

from .models import TagKind, Token
from .sanitizer import is_allowed

_CANONICAL_TAGS: dict[TagKind, str] = {
    TagKind.bold: 'b',
    TagKind.italic: 'i',
    TagKind.underline: 'u',
}

_TAG_KINDS: dict[str, TagKind] = {
    'b': TagKind.bold,
    'strong': TagKind.bold,
    'i': TagKind.italic,
    'em': TagKind.italic,
    'u': TagKind.underline,
    'ins': TagKind.underline,
}

_LINE_BREAK_TAGS = frozenset({'br'})

_TAG_PATTERN = re.compile(r'(?<!\\)<(/?)([a-zA-Z][a-zA-Z0-9-]*)(?:\s+[^<>]*?)?\s*(/?)>')
_ESCAPE_PATTERN = re.compile(r'\\([\\*_~<>`])')


def _sigil_pattern(sigil: str, *, word_bound: bool) -> re.Pattern[str]:
    body = re.escape(sigil)
    char = re.escape(sigil[0])
    opening = r'(?<!\\)' + (r'(?<!\w)' if word_bound else '') + rf'(?<!{char}){body}(?![\s{char}])'
    closing = rf'(?<![\s\\{char}]){body}(?!{char})' + (r'(?!\w)' if word_bound else '')
    return re.compile(opening + r'(.+?)' + closing)


# Longest sigil first, so `**x**` is never read as two `*` pairs.
_SIGIL_RULES: tuple[tuple[re.Pattern[str], tuple[TagKind, ...]], ...] = (
    (_sigil_pattern('***', word_bound=False), (TagKind.bold, TagKind.italic)),
    (_sigil_pattern('**', word_bound=False), (TagKind.bold,)),
    (_sigil_pattern('__', word_bound=True), (TagKind.underline,)),
    (_sigil_pattern('~~', word_bound=False), (TagKind.underline,)),
    (_sigil_pattern('*', word_bound=False), (TagKind.bold,)),
    (_sigil_pattern('_', word_bound=True), (TagKind.italic,)),
    (_sigil_pattern('~', word_bound=False), (TagKind.underline,)),
)


def _wrap_in_tags(kinds: tuple[TagKind, ...]):
    opening = ''.join(f'<{_CANONICAL_TAGS[kind]}>' for kind in kinds)
    closing = ''.join(f'</{_CANONICAL_TAGS[kind]}>' for kind in reversed(kinds))

    def _replace(match: re.Match[str]) -> str:
        return f'{opening}{match.group(1)}{closing}'

    return _replace


def normalize_sigils(text: str) -> str:
    normalized = str(text or '')
    for pattern, kinds in _SIGIL_RULES:
        normalized = pattern.sub(_wrap_in_tags(kinds), normalized)
    return normalized


def _unescape(value: str, *, keep_emoji: bool = True) -> str:
    # Character references may decode to code points the sanitizer would drop.
    decoded = html.unescape(_ESCAPE_PATTERN.sub(r'\1', value))
    return ''.join(char for char in decoded if is_allowed(char, keep_emoji=keep_emoji))


def _close_tag(stack: list[TagKind], kind: TagKind) -> None:
    # Forgiving close: drop the most recent matching kind wherever it sits.
    for index in range(len(stack) - 1, -1, -1):
        if stack[index] == kind:
            del stack[index]
            return


def tokenize_tags(text: str, *, keep_emoji: bool = True) -> list[Token]:
    source = str(text or '')
    tokens: list[Token] = []
    stack: list[TagKind] = []
    buffer: list[str] = []
    cursor = 0

    def _flush() -> None:
        content = _unescape(''.join(buffer), keep_emoji=keep_emoji)
        buffer.clear()
        if content:
            tokens.append(Token(content=content, styles=frozenset(stack)))

    for match in _TAG_PATTERN.finditer(source):
        buffer.append(source[cursor:match.start()])
        cursor = match.end()

        is_closing = bool(match.group(1))
        name = match.group(2).lower()
        self_closing = bool(match.group(3))

        if name in _LINE_BREAK_TAGS:
            buffer.append('\n')
            continue

        kind = _TAG_KINDS.get(name)
        if kind is None or (self_closing and not is_closing):
            continue

        _flush()
        if is_closing:
            _close_tag(stack, kind)
        else:
            stack.append(kind)

    buffer.append(source[cursor:])
    _flush()
    return tokens


def parse(text: str, *, sigils: bool = True, keep_emoji: bool = True) -> list[Token]:
    source = normalize_sigils(text) if sigils else str(text or '')
    return tokenize_tags(source, keep_emoji=keep_emoji)
