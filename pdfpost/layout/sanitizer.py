from __future__ import annotations

_BASE_RANGES: tuple[tuple[int, int], ...] = (
    (0x0020, 0x007E),  # printable ASCII
    (0x00A0, 0x00FF),  # Latin-1 supplement
    (0x0400, 0x052F),  # Cyrillic + supplement
    (0x2000, 0x206F),  # General Punctuation (incl. ZWJ)
    (0x20A0, 0x20CF),  # currency
    (0x2100, 0x2BFF),  # letterlike, arrows, technical, misc symbols, dingbats
)

_EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x20E3, 0x20E3),  # combining keycap
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3297),
    (0x3299, 0x3299),
    (0xFE00, 0xFE0F),  # variation selectors
    (0x1F000, 0x1FAFF),
    (0xE0020, 0xE007F),  # tag sequences (subdivision flags)
)

_LINE_CHARS = frozenset('\n\t')


def _normalize_newlines(value: str) -> str:
    return value.replace('\r\n', '\n').replace('\r', '\n')


def is_allowed(char: str, *, keep_emoji: bool = True) -> bool:
    if char in _LINE_CHARS:
        return True
    code = ord(char)
    for low, high in _BASE_RANGES:
        if low <= code <= high:
            return True
    if keep_emoji:
        for low, high in _EMOJI_RANGES:
            if low <= code <= high:
                return True
    return False


def sanitize(raw: str, *, keep_emoji: bool = True) -> str:
    text = _normalize_newlines(str(raw or ''))
    return ''.join(char for char in text if is_allowed(char, keep_emoji=keep_emoji))
