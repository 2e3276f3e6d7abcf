from __future__ import annotations

import math
from dataclasses import dataclass, fields

from reportlab.lib import colors

from pdfpost.errors import ConfigError


@dataclass(frozen=True)
class LayoutFeatures:
    markup: bool = True
    emoji: bool = True
    custom_font: bool = True


@dataclass(frozen=True)
class LayoutConfig:
    page_width: float = 600
    page_height: float = 400
    margin: float = 50
    line_height: float = 24
    base_font_size: float = 12
    max_width: float | None = None
    bold_size_delta: float = 2
    emoji_font_size: float | None = None
    italic_skew_degrees: float = 12
    color: str = '#000000'
    # Per-side overrides of `margin`.
    margin_left: float | None = None
    margin_top: float | None = None
    margin_right: float | None = None
    margin_bottom: float | None = None

    @property
    def left(self) -> float:
        return float(self.margin if self.margin_left is None else self.margin_left)

    @property
    def top(self) -> float:
        return float(self.margin if self.margin_top is None else self.margin_top)

    @property
    def right(self) -> float:
        return float(self.margin if self.margin_right is None else self.margin_right)

    @property
    def bottom(self) -> float:
        return float(self.margin if self.margin_bottom is None else self.margin_bottom)

    @property
    def content_width(self) -> float:
        if self.max_width is not None:
            return float(self.max_width)
        return float(self.page_width) - self.left - self.right

    def rgb(self) -> tuple[float, float, float]:
        try:
            parsed = colors.toColor(self.color)
        except Exception as exc:
            raise ConfigError(f'invalid color: {self.color!r}') from exc
        return (float(parsed.red), float(parsed.green), float(parsed.blue))

    def _check_finite(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value):
                raise ConfigError(f'{item.name} must be a finite number, got {value}')

    def validate(self) -> LayoutConfig:
        self._check_finite()
        if self.page_width <= 0:
            raise ConfigError(f'page_width must be > 0, got {self.page_width}')
        for side in ('margin', 'margin_left', 'margin_top', 'margin_right', 'margin_bottom'):
            value = getattr(self, side)
            if value is not None and value < 0:
                raise ConfigError(f'{side} must be >= 0, got {value}')
        if self.page_height <= self.top + self.bottom:
            raise ConfigError(
                f'page_height must be > top + bottom margin ({self.top + self.bottom}), got {self.page_height}'
            )
        if self.line_height <= 0:
            raise ConfigError(f'line_height must be > 0, got {self.line_height}')
        if self.base_font_size <= 0:
            raise ConfigError(f'base_font_size must be > 0, got {self.base_font_size}')
        if self.emoji_font_size is not None and self.emoji_font_size <= 0:
            raise ConfigError(f'emoji_font_size must be > 0, got {self.emoji_font_size}')
        if self.content_width <= 0:
            raise ConfigError(f'max_width must be > 0, got {self.content_width}')
        self.rgb()
        return self
