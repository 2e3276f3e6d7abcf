from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdfpost.config import Settings
from pdfpost.layout.config import LayoutConfig, LayoutFeatures


class LayoutOptions(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    page_width: float | None = None
    page_height: float | None = None
    margin: float | None = None
    # left, top, right, bottom; overrides `margin` per side.
    margins: tuple[float, float, float, float] | None = None
    line_height: float | None = None
    font_size: float | None = None
    max_width: float | None = None
    bold_size_delta: float | None = None
    emoji_font_size: float | None = None
    text_color: str | None = None

    markup: bool | None = None
    emoji: bool | None = None
    custom_font: bool | None = None

    def layout_config(self, settings: Settings) -> LayoutConfig:
        def pick(value, default):
            return default if value is None else value

        left, top, right, bottom = self.margins if self.margins is not None else (None, None, None, None)
        return LayoutConfig(
            page_width=pick(self.page_width, settings.page_width),
            page_height=pick(self.page_height, settings.page_height),
            margin=pick(self.margin, settings.margin),
            line_height=pick(self.line_height, settings.line_height),
            base_font_size=pick(self.font_size, settings.font_size),
            max_width=self.max_width,
            bold_size_delta=pick(self.bold_size_delta, settings.bold_size_delta),
            emoji_font_size=self.emoji_font_size,
            italic_skew_degrees=settings.italic_skew_degrees,
            color=pick(self.text_color, settings.text_color),
            margin_left=left,
            margin_top=top,
            margin_right=right,
            margin_bottom=bottom,
        )

    def layout_features(self, settings: Settings) -> LayoutFeatures:
        return LayoutFeatures(
            markup=settings.enable_markup if self.markup is None else self.markup,
            emoji=settings.enable_emoji if self.emoji is None else self.emoji,
            custom_font=settings.enable_custom_font if self.custom_font is None else self.custom_font,
        )


class GeneratePdfRequest(LayoutOptions):
    text: str
    document_title: str = 'document.pdf'

    @field_validator('text')
    @classmethod
    def _text_required(cls, value: str) -> str:
        if not str(value or '').strip():
            raise ValueError('Text is required')
        return value


# Passed through to sendDocument untouched (None values are dropped).
TELEGRAM_PASSTHROUGH_FIELDS = (
    'caption',
    'parse_mode',
    'disable_notification',
    'protect_content',
    'reply_parameters',
    'reply_markup',
    'message_thread_id',
    'thumbnail',
    'caption_entities',
    'disable_content_type_detection',
    'allow_sending_without_reply',
    'has_spoiler',
    'message_effect_id',
    'business_connection_id',
)


class SendPdfRequest(LayoutOptions):
    text: str
    chat_id: int | str
    bot_token: str

    document_title: str = 'document.pdf'
    font_size: float | None = 12
    line_height: float | None = 24

    caption: str = ''
    parse_mode: str = 'HTML'
    disable_notification: bool = False
    protect_content: bool = False

    reply_parameters: dict[str, Any] | None = None
    reply_markup: dict[str, Any] | None = None
    message_thread_id: int | None = None
    thumbnail: str | None = None
    caption_entities: list[dict[str, Any]] | None = None
    disable_content_type_detection: bool | None = None
    allow_sending_without_reply: bool | None = None
    has_spoiler: bool | None = None
    message_effect_id: str | None = None
    business_connection_id: str | None = None

    @field_validator('text', 'bot_token')
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not str(value or '').strip():
            raise ValueError('must not be empty')
        return value

    @field_validator('chat_id')
    @classmethod
    def _chat_id_required(cls, value: int | str) -> int | str:
        if isinstance(value, str) and not value.strip():
            raise ValueError('must not be empty')
        return value

    def passthrough_fields(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in TELEGRAM_PASSTHROUGH_FIELDS}


class DocumentInfo(BaseModel):
    file_name: str
    file_size: int
    mime_type: str = 'application/pdf'


class SendPdfResult(BaseModel):
    message_id: int | None = None
    document: DocumentInfo
    date: int | None = None
    page_count: int = Field(default=1, ge=1)


@dataclass
class RenderedPdf:
    content: bytes
    file_name: str
    page_count: int

    @property
    def size(self) -> int:
        return len(self.content)
