from __future__ import annotations

import logging

from pdfpost.adapters.telegram import PDF_MIME_TYPE, TelegramConfig, TelegramDelivery
from pdfpost.config import get_settings
from pdfpost.fonts import LayoutFonts, get_font_book
from pdfpost.layout.config import LayoutConfig, LayoutFeatures
from pdfpost.layout.pipeline import layout_text
from pdfpost.report.pdf_render import render_document
from pdfpost.types import DocumentInfo, RenderedPdf, SendPdfRequest, SendPdfResult


logger = logging.getLogger(__name__)


def resolve_layout_fonts(features: LayoutFeatures) -> LayoutFonts:
    settings = get_settings()
    return get_font_book().resolve_fonts(
        custom_font=features.custom_font,
        main_path=settings.main_font_path,
        bold_path=settings.main_bold_font_path,
        emoji_path=settings.emoji_font_path,
    )


def build_delivery() -> TelegramDelivery:
    settings = get_settings()
    return TelegramDelivery(
        TelegramConfig(
            base_url=settings.telegram_api_base_url,
            timeout_seconds=settings.telegram_timeout_seconds,
        )
    )


def build_pdf(
    text: str,
    *,
    layout: LayoutConfig,
    features: LayoutFeatures,
    title: str = 'document.pdf',
) -> RenderedPdf:
    layout.validate()
    fonts = resolve_layout_fonts(features)
    document = layout_text(text, config=layout, features=features, fonts=fonts)
    content = render_document(document, title=title, author=get_settings().app_name)
    logger.info(
        'Rendered %s: %d pages, %d draw commands, %d bytes',
        title,
        document.page_count,
        len(document.commands),
        len(content),
    )
    return RenderedPdf(content=content, file_name=title, page_count=document.page_count)


def send_pdf(request: SendPdfRequest, *, delivery: TelegramDelivery | None = None) -> SendPdfResult:
    settings = get_settings()
    rendered = build_pdf(
        request.text,
        layout=request.layout_config(settings),
        features=request.layout_features(settings),
        title=request.document_title,
    )
    sink = delivery or build_delivery()
    delivered = sink.send_document(
        bot_token=request.bot_token,
        chat_id=request.chat_id,
        document=rendered.content,
        file_name=rendered.file_name,
        fields=request.passthrough_fields(),
    )
    return SendPdfResult(
        message_id=delivered.message_id,
        document=DocumentInfo(
            file_name=rendered.file_name,
            file_size=rendered.size,
            mime_type=PDF_MIME_TYPE,
        ),
        date=delivered.date,
        page_count=rendered.page_count,
    )
