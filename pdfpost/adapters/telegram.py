from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from pdfpost.errors import DeliveryError


logger = logging.getLogger(__name__)

PDF_MIME_TYPE = 'application/pdf'


@dataclass
class TelegramConfig:
    base_url: str = 'https://api.telegram.org'
    timeout_seconds: float = 60.0


@dataclass
class DeliveryResult:
    message_id: int | None
    date: int | None
    raw: dict[str, Any] = field(default_factory=dict)


def encode_form_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def build_form_fields(chat_id: Any, fields: dict[str, Any] | None) -> dict[str, str]:
    form: dict[str, str] = {'chat_id': encode_form_value(chat_id)}
    for key, value in (fields or {}).items():
        if value is None:
            continue
        form[key] = encode_form_value(value)
    return form


class TelegramDelivery:
    """Sends a finished PDF through the Bot API ``sendDocument`` method."""

    def __init__(self, cfg: TelegramConfig, *, transport: httpx.BaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    def _endpoint(self, bot_token: str) -> str:
        return f'{self.cfg.base_url.rstrip("/")}/bot{bot_token}/sendDocument'

    def send_document(
        self,
        *,
        bot_token: str,
        chat_id: Any,
        document: bytes,
        file_name: str,
        fields: dict[str, Any] | None = None,
    ) -> DeliveryResult:
        token = str(bot_token or '').strip()
        if not token:
            raise DeliveryError('bot_token is required')

        form = build_form_fields(chat_id, fields)
        files = {'document': (file_name, document, PDF_MIME_TYPE)}

        try:
            with httpx.Client(timeout=self.cfg.timeout_seconds, transport=self._transport) as client:
                response = client.post(self._endpoint(token), data=form, files=files)
        except httpx.HTTPError as exc:
            raise DeliveryError(f'Telegram request failed: {type(exc).__name__}: {exc}') from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DeliveryError(
                f'Telegram returned non-JSON response (HTTP {response.status_code})',
                status_code=response.status_code,
            ) from exc

        if not isinstance(payload, dict) or not payload.get('ok'):
            description = ''
            error_code = None
            if isinstance(payload, dict):
                description = str(payload.get('description') or '')
                error_code = payload.get('error_code')
            raise DeliveryError(
                description or 'Telegram API error',
                status_code=response.status_code,
                error_code=error_code,
            )

        result = payload.get('result') or {}
        logger.info(
            'Delivered %s (%d bytes) to chat %s, message_id=%s',
            file_name,
            len(document),
            chat_id,
            result.get('message_id'),
        )
        return DeliveryResult(
            message_id=result.get('message_id'),
            date=result.get('date'),
            raw=result,
        )
