"""
pdfpost HTTP server - Flask front for the text-to-PDF pipeline
===============================================================
Endpoints:
  - GET  /
  - GET  /health
  - POST /api/generate-pdf
  - GET  /api/temp-pdf/<file_name>
  - POST /api/send-pdf

Configuration comes from `pdfpost.config.Settings` (environment / `.env`).
"""

from __future__ import annotations

import io
import logging
import traceback
from typing import Any

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import MethodNotAllowed

from pdfpost.config import get_settings
from pdfpost.errors import CollaboratorError, ConfigError
from pdfpost.service import build_pdf, send_pdf
from pdfpost.storage import load_temp_pdf, save_temp_pdf
from pdfpost.types import GeneratePdfRequest, SendPdfRequest

# --------------------------------------------------------------------------- #
# Logging
# --------------------------------------------------------------------------- #

logger = logging.getLogger('pdfpost.server')

# --------------------------------------------------------------------------- #
# Flask app
# --------------------------------------------------------------------------- #

app = Flask(__name__)
CORS(app, resources={r'/api/*': {'origins': '*'}}, methods=['GET', 'POST', 'OPTIONS'])


def _validation_message(exc: ValidationError, required: tuple[str, ...]) -> str:
    missing = sorted(
        {
            str(error['loc'][0])
            for error in exc.errors()
            if error.get('loc') and error.get('type') == 'missing'
        }
    )
    if missing:
        return f'Required parameters: {", ".join(required)}'
    parts = []
    for error in exc.errors():
        location = '.'.join(str(part) for part in error.get('loc', ()))
        parts.append(f'{location}: {error.get("msg")}' if location else str(error.get('msg')))
    return '; '.join(parts) or 'Invalid request'


def _read_json() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


def _collaborator_error_response(exc: CollaboratorError, *, success_key: bool):
    logger.error('Collaborator %s failed: %s', exc.collaborator, exc.detail)
    payload: dict[str, Any] = {
        'error': exc.detail,
        'collaborator': exc.collaborator,
    }
    if success_key:
        payload['success'] = False
    return jsonify(payload), 502


def _internal_error_response(exc: Exception, *, label: str, success_key: bool):
    logger.error('%s: %s', label, exc)
    logger.error(traceback.format_exc())
    payload: dict[str, Any] = {'error': label, 'details': str(exc)}
    if success_key:
        payload = {'success': False, 'error': str(exc)}
    if get_settings().is_development:
        payload['stack'] = traceback.format_exc()
    return jsonify(payload), 500


# --------------------------------------------------------------------------- #
# Routes
# --------------------------------------------------------------------------- #


@app.errorhandler(MethodNotAllowed)
def method_not_allowed(exc: MethodNotAllowed):
    allowed = [method for method in (exc.valid_methods or ()) if method not in {'HEAD', 'OPTIONS'}]
    if not allowed:
        return jsonify({'error': 'Method not allowed'}), 405
    return jsonify({'error': f'Only {" or ".join(sorted(allowed))} method allowed'}), 405


@app.route('/', methods=['GET'])
def index():
    settings = get_settings()
    return jsonify(
        {
            'service': settings.app_name,
            'status': 'running',
            'endpoints': {
                'POST /api/generate-pdf': 'Render text to a temporary PDF link',
                'GET /api/temp-pdf/<file_name>': 'Download a temporary PDF',
                'POST /api/send-pdf': 'Render text and send it as a Telegram document',
                'GET /health': 'Health check',
                'GET /': 'This page',
            },
        }
    )


@app.route('/health', methods=['GET'])
def health():
    settings = get_settings()
    return jsonify(
        {
            'status': 'healthy',
            'features': {
                'markup': settings.enable_markup,
                'emoji': settings.enable_emoji,
                'custom_font': settings.enable_custom_font,
            },
            'temp_pdf_ttl_seconds': settings.temp_pdf_ttl_seconds,
        }
    )


@app.route('/api/generate-pdf', methods=['POST'])
def generate_pdf_endpoint():
    settings = get_settings()
    data = _read_json()
    if data is None:
        return jsonify({'error': 'Text is required'}), 400

    try:
        payload = GeneratePdfRequest.model_validate(data)
    except ValidationError as exc:
        return jsonify({'error': _validation_message(exc, ('text',))}), 400

    try:
        rendered = build_pdf(
            payload.text,
            layout=payload.layout_config(settings),
            features=payload.layout_features(settings),
            title=payload.document_title,
        )
        file_name, expires_at = save_temp_pdf(rendered.content)
    except ConfigError as exc:
        return jsonify({'error': str(exc)}), 400
    except CollaboratorError as exc:
        return _collaborator_error_response(exc, success_key=False)
    except Exception as exc:
        return _internal_error_response(exc, label='PDF generation failed', success_key=False)

    base_url = (settings.public_base_url or request.host_url).rstrip('/')
    if '://' not in base_url:
        base_url = f'https://{base_url}'
    return jsonify(
        {
            'pdfUrl': f'{base_url}/api/temp-pdf/{file_name}',
            'expiresAt': expires_at.isoformat().replace('+00:00', 'Z'),
            'pageCount': rendered.page_count,
        }
    ), 200


@app.route('/api/temp-pdf/<file_name>', methods=['GET'])
def temp_pdf_endpoint(file_name: str):
    content = load_temp_pdf(file_name)
    if content is None:
        return jsonify({'error': 'PDF not found or expired'}), 404
    return send_file(
        io.BytesIO(content),
        mimetype='application/pdf',
        as_attachment=False,
        download_name=file_name,
    )


@app.route('/api/send-pdf', methods=['POST'])
def send_pdf_endpoint():
    data = _read_json()
    if data is None:
        return jsonify({'error': 'Required parameters: text, chat_id, bot_token'}), 400

    try:
        payload = SendPdfRequest.model_validate(data)
    except ValidationError as exc:
        return jsonify({'error': _validation_message(exc, ('text', 'chat_id', 'bot_token'))}), 400

    try:
        result = send_pdf(payload)
    except ConfigError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 400
    except CollaboratorError as exc:
        return _collaborator_error_response(exc, success_key=True)
    except Exception as exc:
        return _internal_error_response(exc, label='PDF generation error', success_key=True)

    return jsonify({'success': True, 'result': result.model_dump(mode='json')}), 200


def run(host: str | None = None, port: int | None = None, debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    settings = get_settings()
    bind_host = host or settings.server_host
    bind_port = int(port or settings.server_port)
    logger.info('=' * 70)
    logger.info('Starting %s', settings.app_name)
    logger.info('Server: http://%s:%s', bind_host, bind_port)
    logger.info('=' * 70)
    app.run(host=bind_host, port=bind_port, debug=debug, threaded=True)


if __name__ == '__main__':
    run()
