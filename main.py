from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pdfpost.config import get_settings
from pdfpost.errors import CollaboratorError, ConfigError
from pdfpost.layout.pipeline import layout_text
from pdfpost.service import build_pdf, resolve_layout_fonts, send_pdf
from pdfpost.types import LayoutOptions, SendPdfRequest


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _read_text(args: argparse.Namespace) -> str | None:
    if args.text is not None:
        return args.text
    if args.input == '-':
        return sys.stdin.read()
    if args.input:
        path = Path(args.input).expanduser().resolve()
        if not path.exists() or not path.is_file():
            return None
        return path.read_text(encoding='utf-8')
    return None


def _layout_options(args: argparse.Namespace) -> LayoutOptions:
    return LayoutOptions(
        page_width=args.page_width,
        page_height=args.page_height,
        margin=args.margin,
        margins=tuple(args.margins) if args.margins else None,
        line_height=args.line_height,
        font_size=args.font_size,
        max_width=args.max_width,
        markup=False if args.no_markup else None,
        emoji=False if args.no_emoji else None,
        custom_font=False if args.no_custom_font else None,
    )


def cmd_layout(args: argparse.Namespace) -> int:
    settings = get_settings()
    text = _read_text(args)
    if text is None:
        _print_json({'status': 'error', 'message': 'Text is required (--text or --input)'})
        return 2

    options = _layout_options(args)
    features = options.layout_features(settings)
    try:
        document = layout_text(
            text,
            config=options.layout_config(settings),
            features=features,
            fonts=resolve_layout_fonts(features),
        )
    except (ConfigError, CollaboratorError) as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2

    _print_json(
        {
            'pages': document.page_count,
            'lines': [
                {'index': line.line_index, 'text': line.text, 'width': round(line.width, 3)}
                for line in document.lines
            ],
            'commands': [command.to_dict() for command in document.commands],
        }
    )
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    settings = get_settings()
    text = _read_text(args)
    if text is None:
        _print_json({'status': 'error', 'message': 'Text is required (--text or --input)'})
        return 2

    output_path = Path(args.output).expanduser().resolve()
    options = _layout_options(args)
    try:
        rendered = build_pdf(
            text,
            layout=options.layout_config(settings),
            features=options.layout_features(settings),
            title=args.title or output_path.name,
        )
    except (ConfigError, CollaboratorError) as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(rendered.content)
    _print_json(
        {
            'status': 'ok',
            'output': str(output_path),
            'pages': rendered.page_count,
            'file_size': rendered.size,
        }
    )
    return 0


def cmd_send(args: argparse.Namespace) -> int:
    text = _read_text(args)
    if text is None:
        _print_json({'status': 'error', 'message': 'Text is required (--text or --input)'})
        return 2

    options = _layout_options(args)
    payload = options.model_dump(exclude_none=True)
    payload.update(
        {
            'text': text,
            'chat_id': args.chat_id,
            'bot_token': args.bot_token,
            'document_title': args.title or 'document.pdf',
            'caption': args.caption or '',
        }
    )
    try:
        request = SendPdfRequest.model_validate(payload)
        result = send_pdf(request)
    except (ConfigError, CollaboratorError, ValueError) as exc:
        _print_json({'success': False, 'error': str(exc)})
        return 2

    _print_json({'success': True, 'result': result.model_dump(mode='json')})
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from pdfpost.server import run

    run(host=args.host, port=args.port, debug=args.debug)
    return 0


def _add_text_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--text', help='Inline text with markup')
    source.add_argument('--input', help='Path to a UTF-8 text file, or - for stdin')
    parser.add_argument('--page-width', type=float)
    parser.add_argument('--page-height', type=float)
    parser.add_argument('--margin', type=float)
    parser.add_argument('--margins', type=float, nargs=4, metavar=('LEFT', 'TOP', 'RIGHT', 'BOTTOM'))
    parser.add_argument('--line-height', type=float)
    parser.add_argument('--font-size', type=float)
    parser.add_argument('--max-width', type=float)
    parser.add_argument('--no-markup', action='store_true', help='Treat markup as plain text')
    parser.add_argument('--no-emoji', action='store_true', help='Disable emoji splitting')
    parser.add_argument('--no-custom-font', action='store_true', help='Use built-in Helvetica only')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='pdfpost: rich text to PDF, optionally delivered to Telegram')
    sub = parser.add_subparsers(dest='command', required=True)

    layout = sub.add_parser('layout', help='Print lines and draw commands as JSON')
    _add_text_arguments(layout)
    layout.set_defaults(func=cmd_layout)

    render = sub.add_parser('render', help='Render text to a PDF file')
    _add_text_arguments(render)
    render.add_argument('--output', required=True, help='Output PDF path')
    render.add_argument('--title', required=False, help='PDF title metadata')
    render.set_defaults(func=cmd_render)

    send = sub.add_parser('send', help='Render text and send it as a Telegram document')
    _add_text_arguments(send)
    send.add_argument('--chat-id', required=True)
    send.add_argument('--bot-token', required=True)
    send.add_argument('--title', required=False, help='Document file name')
    send.add_argument('--caption', required=False)
    send.set_defaults(func=cmd_send)

    serve = sub.add_parser('serve', help='Run the HTTP server')
    serve.add_argument('--host', required=False)
    serve.add_argument('--port', type=int, required=False)
    serve.add_argument('--debug', action='store_true')
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
