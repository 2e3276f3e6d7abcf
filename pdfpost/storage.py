from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

from .config import get_settings


logger = logging.getLogger(__name__)

_TEMP_NAME_PATTERN = re.compile(r'^[0-9a-f]{32}\.pdf$')


def temp_root() -> Path:
    root = get_settings().temp_dir()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _safe_temp_name(file_name: str) -> str:
    token = str(file_name or '').strip().lower()
    if not _TEMP_NAME_PATTERN.fullmatch(token):
        raise ValueError(f'invalid temp file name: {file_name}')
    return token


def temp_path(file_name: str) -> Path:
    return temp_root() / _safe_temp_name(file_name)


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def _is_expired(path: Path, ttl_seconds: int, now: float | None = None) -> bool:
    if ttl_seconds <= 0:
        return False
    current = time.time() if now is None else now
    return path.stat().st_mtime + ttl_seconds < current


def save_temp_pdf(content: bytes) -> tuple[str, datetime]:
    cleanup_expired()
    file_name = f'{uuid4().hex}.pdf'
    write_bytes_atomic(temp_path(file_name), content)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=get_settings().temp_pdf_ttl_seconds)
    return file_name, expires_at


def load_temp_pdf(file_name: str) -> bytes | None:
    try:
        path = temp_path(file_name)
    except ValueError:
        return None
    try:
        if _is_expired(path, get_settings().temp_pdf_ttl_seconds):
            path.unlink(missing_ok=True)
            return None
        return path.read_bytes()
    except FileNotFoundError:
        return None


def cleanup_expired(now: float | None = None) -> int:
    ttl = get_settings().temp_pdf_ttl_seconds
    removed = 0
    for path in temp_root().glob('*.pdf'):
        try:
            if _is_expired(path, ttl, now):
                path.unlink(missing_ok=True)
                removed += 1
        except FileNotFoundError:
            continue
    if removed:
        logger.info('Removed %d expired temp PDFs', removed)
    return removed
