from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    app_name: str = 'pdfpost'
    environment: str = Field(
        default='production',
        validation_alias=AliasChoices('ENVIRONMENT', 'NODE_ENV', 'APP_ENV'),
    )

    data_dir: Path = Field(default=Path('./data'))

    # HTTP server
    server_host: str = '0.0.0.0'
    server_port: int = 8000
    public_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices('PUBLIC_BASE_URL', 'VERCEL_URL'),
    )
    temp_pdf_ttl_seconds: int = 300

    # Layout defaults (points)
    page_width: float = 600
    page_height: float = 400
    margin: float = 50
    line_height: float = 24
    font_size: float = 12
    bold_size_delta: float = 2
    italic_skew_degrees: float = 12
    text_color: str = '#000000'

    # Fonts. Empty paths fall back to system candidates, then Helvetica.
    main_font_path: Path | None = None
    main_bold_font_path: Path | None = None
    emoji_font_path: Path | None = None

    # Pipeline feature flags
    enable_markup: bool = True
    enable_emoji: bool = True
    enable_custom_font: bool = True

    # Telegram Bot API
    telegram_api_base_url: str = 'https://api.telegram.org'
    telegram_timeout_seconds: float = 60.0

    @property
    def is_development(self) -> bool:
        return str(self.environment or '').strip().lower() in {'development', 'dev'}

    def temp_dir(self) -> Path:
        return self.data_dir / 'tmp'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.temp_dir().mkdir(parents=True, exist_ok=True)
    return settings
