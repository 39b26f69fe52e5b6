from __future__ import annotations

from dataclasses import dataclass
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
        populate_by_name=True,
    )

    app_name: str = 'riskreport'
    producer: str = 'EziRisk Report Engine'

    # Page geometry (points)
    pdf_page_width: float = 595.28
    pdf_page_height: float = 841.89
    pdf_page_margin: float = 50.0

    # Two weights of one Latin typeface. Paths are optional TrueType overrides.
    pdf_font_regular: str = 'Helvetica'
    pdf_font_bold: str = 'Helvetica-Bold'
    pdf_font_regular_path: Path | None = None
    pdf_font_bold_path: Path | None = None

    # Branding
    brand_name: str = 'EziRisk'
    default_logo_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices('DEFAULT_LOGO_PATH', 'RISKREPORT_DEFAULT_LOGO'),
    )
    org_logo_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices('ORG_LOGO_BASE_URL', 'ORG_ASSETS_URL', 'STORAGE_BASE_URL'),
    )
    org_logo_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('ORG_LOGO_API_KEY', 'STORAGE_API_KEY'),
    )

    # Document records service (revision history, attachments)
    records_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices('RECORDS_BASE_URL', 'RECORDS_API_URL'),
    )
    records_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('RECORDS_API_KEY', 'API_KEY'),
    )

    # Fetch timeouts (seconds)
    org_logo_timeout_seconds: float = 5.0
    default_logo_timeout_seconds: float = 2.0
    revision_history_timeout_seconds: float = 5.0
    attachments_timeout_seconds: float = 5.0

    def geometry(self) -> PageGeometry:
        return PageGeometry(
            width=float(self.pdf_page_width),
            height=float(self.pdf_page_height),
            margin=float(self.pdf_page_margin),
        )


@dataclass(frozen=True)
class PageGeometry:
    width: float = 595.28
    height: float = 841.89
    margin: float = 50.0

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def top(self) -> float:
        return self.height - self.margin

    @property
    def bottom(self) -> float:
        return self.margin

    @property
    def center_x(self) -> float:
        return self.width / 2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
