from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from riskreport.config import Settings
from riskreport.report.diagnostics import BuildDiagnostics
from riskreport.types import Organisation

logger = logging.getLogger(__name__)

TIER_ORGANISATION = 1
TIER_DEFAULT = 2
TIER_TEXT = 3

_MIME_BY_SUFFIX = {
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
}


@dataclass(frozen=True)
class Branding:
    logo_bytes: bytes | None
    mime: str | None
    source_tier: int
    brand_name: str

    @property
    def has_logo(self) -> bool:
        return bool(self.logo_bytes)


@dataclass
class LogoStoreConfig:
    base_url: str | None
    api_key: str | None
    timeout_seconds: float


def detect_logo_mime(path: str | None) -> str | None:
    return _MIME_BY_SUFFIX.get(Path(str(path or '')).suffix.lower())


class OrganisationLogoAdapter:
    def __init__(self, cfg: LogoStoreConfig, *, client: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.cfg.base_url)

    def url_for(self, logo_path: str) -> str:
        assert self.cfg.base_url is not None
        return f"{self.cfg.base_url.rstrip('/')}/{logo_path.lstrip('/')}"

    async def fetch(self, logo_path: str) -> bytes:
        headers: dict[str, str] = {}
        api_key = str(self.cfg.api_key or '').strip()
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'

        url = self.url_for(logo_path)
        if self._client is not None:
            response = await self._client.get(url, headers=headers, timeout=self.cfg.timeout_seconds)
        else:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds) as client:
                response = await client.get(url, headers=headers)
        response.raise_for_status()
        return response.content


async def _organisation_logo(
    organisation: Organisation,
    settings: Settings,
    client: httpx.AsyncClient | None,
    diagnostics: BuildDiagnostics,
) -> Branding | None:
    logo_path = str(organisation.branding_logo_path or '').strip()
    if not logo_path:
        return None

    mime = detect_logo_mime(logo_path)
    if mime is None:
        diagnostics.warning(
            'logo_skipped',
            f'Unsupported organisation logo format: {logo_path}',
            tier=TIER_ORGANISATION,
        )
        return None

    adapter = OrganisationLogoAdapter(
        LogoStoreConfig(
            base_url=settings.org_logo_base_url,
            api_key=settings.org_logo_api_key,
            timeout_seconds=settings.org_logo_timeout_seconds,
        ),
        client=client,
    )
    if not adapter.configured:
        diagnostics.info('logo_skipped', 'Organisation logo store is not configured', tier=TIER_ORGANISATION)
        return None

    try:
        data = await asyncio.wait_for(adapter.fetch(logo_path), timeout=settings.org_logo_timeout_seconds)
    except Exception as exc:
        logger.warning('Failed to fetch organisation logo %s: %s', logo_path, exc)
        diagnostics.warning('logo_fetch_failed', f'Organisation logo unavailable: {exc}', tier=TIER_ORGANISATION)
        return None

    if not data:
        diagnostics.warning('logo_fetch_failed', 'Organisation logo response was empty', tier=TIER_ORGANISATION)
        return None
    return Branding(logo_bytes=data, mime=mime, source_tier=TIER_ORGANISATION, brand_name=organisation.name)


async def _default_logo(settings: Settings, diagnostics: BuildDiagnostics) -> Branding | None:
    path = settings.default_logo_path
    if path is None:
        return None

    mime = detect_logo_mime(str(path))
    if mime is None:
        diagnostics.warning('logo_skipped', f'Unsupported default logo format: {path}', tier=TIER_DEFAULT)
        return None

    try:
        data = await asyncio.wait_for(
            asyncio.to_thread(Path(path).read_bytes),
            timeout=settings.default_logo_timeout_seconds,
        )
    except Exception as exc:
        logger.warning('Failed to read default logo %s: %s', path, exc)
        diagnostics.warning('logo_fetch_failed', f'Default logo unavailable: {exc}', tier=TIER_DEFAULT)
        return None

    if not data:
        return None
    return Branding(logo_bytes=data, mime=mime, source_tier=TIER_DEFAULT, brand_name=settings.brand_name)


async def resolve_branding(
    organisation: Organisation,
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
    diagnostics: BuildDiagnostics | None = None,
) -> Branding:
    """Organisation logo, then the bundled default, then text only. Never raises."""
    diagnostics = diagnostics if diagnostics is not None else BuildDiagnostics()

    branding = await _organisation_logo(organisation, settings, client, diagnostics)
    if branding is None:
        branding = await _default_logo(settings, diagnostics)
    if branding is None:
        branding = Branding(logo_bytes=None, mime=None, source_tier=TIER_TEXT, brand_name=settings.brand_name)

    diagnostics.info('branding_resolved', f'Branding tier {branding.source_tier}', tier=branding.source_tier)
    return branding
