from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from riskreport.config import Settings
from riskreport.report.diagnostics import BuildDiagnostics
from riskreport.types import Attachment, Document, RevisionEntry

logger = logging.getLogger(__name__)


@dataclass
class RecordsConfig:
    base_url: str | None
    api_key: str | None
    revision_history_timeout_seconds: float
    attachments_timeout_seconds: float

    @classmethod
    def from_settings(cls, settings: Settings) -> RecordsConfig:
        return cls(
            base_url=settings.records_base_url,
            api_key=settings.records_api_key,
            revision_history_timeout_seconds=settings.revision_history_timeout_seconds,
            attachments_timeout_seconds=settings.attachments_timeout_seconds,
        )


class RecordsClient:
    """Reads revision history and attachment metadata from the document records service.

    Every public call degrades to an empty list on failure and records why.
    """

    def __init__(
        self,
        cfg: RecordsConfig,
        *,
        client: httpx.AsyncClient | None = None,
        diagnostics: BuildDiagnostics | None = None,
    ):
        self.cfg = cfg
        self._client = client
        self.diagnostics = diagnostics if diagnostics is not None else BuildDiagnostics()

    @property
    def configured(self) -> bool:
        return bool(self.cfg.base_url)

    def _headers(self) -> dict[str, str]:
        headers = {'Accept': 'application/json'}
        api_key = str(self.cfg.api_key or '').strip()
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'
        return headers

    async def _get_json(self, path: str, *, timeout: float) -> Any:
        assert self.cfg.base_url is not None
        url = f"{self.cfg.base_url.rstrip('/')}/{path.lstrip('/')}"
        if self._client is not None:
            response = await self._client.get(url, headers=self._headers(), timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(url, headers=self._headers())
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _rows(payload: Any, key: str) -> list[dict]:
        if isinstance(payload, list):
            rows = payload
        elif isinstance(payload, dict):
            rows = payload.get(key) or payload.get('data') or []
        else:
            rows = []
        return [row for row in rows if isinstance(row, dict)]

    async def fetch_revision_history(self, base_document_id: str) -> list[RevisionEntry]:
        timeout = self.cfg.revision_history_timeout_seconds
        try:
            payload = await asyncio.wait_for(
                self._get_json(f'/documents/{base_document_id}/revisions', timeout=timeout),
                timeout=timeout,
            )
            entries = [RevisionEntry.model_validate(_revision_row(row)) for row in self._rows(payload, 'revisions')]
        except Exception as exc:
            logger.warning('Failed to load revision history for %s: %s', base_document_id, exc)
            self.diagnostics.warning('revision_history_failed', f'Revision history unavailable: {exc}')
            return []
        self.diagnostics.info('revision_history_loaded', f'{len(entries)} revision rows', count=len(entries))
        return entries

    async def fetch_attachments(self, document_id: str) -> list[Attachment]:
        timeout = self.cfg.attachments_timeout_seconds
        try:
            payload = await asyncio.wait_for(
                self._get_json(f'/documents/{document_id}/attachments', timeout=timeout),
                timeout=timeout,
            )
            attachments = [Attachment.model_validate(row) for row in self._rows(payload, 'attachments')]
        except Exception as exc:
            logger.warning('Failed to load attachments for %s: %s', document_id, exc)
            self.diagnostics.warning('attachments_failed', f'Attachments unavailable: {exc}')
            return []
        self.diagnostics.info('attachments_loaded', f'{len(attachments)} attachments', count=len(attachments))
        return attachments


def _revision_row(row: dict) -> dict:
    """Accept both the change-summary shape and the plain revision shape."""
    return {
        'version_number': row.get('version_number'),
        'issue_date': row.get('issue_date') or row.get('created_at'),
        'change_summary': row.get('change_summary') or row.get('summary_text'),
        'issued_by_name': row.get('issued_by_name') or row.get('full_name'),
    }


def synthesize_revision_history(document: Document, history: list[RevisionEntry]) -> list[RevisionEntry]:
    """Newest first; an issued document with no recorded history gets a single synthesized row."""
    rows = list(history)
    if not rows and document.issue_date is not None:
        initial = not document.base_document_id or document.version == 1
        rows.append(
            RevisionEntry(
                version_number=document.version,
                issue_date=document.issue_date,
                change_summary='Initial issue' if initial else 'Revision issued',
                issued_by_name=document.issued_by_name or document.assessor_name,
            )
        )
    return sorted(rows, key=lambda entry: entry.version_number, reverse=True)


async def load_revision_history(
    document: Document,
    *,
    prefetched: list[RevisionEntry] | None,
    records: RecordsClient,
) -> list[RevisionEntry]:
    if prefetched is not None:
        history = list(prefetched)
    elif records.configured and document.base_document_id:
        history = await records.fetch_revision_history(document.base_document_id)
    else:
        history = []
    return synthesize_revision_history(document, history)


async def load_attachments(
    document: Document,
    *,
    prefetched: list[Attachment] | None,
    records: RecordsClient,
) -> list[Attachment]:
    if prefetched is not None:
        return list(prefetched)
    if records.configured and document.id:
        return await records.fetch_attachments(document.id)
    return []
