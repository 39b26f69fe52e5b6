from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from riskreport.adapters.branding import resolve_branding
from riskreport.adapters.records import RecordsClient, RecordsConfig, load_attachments, load_revision_history
from riskreport.config import PageGeometry, Settings, get_settings
from riskreport.report.assemblers import assemble_manifest
from riskreport.report.context import ReportContext
from riskreport.report.decorations import apply_footers, apply_superseded_overlay, draft_watermark, footer_text
from riskreport.report.diagnostics import BuildDiagnostics
from riskreport.report.pagination import Paginator
from riskreport.report.surface import ReportBuildError, resolve_report_fonts, serialize_pages
from riskreport.report.text import format_generated_date
from riskreport.types import DocumentMode, ReportInput, ReportKind, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    pdf_bytes: bytes
    diagnostics: BuildDiagnostics
    page_count: int

    def summary(self) -> dict[str, Any]:
        return {
            'page_count': self.page_count,
            'size_bytes': len(self.pdf_bytes),
            'warnings': len(self.diagnostics.warnings),
            'diagnostics': self.diagnostics.to_dict(),
        }


def _coerce_kind(kind: ReportKind | str) -> ReportKind:
    if isinstance(kind, ReportKind):
        return kind
    normalized = str(kind or '').strip().upper()
    for candidate in ReportKind:
        if candidate.value == normalized or candidate.name.upper() == normalized:
            return candidate
    raise ReportBuildError(f'Unsupported report kind: {kind!r}')


async def build_report(
    report_input: ReportInput,
    *,
    kind: ReportKind | str,
    settings: Settings | None = None,
    geometry: PageGeometry | None = None,
    http_client: httpx.AsyncClient | None = None,
    now: datetime | None = None,
) -> BuildResult:
    """Resolve external inputs, lay out every section and return the finished PDF."""
    settings = settings or get_settings()
    geometry = geometry or settings.geometry()
    report_kind = _coerce_kind(kind)
    now = now or utcnow()
    diagnostics = BuildDiagnostics()
    document = report_input.document
    mode = report_input.resolved_mode

    fonts = resolve_report_fonts(settings)
    records = RecordsClient(RecordsConfig.from_settings(settings), client=http_client, diagnostics=diagnostics)
    branding = await resolve_branding(
        report_input.organisation,
        settings,
        client=http_client,
        diagnostics=diagnostics,
    )
    attachments = await load_attachments(document, prefetched=report_input.attachments, records=records)

    ctx = ReportContext(
        report=report_input,
        kind=report_kind,
        mode=mode,
        settings=settings,
        now=now,
        branding=branding,
        attachments=attachments,
    )
    if ctx.issued_prelude:
        ctx.revision_history = await load_revision_history(
            document,
            prefetched=report_input.revision_history,
            records=records,
        )

    manifest = assemble_manifest(ctx)
    decorators = [draft_watermark(fonts)] if mode == DocumentMode.draft else []
    pager = Paginator(geometry=geometry, fonts=fonts, diagnostics=diagnostics, page_decorators=decorators)
    manifest.render(pager, ctx)
    if not pager.pages:
        raise ReportBuildError(f'{manifest.report_name} produced no pages')

    numbered = apply_footers(
        pager.pages,
        fonts,
        text=footer_text(
            report_name=manifest.footer_name,
            title=document.title or 'Untitled',
            version=document.version,
            generated=format_generated_date(now),
        ),
        skip=ctx.lead_pages,
    )
    if mode == DocumentMode.superseded:
        stamped = apply_superseded_overlay(pager.pages, fonts)
        diagnostics.info('superseded_overlay', f'{stamped} pages stamped', count=stamped)

    pdf_bytes = serialize_pages(
        pager.pages,
        geometry=geometry,
        title=document.title or manifest.report_name,
        author=document.assessor_name or settings.brand_name,
        producer=settings.producer,
    )
    diagnostics.info(
        'pages_created',
        f'{pager.page_count} pages ({numbered} numbered)',
        count=pager.page_count,
        numbered=numbered,
    )
    logger.info(
        'Built %s report %s: %s pages, %s bytes',
        report_kind.value,
        document.id or '<unsaved>',
        pager.page_count,
        len(pdf_bytes),
    )
    return BuildResult(pdf_bytes=pdf_bytes, diagnostics=diagnostics, page_count=pager.page_count)


def build_report_pdf(report_input: ReportInput, *, kind: ReportKind | str, **kwargs: Any) -> BuildResult:
    return asyncio.run(build_report(report_input, kind=kind, **kwargs))
