from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator

logger = logging.getLogger(__name__)

SectionRenderer = Callable[[Paginator, ReportContext, Any], None]


class SectionKind(str, Enum):
    cover = 'cover'
    issued_cover = 'issued_cover'
    document_control = 'document_control'
    executive_summary = 'executive_summary'
    significant_findings = 'significant_findings'
    explosive_atmospheres_overview = 'explosive_atmospheres_overview'
    strategy_overview = 'strategy_overview'
    table_of_contents = 'table_of_contents'
    part_header = 'part_header'
    text = 'text'
    zone_definitions = 'zone_definitions'
    references = 'references'
    module = 'module'
    action_register = 'action_register'
    attachments = 'attachments'
    assumptions = 'assumptions'
    recommendations = 'recommendations'


@dataclass(frozen=True)
class ManifestEntry:
    kind: SectionKind
    renderer: SectionRenderer
    data: Any = None
    condition: bool = True
    new_page: bool = True
    label: str = ''


@dataclass(frozen=True)
class ReportManifest:
    """Ordered section recipe for one build. Built once, then only read."""

    report_name: str
    footer_name: str
    entries: tuple[ManifestEntry, ...]

    def active_entries(self) -> list[ManifestEntry]:
        return [entry for entry in self.entries if entry.condition]

    def render(self, pager: Paginator, ctx: ReportContext) -> None:
        for entry in self.entries:
            label = entry.label or entry.kind.value
            if not entry.condition:
                pager.diagnostics.info('section_omitted', label, section=entry.kind.value)
                continue

            start = pager.page_count
            if entry.new_page:
                pager.new_page()
            entry.renderer(pager, ctx, entry.data)
            pager.diagnostics.info(
                'section_rendered',
                label,
                section=entry.kind.value,
                pages=pager.page_count - start,
            )
        logger.debug('Rendered %s sections onto %s pages', len(self.active_entries()), pager.page_count)
