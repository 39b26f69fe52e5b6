from __future__ import annotations

import logging
from typing import Callable

from riskreport.modules import ModuleKind
from riskreport.report.boilerplate import (
    EXPLOSIVE_ATMOSPHERES_PURPOSE,
    FRA_REGULATORY_FRAMEWORK,
    HAZARDOUS_AREA_CLASSIFICATION,
    ZONE_DEFINITIONS,
    fra_responsible_person_duties,
    fsd_limitations,
    fsd_purpose_and_scope,
)
from riskreport.report.context import ReportContext
from riskreport.report.manifest import ManifestEntry, ReportManifest, SectionKind
from riskreport.report.sections.actions import render_action_register
from riskreport.report.sections.assumptions import (
    has_combined_assumptions,
    render_assumptions,
    render_combined_assumptions,
)
from riskreport.report.sections.attachments import render_attachments_index
from riskreport.report.sections.contents import COMBINED_CONTENTS, render_part_header, render_table_of_contents
from riskreport.report.sections.cover import CoverSpec, render_cover, render_document_control, render_issued_cover
from riskreport.report.sections.executive_summary import (
    plan_summary_pages,
    render_explosive_atmospheres_overview,
    render_significant_findings,
    render_strategy_overview,
    render_summary_text,
)
from riskreport.report.sections.modules import ModuleContent, ModuleSection, render_module_section
from riskreport.report.sections.recommendations import render_recommendations
from riskreport.report.sections.regulatory import TextSection, render_references, render_text_section
from riskreport.report.surface import ReportBuildError
from riskreport.report.text import format_date, format_generated_date, humanize
from riskreport.rules.ordering import (
    COMBINED_COMMON_MODULES,
    COMBINED_FRA_ORDER,
    COMBINED_FSD_ORDER,
    DSEAR_MODULE_ORDER,
    FRA_MODULE_ORDER,
    FSD_MODULE_ORDER,
    filter_modules,
    sort_modules,
)
from riskreport.rules.outcome import AssessorRatingWithOverride, EngineDerived
from riskreport.types import DocumentMode, Jurisdiction, ModuleInstance, ReportKind

logger = logging.getLogger(__name__)

COMBINED_FOOTER_NAME = 'Combined FRA + FSD Report'
PART_1_TITLE = 'Part 1: Fire Risk Assessment (FRA)'
PART_2_TITLE = 'Part 2: Fire Strategy Document (FSD)'


def report_display_name(kind: ReportKind, jurisdiction: Jurisdiction = Jurisdiction.uk) -> str:
    if kind == ReportKind.dsear:
        if jurisdiction == Jurisdiction.ie:
            return 'Explosive Atmospheres Risk Assessment'
        return 'DSEAR Risk Assessment'
    if kind == ReportKind.fra:
        return 'Fire Risk Assessment'
    if kind == ReportKind.fsd:
        return 'Fire Strategy Document'
    if kind == ReportKind.combined:
        return 'Combined Fire Risk Assessment and Fire Strategy Document'
    if kind == ReportKind.survey:
        return 'Risk Engineering Survey Report'
    raise ReportBuildError(f'Unsupported report kind: {kind!r}')


def footer_name(kind: ReportKind, jurisdiction: Jurisdiction = Jurisdiction.uk) -> str:
    if kind == ReportKind.combined:
        return COMBINED_FOOTER_NAME
    return report_display_name(kind, jurisdiction)


# ---------------------------------------------------------------------------
# Shared recipe pieces
# ---------------------------------------------------------------------------

def _common_rows(ctx: ReportContext) -> list[tuple[str, str]]:
    document = ctx.document
    return [
        ('Assessor:', document.assessor_name or '-'),
        ('Role:', document.assessor_role or '-'),
        ('Responsible Person:', document.responsible_person or '-'),
    ]


def _fra_cover(ctx: ReportContext) -> CoverSpec:
    document = ctx.document
    rows = [
        ('Organisation:', ctx.report.organisation.name or '-'),
        ('Assessment Date:', format_date(document.assessment_date)),
        *_common_rows(ctx),
        ('Version:', f'v{document.version}'),
        ('Document Type:', document.document_type or 'FRA'),
    ]
    return CoverSpec(
        headings=('FIRE RISK ASSESSMENT',),
        title=document.title,
        rows=tuple(rows),
        status_chip=ctx.mode.value,
        status_issued=ctx.mode == DocumentMode.issued,
        footnote=f'Generated by {ctx.settings.brand_name}',
    )


def _dsear_cover(ctx: ReportContext) -> CoverSpec:
    document = ctx.document
    rows = [
        ('Organisation:', ctx.report.organisation.name or '-'),
        ('Assessment Date:', format_date(document.assessment_date)),
        ('Version:', f'v{document.version}'),
        ('Status:', humanize(ctx.mode.value).title()),
        *_common_rows(ctx),
    ]
    return CoverSpec(
        headings=(report_display_name(ReportKind.dsear, document.jurisdiction),),
        title=document.title,
        rows=tuple(rows),
        footnote=f'Generated on {format_generated_date(ctx.now)}',
    )


def _fsd_cover(ctx: ReportContext) -> CoverSpec:
    document = ctx.document
    rows = [
        ('Status:', humanize(ctx.mode.value).title()),
        ('Version:', f'v{document.version}'),
        ('Assessment Date:', format_date(document.assessment_date)),
        ('Review Date:', format_date(document.review_date)),
        *_common_rows(ctx),
    ]
    return CoverSpec(
        headings=('Fire Strategy Document',),
        title=document.title,
        rows=tuple(rows),
        footnote=f'Generated on {format_generated_date(ctx.now)}',
    )


def _combined_cover(ctx: ReportContext) -> CoverSpec:
    document = ctx.document
    rows = [
        ('Organisation:', ctx.report.organisation.name or '-'),
        ('Assessment Date:', format_date(document.assessment_date)),
        ('Version:', f'v{document.version}'),
        ('Status:', humanize(ctx.mode.value).title()),
        *_common_rows(ctx),
    ]
    return CoverSpec(
        headings=('Combined Fire Risk Assessment', 'and Fire Strategy Document'),
        title=document.title,
        rows=tuple(rows),
        footnote=f'Generated on {format_generated_date(ctx.now)}',
    )


def _survey_cover(ctx: ReportContext) -> CoverSpec:
    document = ctx.document
    return CoverSpec(
        headings=('Risk Engineering Survey Report',),
        title=document.title,
        rows=(
            ('Organisation:', ctx.report.organisation.name or '-'),
            ('Assessor:', document.assessor_name or '-'),
        ),
        lines=(f'Version {document.version}.0 - {ctx.mode.value.upper()}',),
    )


def _prelude(ctx: ReportContext, cover: CoverSpec) -> list[ManifestEntry]:
    """Branded cover plus document control when issued, otherwise the flavor's simple cover."""
    if ctx.issued_prelude:
        name = report_display_name(ctx.kind, ctx.document.jurisdiction)
        return [
            ManifestEntry(SectionKind.issued_cover, render_issued_cover, name, label='Cover'),
            ManifestEntry(SectionKind.document_control, render_document_control, label='Document Control'),
        ]
    return [ManifestEntry(SectionKind.cover, render_cover, cover, label='Cover')]


def _summary_entries(ctx: ReportContext) -> list[ManifestEntry]:
    ai_page, author_page = plan_summary_pages(ctx.document)
    return [
        ManifestEntry(
            SectionKind.executive_summary,
            render_summary_text,
            ai_page,
            condition=ai_page is not None,
            label='Executive Summary (AI)',
        ),
        ManifestEntry(
            SectionKind.executive_summary,
            render_summary_text,
            author_page,
            condition=author_page is not None,
            label='Executive Summary (Author)',
        ),
    ]


def _module_entries(
    instances: list[ModuleInstance],
    *,
    content: ModuleContent = ModuleContent.key_details,
    show_outcome: bool = True,
    show_info_gaps: bool = True,
) -> list[ManifestEntry]:
    return [
        ManifestEntry(
            SectionKind.module,
            render_module_section,
            ModuleSection(instance, content=content, show_outcome=show_outcome, show_info_gaps=show_info_gaps),
            label=instance.module_key,
        )
        for instance in instances
    ]


def _text(title: str, body: str, *, condition: bool = True, heading_size: float = 16) -> ManifestEntry:
    return ManifestEntry(
        SectionKind.text,
        render_text_section,
        TextSection(title, body, heading_size=heading_size),
        condition=condition,
        label=title,
    )


def _present(value: object) -> bool:
    return bool(str(value or '').strip())


def _attachments(ctx: ReportContext) -> ManifestEntry:
    return ManifestEntry(
        SectionKind.attachments,
        render_attachments_index,
        condition=bool(ctx.attachments),
        label='Attachments',
    )


def _register(*, condition: bool = True) -> ManifestEntry:
    return ManifestEntry(SectionKind.action_register, render_action_register, condition=condition,
                         label='Action Register')


def _without(instances: list[ModuleInstance], excluded: tuple[ModuleKind, ...]) -> list[ModuleInstance]:
    keys = {kind.value for kind in excluded}
    return [instance for instance in instances if instance.module_key not in keys]


# ---------------------------------------------------------------------------
# Per-flavor recipes
# ---------------------------------------------------------------------------

def assemble_fra(ctx: ReportContext) -> list[ManifestEntry]:
    modules = _without(sort_modules(ctx.modules, FRA_MODULE_ORDER), (ModuleKind.fra_4_significant_findings,))
    return [
        *_prelude(ctx, _fra_cover(ctx)),
        *_summary_entries(ctx),
        ManifestEntry(
            SectionKind.significant_findings,
            render_significant_findings,
            AssessorRatingWithOverride(),
            label='Significant Findings',
        ),
        *_module_entries(modules),
        _register(),
        _attachments(ctx),
        ManifestEntry(SectionKind.assumptions, render_assumptions, label='Assumptions and Limitations'),
    ]


def assemble_dsear(ctx: ReportContext) -> list[ManifestEntry]:
    document = ctx.document
    modules = sort_modules(ctx.modules, DSEAR_MODULE_ORDER)
    return [
        *_prelude(ctx, _dsear_cover(ctx)),
        *_summary_entries(ctx),
        ManifestEntry(
            SectionKind.explosive_atmospheres_overview,
            render_explosive_atmospheres_overview,
            EngineDerived(),
            label='Explosive Atmospheres Overview',
        ),
        _text('PURPOSE AND INTRODUCTION', EXPLOSIVE_ATMOSPHERES_PURPOSE),
        _text('HAZARDOUS AREA CLASSIFICATION METHODOLOGY', HAZARDOUS_AREA_CLASSIFICATION),
        ManifestEntry(
            SectionKind.zone_definitions,
            render_text_section,
            TextSection('ZONE DEFINITIONS', ZONE_DEFINITIONS),
            label='Zone Definitions',
        ),
        _text('SCOPE', str(document.scope_description or ''), condition=_present(document.scope_description)),
        _text(
            'LIMITATIONS AND ASSUMPTIONS',
            str(document.limitations_assumptions or ''),
            condition=_present(document.limitations_assumptions),
        ),
        *_module_entries(modules, content=ModuleContent.structured, show_outcome=False),
        ManifestEntry(SectionKind.references, render_references, label='References and Compliance'),
        _register(),
        _attachments(ctx),
    ]


def _fsd_limitations_text(ctx: ReportContext) -> str:
    text = fsd_limitations(ctx.document.jurisdiction)
    project = str(ctx.document.limitations_assumptions or '').strip()
    if project:
        text = f'{text}\n\n**Project-Specific Limitations**\n\n{project}'
    return text


def assemble_fsd(ctx: ReportContext) -> list[ManifestEntry]:
    document = ctx.document
    modules = sort_modules(ctx.modules, FSD_MODULE_ORDER)
    return [
        *_prelude(ctx, _fsd_cover(ctx)),
        *_summary_entries(ctx),
        ManifestEntry(
            SectionKind.strategy_overview,
            render_strategy_overview,
            EngineDerived(),
            label='Strategy Overview',
        ),
        _text('Purpose and Scope', fsd_purpose_and_scope(document.jurisdiction)),
        _text('Scope', str(document.scope_description or ''), condition=_present(document.scope_description)),
        _text('Limitations', _fsd_limitations_text(ctx)),
        *_module_entries(modules),
        _register(condition=bool(ctx.actions)),
        _attachments(ctx),
    ]


def assemble_combined(ctx: ReportContext) -> list[ManifestEntry]:
    document = ctx.document
    common = sort_modules(filter_modules(ctx.modules, COMBINED_COMMON_MODULES), COMBINED_COMMON_MODULES)
    fra_modules = sort_modules(
        filter_modules(ctx.modules, _without_kinds(COMBINED_FRA_ORDER, COMBINED_COMMON_MODULES)),
        COMBINED_FRA_ORDER,
    )
    fsd_modules = sort_modules(filter_modules(ctx.modules, COMBINED_FSD_ORDER), COMBINED_FSD_ORDER)
    return [
        *_prelude(ctx, _combined_cover(ctx)),
        *_summary_entries(ctx),
        ManifestEntry(
            SectionKind.table_of_contents,
            render_table_of_contents,
            COMBINED_CONTENTS,
            label='Table of Contents',
        ),
        _text('Common Sections', '', condition=bool(common)),
        *_module_entries(common),
        ManifestEntry(SectionKind.part_header, render_part_header, PART_1_TITLE, label=PART_1_TITLE),
        ManifestEntry(
            SectionKind.text,
            render_text_section,
            TextSection('Regulatory Framework', FRA_REGULATORY_FRAMEWORK, heading_size=14),
            new_page=False,
            label='Regulatory Framework',
        ),
        _text('Responsible Person Duties', fra_responsible_person_duties(document.jurisdiction), heading_size=14),
        *_module_entries(fra_modules),
        ManifestEntry(SectionKind.part_header, render_part_header, PART_2_TITLE, label=PART_2_TITLE),
        ManifestEntry(
            SectionKind.text,
            render_text_section,
            TextSection('Purpose and Scope', fsd_purpose_and_scope(document.jurisdiction), heading_size=14),
            new_page=False,
            label='Purpose and Scope',
        ),
        *_module_entries(fsd_modules),
        _register(),
        _attachments(ctx),
        ManifestEntry(
            SectionKind.assumptions,
            render_combined_assumptions,
            condition=has_combined_assumptions(ctx),
            label='Assumptions and Limitations',
        ),
        _text('Fire Strategy Limitations', fsd_limitations(document.jurisdiction)),
    ]


def _without_kinds(order: tuple[ModuleKind, ...], excluded: tuple[ModuleKind, ...]) -> tuple[ModuleKind, ...]:
    return tuple(kind for kind in order if kind not in excluded)


def assemble_survey(ctx: ReportContext) -> list[ManifestEntry]:
    selected = ctx.report.selected_modules
    modules = list(ctx.modules) if selected is None else [
        instance for instance in ctx.modules if instance.module_key in set(selected)
    ]
    return [
        *_prelude(ctx, _survey_cover(ctx)),
        *_summary_entries(ctx),
        *_module_entries(modules, show_outcome=False, show_info_gaps=False),
        ManifestEntry(SectionKind.recommendations, render_recommendations, label='Recommendations'),
    ]


_ASSEMBLERS: dict[ReportKind, Callable[[ReportContext], list[ManifestEntry]]] = {
    ReportKind.fra: assemble_fra,
    ReportKind.dsear: assemble_dsear,
    ReportKind.fsd: assemble_fsd,
    ReportKind.combined: assemble_combined,
    ReportKind.survey: assemble_survey,
}


def assemble_manifest(ctx: ReportContext) -> ReportManifest:
    assembler = _ASSEMBLERS.get(ctx.kind)
    if assembler is None:
        raise ReportBuildError(f'Unsupported report kind: {ctx.kind!r}')
    jurisdiction = ctx.document.jurisdiction
    manifest = ReportManifest(
        report_name=report_display_name(ctx.kind, jurisdiction),
        footer_name=footer_name(ctx.kind, jurisdiction),
        entries=tuple(assembler(ctx)),
    )
    logger.debug('Assembled %s manifest with %s active sections', ctx.kind.value, len(manifest.active_entries()))
    return manifest
