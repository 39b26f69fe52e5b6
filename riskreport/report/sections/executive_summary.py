from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from reportlab.lib import colors

from riskreport.modules import (
    BuildingProfileAnswers,
    DecodedModule,
    EvacuationStrategyAnswers,
    HazardousAreaAnswers,
    ModuleKind,
    RegulatoryBasisAnswers,
    SignificantFindingsAnswers,
    SubstancesAnswers,
    decode_module,
    find_module,
)
from riskreport.report.blocks import chip, heading, paragraph, paragraphs, subheading
from riskreport.report.boilerplate import DSEAR_RISK_PROFILE_STATEMENT
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import ALERT, BLACK, CAUTION, INK_SOFT, LABEL, executive_outcome_color, rating_color
from riskreport.rules.findings import building_context, compute_fra_summary
from riskreport.rules.outcome import OutcomeStrategy
from riskreport.types import Document, ExecutiveSummaryMode

GAS_ZONES = frozenset({'0', '1', '2'})
DUST_ZONES = frozenset({'20', '21', '22'})


@dataclass(frozen=True)
class SummaryText:
    heading: str
    text: str


def plan_summary_pages(document: Document) -> tuple[SummaryText | None, SummaryText | None]:
    """(ai page, author page) for the document's executive summary mode; either may be absent."""
    mode = document.executive_summary_mode
    ai_text = str(document.executive_summary_ai or '').strip()
    author_text = str(document.executive_summary_author or '').strip()

    ai_page = None
    if mode in {ExecutiveSummaryMode.ai, ExecutiveSummaryMode.both} and ai_text:
        ai_page = SummaryText('Executive Summary', ai_text)

    author_page = None
    if mode in {ExecutiveSummaryMode.author, ExecutiveSummaryMode.both} and author_text:
        title = 'Author Commentary' if mode == ExecutiveSummaryMode.both else 'Executive Summary'
        author_page = SummaryText(title, author_text)
    return ai_page, author_page


def render_summary_text(pager: Paginator, ctx: ReportContext, data: SummaryText) -> None:
    heading(pager, data.heading, size=18)
    paragraphs(pager, data.text, size=11, leading=14, color=BLACK)


def _decoded(ctx: ReportContext, kind: ModuleKind, model: type) -> Any:
    instance = find_module(ctx.modules, kind)
    if instance is None:
        return None
    decoded = decode_module(instance)
    if isinstance(decoded, DecodedModule) and isinstance(decoded.answers, model):
        return decoded.answers
    return None


def _count_line(
    pager: Paginator,
    text: str,
    *,
    color: colors.Color = INK_SOFT,
    indent: float = 20,
    size: float = 11,
) -> None:
    page = pager.ensure_room(18)
    page.draw_text(text, x=pager.left + indent, y=pager.cursor, font=pager.fonts.regular, size=size, color=color)
    pager.advance(18)


def render_significant_findings(pager: Paginator, ctx: ReportContext, strategy: OutcomeStrategy) -> None:
    """Headline outcome, action counts, assessor narrative and the computed top issues."""
    fonts = pager.fonts
    headline = strategy.resolve(ctx.modules, ctx.actions)
    band, fra_ctx = building_context(ctx.modules, scs_band=ctx.document.scs_band)
    summary = compute_fra_summary(ctx.actions, band, fra_ctx)

    heading(pager, 'EXECUTIVE SUMMARY', size=18)

    page = pager.ensure_room(60)
    page.draw_text('Overall Fire Risk Rating:', x=pager.left, y=pager.cursor, font=fonts.bold, size=12)
    pager.advance(25)
    fill = rating_color(headline.assessor_rating) if headline.assessor_rating else executive_outcome_color(
        headline.engine_outcome.value
    )
    chip_width = max(150.0, fonts.width(headline.label, 14, bold=True) + 20)
    chip(page, headline.label, x=pager.left, y=pager.cursor, width=chip_width, height=30, fill=fill,
         font=fonts.bold, size=14, padding=10)
    if headline.overridden:
        page.draw_text('OVERRIDDEN', x=pager.left + chip_width + 12, y=pager.cursor + 6, font=fonts.bold, size=10,
                       color=ALERT)
    pager.advance(40)

    if headline.overridden:
        paragraph(pager, f'Engine-derived outcome: {headline.engine_label}', size=10, color=LABEL)
        if headline.override_reason:
            paragraph(pager, f'Override reason: {headline.override_reason}', size=10, color=LABEL)
        pager.advance(10)

    subheading(pager, 'Priority Actions Summary:', size=12, space_after=20)
    _count_line(pager, f'P1 (Immediate): {summary.counts.p1}', color=ALERT)
    _count_line(pager, f'P2 (Urgent): {summary.counts.p2}', color=CAUTION)
    _count_line(pager, f'Total Open Actions: {summary.counts.total}')
    pager.advance(12)

    material = sum(1 for module in ctx.modules if module.outcome == 'material_def')
    gaps = sum(1 for module in ctx.modules if module.outcome == 'info_gap')
    subheading(pager, 'Module Outcomes:', size=12, space_after=20)
    _count_line(pager, f'Material Deficiencies: {material}')
    _count_line(pager, f'Information Gaps: {gaps}')
    if summary.material_deficiency:
        _count_line(pager, 'Material life safety deficiency identified.', color=ALERT)
    pager.advance(12)

    findings = _decoded(ctx, ModuleKind.fra_4_significant_findings, SignificantFindingsAnswers)
    if findings is not None and findings.executive_summary:
        subheading(pager, 'Summary:', size=12, space_after=20)
        paragraphs(pager, findings.executive_summary, size=11, leading=16)
    if findings is not None and findings.review_recommendation:
        subheading(pager, 'Review Recommendation:', size=12, space_after=20)
        paragraph(pager, findings.review_recommendation, size=11, leading=16)
        pager.advance(10)

    if summary.top_issues:
        subheading(pager, 'Key Issues:', size=12, space_after=20)
        for issue in summary.top_issues:
            paragraph(pager, f'[{issue.priority}] {issue.title}', size=10, leading=14, indent=10, bold=True,
                      color=BLACK)
            if issue.trigger_text:
                paragraph(pager, f'Trigger: {issue.trigger_text}', size=9, leading=12, indent=20, color=LABEL)
            pager.advance(4)
        pager.advance(8)

    subheading(pager, 'Overall Assessment:', size=12, space_after=20)
    paragraph(pager, summary.tone_paragraph, size=11, leading=16)
    pager.diagnostics.info(
        'headline_outcome',
        headline.label,
        strategy=headline.strategy,
        engine_outcome=headline.engine_outcome.value,
        overridden=headline.overridden,
    )


def _summary_block(pager: Paginator, label: str, value: str) -> None:
    pager.ensure_room(18 + 14 + 25)
    subheading(pager, label, size=11, space_after=18)
    paragraph(pager, value, size=10, leading=14, indent=20)
    pager.advance(11)


def _engine_outcome(pager: Paginator, ctx: ReportContext, strategy: OutcomeStrategy | None) -> None:
    if strategy is None:
        return
    headline = strategy.resolve(ctx.modules, ctx.actions)
    _summary_block(pager, 'Overall Outcome:', headline.label)
    pager.diagnostics.info(
        'headline_outcome',
        headline.label,
        strategy=headline.strategy,
        engine_outcome=headline.engine_outcome.value,
        overridden=headline.overridden,
    )


def render_explosive_atmospheres_overview(
    pager: Paginator,
    ctx: ReportContext,
    data: OutcomeStrategy | None = None,
) -> None:
    heading(pager, 'Executive Summary', size=16)
    _engine_outcome(pager, ctx, data)

    substances = _decoded(ctx, ModuleKind.dsear_1_dangerous_substances, SubstancesAnswers)
    items = substances.substances if substances is not None else []
    states: list[str] = []
    for item in items:
        if item.physical_state and item.physical_state not in states:
            states.append(item.physical_state)
    _summary_block(
        pager,
        'Dangerous Substances:',
        f"{len(items)} substances identified ({', '.join(states) or 'none'})",
    )

    areas = _decoded(ctx, ModuleKind.dsear_3_hazardous_area_classification, HazardousAreaAnswers)
    zones = areas.zones if areas is not None else []
    gas = sum(1 for zone in zones if str(zone.zone_type or '') in GAS_ZONES)
    dust = sum(1 for zone in zones if str(zone.zone_type or '') in DUST_ZONES)
    _summary_block(pager, 'Hazardous Areas Classified:', f'Gas zones: {gas}, Dust zones: {dust}')

    p1 = sum(1 for action in ctx.actions if action.priority_band == 'P1')
    p2 = sum(1 for action in ctx.actions if action.priority_band == 'P2')
    p34 = sum(1 for action in ctx.actions if action.priority_band in {'P3', 'P4'})
    _summary_block(pager, 'Priority Actions:', f'P1: {p1}, P2: {p2}, P3/P4: {p34}')

    _summary_block(pager, 'Explosion Risk Profile:', DSEAR_RISK_PROFILE_STATEMENT)


def render_strategy_overview(pager: Paginator, ctx: ReportContext, data: OutcomeStrategy | None = None) -> None:
    heading(pager, 'Executive Summary', size=16)
    _engine_outcome(pager, ctx, data)

    basis = _decoded(ctx, ModuleKind.fsd_1_reg_basis, RegulatoryBasisAnswers)
    framework = (basis.regulatory_framework_selected if basis is not None else None) or 'Not specified'
    _summary_block(pager, 'Strategy Framework', f'Framework: {framework}')

    profile = _decoded(ctx, ModuleKind.a2_building_profile, BuildingProfileAnswers)
    if profile is not None:
        height = f'{profile.building_height_m}m' if profile.building_height_m else 'Not specified'
        storeys = profile.number_of_storeys or 'Not specified'
        use = profile.primary_use or 'Not specified'
        _summary_block(pager, 'Building Overview', f'Height: {height}, Storeys: {storeys}, Use: {use}')
    else:
        _summary_block(pager, 'Building Overview', 'No building profile recorded')

    evacuation = _decoded(ctx, ModuleKind.fsd_2_evac_strategy, EvacuationStrategyAnswers)
    strategy = (evacuation.evacuation_strategy_type if evacuation is not None else None) or 'Not specified'
    _summary_block(pager, 'Evacuation Strategy', f'Strategy: {strategy}')

    counts = {band: sum(1 for action in ctx.actions if action.priority_band == band) for band in
              ('P1', 'P2', 'P3', 'P4')}
    _summary_block(
        pager,
        'Actions Summary',
        f"Total Actions: {len(ctx.actions)} (P1: {counts['P1']}, P2: {counts['P2']}, "
        f"P3: {counts['P3']}, P4: {counts['P4']})",
    )
