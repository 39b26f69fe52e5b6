from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from riskreport.modules import (
    AnyModule,
    DecodedModule,
    HazardousAreaAnswers,
    RiskAssessmentAnswers,
    SubstancesAnswers,
    decode_module,
    generic_entries,
    key_details,
)
from riskreport.report.blocks import bullets, chip, heading, paragraph, paragraphs
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import BLACK, INK_SOFT, LABEL, MUTED, WHITE, outcome_color, outcome_label
from riskreport.report.sections.info_gaps import render_info_gap_callout
from riskreport.types import ModuleInstance

RECORD_LEADING = 12


class ModuleContent(str, Enum):
    key_details = 'key_details'
    structured = 'structured'
    notes_only = 'notes_only'


@dataclass(frozen=True)
class ModuleSection:
    instance: ModuleInstance
    content: ModuleContent = ModuleContent.key_details
    show_outcome: bool = True
    show_info_gaps: bool = True


def render_module_section(pager: Paginator, ctx: ReportContext, data: ModuleSection) -> None:
    instance = data.instance
    module = decode_module(instance)
    heading(pager, module.name, space_after=25)

    if data.show_outcome:
        _outcome_row(pager, instance.outcome)

    if data.content == ModuleContent.structured:
        _structured_content(pager, module)
        _notes(pager, instance.assessor_notes, size=9, leading=12)
    else:
        _notes(pager, instance.assessor_notes, size=10, leading=14)
        if data.content == ModuleContent.key_details:
            _key_details(pager, module)

    if data.show_info_gaps:
        render_info_gap_callout(pager, ctx, instance)


def _outcome_row(pager: Paginator, outcome: str | None) -> None:
    fonts = pager.fonts
    page = pager.ensure_room(30)
    page.draw_text('Outcome:', x=pager.left, y=pager.cursor, font=fonts.bold, size=11)
    chip(
        page,
        outcome_label(outcome),
        x=pager.left + 70,
        y=pager.cursor,
        width=140,
        height=18,
        fill=outcome_color(outcome),
        font=fonts.bold,
        size=10,
        text_color=WHITE,
        padding=5,
    )
    pager.advance(30)


def _notes(pager: Paginator, notes: str | None, *, size: float, leading: float) -> None:
    if not str(notes or '').strip():
        return
    page = pager.ensure_room(15 + leading)
    page.draw_text('Assessor Notes:', x=pager.left, y=pager.cursor, font=pager.fonts.bold, size=11)
    pager.advance(18)
    paragraphs(pager, notes, size=size, leading=leading, gap=6, color=INK_SOFT)
    pager.advance(6)


def _key_details(pager: Paginator, module: AnyModule) -> None:
    details = key_details(module)
    if not details:
        return
    page = pager.ensure_room(15 + 12)
    page.draw_text('Key Details:', x=pager.left, y=pager.cursor, font=pager.fonts.bold, size=10)
    pager.advance(15)
    bullets(pager, [detail.as_bullet() for detail in details], size=9, leading=12, indent=10)
    pager.advance(10)


def _record_line(pager: Paginator, text: str, *, indent: float = 20, size: float = 9, bold: bool = False) -> None:
    paragraph(pager, text, size=size, leading=RECORD_LEADING, indent=indent, bold=bold,
              color=BLACK if bold else INK_SOFT)


def _placeholder(pager: Paginator, text: str) -> None:
    page = pager.ensure_room(20)
    page.draw_text(text, x=pager.left, y=pager.cursor, font=pager.fonts.regular, size=9, color=MUTED)
    pager.advance(20)


def _structured_content(pager: Paginator, module: AnyModule) -> None:
    answers = module.answers if isinstance(module, DecodedModule) else None
    if isinstance(answers, SubstancesAnswers):
        _substances(pager, answers)
    elif isinstance(answers, HazardousAreaAnswers):
        _zones(pager, answers)
    elif isinstance(answers, RiskAssessmentAnswers):
        _risk_rows(pager, answers)
    else:
        _generic(pager, module)


def _substances(pager: Paginator, answers: SubstancesAnswers) -> None:
    if not answers.substances:
        _placeholder(pager, 'No substances recorded')
        return
    for number, substance in enumerate(answers.substances, start=1):
        pager.ensure_room(RECORD_LEADING * 5)
        _record_line(pager, f'{number}. {substance.name or "Unnamed"}', indent=0, size=10, bold=True)
        _record_line(pager, f'State: {substance.physical_state or "-"}')
        _record_line(pager, f'Quantity: {substance.quantity or "-"}')
        _record_line(pager, f'Location: {substance.storage_location or "-"}')
        _record_line(
            pager,
            f'Flash Point: {substance.flash_point or "unknown"} | LFL/UFL: {substance.lfl_ufl or "unknown"}',
        )
        pager.advance(8)


def _zones(pager: Paginator, answers: HazardousAreaAnswers) -> None:
    if not answers.zones:
        _placeholder(pager, 'No zones recorded')
    for zone in answers.zones:
        _record_line(
            pager,
            f'Zone {zone.zone_type or "?"}: {zone.extent_description or "No description"}',
            indent=0,
            size=10,
        )
        pager.advance(4)

    if answers.drawings_reference:
        pager.advance(8)
        page = pager.ensure_room(14 + RECORD_LEADING)
        page.draw_text('Drawings Reference:', x=pager.left, y=pager.cursor, font=pager.fonts.bold, size=10,
                       color=LABEL)
        pager.advance(14)
        _record_line(pager, answers.drawings_reference, indent=10)
        pager.advance(8)


def _risk_rows(pager: Paginator, answers: RiskAssessmentAnswers) -> None:
    if not answers.risk_rows:
        _placeholder(pager, 'No risk assessment rows recorded')
        return
    for number, row in enumerate(answers.risk_rows, start=1):
        pager.ensure_room(RECORD_LEADING * 4)
        _record_line(pager, f'{number}. {row.activity or "Activity not specified"}', indent=0, size=10, bold=True)
        _record_line(pager, f'Hazard: {row.hazard or "-"}')
        _record_line(pager, f'Likelihood: {row.likelihood or "-"}, Severity: {row.severity or "-"}')
        _record_line(pager, f'Residual Risk: {row.residual_risk or "-"}')
        pager.advance(8)


def _generic(pager: Paginator, module: AnyModule) -> None:
    entries = generic_entries(module.raw)
    if not entries:
        _placeholder(pager, 'No data recorded')
        return
    for entry in entries:
        paragraph(pager, f'{entry.key}: {entry.value}', size=9, leading=RECORD_LEADING, color=INK_SOFT, max_lines=2)
        pager.advance(3)
    pager.advance(8)
