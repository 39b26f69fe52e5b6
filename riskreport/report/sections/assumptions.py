from __future__ import annotations

from riskreport.modules import DecodedModule, ModuleKind, SignificantFindingsAnswers, decode_module, find_module
from riskreport.report.blocks import heading, labeled_field, paragraph
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.palette import MUTED

NO_ASSUMPTIONS_TEXT = 'No specific assumptions or limitations recorded.'


def _key_assumptions(ctx: ReportContext) -> str:
    instance = find_module(ctx.modules, ModuleKind.fra_4_significant_findings)
    if instance is None:
        return ''
    decoded = decode_module(instance)
    if isinstance(decoded, DecodedModule) and isinstance(decoded.answers, SignificantFindingsAnswers):
        return str(decoded.answers.key_assumptions or '').strip()
    return ''


def render_assumptions(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    document = ctx.document
    limitations = str(document.limitations_assumptions or '').strip()
    assumptions = _key_assumptions(ctx)
    scope = str(document.scope_description or '').strip()

    heading(pager, 'ASSUMPTIONS & LIMITATIONS')
    if limitations:
        labeled_field(pager, 'Assessment Limitations', limitations, size=11, leading=16, indent=0)
        pager.advance(10)
    if assumptions:
        labeled_field(pager, 'Key Assumptions', assumptions, size=11, leading=16, indent=0)
        pager.advance(10)
    if not limitations and not assumptions:
        paragraph(pager, NO_ASSUMPTIONS_TEXT, size=11, leading=16, color=MUTED)
        pager.advance(10)
    if scope:
        labeled_field(pager, 'Scope', scope, size=11, leading=16, indent=0)


def has_combined_assumptions(ctx: ReportContext) -> bool:
    document = ctx.document
    return bool(str(document.scope_description or '').strip() or str(document.limitations_assumptions or '').strip())


def render_combined_assumptions(pager: Paginator, ctx: ReportContext, data: object = None) -> None:
    document = ctx.document
    heading(pager, 'Assumptions and Limitations')
    if str(document.scope_description or '').strip():
        labeled_field(pager, 'Scope', document.scope_description, size=11, leading=16, indent=0)
        pager.advance(10)
    if str(document.limitations_assumptions or '').strip():
        labeled_field(pager, 'Limitations and Assumptions', document.limitations_assumptions, size=11, leading=16,
                      indent=0)
