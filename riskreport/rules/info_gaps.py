from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping


@dataclass(frozen=True)
class QuickAction:
    action: str
    reason: str
    priority: str


@dataclass(frozen=True)
class InfoGapDetection:
    has_info_gap: bool
    reasons: list[str] = field(default_factory=list)
    quick_actions: list[QuickAction] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentContext:
    """Document-level answers that stand in for module answers when the module leaves them blank."""

    responsible_person: str | None = None
    standards_selected: tuple[str, ...] = ()


_Rule = Callable[[Mapping[str, Any], DocumentContext, list[str], list[QuickAction]], None]

_TITLES = {
    'A1_DOC_CONTROL': 'Document Control Information Gaps',
    'A4_MANAGEMENT_CONTROLS': 'Management Systems Information Gaps',
    'A5_EMERGENCY_ARRANGEMENTS': 'Emergency Arrangements Information Gaps',
    'FRA_1_HAZARDS': 'Hazard Identification Information Gaps',
    'FRA_2_ESCAPE_ASIS': 'Means of Escape Information Gaps',
    'FRA_3_PROTECTION_ASIS': 'Fire Protection Information Gaps',
    'FRA_5_EXTERNAL_FIRE_SPREAD': 'External Fire Spread Information Gaps',
    'FRA_4_SIGNIFICANT_FINDINGS': 'Assessment Completion Information Gaps',
}


def _unknown(value: Any) -> bool:
    return not value or value == 'unknown'


def _blank(value: Any) -> bool:
    return not str(value or '').strip()


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _gap(reasons: list[str], actions: list[QuickAction], reason: str, action: str, why: str, priority: str) -> None:
    reasons.append(reason)
    actions.append(QuickAction(action=action, reason=why, priority=priority))


def _document_control(data, ctx, reasons, actions) -> None:
    if _blank(data.get('responsible_person') or ctx.responsible_person):
        _gap(
            reasons, actions,
            'Responsible person not identified',
            'Identify and document the responsible person for fire safety',
            'Legal requirement under Regulatory Reform (Fire Safety) Order 2005',
            'P2',
        )
    if not (data.get('standards_selected') or ctx.standards_selected):
        _gap(
            reasons, actions,
            'No assessment standards selected',
            'Select and document applicable fire safety standards (e.g., BS 9999, BS 9991)',
            'Defines assessment methodology and compliance framework',
            'P3',
        )


def _management(data, ctx, reasons, actions) -> None:
    if _unknown(data.get('fire_safety_policy')):
        _gap(
            reasons, actions,
            'Fire safety policy status unknown',
            'Verify existence of fire safety policy and management procedures',
            'Essential for demonstrating management commitment',
            'P2',
        )
    if _unknown(data.get('training_induction')):
        _gap(
            reasons, actions,
            'Staff training status unknown',
            'Obtain fire safety training records and verify induction procedures',
            'Trained staff are critical to fire safety management',
            'P2',
        )
    if _unknown(data.get('testing_records')):
        _gap(
            reasons, actions,
            'Testing records availability unknown',
            'Request and review fire safety equipment testing/maintenance records',
            'Demonstrates ongoing system maintenance and compliance',
            'P3',
        )


def _emergency(data, ctx, reasons, actions) -> None:
    if _unknown(data.get('emergency_plan_exists')):
        _gap(
            reasons, actions,
            'Emergency plan status unknown',
            'Verify existence of emergency evacuation plan and procedures',
            'Legal requirement and critical for life safety',
            'P2',
        )
    if _unknown(data.get('peeps_in_place')):
        _gap(
            reasons, actions,
            'PEEPs status unknown',
            'Confirm whether Personal Emergency Evacuation Plans (PEEPs) exist for vulnerable persons',
            'Legal duty to ensure all persons can evacuate safely',
            'P2',
        )
    if _unknown(data.get('drill_frequency')):
        _gap(
            reasons, actions,
            'Fire drill frequency unknown',
            'Obtain fire drill records and confirm frequency of evacuations',
            'Regular drills essential for emergency preparedness',
            'P3',
        )


def _hazards(data, ctx, reasons, actions) -> None:
    if not data.get('ignition_sources'):
        _gap(
            reasons, actions,
            'No ignition sources identified',
            'Conduct detailed walkthrough to identify all potential ignition sources',
            'Ignition sources are fundamental to fire risk assessment',
            'P2',
        )
    if not data.get('fuel_sources'):
        _gap(
            reasons, actions,
            'No fuel sources identified',
            'Survey premises to identify and document all combustible materials and fuel sources',
            'Fuel sources determine potential fire load and spread',
            'P2',
        )
    if _unknown(data.get('arson_risk')):
        _gap(
            reasons, actions,
            'Arson risk not assessed',
            'Assess arson vulnerability including external security, waste storage, and access control',
            'Arson is a significant cause of fire in commercial premises',
            'P3',
        )


def _escape(data, ctx, reasons, actions) -> None:
    if _unknown(data.get('travel_distances_compliant')):
        _gap(
            reasons, actions,
            'Travel distances not verified',
            'Measure and verify travel distances to final exits against applicable standards',
            'Travel distances are critical for safe evacuation',
            'P2',
        )
    if _unknown(data.get('escape_strategy')):
        _gap(
            reasons, actions,
            'Escape strategy not determined',
            "Determine and document the building's fire evacuation strategy (simultaneous, phased, stay-put)",
            'Defines evacuation approach and influences all other provisions',
            'P2',
        )
    if _unknown(data.get('stair_protection_status')):
        _gap(
            reasons, actions,
            'Stair protection status unknown',
            'Verify staircase fire protection including enclosure and fire doors',
            'Protected stairs are essential for multi-storey evacuation',
            'P2',
        )


def _protection(data, ctx, reasons, actions) -> None:
    if _unknown(data.get('alarm_present')):
        _gap(
            reasons, actions,
            'Fire alarm system presence unknown',
            'Confirm fire alarm system installation and obtain system certificates',
            'Alarm system is primary means of warning occupants',
            'P2',
        )
    if data.get('alarm_present') == 'yes' and _unknown(data.get('alarm_category')):
        _gap(
            reasons, actions,
            'Fire alarm category not identified',
            'Identify fire alarm category (L1-L5/M) from commissioning certificates',
            'Category defines level of protection provided',
            'P2',
        )
    if _unknown(data.get('emergency_lighting_present')):
        _gap(
            reasons, actions,
            'Emergency lighting presence unknown',
            'Survey building for emergency lighting installation and obtain test certificates',
            'Emergency lighting enables safe evacuation in power failure',
            'P2',
        )
    if _unknown(data.get('compartmentation_condition')):
        _gap(
            reasons, actions,
            'Compartmentation condition unknown',
            'Commission compartmentation survey to verify fire resistance of walls, floors, and penetrations',
            'Compartmentation prevents fire spread and supports stay-put strategies',
            'P2',
        )
    if data.get('fire_stopping_confidence') in {'low', 'unknown'}:
        _gap(
            reasons, actions,
            'Fire stopping integrity uncertain',
            'Arrange intrusive survey of fire stopping at service penetrations and construction joints',
            'Fire stopping breaches can compromise compartmentation',
            'P2',
        )


def _external_spread(data, ctx, reasons, actions) -> None:
    height = _number(data.get('building_height_m'))
    if not height:
        _gap(
            reasons, actions,
            'Building height not recorded',
            'Measure or obtain building height (from plans or building records)',
            'Buildings >=18m have specific regulatory requirements',
            'P2',
        )
    if _unknown(data.get('cladding_present')):
        _gap(
            reasons, actions,
            'Cladding system presence/type unknown',
            'Inspect external walls and identify cladding system type and materials',
            'Combustible cladding poses significant external fire spread risk',
            'P2',
        )
    if data.get('cladding_present') == 'yes' and _unknown(data.get('insulation_combustibility_known')):
        _gap(
            reasons, actions,
            'Insulation combustibility unknown',
            'Obtain building records or commission testing to determine insulation combustibility classification',
            'Combustible insulation can lead to rapid vertical fire spread',
            'P2',
        )
    if height >= 18 and _unknown(data.get('pas9980_or_equivalent_appraisal')):
        _gap(
            reasons, actions,
            'PAS 9980 appraisal status unknown for high-rise building',
            'Confirm whether PAS 9980 external wall appraisal has been completed',
            'Legal requirement for residential buildings >=18m',
            'P2',
        )


def _significant_findings(data, ctx, reasons, actions) -> None:
    if _unknown(data.get('overall_risk_rating')):
        _gap(
            reasons, actions,
            'Overall risk rating not determined',
            'Complete all other modules to determine overall fire risk rating',
            'Overall rating drives risk communication and action prioritization',
            'P2',
        )
    if _blank(data.get('executive_summary')):
        _gap(
            reasons, actions,
            'Executive summary not written',
            'Draft executive summary of key findings, deficiencies, and recommendations',
            'Summary provides client with clear understanding of risk',
            'P3',
        )


_RULES: dict[str, _Rule] = {
    'A1_DOC_CONTROL': _document_control,
    'A4_MANAGEMENT_CONTROLS': _management,
    'A5_EMERGENCY_ARRANGEMENTS': _emergency,
    'FRA_1_HAZARDS': _hazards,
    'FRA_2_ESCAPE_ASIS': _escape,
    'FRA_3_PROTECTION_ASIS': _protection,
    'FRA_5_EXTERNAL_FIRE_SPREAD': _external_spread,
    'FRA_4_SIGNIFICANT_FINDINGS': _significant_findings,
}


def detect_info_gaps(
    module_key: str,
    data: Mapping[str, Any] | None,
    outcome: str | None,
    document_context: DocumentContext | None = None,
) -> InfoGapDetection:
    """Pure predicate over module answers; a gap exists when the outcome says so or any rule fires."""
    reasons: list[str] = []
    actions: list[QuickAction] = []
    if outcome == 'info_gap':
        reasons.append('Module outcome marked as Information Gap')

    rule = _RULES.get(module_key)
    if rule is not None:
        rule(data or {}, document_context or DocumentContext(), reasons, actions)

    return InfoGapDetection(
        has_info_gap=outcome == 'info_gap' or bool(actions),
        reasons=reasons,
        quick_actions=actions,
    )


def info_gap_title(module_key: str) -> str:
    return _TITLES.get(module_key, 'Information Gaps')
