from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from riskreport.modules import (
    BuildingProfileAnswers,
    DecodedModule,
    ModuleKind,
    ProtectionAnswers,
    decode_module,
    find_module,
)
from riskreport.rules.complexity import (
    BuildingComplexityInput,
    ComplexityBand,
    calculate_scs,
    derive_fire_protection_reliance,
    derive_storeys_for_scoring,
)
from riskreport.rules.severity import (
    ExecutiveOutcome,
    FraContext,
    OccupancyRisk,
    check_material_deficiency,
    derive_executive_outcome,
)
from riskreport.types import Action, ModuleInstance

_PRIORITY_RANK = {'P1': 1, 'P2': 2, 'P3': 3, 'P4': 4}

HIGH_PRIORITY_CATEGORIES = ('MeansOfEscape', 'DetectionAlarm', 'Compartmentation')

_COMPLEXITY_TONE = {
    ComplexityBand.very_high: (
        'The premises comprises a complex building with significant reliance on structural and active fire '
        'protection systems. Effective maintenance and management controls are critical.'
    ),
    ComplexityBand.high: (
        'The building presents structural and occupancy complexity which increases reliance on fire '
        'protection measures.'
    ),
    ComplexityBand.moderate: 'The building has moderate complexity requiring appropriate fire safety provisions.',
    ComplexityBand.low: 'The premises presents a relatively straightforward fire safety context.',
}

_OCCUPANCY_TONE = {
    OccupancyRisk.vulnerable: (
        ' The presence of vulnerable occupants increases the criticality of maintaining robust fire safety systems.'
    ),
    OccupancyRisk.sleeping: (
        ' As sleeping accommodation, occupants may be less alert to fire cues, requiring higher standards of '
        'detection and alarm provision.'
    ),
    OccupancyRisk.non_sleeping: '',
}

_OUTCOME_TONE = {
    ExecutiveOutcome.material_life_safety_risk: (
        ' Material life safety deficiencies have been identified which require immediate attention.'
    ),
    ExecutiveOutcome.significant_deficiencies: (
        ' Significant deficiencies have been identified which require prompt remedial action.'
    ),
    ExecutiveOutcome.improvements_required: (
        ' Improvements are required to achieve compliance with fire safety standards.'
    ),
    ExecutiveOutcome.satisfactory_with_improvements: (
        ' Overall, fire safety arrangements are satisfactory subject to the improvements identified.'
    ),
}


@dataclass(frozen=True)
class TopIssue:
    title: str
    priority: str
    trigger_text: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class PriorityCounts:
    p1: int = 0
    p2: int = 0
    p3: int = 0
    p4: int = 0

    @property
    def total(self) -> int:
        return self.p1 + self.p2 + self.p3 + self.p4


@dataclass(frozen=True)
class FraSummary:
    computed_outcome: ExecutiveOutcome
    counts: PriorityCounts
    top_issues: list[TopIssue] = field(default_factory=list)
    material_deficiency: bool = False
    tone_paragraph: str = ''


def tone_paragraph(band: ComplexityBand, occupancy: OccupancyRisk, outcome: ExecutiveOutcome) -> str:
    return f'{_COMPLEXITY_TONE[band]}{_OCCUPANCY_TONE[occupancy]}{_OUTCOME_TONE[outcome]}'


def rank_top_issues(actions: Sequence[Action], band: ComplexityBand) -> list[Action]:
    """Priority first; in High/VeryHigh buildings life-safety categories win equal-priority ties."""
    high_complexity = band in {ComplexityBand.high, ComplexityBand.very_high}

    def _key(action: Action) -> tuple[int, int]:
        preference = 0
        if high_complexity and action.category not in HIGH_PRIORITY_CATEGORIES:
            preference = 1
        return _PRIORITY_RANK.get(action.priority_band, 4), preference

    return sorted(actions, key=_key)


def count_open_priorities(actions: Sequence[Action]) -> PriorityCounts:
    open_actions = [action for action in actions if action.is_open]
    return PriorityCounts(
        p1=sum(1 for action in open_actions if action.priority_band == 'P1'),
        p2=sum(1 for action in open_actions if action.priority_band == 'P2'),
        p3=sum(1 for action in open_actions if action.priority_band == 'P3'),
        p4=sum(1 for action in open_actions if action.priority_band == 'P4'),
    )


def compute_fra_summary(actions: Sequence[Action], band: ComplexityBand, ctx: FraContext) -> FraSummary:
    open_actions = [action for action in actions if action.is_open]
    outcome = derive_executive_outcome(open_actions)
    material = check_material_deficiency(open_actions, ctx)

    top_issues: list[TopIssue] = []
    for action in rank_top_issues(open_actions, band)[:3]:
        priority = action.priority_band or 'P4'
        top_issues.append(
            TopIssue(
                title=action.recommended_action or 'Untitled action',
                priority=priority,
                trigger_text=action.trigger_text if priority in {'P1', 'P2'} else None,
                category=action.category,
            )
        )

    return FraSummary(
        computed_outcome=outcome,
        counts=count_open_priorities(actions),
        top_issues=top_issues,
        material_deficiency=material.is_material_deficiency,
        tone_paragraph=tone_paragraph(band, ctx.occupancy_risk, outcome),
    )


def _yes(value: object) -> bool:
    return str(value or '').strip().lower() == 'yes'


def _occupancy_risk(answers: BuildingProfileAnswers | None) -> OccupancyRisk:
    value = answers.occupancy_risk if answers is not None else None
    try:
        return OccupancyRisk(value or OccupancyRisk.non_sleeping.value)
    except ValueError:
        return OccupancyRisk.non_sleeping


def _answers(modules: Sequence[ModuleInstance], kind: ModuleKind, model: type) -> Any:
    instance = find_module(list(modules), kind)
    if instance is None:
        return None
    decoded = decode_module(instance)
    if isinstance(decoded, DecodedModule) and isinstance(decoded.answers, model):
        return decoded.answers
    return None


def building_context(
    modules: Sequence[ModuleInstance],
    *,
    scs_band: str | None = None,
) -> tuple[ComplexityBand, FraContext]:
    """Complexity band and occupancy context for the FRA summary.

    A band already stored on the document wins; otherwise it is scored from the building
    profile and the as-is protection answers.
    """
    profile = _answers(modules, ModuleKind.a2_building_profile, BuildingProfileAnswers)
    protection = _answers(modules, ModuleKind.fra_3_protection, ProtectionAnswers)

    storeys = derive_storeys_for_scoring(
        profile.storeys_band if profile else None,
        (profile.storeys_exact or profile.number_of_storeys) if profile else None,
    )
    ctx = FraContext(occupancy_risk=_occupancy_risk(profile), storeys=int(storeys))

    try:
        return ComplexityBand(str(scs_band or '')), ctx
    except ValueError:
        pass

    reliance = derive_fire_protection_reliance(
        {
            'has_suppression_system': _yes(protection.sprinkler_present),
            'has_smoke_control': _yes(protection.smoke_control_present),
            'has_detection_system': _yes(protection.alarm_present),
            'has_emergency_lighting': _yes(protection.emergency_lighting_present),
        }
        if protection
        else None
    )
    score = calculate_scs(
        BuildingComplexityInput(
            storeys_band=profile.storeys_band if profile else None,
            storeys_exact=(profile.storeys_exact or profile.number_of_storeys) if profile else None,
            floor_area_band=profile.floor_area_band if profile else None,
            floor_area_m2=(profile.floor_area_m2 or profile.total_floor_area_sqm) if profile else None,
            sleeping_risk=(profile.sleeping_risk if profile and profile.sleeping_risk else 'None'),
            layout_complexity=(profile.layout_complexity if profile and profile.layout_complexity else 'Simple'),
            fire_protection_reliance=reliance,
        )
    )
    return score.band, ctx
