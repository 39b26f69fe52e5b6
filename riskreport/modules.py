from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from riskreport.types import ModuleInstance

logger = logging.getLogger(__name__)


class ModuleKind(str, Enum):
    a1_doc_control = 'A1_DOC_CONTROL'
    a2_building_profile = 'A2_BUILDING_PROFILE'
    a3_persons_at_risk = 'A3_PERSONS_AT_RISK'
    a4_management_controls = 'A4_MANAGEMENT_CONTROLS'
    a5_emergency_arrangements = 'A5_EMERGENCY_ARRANGEMENTS'
    a7_review_assurance = 'A7_REVIEW_ASSURANCE'
    fra_1_hazards = 'FRA_1_HAZARDS'
    fra_2_escape = 'FRA_2_ESCAPE_ASIS'
    fra_3_protection = 'FRA_3_PROTECTION_ASIS'
    fra_4_significant_findings = 'FRA_4_SIGNIFICANT_FINDINGS'
    fra_5_external_fire_spread = 'FRA_5_EXTERNAL_FIRE_SPREAD'
    fsd_1_reg_basis = 'FSD_1_REG_BASIS'
    fsd_2_evac_strategy = 'FSD_2_EVAC_STRATEGY'
    fsd_3_escape_design = 'FSD_3_ESCAPE_DESIGN'
    fsd_4_passive_protection = 'FSD_4_PASSIVE_PROTECTION'
    fsd_5_active_systems = 'FSD_5_ACTIVE_SYSTEMS'
    fsd_6_frs_access = 'FSD_6_FRS_ACCESS'
    fsd_7_drawings = 'FSD_7_DRAWINGS'
    fsd_8_smoke_control = 'FSD_8_SMOKE_CONTROL'
    fsd_9_construction_phase = 'FSD_9_CONSTRUCTION_PHASE'
    dsear_1_dangerous_substances = 'DSEAR_1_DANGEROUS_SUBSTANCES'
    dsear_2_process_releases = 'DSEAR_2_PROCESS_RELEASES'
    dsear_3_hazardous_area_classification = 'DSEAR_3_HAZARDOUS_AREA_CLASSIFICATION'
    dsear_4_ignition_sources = 'DSEAR_4_IGNITION_SOURCES'
    dsear_5_explosion_protection = 'DSEAR_5_EXPLOSION_PROTECTION'
    dsear_6_risk_assessment = 'DSEAR_6_RISK_ASSESSMENT'
    dsear_10_hierarchy_of_control = 'DSEAR_10_HIERARCHY_OF_CONTROL'
    dsear_11_explosion_emergency_response = 'DSEAR_11_EXPLOSION_EMERGENCY_RESPONSE'

    @property
    def display_name(self) -> str:
        return CATALOG_NAMES[self]

    @classmethod
    def parse(cls, key: str | None) -> ModuleKind | None:
        try:
            return cls(str(key or ''))
        except ValueError:
            return None


CATALOG_NAMES: dict[ModuleKind, str] = {
    ModuleKind.a1_doc_control: 'A1 - Document Control & Governance',
    ModuleKind.a2_building_profile: 'A2 - Building Profile',
    ModuleKind.a3_persons_at_risk: 'A3 - Occupancy & Persons at Risk',
    ModuleKind.a4_management_controls: 'A4 - Management Systems',
    ModuleKind.a5_emergency_arrangements: 'A5 - Emergency Arrangements',
    ModuleKind.a7_review_assurance: 'A7 - Review & Assurance',
    ModuleKind.fra_1_hazards: 'FRA-1 - Hazards & Ignition Sources',
    ModuleKind.fra_2_escape: 'FRA-2 - Means of Escape (As-Is)',
    ModuleKind.fra_3_protection: 'FRA-3 - Fire Protection (As-Is)',
    ModuleKind.fra_4_significant_findings: 'FRA-4 - Significant Findings (Summary)',
    ModuleKind.fra_5_external_fire_spread: 'FRA-5 - External Fire Spread',
    ModuleKind.fsd_1_reg_basis: 'FSD-1 - Regulatory Basis',
    ModuleKind.fsd_2_evac_strategy: 'FSD-2 - Evacuation Strategy',
    ModuleKind.fsd_3_escape_design: 'FSD-3 - Escape Design',
    ModuleKind.fsd_4_passive_protection: 'FSD-4 - Passive Fire Protection',
    ModuleKind.fsd_5_active_systems: 'FSD-5 - Active Fire Systems',
    ModuleKind.fsd_6_frs_access: 'FSD-6 - Fire & Rescue Service Access',
    ModuleKind.fsd_7_drawings: 'FSD-7 - Drawings & Schedules',
    ModuleKind.fsd_8_smoke_control: 'FSD-8 - Smoke Control',
    ModuleKind.fsd_9_construction_phase: 'FSD-9 - Construction Phase',
    ModuleKind.dsear_1_dangerous_substances: 'DSEAR-1 - Dangerous Substances Register',
    ModuleKind.dsear_2_process_releases: 'DSEAR-2 - Process & Release Assessment',
    ModuleKind.dsear_3_hazardous_area_classification: 'DSEAR-3 - Hazardous Area Classification',
    ModuleKind.dsear_4_ignition_sources: 'DSEAR-4 - Ignition Source Control',
    ModuleKind.dsear_5_explosion_protection: 'DSEAR-5 - Explosion Protection & Mitigation',
    ModuleKind.dsear_6_risk_assessment: 'DSEAR-6 - Risk Assessment Table',
    ModuleKind.dsear_10_hierarchy_of_control: 'DSEAR-10 - Hierarchy of Control',
    ModuleKind.dsear_11_explosion_emergency_response: 'DSEAR-11 - Explosion Emergency Response',
}


def module_display_name(module_key: str | None) -> str:
    kind = ModuleKind.parse(module_key)
    if kind is None:
        return str(module_key or 'Unknown module')
    return kind.display_name


class _Answers(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, coerce_numbers_to_str=True)


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if str(item or '').strip()]
    return [str(value)]


class GenericAnswers(_Answers):
    """Kinds with no dedicated fields."""


class DocumentControlAnswers(_Answers):
    responsible_person: str | None = None
    standards_selected: list[str] = Field(default_factory=list)

    @field_validator('standards_selected', mode='before')
    @classmethod
    def _standards(cls, value: Any) -> list[str]:
        return _string_list(value)


class BuildingProfileAnswers(_Answers):
    building_height_m: str | None = None
    number_of_storeys: str | None = None
    total_floor_area_sqm: str | None = None
    primary_use: str | None = None
    frame_type: str | None = None
    storeys_band: str | None = None
    storeys_exact: str | None = None
    floor_area_band: str | None = None
    floor_area_m2: str | None = None
    occupancy_risk: str | None = None
    sleeping_risk: str | None = None
    layout_complexity: str | None = None


class PersonsAtRiskAnswers(_Answers):
    max_occupancy: str | None = None
    normal_occupancy: str | None = None
    vulnerable_groups_present: str | None = None


class ManagementAnswers(_Answers):
    fire_safety_policy: str | None = None
    training_induction: str | None = None
    testing_records: str | None = None


class EmergencyAnswers(_Answers):
    evacuation_strategy: str | None = None
    emergency_plan_exists: str | None = None
    peeps_in_place: str | None = None
    drill_frequency: str | None = None


class HazardsAnswers(_Answers):
    ignition_sources: list[str] = Field(default_factory=list)
    fuel_sources: list[str] = Field(default_factory=list)
    arson_risk: str | None = None

    @field_validator('ignition_sources', 'fuel_sources', mode='before')
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _string_list(value)


class EscapeAnswers(_Answers):
    escape_strategy: str | None = None
    travel_distances_compliant: str | None = None
    stair_protection_status: str | None = None


class ProtectionAnswers(_Answers):
    alarm_present: str | None = None
    alarm_category: str | None = None
    emergency_lighting_present: str | None = None
    compartmentation_condition: str | None = None
    fire_stopping_confidence: str | None = None
    sprinkler_present: str | None = None
    smoke_control_present: str | None = None


class OutcomeOverride(_Answers):
    enabled: bool = False
    outcome: str | None = None
    reason: str | None = None


class SignificantFindingsAnswers(_Answers):
    overall_risk_rating: str | None = None
    executive_summary: str | None = None
    review_recommendation: str | None = None
    key_assumptions: str | None = None
    override: OutcomeOverride = Field(default_factory=OutcomeOverride)

    @field_validator('override', mode='before')
    @classmethod
    def _override(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ExternalSpreadAnswers(_Answers):
    building_height_m: str | None = None
    building_height_relevant: str | None = None
    cladding_present: str | None = None
    insulation_combustibility_known: str | None = None
    pas9980_or_equivalent_appraisal: str | None = None


class RegulatoryBasisAnswers(_Answers):
    regulatory_framework_selected: str | None = None
    fire_safety_objectives: str | None = None
    deviations_from_guidance: list[Any] | None = None

    @field_validator('deviations_from_guidance', mode='before')
    @classmethod
    def _deviations(cls, value: Any) -> list[Any] | None:
        return value if isinstance(value, list) else None


class EvacuationStrategyAnswers(_Answers):
    evacuation_strategy_type: str | None = None
    alarm_communication_method: str | None = None


class EscapeDesignAnswers(_Answers):
    travel_distance_basis: str | None = None
    exit_capacity_calculation_done: str | None = None
    stairs_strategy: str | None = None


class PassiveProtectionAnswers(_Answers):
    fire_resistance_standard: str | None = None
    compartmentation_strategy: str | None = None


class ActiveSystemsAnswers(_Answers):
    detection_alarm_design_category: str | None = None
    sprinkler_provision: str | None = None
    sprinkler_standard: str | None = None


class FireServiceAccessAnswers(_Answers):
    water_supplies_hydrants: str | None = None
    dry_riser: str | None = None
    wet_riser: str | None = None


class DrawingsAnswers(_Answers):
    drawings_checklist: dict[str, Any] | None = None


class SmokeControlAnswers(_Answers):
    smoke_control_present: str | None = None
    system_type: str | None = None


class ConstructionPhaseAnswers(_Answers):
    construction_phase_applicable: str | None = None
    fire_plan_exists: str | None = None


class Substance(_Answers):
    name: str | None = None
    physical_state: str | None = None
    quantity: str | None = None
    storage_location: str | None = None
    flash_point: str | None = None
    lfl_ufl: str | None = Field(default=None, validation_alias=AliasChoices('LFL_UFL', 'lfl_ufl'))


class SubstancesAnswers(_Answers):
    substances: list[Substance] = Field(default_factory=list)


class Zone(_Answers):
    zone_type: str | None = None
    extent_description: str | None = None


class HazardousAreaAnswers(_Answers):
    zones: list[Zone] = Field(default_factory=list)
    drawings_reference: str | None = None


class RiskRow(_Answers):
    activity: str | None = None
    hazard: str | None = None
    likelihood: str | None = None
    severity: str | None = None
    residual_risk: str | None = None


class RiskAssessmentAnswers(_Answers):
    risk_rows: list[RiskRow] = Field(default_factory=list)


_ANSWER_MODELS: dict[ModuleKind, type[_Answers]] = {
    ModuleKind.a1_doc_control: DocumentControlAnswers,
    ModuleKind.a2_building_profile: BuildingProfileAnswers,
    ModuleKind.a3_persons_at_risk: PersonsAtRiskAnswers,
    ModuleKind.a4_management_controls: ManagementAnswers,
    ModuleKind.a5_emergency_arrangements: EmergencyAnswers,
    ModuleKind.fra_1_hazards: HazardsAnswers,
    ModuleKind.fra_2_escape: EscapeAnswers,
    ModuleKind.fra_3_protection: ProtectionAnswers,
    ModuleKind.fra_4_significant_findings: SignificantFindingsAnswers,
    ModuleKind.fra_5_external_fire_spread: ExternalSpreadAnswers,
    ModuleKind.fsd_1_reg_basis: RegulatoryBasisAnswers,
    ModuleKind.fsd_2_evac_strategy: EvacuationStrategyAnswers,
    ModuleKind.fsd_3_escape_design: EscapeDesignAnswers,
    ModuleKind.fsd_4_passive_protection: PassiveProtectionAnswers,
    ModuleKind.fsd_5_active_systems: ActiveSystemsAnswers,
    ModuleKind.fsd_6_frs_access: FireServiceAccessAnswers,
    ModuleKind.fsd_7_drawings: DrawingsAnswers,
    ModuleKind.fsd_8_smoke_control: SmokeControlAnswers,
    ModuleKind.fsd_9_construction_phase: ConstructionPhaseAnswers,
    ModuleKind.dsear_1_dangerous_substances: SubstancesAnswers,
    ModuleKind.dsear_3_hazardous_area_classification: HazardousAreaAnswers,
    ModuleKind.dsear_6_risk_assessment: RiskAssessmentAnswers,
}


@dataclass(frozen=True)
class DecodedModule:
    kind: ModuleKind
    instance: ModuleInstance
    answers: _Answers

    @property
    def name(self) -> str:
        return self.kind.display_name

    @property
    def raw(self) -> dict[str, Any]:
        return self.instance.data


@dataclass(frozen=True)
class UnknownModule:
    """A key outside the catalog, or answers that failed to decode; rendered as generic key-values."""

    instance: ModuleInstance
    error: str | None = None

    @property
    def name(self) -> str:
        return module_display_name(self.instance.module_key)

    @property
    def raw(self) -> dict[str, Any]:
        return self.instance.data


AnyModule = Union[DecodedModule, UnknownModule]


def decode_module(instance: ModuleInstance) -> AnyModule:
    kind = ModuleKind.parse(instance.module_key)
    if kind is None:
        return UnknownModule(instance=instance)
    model = _ANSWER_MODELS.get(kind, GenericAnswers)
    try:
        answers = model.model_validate(instance.data or {})
    except ValidationError as exc:
        logger.warning('Failed to decode answers for module %s: %s', instance.module_key, exc)
        return UnknownModule(instance=instance, error=str(exc))
    return DecodedModule(kind=kind, instance=instance, answers=answers)


@dataclass(frozen=True)
class KeyDetail:
    label: str
    value: str

    def as_bullet(self) -> str:
        return f'{self.label}: {self.value}' if self.value else self.label


_KeyDetailFn = Callable[[Any], list[KeyDetail]]


def _details(*pairs: tuple[str, Any]) -> list[KeyDetail]:
    return [KeyDetail(label, str(value)) for label, value in pairs if value not in (None, '', [])]


def _building_profile(a: BuildingProfileAnswers) -> list[KeyDetail]:
    return _details(
        ('Height', f'{a.building_height_m}m' if a.building_height_m else None),
        ('Storeys', a.number_of_storeys),
        ('Area', f'{a.total_floor_area_sqm} sqm' if a.total_floor_area_sqm else None),
        ('Use', a.primary_use),
        ('Frame', a.frame_type),
    )


def _persons_at_risk(a: PersonsAtRiskAnswers) -> list[KeyDetail]:
    details = _details(('Max Occupancy', a.max_occupancy), ('Normal Occupancy', a.normal_occupancy))
    if a.vulnerable_groups_present == 'yes':
        details.append(KeyDetail('Vulnerable groups present', ''))
    return details


def _management(a: ManagementAnswers) -> list[KeyDetail]:
    return _details(('Fire Safety Policy', a.fire_safety_policy))


def _emergency(a: EmergencyAnswers) -> list[KeyDetail]:
    return _details(('Evacuation Strategy', a.evacuation_strategy))


def _hazards(a: HazardsAnswers) -> list[KeyDetail]:
    return _details(
        ('Ignition Sources', ', '.join(a.ignition_sources)),
        ('Fuel Sources', ', '.join(a.fuel_sources)),
        ('Arson Risk', a.arson_risk if a.arson_risk != 'unknown' else None),
    )


def _external_spread(a: ExternalSpreadAnswers) -> list[KeyDetail]:
    height = a.building_height_relevant or a.building_height_m
    appraisal = a.pas9980_or_equivalent_appraisal
    return _details(
        ('Building Height', f'{height}m' if height else None),
        ('PAS 9980 Appraisal', appraisal.replace('_', ' ') if appraisal else None),
    )


def _regulatory_basis(a: RegulatoryBasisAnswers) -> list[KeyDetail]:
    deviations = None
    if a.deviations_from_guidance is not None:
        deviations = f'{len(a.deviations_from_guidance)} noted'
    return _details(
        ('Framework', a.regulatory_framework_selected),
        ('Objectives', a.fire_safety_objectives),
        ('Deviations', deviations),
    )


def _evacuation(a: EvacuationStrategyAnswers) -> list[KeyDetail]:
    return _details(('Strategy', a.evacuation_strategy_type), ('Alarm', a.alarm_communication_method))


def _escape_design(a: EscapeDesignAnswers) -> list[KeyDetail]:
    return _details(
        ('Travel basis', a.travel_distance_basis),
        ('Exit calcs', a.exit_capacity_calculation_done),
        ('Stairs', a.stairs_strategy),
    )


def _passive(a: PassiveProtectionAnswers) -> list[KeyDetail]:
    return _details(('FR Standard', a.fire_resistance_standard), ('Compartmentation', a.compartmentation_strategy))


def _active(a: ActiveSystemsAnswers) -> list[KeyDetail]:
    return _details(
        ('Detection', a.detection_alarm_design_category),
        ('Sprinklers', a.sprinkler_provision),
        ('Sprinkler std', a.sprinkler_standard if a.sprinkler_provision == 'yes' else None),
    )


def _frs_access(a: FireServiceAccessAnswers) -> list[KeyDetail]:
    return _details(('Hydrants', a.water_supplies_hydrants), ('Dry riser', a.dry_riser), ('Wet riser', a.wet_riser))


def _drawings(a: DrawingsAnswers) -> list[KeyDetail]:
    if not a.drawings_checklist:
        return []
    checked = sum(1 for value in a.drawings_checklist.values() if value)
    return [KeyDetail('Drawings', f'{checked}/{len(a.drawings_checklist)} types provided')]


def _smoke(a: SmokeControlAnswers) -> list[KeyDetail]:
    return _details(
        ('Smoke control', a.smoke_control_present),
        ('Type', a.system_type if a.smoke_control_present == 'yes' else None),
    )


def _construction(a: ConstructionPhaseAnswers) -> list[KeyDetail]:
    return _details(
        ('Applicable', a.construction_phase_applicable),
        ('Fire plan', a.fire_plan_exists if a.construction_phase_applicable == 'yes' else None),
    )


_KEY_DETAILS: dict[ModuleKind, _KeyDetailFn] = {
    ModuleKind.a2_building_profile: _building_profile,
    ModuleKind.a3_persons_at_risk: _persons_at_risk,
    ModuleKind.a4_management_controls: _management,
    ModuleKind.a5_emergency_arrangements: _emergency,
    ModuleKind.fra_1_hazards: _hazards,
    ModuleKind.fra_5_external_fire_spread: _external_spread,
    ModuleKind.fsd_1_reg_basis: _regulatory_basis,
    ModuleKind.fsd_2_evac_strategy: _evacuation,
    ModuleKind.fsd_3_escape_design: _escape_design,
    ModuleKind.fsd_4_passive_protection: _passive,
    ModuleKind.fsd_5_active_systems: _active,
    ModuleKind.fsd_6_frs_access: _frs_access,
    ModuleKind.fsd_7_drawings: _drawings,
    ModuleKind.fsd_8_smoke_control: _smoke,
    ModuleKind.fsd_9_construction_phase: _construction,
}


def key_details(module: AnyModule) -> list[KeyDetail]:
    """Absent answers are simply left out."""
    if not isinstance(module, DecodedModule):
        return []
    builder = _KEY_DETAILS.get(module.kind)
    if builder is None:
        return []
    return builder(module.answers)


@dataclass(frozen=True)
class GenericEntry:
    key: str
    value: str


def generic_entries(raw: dict[str, Any], *, limit: int = 5, max_value_chars: int = 100) -> list[GenericEntry]:
    entries: list[GenericEntry] = []
    for key in [item for item in raw.keys() if item != 'notes'][:limit]:
        value = raw[key]
        if isinstance(value, (dict, list)):
            display = json.dumps(value, ensure_ascii=False, default=str)[:max_value_chars]
        else:
            display = str(value)
        entries.append(GenericEntry(key=key, value=display))
    return entries


@dataclass
class ModuleIndex:
    """In-memory id lookup used for cross references from actions and attachments."""

    by_id: dict[str, ModuleInstance] = field(default_factory=dict)

    @classmethod
    def build(cls, instances: list[ModuleInstance]) -> ModuleIndex:
        return cls(by_id={item.id: item for item in instances if item.id})

    def get(self, module_id: str | None) -> ModuleInstance | None:
        if not module_id:
            return None
        return self.by_id.get(module_id)


def find_module(instances: list[ModuleInstance], kind: ModuleKind) -> ModuleInstance | None:
    for item in instances:
        if item.module_key == kind.value:
            return item
    return None
