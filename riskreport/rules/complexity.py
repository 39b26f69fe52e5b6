from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class ComplexityBand(str, Enum):
    low = 'Low'
    moderate = 'Moderate'
    high = 'High'
    very_high = 'VeryHigh'


_STOREY_BANDS = {
    '1': 1,
    '2': 2,
    '3': 3,
    '4': 4,
    '5-6': 6,
    '7-10': 10,
    '11+': 11,
    'unknown': 4,
}

_AREA_BANDS = {
    '<150': 150,
    '150-300': 300,
    '300-1000': 1000,
    '1000-5000': 5000,
    '5000-10000': 10000,
    '10000+': 10000,
    'unknown': 1000,
}

_SLEEPING_SCORES = {'HMO': 2, 'BlockOrHotel': 3, 'Vulnerable': 4}
_LAYOUT_SCORES = {'Moderate': 2, 'Complex': 3, 'MixedUse': 4}
_RELIANCE_SCORES = {
    'DetectionAndEmergencyLighting': 2,
    'CompartmentationCritical': 3,
    'EngineeredSystemsCritical': 4,
}


@dataclass(frozen=True)
class BuildingComplexityInput:
    storeys_band: str | None = None
    storeys_exact: float | str | None = None
    floor_area_band: str | None = None
    floor_area_m2: float | str | None = None
    sleeping_risk: str = 'None'
    layout_complexity: str = 'Simple'
    fire_protection_reliance: str = 'Basic'


@dataclass(frozen=True)
class ComplexityScore:
    score: int
    band: ComplexityBand
    height: int
    area: int
    sleeping: int
    layout: int
    reliance: int


def _positive_number(value: Any) -> float | None:
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def derive_storeys_for_scoring(band: str | None, exact: Any = None) -> float:
    exact_value = _positive_number(exact)
    if band == 'custom' and exact_value is not None:
        return exact_value
    if band in _STOREY_BANDS:
        return _STOREY_BANDS[band]
    return exact_value if exact_value is not None else 4


def derive_floor_area_for_scoring(band: str | None, exact: Any = None) -> float:
    exact_value = _positive_number(exact)
    if band == 'custom' and exact_value is not None:
        return exact_value
    if band in _AREA_BANDS:
        return _AREA_BANDS[band]
    return exact_value if exact_value is not None else 1000


def _score_height(storeys: float) -> int:
    if storeys <= 2:
        return 1
    if storeys <= 4:
        return 2
    if storeys <= 6:
        return 3
    return 4


def _score_area(area: float) -> int:
    if area < 300:
        return 1
    if area < 1000:
        return 2
    if area < 5000:
        return 3
    return 4


def calculate_scs(value: BuildingComplexityInput) -> ComplexityScore:
    """Structural complexity score: five additive components banded at 9, 14 and 18."""
    height = _score_height(derive_storeys_for_scoring(value.storeys_band, value.storeys_exact))
    area = _score_area(derive_floor_area_for_scoring(value.floor_area_band, value.floor_area_m2))
    sleeping = _SLEEPING_SCORES.get(value.sleeping_risk, 0)
    layout = _LAYOUT_SCORES.get(value.layout_complexity, 1)
    reliance = _RELIANCE_SCORES.get(value.fire_protection_reliance, 1)

    score = height + area + sleeping + layout + reliance
    if score >= 18:
        band = ComplexityBand.very_high
    elif score >= 14:
        band = ComplexityBand.high
    elif score >= 9:
        band = ComplexityBand.moderate
    else:
        band = ComplexityBand.low
    return ComplexityScore(
        score=score,
        band=band,
        height=height,
        area=area,
        sleeping=sleeping,
        layout=layout,
        reliance=reliance,
    )


def derive_fire_protection_reliance(protection: Mapping[str, Any] | None) -> str:
    if not protection:
        return 'Basic'
    if (
        protection.get('has_suppression_system')
        or protection.get('has_smoke_control')
        or protection.get('engineered_evacuation_strategy')
    ):
        return 'EngineeredSystemsCritical'
    if protection.get('compartmentation_critical'):
        return 'CompartmentationCritical'
    if protection.get('has_detection_system') and protection.get('has_emergency_lighting'):
        return 'DetectionAndEmergencyLighting'
    return 'Basic'
