from __future__ import annotations

import base64
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from riskreport.adapters.branding import TIER_TEXT, Branding
from riskreport.config import PageGeometry, Settings
from riskreport.report.context import ReportContext
from riskreport.report.pagination import Paginator
from riskreport.report.surface import ReportFonts
from riskreport.types import ReportInput, ReportKind

ONE_PIXEL_PNG = base64.b64decode(
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=='
)
FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        default_logo_path=None,
        org_logo_base_url=None,
        records_base_url=None,
    )


@pytest.fixture
def geometry() -> PageGeometry:
    return PageGeometry()


@pytest.fixture
def fonts() -> ReportFonts:
    return ReportFonts(regular='Helvetica', bold='Helvetica-Bold')


@pytest.fixture
def pager(geometry: PageGeometry, fonts: ReportFonts) -> Paginator:
    return Paginator(geometry=geometry, fonts=fonts)


@pytest.fixture
def logo_file(tmp_path: Path) -> Path:
    path = tmp_path / 'logo.png'
    path.write_bytes(ONE_PIXEL_PNG)
    return path


def document_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        'id': 'doc-1',
        'title': 'Riverside Warehouse',
        'document_type': 'FRA',
        'status': 'draft',
        'version': 1,
        'assessment_date': '2026-03-01',
        'assessor_name': 'Sam Patel',
        'assessor_role': 'Fire Risk Assessor',
        'responsible_person': 'Facilities Manager',
        'scope_description': 'Whole building including the loading bay.',
        'jurisdiction': 'UK',
    }
    payload.update(overrides)
    return payload


def fra_modules() -> list[dict[str, Any]]:
    return [
        {
            'id': 'm-a1',
            'module_key': 'A1_DOC_CONTROL',
            'outcome': 'compliant',
            'data': {'responsible_person': 'Facilities Manager', 'standards_selected': ['BS 9999']},
        },
        {
            'id': 'm-a2',
            'module_key': 'A2_BUILDING_PROFILE',
            'outcome': 'compliant',
            'data': {'building_height_m': 12, 'number_of_storeys': 3, 'primary_use': 'Storage'},
        },
        {
            'id': 'm-fra2',
            'module_key': 'FRA_2_ESCAPE_ASIS',
            'outcome': 'material_def',
            'assessor_notes': 'Final exit door chained during the visit.',
            'data': {
                'escape_strategy': 'simultaneous',
                'travel_distances_compliant': 'yes',
                'stair_protection_status': 'yes',
            },
        },
        {
            'id': 'm-fra3',
            'module_key': 'FRA_3_PROTECTION_ASIS',
            'outcome': 'info_gap',
            'data': {'alarm_present': 'unknown', 'emergency_lighting_present': 'yes'},
        },
        {
            'id': 'm-fra4',
            'module_key': 'FRA_4_SIGNIFICANT_FINDINGS',
            'data': {
                'overall_risk_rating': 'intolerable',
                'executive_summary': 'Escape routes are compromised.',
                'review_recommendation': 'Review within 3 months.',
                'key_assumptions': 'Roof void not accessed.',
            },
        },
    ]


def fra_actions() -> list[dict[str, Any]]:
    return [
        {
            'id': 'a-p3',
            'recommended_action': 'Replace faded fire exit signage in the stores.',
            'priority_band': 'P3',
            'status': 'open',
            'module_instance_id': 'm-fra2',
            'created_at': '2026-03-01T10:00:00Z',
        },
        {
            'id': 'a-p1',
            'recommended_action': 'Remove the chain from the rear final exit door.',
            'priority_band': 'P1',
            'status': 'open',
            'owner': 'Site Manager',
            'target_date': '2026-03-07',
            'trigger_text': 'Final exit locked',
            'module_instance_id': 'm-fra2',
            'created_at': '2026-03-01T09:00:00Z',
        },
    ]


def make_input(**overrides: Any) -> ReportInput:
    payload: dict[str, Any] = {
        'document': document_payload(),
        'modules': fra_modules(),
        'actions': fra_actions(),
        'action_ratings': [
            {'action_id': 'a-p1', 'likelihood': 4, 'impact': 5, 'rated_at': '2026-03-01T09:05:00Z'},
        ],
        'organisation': {'id': 'org-1', 'name': 'Acme Logistics'},
    }
    payload.update(overrides)
    return ReportInput.model_validate(payload)


@pytest.fixture
def report_input():
    return make_input


@pytest.fixture
def make_context(settings: Settings):
    def _make(report: ReportInput | None = None, *, kind: ReportKind = ReportKind.fra, **kwargs: Any) -> ReportContext:
        report = report or make_input()
        return ReportContext(
            report=report,
            kind=kind,
            mode=report.resolved_mode,
            settings=settings,
            now=FIXED_NOW,
            branding=Branding(logo_bytes=None, mime=None, source_tier=TIER_TEXT, brand_name='EziRisk'),
            **kwargs,
        )

    return _make


def _all_text(pager: Paginator) -> str:
    return '\n'.join(page.plain_text() for page in pager.pages)


@pytest.fixture
def text_of():
    return _all_text
