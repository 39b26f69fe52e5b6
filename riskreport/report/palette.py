from __future__ import annotations

from reportlab.lib import colors

BLACK = colors.Color(0, 0, 0)
WHITE = colors.Color(1, 1, 1)
INK = colors.Color(0.1, 0.1, 0.1)
INK_SOFT = colors.Color(0.2, 0.2, 0.2)
LABEL = colors.Color(0.3, 0.3, 0.3)
MUTED = colors.Color(0.5, 0.5, 0.5)
RULE = colors.Color(0.8, 0.8, 0.8)
RULE_LIGHT = colors.Color(0.9, 0.9, 0.9)
BORDER = colors.Color(0.7, 0.7, 0.7)
PANEL = colors.Color(0.95, 0.95, 0.97)
CALLOUT_FILL = colors.Color(0.98, 0.98, 0.98)
ACCENT = colors.Color(0.12, 0.25, 0.45)
ALERT = colors.Color(0.7, 0, 0)
CAUTION = colors.Color(0.8, 0.4, 0)
TIP = colors.Color(0.6, 0.4, 0)
ISSUED_GREEN = colors.Color(0.13, 0.55, 0.13)

WATERMARK_DRAFT = colors.Color(0.9, 0.9, 0.9)
WATERMARK_SUPERSEDED = colors.Color(0.8, 0, 0)

_GREEN = colors.Color(0.13, 0.55, 0.13)
_AMBER = colors.Color(0.85, 0.65, 0.13)
_ORANGE = colors.Color(0.9, 0.5, 0.13)
_RED = colors.Color(0.8, 0.13, 0.13)
_BLUE = colors.Color(0.2, 0.5, 0.8)

_PRIORITY_COLORS = {
    'P1': _RED,
    'P2': _ORANGE,
    'P3': _AMBER,
    'P4': _BLUE,
}

_OUTCOME_COLORS = {
    'compliant': _GREEN,
    'minor_def': _AMBER,
    'material_def': _RED,
    'info_gap': _BLUE,
    'na': colors.Color(0.6, 0.6, 0.6),
}

_OUTCOME_LABELS = {
    'compliant': 'Compliant',
    'minor_def': 'Minor Deficiency',
    'material_def': 'Material Deficiency',
    'info_gap': 'Information Gap',
    'na': 'Not Applicable',
}

_RATING_COLORS = {
    'low': _GREEN,
    'medium': _AMBER,
    'high': _ORANGE,
    'intolerable': _RED,
}

_EXECUTIVE_OUTCOME_COLORS = {
    'SatisfactoryWithImprovements': _GREEN,
    'ImprovementsRequired': _AMBER,
    'SignificantDeficiencies': _ORANGE,
    'MaterialLifeSafetyRiskPresent': _RED,
}


def priority_color(priority: str | None) -> colors.Color:
    return _PRIORITY_COLORS.get(str(priority or '').upper(), MUTED)


def quick_action_color(priority: str | None) -> colors.Color:
    return _ORANGE if str(priority or '').upper() == 'P2' else _AMBER


def outcome_color(outcome: str | None) -> colors.Color:
    return _OUTCOME_COLORS.get(str(outcome or ''), colors.Color(0.7, 0.7, 0.7))


def outcome_label(outcome: str | None) -> str:
    return _OUTCOME_LABELS.get(str(outcome or ''), 'Pending')


def rating_color(rating: str | None) -> colors.Color:
    return _RATING_COLORS.get(str(rating or '').strip().lower(), MUTED)


def executive_outcome_color(outcome: str | None) -> colors.Color:
    return _EXECUTIVE_OUTCOME_COLORS.get(str(outcome or ''), MUTED)
