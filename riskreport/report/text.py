from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable

from reportlab.pdfbase import pdfmetrics

from riskreport.types import coerce_datetime

WidthFn = Callable[[str, float], float]

# Order matters: multi-character replacements never produce characters that a later
# entry would rewrite again, which keeps sanitize_pdf_text idempotent.
_TYPOGRAPHIC_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ('⚠', '!'),
    ('✅', '[OK]'),
    ('❌', '[X]'),
    ('✓', '[OK]'),
    ('✗', '[X]'),
    ('“', '"'),
    ('”', '"'),
    ('‘', "'"),
    ('’', "'"),
    ('—', '-'),
    ('–', '-'),
    ('…', '...'),
    ('•', '*'),
    ('°', ' deg'),
    ('×', 'x'),
    ('÷', '/'),
    ('≤', '<='),
    ('≥', '>='),
    ('≠', '!='),
    ('€', 'EUR'),
    ('¢', 'c'),
    ('™', '(TM)'),
    ('®', '(R)'),
    ('©', '(C)'),
)

_UNENCODABLE_RE = re.compile(r'[^\x20-\x7E\xA0-\xFF]')
_CONTROL_WHITESPACE_RE = re.compile(r'[\r\n\t]+')
_PARAGRAPH_SPLIT_RE = re.compile(r'\n\s*\n')


def sanitize_pdf_text(value: Any) -> str:
    """Map typographic glyphs to ASCII and drop anything outside printable Latin-1.

    The standard Type 1 fonts only carry WinAnsi glyphs, so anything else would
    abort serialization. Line breaks and tabs collapse to a single space.
    """
    text = '' if value is None else str(value)
    text = _CONTROL_WHITESPACE_RE.sub(' ', text)
    for source, target in _TYPOGRAPHIC_REPLACEMENTS:
        if source in text:
            text = text.replace(source, target)
    return _UNENCODABLE_RE.sub('', text)


def font_width_fn(font_name: str) -> WidthFn:
    def _width(text: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, font_name, size)

    return _width


def text_width(text: str, font_name: str, size: float) -> float:
    return pdfmetrics.stringWidth(sanitize_pdf_text(text), font_name, size)


def wrap_text(value: Any, max_width: float, font_size: float, width_fn: WidthFn) -> list[str]:
    """Greedy word wrap of sanitized text.

    Always returns at least one line; an empty or fully stripped input gives ``['']``.
    A single word wider than ``max_width`` sits alone on its own line.
    """
    safe = sanitize_pdf_text(value).strip()
    if not safe:
        return ['']

    lines: list[str] = []
    current = ''
    for word in safe.split():
        candidate = f'{current} {word}' if current else word
        if current and width_fn(candidate, font_size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines or ['']


def truncate_to_width(
    value: str,
    max_width: float,
    font_size: float,
    width_fn: WidthFn,
    *,
    suffix: str = '...',
) -> str:
    """Trim ``value`` until it plus ``suffix`` fits; text that already fits is returned as is."""
    if width_fn(value, font_size) <= max_width:
        return value
    text = value
    while text and width_fn(f'{text}{suffix}', font_size) > max_width:
        text = text[:-1]
    return f'{text.rstrip()}{suffix}'


def split_paragraphs(text: Any) -> list[str]:
    blocks = [part.strip() for part in _PARAGRAPH_SPLIT_RE.split(str(text or ''))]
    return [item for item in blocks if item]


def flatten_whitespace(text: Any) -> str:
    return ' '.join(str(text or '').split())


def format_date(value: Any, *, placeholder: str = '-') -> str:
    if value is None or value == '':
        return placeholder
    try:
        parsed = coerce_datetime(value)
    except ValueError:
        return placeholder
    if parsed is None:
        return placeholder
    return parsed.strftime('%d %b %Y')


def format_generated_date(now: datetime) -> str:
    return now.strftime('%d %b %Y')


def humanize(value: Any) -> str:
    return str(value or '').replace('_', ' ').strip()
