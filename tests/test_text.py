from __future__ import annotations

from datetime import datetime, timezone

from riskreport.report.text import (
    font_width_fn,
    format_date,
    humanize,
    sanitize_pdf_text,
    split_paragraphs,
    wrap_text,
)

WIDTH = font_width_fn('Helvetica')


def test_sanitize_maps_typographic_glyphs():
    assert sanitize_pdf_text('“Exit” – route…') == '"Exit" - route...'
    assert sanitize_pdf_text('✅ done ❌ missing') == '[OK] done [X] missing'
    assert sanitize_pdf_text('≥ 18m at 20°') == '>= 18m at 20 deg'


def test_sanitize_drops_unencodable_and_collapses_breaks():
    assert sanitize_pdf_text('line one\nline two\ttab') == 'line one line two tab'
    assert sanitize_pdf_text('zone 日本 ok') == 'zone  ok'
    assert sanitize_pdf_text(None) == ''


def test_sanitize_is_idempotent():
    raw = '⚠ “Café” — 5 × 3 ≠ 14 ™ ✓'
    once = sanitize_pdf_text(raw)
    assert sanitize_pdf_text(once) == once


def test_wrap_empty_input_yields_single_blank_line():
    assert wrap_text('', 100, 10, WIDTH) == ['']
    assert wrap_text('日本', 100, 10, WIDTH) == ['']


def test_wrap_respects_width():
    text = 'The responsible person must keep the assessment under regular review at all times.'
    lines = wrap_text(text, 150, 10, WIDTH)
    assert len(lines) > 1
    assert ' '.join(lines) == text
    assert all(WIDTH(line, 10) <= 150 for line in lines)


def test_wrap_puts_overlong_word_on_its_own_line():
    word = 'X' * 80
    lines = wrap_text(f'short {word} tail', 100, 10, WIDTH)
    assert lines == ['short', word, 'tail']


def test_wrap_collapses_runs_of_spaces():
    text = 'Keep  the   escape route    clear of stored   goods at all times.'
    lines = wrap_text(text, 120, 10, WIDTH)
    assert len(lines) > 1
    assert all(line == line.strip() and '  ' not in line for line in lines)
    assert ' '.join(lines) == ' '.join(text.split())
    assert wrap_text('zone 日本 ok', 200, 10, WIDTH) == ['zone ok']


def test_split_paragraphs_drops_blank_blocks():
    assert split_paragraphs('First.\n\n\n  \nSecond.\n') == ['First.', 'Second.']
    assert split_paragraphs(None) == []


def test_format_date_and_humanize():
    assert format_date(datetime(2026, 3, 7, tzinfo=timezone.utc)) == '07 Mar 2026'
    assert format_date('2026-03-07') == '07 Mar 2026'
    assert format_date(None) == '-'
    assert format_date('not a date', placeholder='n/a') == 'n/a'
    assert humanize('in_progress') == 'in progress'
