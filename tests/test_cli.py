from __future__ import annotations

import json

import pytest

from conftest import document_payload, fra_actions, fra_modules
from main import main
from riskreport.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    for name in ('DEFAULT_LOGO_PATH', 'ORG_LOGO_BASE_URL', 'STORAGE_BASE_URL', 'RECORDS_BASE_URL', 'RECORDS_API_URL'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _write_input(tmp_path, **overrides):
    payload = {'document': document_payload(), 'modules': fra_modules(), 'actions': fra_actions()}
    payload.update(overrides)
    path = tmp_path / 'input.json'
    path.write_text(json.dumps(payload), encoding='utf-8')
    return path


def test_build_writes_pdf_and_reports_summary(tmp_path, capsys):
    input_path = _write_input(tmp_path)
    output_path = tmp_path / 'out' / 'fra.pdf'

    code = main(['build', '--input', str(input_path), '--kind', 'FRA', '--output', str(output_path)])

    assert code == 0
    assert output_path.read_bytes().startswith(b'%PDF')
    payload = json.loads(capsys.readouterr().out)
    assert payload['status'] == 'ok'
    assert payload['page_count'] >= 3
    assert payload['size_bytes'] == output_path.stat().st_size


def test_mode_flag_overrides_document_status(tmp_path, capsys):
    input_path = _write_input(tmp_path)
    output_path = tmp_path / 'superseded.pdf'

    code = main(
        ['build', '--input', str(input_path), '--kind', 'FRA', '--output', str(output_path), '--mode', 'superseded']
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    events = [item['event'] for item in payload['diagnostics']]
    assert 'superseded_overlay' in events


def test_invalid_input_returns_validation_errors(tmp_path, capsys):
    input_path = tmp_path / 'bad.json'
    input_path.write_text(json.dumps({'modules': []}), encoding='utf-8')

    code = main(['build', '--input', str(input_path), '--kind', 'FRA', '--output', str(tmp_path / 'x.pdf')])

    assert code == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload['status'] == 'error'
    assert payload['errors'][0]['loc'] == ['document']
    assert not (tmp_path / 'x.pdf').exists()


def test_malformed_json_and_missing_file(tmp_path, capsys):
    broken = tmp_path / 'broken.json'
    broken.write_text('{not json', encoding='utf-8')
    assert main(['build', '--input', str(broken), '--kind', 'FRA', '--output', str(tmp_path / 'x.pdf')]) == 2
    assert main(['build', '--input', str(tmp_path / 'nope.json'), '--kind', 'FRA', '--output', 'x.pdf']) == 2
    assert main(['inspect', '--pdf', str(tmp_path / 'nope.pdf')]) == 2
    capsys.readouterr()


def test_inspect_reports_footer_lines(tmp_path, capsys):
    input_path = _write_input(tmp_path)
    output_path = tmp_path / 'fra.pdf'
    assert main(['build', '--input', str(input_path), '--kind', 'FRA', '--output', str(output_path)]) == 0
    built = json.loads(capsys.readouterr().out)

    assert main(['inspect', '--pdf', str(output_path)]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary['page_count'] == built['page_count']
    assert summary['title'] == 'Riverside Warehouse'
    assert summary['footers'][0] == ''
    assert f"Page {built['page_count'] - 1} of {built['page_count'] - 1}" in summary['footers'][-1]
    assert summary['footers'][-1].startswith('Fire Risk Assessment - Riverside Warehouse - v1')
