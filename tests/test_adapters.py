from __future__ import annotations

import httpx

from riskreport.adapters.branding import TIER_DEFAULT, TIER_ORGANISATION, TIER_TEXT, detect_logo_mime, resolve_branding
from riskreport.adapters.records import (
    RecordsClient,
    RecordsConfig,
    load_attachments,
    load_revision_history,
    synthesize_revision_history,
)
from riskreport.config import Settings
from riskreport.report.diagnostics import BuildDiagnostics
from riskreport.types import Attachment, Document, Organisation, RevisionEntry


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _records(handler, diagnostics: BuildDiagnostics | None = None) -> RecordsClient:
    cfg = RecordsConfig(
        base_url='https://records.example.test/api',
        api_key='secret',
        revision_history_timeout_seconds=2,
        attachments_timeout_seconds=2,
    )
    return RecordsClient(cfg, client=_client(handler), diagnostics=diagnostics)


def test_logo_mime_by_extension():
    assert detect_logo_mime('brand/logo.PNG') == 'image/png'
    assert detect_logo_mime('logo.jpeg') == 'image/jpeg'
    assert detect_logo_mime('logo.svg') is None


async def test_organisation_logo_is_fetched_with_bearer_token(logo_file):
    png = logo_file.read_bytes()
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['url'] = str(request.url)
        seen['auth'] = request.headers.get('Authorization')
        return httpx.Response(200, content=png)

    settings = Settings(_env_file=None, org_logo_base_url='https://assets.example.test/', org_logo_api_key='k1')
    async with _client(handler) as client:
        branding = await resolve_branding(
            Organisation(name='Acme', branding_logo_path='/orgs/acme/logo.png'),
            settings,
            client=client,
        )
    assert branding.source_tier == TIER_ORGANISATION
    assert branding.logo_bytes == png
    assert branding.brand_name == 'Acme'
    assert seen == {'url': 'https://assets.example.test/orgs/acme/logo.png', 'auth': 'Bearer k1'}


async def test_failed_organisation_logo_falls_back_to_default_file(logo_file):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    diagnostics = BuildDiagnostics()
    settings = Settings(_env_file=None, org_logo_base_url='https://assets.example.test', default_logo_path=logo_file)
    async with _client(handler) as client:
        branding = await resolve_branding(
            Organisation(name='Acme', branding_logo_path='logo.png'),
            settings,
            client=client,
            diagnostics=diagnostics,
        )
    assert branding.source_tier == TIER_DEFAULT
    assert branding.mime == 'image/png'
    assert diagnostics.has('logo_fetch_failed')


async def test_unsupported_logo_format_is_skipped_without_fetching(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError('no request expected')

    diagnostics = BuildDiagnostics()
    async with _client(handler) as client:
        branding = await resolve_branding(
            Organisation(name='Acme', branding_logo_path='logo.svg'),
            settings,
            client=client,
            diagnostics=diagnostics,
        )
    assert branding.source_tier == TIER_TEXT
    assert not branding.has_logo
    assert diagnostics.has('logo_skipped')


async def test_missing_default_logo_file_degrades_to_text(tmp_path):
    diagnostics = BuildDiagnostics()
    settings = Settings(_env_file=None, default_logo_path=tmp_path / 'missing.png')
    branding = await resolve_branding(Organisation(name='Acme'), settings, diagnostics=diagnostics)
    assert branding.source_tier == TIER_TEXT
    assert branding.brand_name == settings.brand_name
    assert diagnostics.has('logo_fetch_failed')


async def test_revision_history_is_fetched_and_sorted_newest_first():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == '/api/documents/base-1/revisions'
        return httpx.Response(
            200,
            json={
                'revisions': [
                    {'version_number': 1, 'created_at': '2025-01-10', 'summary_text': 'Initial issue'},
                    {'version_number': 2, 'issue_date': '2026-01-10', 'change_summary': 'Annual review',
                     'issued_by_name': 'J. Ortiz'},
                ]
            },
        )

    document = Document(id='doc-2', version=2, base_document_id='base-1', issue_date='2026-01-10')
    history = await load_revision_history(document, prefetched=None, records=_records(handler))
    assert [entry.version_number for entry in history] == [2, 1]
    assert history[1].change_summary == 'Initial issue'
    assert history[0].issued_by_name == 'J. Ortiz'


async def test_revision_history_failure_returns_synthesized_row():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    diagnostics = BuildDiagnostics()
    document = Document(id='doc-3', version=3, base_document_id='base-1', issue_date='2026-02-01',
                        issued_by_name='Lead Assessor')
    history = await load_revision_history(document, prefetched=None, records=_records(handler, diagnostics))
    assert len(history) == 1
    assert history[0].change_summary == 'Revision issued'
    assert history[0].issued_by_name == 'Lead Assessor'
    assert diagnostics.has('revision_history_failed')


def test_synthesized_initial_issue():
    document = Document(version=1, issue_date='2026-02-01', assessor_name='Sam Patel')
    rows = synthesize_revision_history(document, [])
    assert rows[0].change_summary == 'Initial issue'
    assert rows[0].issued_by_name == 'Sam Patel'
    assert synthesize_revision_history(Document(version=1), []) == []


async def test_prefetched_lists_win_over_remote_calls():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError('no request expected')

    records = _records(handler)
    document = Document(id='doc-4', base_document_id='base-4', issue_date='2026-02-01')
    prefetched = [RevisionEntry(version_number=1, change_summary='Imported')]
    history = await load_revision_history(document, prefetched=prefetched, records=records)
    attachments = await load_attachments(document, prefetched=[Attachment(file_name='a.jpg')], records=records)
    assert history[0].change_summary == 'Imported'
    assert attachments[0].file_name == 'a.jpg'


async def test_attachments_fetch_and_failure():
    def ok(request: httpx.Request) -> httpx.Response:
        assert request.headers['Authorization'] == 'Bearer secret'
        return httpx.Response(200, json=[{'id': 'att-1', 'file_name': 'door.jpg', 'file_size_bytes': 2048}])

    document = Document(id='doc-5')
    attachments = await load_attachments(document, prefetched=None, records=_records(ok))
    assert [item.file_name for item in attachments] == ['door.jpg']

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    diagnostics = BuildDiagnostics()
    assert await load_attachments(document, prefetched=None, records=_records(broken, diagnostics)) == []
    assert diagnostics.has('attachments_failed')


async def test_unconfigured_records_service_makes_no_calls(settings):
    records = RecordsClient(RecordsConfig.from_settings(settings))
    assert not records.configured
    assert await load_attachments(Document(id='doc-6'), prefetched=None, records=records) == []
