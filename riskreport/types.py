from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_datetime(value: Any) -> datetime | None:
    """Parse ISO strings, dates and datetimes into aware UTC datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError as exc:
            raise ValueError(f'unrecognised date value: {value!r}') from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class DocumentMode(str, Enum):
    draft = 'draft'
    issued = 'issued'
    superseded = 'superseded'


class ReportKind(str, Enum):
    fra = 'FRA'
    dsear = 'DSEAR'
    fsd = 'FSD'
    combined = 'FRA_FSD'
    survey = 'RE'


class Jurisdiction(str, Enum):
    uk = 'UK'
    ie = 'IE'


class ExecutiveSummaryMode(str, Enum):
    ai = 'ai'
    author = 'author'
    both = 'both'
    none = 'none'


def blank_text(value: Any) -> str:
    return '' if value is None else str(value)


def normalize_jurisdiction(value: Any) -> Jurisdiction:
    upper = str(value or '').strip().upper()
    if 'IE' in upper or 'IRELAND' in upper:
        return Jurisdiction.ie
    return Jurisdiction.uk


def resolve_document_mode(status: str | None, issue_status: str | None = None) -> DocumentMode:
    values = {str(status or '').strip().lower(), str(issue_status or '').strip().lower()}
    if 'superseded' in values:
        return DocumentMode.superseded
    if 'issued' in values:
        return DocumentMode.issued
    return DocumentMode.draft


class _Record(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)


class Document(_Record):
    id: str = ''
    title: str = ''
    document_type: str = ''
    status: str = 'draft'
    issue_status: str | None = None
    version: int = Field(default=1, validation_alias=AliasChoices('version', 'version_number'))
    assessment_date: datetime | None = None
    review_date: datetime | None = None
    issue_date: datetime | None = None
    assessor_name: str | None = None
    assessor_role: str | None = None
    issued_by_name: str | None = None
    responsible_person: str | None = None
    scope_description: str | None = None
    limitations_assumptions: str | None = None
    standards_selected: list[str] = Field(default_factory=list)
    executive_summary_ai: str | None = None
    executive_summary_author: str | None = None
    executive_summary_mode: ExecutiveSummaryMode = ExecutiveSummaryMode.none
    jurisdiction: Jurisdiction = Jurisdiction.uk
    base_document_id: str | None = None
    client_name: str | None = None
    site_name: str | None = None
    scs_band: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator('id', 'title', 'document_type', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return blank_text(value)

    @field_validator('status', mode='before')
    @classmethod
    def _status(cls, value: Any) -> str:
        return str(value or 'draft')

    @field_validator('version', mode='before')
    @classmethod
    def _version(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator(
        'assessment_date', 'review_date', 'issue_date', 'created_at', 'updated_at',
        mode='before',
    )
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator('jurisdiction', mode='before')
    @classmethod
    def _jurisdiction(cls, value: Any) -> Jurisdiction:
        return normalize_jurisdiction(value)

    @field_validator('executive_summary_mode', mode='before')
    @classmethod
    def _summary_mode(cls, value: Any) -> str:
        normalized = str(value or '').strip().lower()
        if normalized in {item.value for item in ExecutiveSummaryMode}:
            return normalized
        return ExecutiveSummaryMode.none.value

    @field_validator('standards_selected', mode='before')
    @classmethod
    def _standards(cls, value: Any) -> list[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        return [str(item) for item in value if str(item or '').strip()]

    @property
    def mode(self) -> DocumentMode:
        return resolve_document_mode(self.status, self.issue_status)


class ModuleInstance(_Record):
    id: str = ''
    module_key: str
    outcome: str | None = None
    assessor_notes: str | None = ''
    data: dict[str, Any] = Field(default_factory=dict)
    completed_at: datetime | None = None

    @field_validator('id', mode='before')
    @classmethod
    def _id(cls, value: Any) -> str:
        return blank_text(value)

    @field_validator('completed_at', mode='before')
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator('data', mode='before')
    @classmethod
    def _data(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}


class Action(_Record):
    id: str = ''
    recommended_action: str = Field(
        default='',
        validation_alias=AliasChoices('recommended_action', 'action', 'title'),
    )
    priority_band: str = 'P4'
    status: str = 'open'
    owner: str | None = Field(
        default=None,
        validation_alias=AliasChoices('owner', 'owner_display_name'),
    )
    target_date: datetime | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    module_instance_id: str | None = None
    trigger_text: str | None = None
    category: str | None = None
    reference_number: str | None = None
    first_raised_in_version: int | None = None
    superseded_by_action_id: str | None = None

    @field_validator('id', 'recommended_action', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return blank_text(value)

    @field_validator('target_date', 'created_at', 'closed_at', mode='before')
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator('priority_band', mode='before')
    @classmethod
    def _priority(cls, value: Any) -> str:
        return str(value or 'P4').strip().upper()

    @field_validator('status', mode='before')
    @classmethod
    def _status(cls, value: Any) -> str:
        return str(value or 'open').strip().lower()

    @property
    def is_open(self) -> bool:
        return self.status in {'open', 'in_progress'}


class ActionRating(_Record):
    action_id: str
    likelihood: int
    impact: int
    score: int | None = None
    rated_at: datetime | None = None

    @field_validator('rated_at', mode='before')
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)


class Organisation(_Record):
    id: str = ''
    name: str = ''
    branding_logo_path: str | None = None

    @field_validator('id', 'name', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return blank_text(value)


class Attachment(_Record):
    id: str = ''
    file_name: str = ''
    file_type: str | None = None
    file_size_bytes: int | None = None
    caption: str | None = None
    module_instance_id: str | None = None
    action_id: str | None = None
    taken_at: datetime | None = None
    created_at: datetime | None = None

    @field_validator('id', 'file_name', mode='before')
    @classmethod
    def _text(cls, value: Any) -> str:
        return blank_text(value)

    @field_validator('taken_at', 'created_at', mode='before')
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)


class RevisionEntry(_Record):
    version_number: int
    issue_date: datetime | None = None
    change_summary: str | None = None
    issued_by_name: str | None = None

    @field_validator('issue_date', mode='before')
    @classmethod
    def _dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)


class ReportInput(_Record):
    document: Document
    modules: list[ModuleInstance] = Field(
        default_factory=list,
        validation_alias=AliasChoices('modules', 'module_instances', 'moduleInstances'),
    )
    actions: list[Action] = Field(default_factory=list)
    action_ratings: list[ActionRating] = Field(
        default_factory=list,
        validation_alias=AliasChoices('action_ratings', 'actionRatings'),
    )
    organisation: Organisation = Field(default_factory=Organisation)
    attachments: list[Attachment] | None = None
    revision_history: list[RevisionEntry] | None = None
    selected_modules: list[str] | None = None
    mode: DocumentMode | None = None

    @field_validator('modules', 'actions', 'action_ratings', mode='before')
    @classmethod
    def _records(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator('organisation', mode='before')
    @classmethod
    def _organisation(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def resolved_mode(self) -> DocumentMode:
        if self.mode is not None:
            return self.mode
        return self.document.mode
