from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from riskreport.adapters.branding import Branding
from riskreport.config import Settings
from riskreport.modules import ModuleIndex
from riskreport.rules.info_gaps import DocumentContext
from riskreport.types import (
    Action,
    ActionRating,
    Attachment,
    Document,
    DocumentMode,
    ModuleInstance,
    ReportInput,
    ReportKind,
    RevisionEntry,
)


@dataclass
class ReportContext:
    """Resolved, read-only inputs for one build.

    Everything a section renderer needs that is not on the paginator: the domain
    snapshot, the fetched branding/history/attachments and the build clock.
    """

    report: ReportInput
    kind: ReportKind
    mode: DocumentMode
    settings: Settings
    now: datetime
    branding: Branding
    revision_history: list[RevisionEntry] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    module_index: ModuleIndex = field(init=False)
    _latest_ratings: dict[str, ActionRating] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.module_index = ModuleIndex.build(self.report.modules)
        latest: dict[str, ActionRating] = {}
        for rating in self.report.action_ratings:
            current = latest.get(rating.action_id)
            if current is None or _rated_after(rating, current):
                latest[rating.action_id] = rating
        self._latest_ratings = latest

    @property
    def document(self) -> Document:
        return self.report.document

    @property
    def modules(self) -> list[ModuleInstance]:
        return self.report.modules

    @property
    def actions(self) -> list[Action]:
        return self.report.actions

    @property
    def issued_prelude(self) -> bool:
        if self.mode == DocumentMode.issued:
            return True
        return self.mode == DocumentMode.superseded and self.document.issue_date is not None

    @property
    def lead_pages(self) -> int:
        return 2 if self.issued_prelude else 1

    def latest_rating(self, action_id: str | None) -> ActionRating | None:
        if not action_id:
            return None
        return self._latest_ratings.get(action_id)

    def find_action(self, action_id: str | None) -> Action | None:
        if not action_id:
            return None
        for action in self.report.actions:
            if action.id == action_id:
                return action
        return None

    def document_context(self) -> DocumentContext:
        return DocumentContext(
            responsible_person=self.document.responsible_person,
            standards_selected=tuple(self.document.standards_selected),
        )


def _rated_after(candidate: ActionRating, current: ActionRating) -> bool:
    if candidate.rated_at is None:
        return current.rated_at is None
    if current.rated_at is None:
        return True
    return candidate.rated_at >= current.rated_at
