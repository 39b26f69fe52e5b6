from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    level: str
    event: str
    message: str
    detail: dict[str, Any] = field(default_factory=dict)


@dataclass
class BuildDiagnostics:
    """Events collected during one build and handed back with the PDF bytes."""

    events: list[DiagnosticEvent] = field(default_factory=list)

    def info(self, event: str, message: str, **detail: Any) -> None:
        self.events.append(DiagnosticEvent('info', event, message, dict(detail)))
        logger.debug('%s: %s', event, message)

    def warning(self, event: str, message: str, **detail: Any) -> None:
        self.events.append(DiagnosticEvent('warning', event, message, dict(detail)))
        logger.warning('%s: %s', event, message)

    def has(self, event: str) -> bool:
        return any(item.event == event for item in self.events)

    def find(self, event: str) -> list[DiagnosticEvent]:
        return [item for item in self.events if item.event == event]

    @property
    def warnings(self) -> list[DiagnosticEvent]:
        return [item for item in self.events if item.level == 'warning']

    def to_dict(self) -> list[dict[str, Any]]:
        return [
            {'level': item.level, 'event': item.event, 'message': item.message, **item.detail}
            for item in self.events
        ]
