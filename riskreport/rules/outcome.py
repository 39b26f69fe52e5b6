from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from riskreport.modules import DecodedModule, ModuleKind, SignificantFindingsAnswers, decode_module, find_module
from riskreport.rules.severity import ExecutiveOutcome, derive_executive_outcome, executive_outcome_label
from riskreport.types import Action, ModuleInstance

# Assessor ratings and engine outcomes describe the same scale from opposite ends.
_RATING_FOR_OUTCOME = {
    ExecutiveOutcome.satisfactory_with_improvements: 'low',
    ExecutiveOutcome.improvements_required: 'medium',
    ExecutiveOutcome.significant_deficiencies: 'high',
    ExecutiveOutcome.material_life_safety_risk: 'intolerable',
}


@dataclass(frozen=True)
class HeadlineOutcome:
    label: str
    engine_outcome: ExecutiveOutcome
    assessor_rating: str | None = None
    overridden: bool = False
    override_reason: str | None = None
    strategy: str = ''

    @property
    def engine_label(self) -> str:
        return executive_outcome_label(self.engine_outcome)


class OutcomeStrategy(Protocol):
    name: str

    def resolve(self, modules: Sequence[ModuleInstance], actions: Sequence[Action]) -> HeadlineOutcome:
        ...


def _open(actions: Sequence[Action]) -> list[Action]:
    return [action for action in actions if action.is_open]


class EngineDerived:
    """Headline comes from the open-action severity engine only."""

    name = 'engine_derived'

    def resolve(self, modules: Sequence[ModuleInstance], actions: Sequence[Action]) -> HeadlineOutcome:
        outcome = derive_executive_outcome(_open(actions))
        return HeadlineOutcome(
            label=executive_outcome_label(outcome),
            engine_outcome=outcome,
            strategy=self.name,
        )


class AssessorRatingWithOverride:
    """Headline is the assessor's overall rating when entered.

    The engine outcome is still computed; when the two disagree, or the assessor
    explicitly enabled an override, the result is flagged as overridden.
    """

    name = 'assessor_rating_with_override'

    def resolve(self, modules: Sequence[ModuleInstance], actions: Sequence[Action]) -> HeadlineOutcome:
        outcome = derive_executive_outcome(_open(actions))
        answers = _significant_findings(modules)
        rating = _entered_rating(answers)
        if rating is None:
            return HeadlineOutcome(
                label=executive_outcome_label(outcome),
                engine_outcome=outcome,
                strategy=self.name,
            )

        explicit = answers is not None and answers.override.enabled
        return HeadlineOutcome(
            label=rating.upper(),
            engine_outcome=outcome,
            assessor_rating=rating,
            overridden=explicit or _RATING_FOR_OUTCOME[outcome] != rating,
            override_reason=answers.override.reason if explicit and answers is not None else None,
            strategy=self.name,
        )


def _significant_findings(modules: Sequence[ModuleInstance]) -> SignificantFindingsAnswers | None:
    instance = find_module(list(modules), ModuleKind.fra_4_significant_findings)
    if instance is None:
        return None
    decoded = decode_module(instance)
    if isinstance(decoded, DecodedModule) and isinstance(decoded.answers, SignificantFindingsAnswers):
        return decoded.answers
    return None


def _entered_rating(answers: SignificantFindingsAnswers | None) -> str | None:
    if answers is None:
        return None
    rating = str(answers.overall_risk_rating or '').strip().lower()
    if not rating or rating == 'unknown':
        return None
    return rating
