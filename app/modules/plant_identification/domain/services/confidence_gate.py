# 📄 File: app/modules/plant_identification/domain/services/confidence_gate.py
# 🧭 Purpose (Layman Explanation):
# Decides whether the best plant guess is sure enough to show, or whether the user should retake the photo.
# 🧪 Purpose (Technical Summary):
# Minimum-confidence policy over ranked classifier suggestions. Rejection is an outcome, not an error.
# 🔗 Dependencies:
# Domain models (RawSuggestion, SpeciesSuggestion, GateResult)
# 🔄 Connected Modules / Calls From:
# identification_service.py

from typing import Optional, Sequence, Union

from ..models.identification import GateResult, RawSuggestion, SpeciesSuggestion

Suggestion = Union[RawSuggestion, SpeciesSuggestion]


def rank_suggestions(
    suggestions: Sequence[Suggestion],
    max_suggestions: Optional[int] = None,
) -> list:
    """Sort by descending confidence and keep the top N. sorted() is stable, so ties keep classifier order."""
    ranked = [
        s if isinstance(s, SpeciesSuggestion) else SpeciesSuggestion.from_raw(s)
        for s in suggestions
    ]
    ranked = sorted(ranked, key=lambda s: s.confidence, reverse=True)
    if max_suggestions is not None:
        ranked = ranked[:max_suggestions]
    return ranked


class ConfidenceGate:
    """Accepts a suggestion list when its top confidence reaches the threshold."""

    def __init__(self, threshold: float = 0.5, max_suggestions: Optional[int] = 5):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        self.threshold = threshold
        self.max_suggestions = max_suggestions

    def gate(self, suggestions: Sequence[Suggestion], threshold: Optional[float] = None) -> GateResult:
        threshold = self.threshold if threshold is None else threshold
        ranked = rank_suggestions(suggestions, self.max_suggestions)

        if not ranked:
            return GateResult(accepted=False, suggestions=[], best_confidence=0.0)

        best = ranked[0].confidence
        return GateResult(
            accepted=best >= threshold,
            suggestions=ranked,
            best_confidence=best,
        )
