"""Candidate selector: pick today's recommendation domain.

Weakest metric -> eligible domains -> drop domains tried inside the look-back
window -> first remaining domain. When every eligible domain was tried
recently, the full eligible set is used again; a repeat beats no advice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from tempo.domains.advice.domain_logic.health_models import DomainScores, Metric
from tempo.domains.advice.domain_logic.profile_models import Domain
from tempo.domains.advice.domain_logic.try_history import RecentTryHistory

logger = logging.getLogger(__name__)

# Tie-break order when several metrics share the lowest score.
METRIC_PRIORITY: tuple[Metric, ...] = (
    Metric.SLEEP,
    Metric.HRV,
    Metric.RHYTHM,
    Metric.ACTIVITY,
)

# Listed order is also the selection priority within each entry.
ELIGIBLE_DOMAINS: dict[Metric, tuple[Domain, ...]] = {
    Metric.SLEEP: (Domain.SLEEP,),
    Metric.HRV: (Domain.MENTAL, Domain.SLEEP),
    Metric.RHYTHM: (Domain.SLEEP,),
    Metric.ACTIVITY: (Domain.FITNESS, Domain.ENERGY),
}


@dataclass(frozen=True)
class SelectionTrace:
    """How a domain was chosen, for logging and debugging."""

    weakest_metric: Metric
    eligible: tuple[Domain, ...]
    excluded: tuple[Domain, ...]
    fell_back: bool
    domain: Domain

    def to_dict(self) -> dict:
        return {
            "weakest_metric": self.weakest_metric.value,
            "eligible": [d.value for d in self.eligible],
            "excluded": [d.value for d in self.excluded],
            "fell_back": self.fell_back,
            "domain": self.domain.value,
        }


def weakest_metric(scores: DomainScores) -> Metric:
    """Lowest-scoring metric; ties resolved by METRIC_PRIORITY."""
    return min(
        METRIC_PRIORITY,
        key=lambda metric: (scores.get(metric), METRIC_PRIORITY.index(metric)),
    )


def explain_selection(
    scores: DomainScores,
    history: RecentTryHistory,
    *,
    as_of: date | None = None,
) -> SelectionTrace:
    """Run the selection and return every intermediate decision."""
    metric = weakest_metric(scores)
    eligible = ELIGIBLE_DOMAINS[metric]
    recent = set(history.topics(as_of))
    excluded = tuple(d for d in eligible if d.value in recent)
    remaining = tuple(d for d in eligible if d not in excluded)
    fell_back = not remaining
    candidates = eligible if fell_back else remaining
    return SelectionTrace(
        weakest_metric=metric,
        eligible=eligible,
        excluded=excluded,
        fell_back=fell_back,
        domain=candidates[0],
    )


def select_domain(
    scores: DomainScores,
    history: RecentTryHistory,
    *,
    as_of: date | None = None,
) -> Domain:
    """Pick today's recommendation domain.

    Pure: identical scores and history always give the same domain.

    Args:
        scores: Today's per-metric scores.
        history: Recently suggested topics.
        as_of: End of the look-back window (defaults to the newest history date).
    """
    trace = explain_selection(scores, history, as_of=as_of)
    logger.debug("Domain selection: %s", trace.to_dict())
    return trace.domain
