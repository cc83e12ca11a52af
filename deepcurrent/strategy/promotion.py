"""Candidate promotion policies.

Evolution creates candidate versions; a promotion policy decides when a
candidate replaces the active version. Only manual promotion ships.
"""

from abc import ABC, abstractmethod

from deepcurrent.evolution.models import AggregatedMetrics
from deepcurrent.strategy.models import Strategy


class PromotionPolicy(ABC):
    """Decides whether a candidate version should become active."""

    @abstractmethod
    def should_promote(
        self,
        active: Strategy | None,
        candidate: Strategy,
        candidate_metrics: AggregatedMetrics,
    ) -> bool:
        """Return True if the candidate should be promoted."""
        pass


class ManualPromotionPolicy(PromotionPolicy):
    """Never promotes automatically; promotion is an operator action."""

    def should_promote(
        self,
        active: Strategy | None,
        candidate: Strategy,
        candidate_metrics: AggregatedMetrics,
    ) -> bool:
        return False
