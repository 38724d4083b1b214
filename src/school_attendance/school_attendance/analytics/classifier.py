from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..core.constants import EXCELLENT_MIN_RATE, FAIR_MIN_RATE, GOOD_MIN_RATE
from ..core.enums import PerformanceBand


class PerformanceClassifier(ABC):
    """Classifier interface (Strategy Pattern for performance bands)."""

    @abstractmethod
    def classify(self, rate: int) -> PerformanceBand:
        raise NotImplementedError


@dataclass(frozen=True)
class ThresholdClassifier(PerformanceClassifier):
    """Standard rule: each band includes its lower bound."""

    excellent: int = EXCELLENT_MIN_RATE
    good: int = GOOD_MIN_RATE
    fair: int = FAIR_MIN_RATE

    def classify(self, rate: int) -> PerformanceBand:
        if rate >= self.excellent:
            return PerformanceBand.EXCELLENT
        if rate >= self.good:
            return PerformanceBand.GOOD
        if rate >= self.fair:
            return PerformanceBand.FAIR
        return PerformanceBand.POOR


DEFAULT_CLASSIFIER = ThresholdClassifier()


def classify_rate(rate: int) -> PerformanceBand:
    return DEFAULT_CLASSIFIER.classify(rate)
