from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ...core.enums import RollupPeriod


class BucketStrategy(ABC):
    """Strategy Pattern: encapsulate how a record date maps to a rollup bucket."""

    period: RollupPeriod

    @abstractmethod
    def key_for(self, day: date) -> date:
        raise NotImplementedError

    @abstractmethod
    def label_for(self, key: date) -> str:
        raise NotImplementedError
