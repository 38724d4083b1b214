from __future__ import annotations

from datetime import date

from ...core.enums import RollupPeriod
from .base import BucketStrategy


class DayBucket(BucketStrategy):
    """One bucket per calendar day."""

    period = RollupPeriod.DAY

    def key_for(self, day: date) -> date:
        return day

    def label_for(self, key: date) -> str:
        return key.strftime("%b %d")
