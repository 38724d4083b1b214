from __future__ import annotations

from datetime import date

from ...common.datetime_utils import start_of_month
from ...core.enums import RollupPeriod
from .base import BucketStrategy


class MonthBucket(BucketStrategy):
    """Buckets keyed by the first of the record's month."""

    period = RollupPeriod.MONTH

    def key_for(self, day: date) -> date:
        return start_of_month(day)

    def label_for(self, key: date) -> str:
        return key.strftime("%b %Y")
