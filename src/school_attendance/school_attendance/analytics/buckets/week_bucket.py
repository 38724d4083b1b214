from __future__ import annotations

from datetime import date

from ...common.datetime_utils import start_of_week
from ...core.enums import RollupPeriod
from .base import BucketStrategy


class WeekBucket(BucketStrategy):
    """Buckets keyed by the first day of the record's week."""

    period = RollupPeriod.WEEK

    def __init__(self, first_weekday: int = 0):
        if not 0 <= int(first_weekday) <= 6:
            raise ValueError("first_weekday must be between 0 (Monday) and 6 (Sunday)")
        self.first_weekday = int(first_weekday)

    def key_for(self, day: date) -> date:
        return start_of_week(day, first_weekday=self.first_weekday)

    def label_for(self, key: date) -> str:
        return key.strftime("%b %d")
