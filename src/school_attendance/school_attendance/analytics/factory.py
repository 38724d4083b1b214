from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_WEEK_START
from ..core.enums import RollupPeriod
from .buckets.base import BucketStrategy
from .buckets.day_bucket import DayBucket
from .buckets.month_bucket import MonthBucket
from .buckets.week_bucket import WeekBucket


@dataclass
class BucketStrategyFactory:
    """Factory Pattern: choose the bucketing strategy for a rollup period."""

    first_weekday: int = DEFAULT_WEEK_START

    def for_period(self, period: RollupPeriod | str) -> BucketStrategy:
        period = RollupPeriod(period)
        if period is RollupPeriod.DAY:
            return DayBucket()
        if period is RollupPeriod.WEEK:
            return WeekBucket(self.first_weekday)
        return MonthBucket()
