"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SAVED_INDICATOR_SECONDS = 2.5
DEFAULT_TREND_DAYS = 7
DEFAULT_REPORT_DAYS = 30
DEFAULT_LEADERBOARD_SIZE = 10

# Lower bounds (inclusive) of each performance band.
EXCELLENT_MIN_RATE = 90
GOOD_MIN_RATE = 75
FAIR_MIN_RATE = 60

# Below this rate a student is listed as needing attention.
ATTENTION_RATE = GOOD_MIN_RATE

# 0 = Monday (ISO weeks), 6 = Sunday.
DEFAULT_WEEK_START = 0

DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"

CSV_HEADER = ("Date", "Status")
