import os

from .config import db_config

SECRET_KEY = "test-secret"
DB_CONFIG = db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Tests assert on the indicator without waiting.
SAVED_INDICATOR_SECONDS = 0.0
WEEK_START = 0
