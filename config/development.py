import os

from .config import Config, db_config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app applies database/schema.sql on startup (CREATE IF NOT EXISTS).
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

SAVED_INDICATOR_SECONDS = Config.SAVED_INDICATOR_SECONDS
WEEK_START = Config.WEEK_START
