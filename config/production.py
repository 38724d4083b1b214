import os

from .config import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SAVED_INDICATOR_SECONDS = Config.SAVED_INDICATOR_SECONDS
WEEK_START = Config.WEEK_START
