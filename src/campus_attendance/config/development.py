import os

from .config import Config, db_config_from

SECRET_KEY = Config.SECRET_KEY

DB_CONFIG = db_config_from(Config)

TOKEN_MAX_AGE_SECONDS = Config.TOKEN_MAX_AGE_SECONDS
TOKEN_MAX_FUTURE_SECONDS = Config.TOKEN_MAX_FUTURE_SECONDS
DEFAULT_TIMEZONE = Config.DEFAULT_TIMEZONE

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "logs/campus_attendance.log")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB
