import os

from .config import Config, db_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from(Config)

TOKEN_MAX_AGE_SECONDS = Config.TOKEN_MAX_AGE_SECONDS
TOKEN_MAX_FUTURE_SECONDS = Config.TOKEN_MAX_FUTURE_SECONDS
DEFAULT_TIMEZONE = Config.DEFAULT_TIMEZONE

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_FILE = Config.LOG_FILE

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
