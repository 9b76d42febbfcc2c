from .config import Config, db_config_from

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from(Config)

TOKEN_MAX_AGE_SECONDS = 600
TOKEN_MAX_FUTURE_SECONDS = 300
DEFAULT_TIMEZONE = "UTC"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_FILE = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False
