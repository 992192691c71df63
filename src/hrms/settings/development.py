import os

from . import work_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrms_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Also insert the demo employees
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

COMPANY_NAME = os.getenv("COMPANY_NAME", "HRMS Lite Company")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "Company Address Here")

WORK_CONFIG = work_config_from_env()
