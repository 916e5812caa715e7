import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracking"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

TIMEZONE = os.getenv("TIMEZONE", "America/Santiago")
STANDARD_DAY_MINUTES = int(os.getenv("STANDARD_DAY_MINUTES", "480"))
MAX_LUNCH_MINUTES = int(os.getenv("MAX_LUNCH_MINUTES", "120"))
MAX_DAILY_WORK_MINUTES = int(os.getenv("MAX_DAILY_WORK_MINUTES", "600"))
ALLOW_MULTIPLE_LUNCHES = bool(int(os.getenv("ALLOW_MULTIPLE_LUNCHES", "0")))
