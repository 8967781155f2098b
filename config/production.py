import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_payroll"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

DEFAULT_BASE_AMOUNT = os.getenv("DEFAULT_BASE_AMOUNT", "150.00")
PAY_MODEL = os.getenv("PAY_MODEL", "retainer_plus_per_class")
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))
