import os

from config.config import db_config, env_bool, env_float

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Local key-value store (one JSON file per device)
LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", "instance/mediguard-store.json")

# Remote store: none | supabase | mysql
REMOTE_BACKEND = os.getenv("REMOTE_BACKEND", "none").lower()
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
DB_CONFIG = db_config()
REMOTE_TIMEOUT_SECONDS = env_float("REMOTE_TIMEOUT_SECONDS", 10.0)
FORCE_OFFLINE = env_bool("FORCE_OFFLINE", False)

# LOGIN_ONLY | STRICT
DEVICE_CHECK_MODE = os.getenv("DEVICE_CHECK_MODE", "LOGIN_ONLY").upper()
# CHECKOUT_ONLY | UPSERT_ALL
IMPORT_MERGE_POLICY = os.getenv("IMPORT_MERGE_POLICY", "CHECKOUT_ONLY").upper()

ADMIN_PIN = os.getenv("ADMIN_PIN", "1234")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# If enabled (mysql backend only), schema.sql is applied on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", True)
