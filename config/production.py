import os

from config.config import db_config, env_bool, env_float

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", "instance/mediguard-store.json")

REMOTE_BACKEND = os.getenv("REMOTE_BACKEND", "supabase").lower()
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
DB_CONFIG = db_config()
REMOTE_TIMEOUT_SECONDS = env_float("REMOTE_TIMEOUT_SECONDS", 10.0)
FORCE_OFFLINE = env_bool("FORCE_OFFLINE", False)

DEVICE_CHECK_MODE = os.getenv("DEVICE_CHECK_MODE", "STRICT").upper()
IMPORT_MERGE_POLICY = os.getenv("IMPORT_MERGE_POLICY", "CHECKOUT_ONLY").upper()

# No default admin PIN in production; set ADMIN_PIN to enable the super admin.
ADMIN_PIN = os.getenv("ADMIN_PIN", "")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", False)
