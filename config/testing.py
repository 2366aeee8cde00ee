SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

# Empty path keeps everything in memory.
LOCAL_STORE_PATH = ""

REMOTE_BACKEND = "none"
SUPABASE_URL = ""
SUPABASE_KEY = ""
DB_CONFIG = {}
REMOTE_TIMEOUT_SECONDS = 1.0
FORCE_OFFLINE = False

DEVICE_CHECK_MODE = "LOGIN_ONLY"
IMPORT_MERGE_POLICY = "CHECKOUT_ONLY"

ADMIN_PIN = "1234"

GEMINI_API_KEY = ""
GEMINI_MODEL = "gemini-2.5-flash"

AUTO_INIT_DB = False
