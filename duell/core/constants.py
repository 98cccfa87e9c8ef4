# duell/core/constants.py

import os
import secrets
from pathlib import Path

# --- Uvicorn Configure ---
UVICORN_HOST = os.getenv("HOST", "0.0.0.0")
UVICORN_LOG_LEVEL = "warning"
UVICORN_PORT = int(os.getenv("PORT", "3000"))

# --- Path Configure ---
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --- Directory that stores All files generated ---
STORAGE_ROOT_PATH = Path(os.getenv("DUELL_STORAGE_PATH") or (BASE_DIR / "storages"))
STORAGE_ROOT_PATH.mkdir(parents=True, exist_ok=True)

# --- Database Configure ---
SQLALCHEMY_DATABASE_URL = os.getenv("DUELL_DATABASE_URL") or "sqlite:///{}".format(
    (STORAGE_ROOT_PATH / "duell.db").as_posix()
)
# Heroku/Render style URLs are not accepted by SQLAlchemy 1.4+
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)
DATABASE_CONNECT_ARGS = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

# --- Logger Configuration ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE_LEVEL = os.getenv("LOG_FILE_LEVEL", "DEBUG")
LOG_STORAGE = STORAGE_ROOT_PATH / "logs"
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "7"))
SECURITY_LOG_RETENTION_DAYS = int(os.getenv("SECURITY_LOG_RETENTION_DAYS", "30"))

# --- Secret Key for authorization ---
# DUELL_SECRET_KEY wins; otherwise storages/secret.key is read or generated (kept out of git)
_SECRET_KEY_ENV = os.getenv("DUELL_SECRET_KEY") or os.getenv("SECRET_KEY")
_SECRET_KEY_FILE = STORAGE_ROOT_PATH / "secret.key"

if _SECRET_KEY_ENV and _SECRET_KEY_ENV.strip():
    SECRET_KEY = _SECRET_KEY_ENV.strip()
elif _SECRET_KEY_FILE.exists() and _SECRET_KEY_FILE.read_text(encoding="utf-8").strip():
    SECRET_KEY = _SECRET_KEY_FILE.read_text(encoding="utf-8").strip()
else:
    SECRET_KEY = secrets.token_hex(32)
    _SECRET_KEY_FILE.write_text(SECRET_KEY, encoding="utf-8")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 1 day

# --- Admin account ---
ADMIN_USERNAME = os.getenv("DUELL_ADMIN_USERNAME", "admin")
# None means: generate a fresh password on every startup
ADMIN_PASSWORD = os.getenv("DUELL_ADMIN_PASSWORD") or None
ADMIN_PASSWORD_LENGTH = 32

# --- CORS Configure ---
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGIN", "http://localhost:5173").split(",") if origin.strip()
]

# --- Question selection policy ---
# Unrated questions count as the midpoint of the 1-5 scale
NEUTRAL_RATING = 3
# Shifts averages 1..5 to weights 3..7
WEIGHT_OFFSET = 2
MIN_RATING = 1
MAX_RATING = 5

# --- Login lockout policy ---
BASE_LOCKOUT_SECONDS = 5
LOCKOUT_MULTIPLIER = 10
MAX_LOCKOUT_SECONDS = 3600
RESET_AFTER_SECONDS = 3600
LOGIN_SWEEP_INTERVAL_SECONDS = 10 * 60

# --- Captcha ---
CAPTCHA_TTL_SECONDS = 5 * 60
CAPTCHA_MAX_CHALLENGES = 10000
CAPTCHA_SWEEP_INTERVAL_SECONDS = 60

# --- Game defaults ---
DEFAULT_STARTING_MONEY = 1000
DEFAULT_TIMER_DURATION = 0
INITIAL_GAME_STATE = "QUESTION_INTRO"
MIN_HINTS = 2

# --- Export format ---
EXPORT_FORMAT_VERSION = "1.0"

# --- Default question catalogue ---
# loaded into an empty or partial database on every start; existing texts are skipped
SEED_DEFAULT_QUESTIONS = os.getenv("DUELL_SEED_QUESTIONS", "1").lower() not in ("0", "false", "no")
SEED_QUESTIONS_FILE = Path(
    os.getenv("DUELL_SEED_QUESTIONS_FILE") or (Path(__file__).resolve().parent.parent / "data" / "seed_questions.json")
)
