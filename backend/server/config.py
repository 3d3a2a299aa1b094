"""Global configuration — paths, env vars.

DEPLOYMENT:
  Copy .env.example → .env and fill in the values.
  To switch servers, only the .env file needs to change — no code edits required.
"""

import os
from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))  # backend/
PROJECT_DIR = os.path.dirname(BASE_DIR)  # project root

# Load .env from project root (overrides any system env vars with same name)
load_dotenv(os.path.join(PROJECT_DIR, ".env"), override=True)

# ─── Paths ───────────────────────────────────────────────────
DB_PATH = os.environ.get("EXAMBRIDGE_DB_PATH", os.path.join(BASE_DIR, "exambridge.db"))
DATA_DIR = os.environ.get("SEED_DATA_DIR", os.path.join(BASE_DIR, "data"))

# ─── Environment ─────────────────────────────────────────────
# Set ENVIRONMENT=production in .env to enable HTTPS-only cookies.
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ─── Server ──────────────────────────────────────────────────
PORT = int(os.environ.get("PORT", 8000))

# ─── CORS ────────────────────────────────────────────────────
# Dev:  ALLOWED_ORIGINS=*
# Prod: ALLOWED_ORIGINS=https://yourdomain.com,https://www.yourdomain.com
_raw_origins = os.environ.get("ALLOWED_ORIGINS", "*")
ALLOWED_ORIGINS = ["*"] if _raw_origins.strip() == "*" else [
    o.strip() for o in _raw_origins.split(",") if o.strip()
]

# ─── AI ──────────────────────────────────────────────────────
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
AI_MAX_TOKENS = int(os.environ.get("AI_MAX_TOKENS", 4000))
AI_TIMEOUT_SECONDS = float(os.environ.get("AI_TIMEOUT_SECONDS", 55))

# ─── Sessions ────────────────────────────────────────────────
SESSION_COOKIE_NAME = "session_token"
SESSION_MAX_AGE = 2592000  # 30 days

# ─── Uploads ─────────────────────────────────────────────────
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))  # 10 MB
