import os
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root (parent of app/)
ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / ".env")

ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))

if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY is not set")

PORT = int(os.getenv("PORT", 4000))
if not 1 <= PORT <= 65535:
    raise RuntimeError("PORT must be a valid number between 1 and 65535")

PUBLIC_BASE_URL = (os.getenv("PUBLIC_BASE_URL") or f"http://localhost:{PORT}").rstrip("/")
CLIENT_ORIGIN = os.getenv("CLIENT_ORIGIN", "*")

# Dev: SQLite (zero config), Prod: PostgreSQL
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    if ENVIRONMENT == "prod":
        raise RuntimeError("DATABASE_URL must be set in production")
    DATABASE_URL = f"sqlite:///{ROOT_DIR / 'snaplinks_dev.db'}"

API_RATE_LIMIT = int(os.getenv("API_RATE_LIMIT", 100))
API_RATE_WINDOW_SECONDS = int(os.getenv("API_RATE_WINDOW_SECONDS", 15 * 60))
REDIRECT_RATE_LIMIT = int(os.getenv("REDIRECT_RATE_LIMIT", 300))
REDIRECT_RATE_WINDOW_SECONDS = int(os.getenv("REDIRECT_RATE_WINDOW_SECONDS", 60))

# Optional admin account created on startup
ADMIN_EMAIL = (os.getenv("ADMIN_EMAIL") or "").strip().lower()
ADMIN_PASSWORD = (os.getenv("ADMIN_PASSWORD") or "").strip()
