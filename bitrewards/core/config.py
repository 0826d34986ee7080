import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development").lower()
IS_PRODUCTION = APP_ENV == "production"

DATABASE_URL = os.getenv("DATABASE_URL")
SESSION_SECRET = os.getenv("SESSION_SECRET")

if IS_PRODUCTION:
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is not set in the .env file!")
    if not SESSION_SECRET:
        raise ValueError("SESSION_SECRET must be set in the .env file")

DATABASE_URL = DATABASE_URL or "sqlite:///./bitrewards.db"
SESSION_SECRET = SESSION_SECRET or "dev-session-secret-change-me"
SESSION_ALGORITHM = "HS256"
SESSION_COOKIE_NAME = "bitrewards_session"
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", 86400))
SESSION_BACKEND = os.getenv("SESSION_BACKEND", "database").lower()
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

SUPPORT_CONTACT = os.getenv("SUPPORT_CONTACT", "YOUR_TELEGRAM_ID")

# Seed administrator, only created when both are set
ADMIN_USER = os.getenv("ADMIN_USER", "")
ADMIN_PASS = os.getenv("ADMIN_PASS", "")

LANG_COOKIE_NAME = "lang"
LANG_COOKIE_MAX_AGE = 90000  # seconds

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
RATE_LIMIT_LOGIN = os.getenv("RATE_LIMIT_LOGIN", "5/minute")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
