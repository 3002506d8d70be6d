import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# SQLite by default so the service runs without an external database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./carequeue.db")

# Calendar-day boundaries (capacity, queue, dashboard) are computed in this zone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

# Redis Configuration (dashboard stats cache)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
DASHBOARD_CACHE_TTL = int(os.getenv("DASHBOARD_CACHE_TTL", "60"))  # seconds

# Staff defaults (the admin form may omit capacity)
DEFAULT_DAILY_CAPACITY = int(os.getenv("DEFAULT_DAILY_CAPACITY", "5"))
MAX_DAILY_CAPACITY = 50

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
