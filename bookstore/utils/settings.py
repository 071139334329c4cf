# bookstore/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

# required, app refuses to start without them (see require_settings)
DATABASE_URL = os.getenv("DATABASE_URL")
JWT_SECRET = os.getenv("JWT_SECRET")

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", 7 * 24 * 60 * 60))
BCRYPT_ROUNDS = max(12, int(os.getenv("BCRYPT_ROUNDS", 12)))

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in ("1", "true", "yes")

PAYMENT_SUCCESS_RATE = float(os.getenv("PAYMENT_SUCCESS_RATE", 0.8))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

REQUIRED_SETTINGS = ("DATABASE_URL", "JWT_SECRET")


def require_settings():
    missing = [name for name in REQUIRED_SETTINGS if not globals().get(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")
