# todosync/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "todosync API")
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # Every REST route and the stream endpoint live under this prefix
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    # CORS origins for the browser client ("*" allows any origin)
    CORS_ORIGINS: list[str] = _split_csv(os.getenv("CORS_ORIGINS", "*"))

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite://todosync.db")
    # Create missing tables at startup; turn off once aerich migrations manage the schema
    db_generate_schemas: bool = os.getenv("DB_GENERATE_SCHEMAS", "true").lower() in ("true", "1", "yes")

    # Bearer tokens / sessions
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_alg: str = os.getenv("JWT_ALG", "HS256")
    session_ttl_days: int = int(os.getenv("SESSION_TTL_DAYS", "7"))

    # Credentials & lockout
    min_password_length: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    lock_threshold: int = int(os.getenv("LOCK_THRESHOLD", "5"))
    lock_minutes: int = int(os.getenv("LOCK_MINUTES", "15"))

    # Live updates (Server-Sent Events)
    stream_keepalive_seconds: float = float(os.getenv("STREAM_KEEPALIVE_SECONDS", "15"))
    stream_queue_size: int = int(os.getenv("STREAM_QUEUE_SIZE", "256"))


settings = Settings()  # Instantiate configuration
