from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    statuspage_db_url: str = "sqlite+aiosqlite:///data/statuspage.db"

    # Logging
    statuspage_log_level: str = "info"

    # CORS
    statuspage_cors_origins: str = "http://localhost:3000"

    # Identity provider tokens
    statuspage_jwt_secret: str = "dev-secret-key-change-in-production"
    statuspage_jwt_algorithm: str = "HS256"
    statuspage_jwt_expiry_seconds: int = 3600

    # Organization defaults
    statuspage_default_brand_color: str = "#0066FF"
    statuspage_default_timezone: str = "UTC"

    # Realtime fanout
    statuspage_fanout_queue_size: int = 1000  # pending events before new ones are dropped
    statuspage_subscriber_queue_size: int = 100  # per WebSocket connection

    # Read surface
    statuspage_history_limit: int = 50
    statuspage_max_page_size: int = 100

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
