"""
Configuration settings for the ProjectPilot API
"""
import os


class Settings:
    """Application settings"""

    def __init__(self):
        # Load from environment variables with safe defaults
        self.app_name = os.getenv("APP_NAME", "ProjectPilot API")
        self.app_version = os.getenv("APP_VERSION", "1.0.0")
        self.debug = os.getenv("DEBUG", "False").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", "production")

        # Database - require DATABASE_URL
        self.database_url = os.getenv("DATABASE_URL")
        if not self.database_url:
            raise RuntimeError("DATABASE_URL must be set")

        # Database Connection Pool Settings (PostgreSQL only)
        self.db_pool_size = int(os.getenv("DB_POOL_SIZE", "5"))
        self.db_max_overflow = int(os.getenv("DB_MAX_OVERFLOW", "10"))
        self.db_pool_timeout = int(os.getenv("DB_POOL_TIMEOUT", "30"))

        # Security
        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", "12"))
        self.password_min_length = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))

        # CORS - configure for dev and prod
        origins_str = os.getenv("ALLOWED_ORIGINS", "")
        if not origins_str:
            if self.environment == "production":
                raise RuntimeError("ALLOWED_ORIGINS must be set in production (comma-separated HTTPS URLs)")
            else:
                origins_str = "http://localhost:3000,http://127.0.0.1:3000"

        self.allowed_origins = [origin.strip() for origin in origins_str.split(',') if origin.strip()]

        # Rate Limiting
        self.rate_limit_general = int(os.getenv("RATE_LIMIT_GENERAL", "100"))
        self.rate_limit_general_window = int(os.getenv("RATE_LIMIT_GENERAL_WINDOW", "900"))  # 15 minutes
        self.rate_limit_ai = int(os.getenv("RATE_LIMIT_AI", "20"))
        self.rate_limit_ai_window = int(os.getenv("RATE_LIMIT_AI_WINDOW", "300"))  # 5 minutes
        # Only behind a proxy that overwrites X-Forwarded-For
        self.trust_proxy_headers = os.getenv("TRUST_PROXY_HEADERS", "False").lower() == "true"

        # AI Integration
        self.ai_model_enabled = os.getenv("AI_MODEL_ENABLED", "True").lower() == "true"
        self.ai_model_dir = os.getenv("AI_MODEL_DIR", "models/ai")
        self.suggestion_default_count = int(os.getenv("SUGGESTION_DEFAULT_COUNT", "3"))
        self.suggestion_max_count = int(os.getenv("SUGGESTION_MAX_COUNT", "20"))

        # Monitoring and Observability
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "json")


# Load environment variables from .env file if it exists
from dotenv import load_dotenv  # noqa: E402

load_dotenv()

# Global settings instance
settings = Settings()
