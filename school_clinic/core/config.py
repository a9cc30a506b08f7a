"""Application configuration with environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Proxy/Load Balancer Settings
    # Set to True when running behind nginx to trust X-Forwarded-For
    TRUST_PROXY_HEADERS: bool = False

    # Database (single SQLite file)
    DB_PATH: str = "school_health.db"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 8

    # Identity resolution. True keeps the deployed single-user behaviour where
    # every request other than login runs as the seeded administrator.
    SINGLE_USER_MODE: bool = True

    # Bootstrap account
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Login lockout
    LOGIN_LOCKOUT_THRESHOLD: int = 5

    # Audit trail listing bound
    AUDIT_LIST_LIMIT: int = 500

    # Calendar day used for timestamps and dashboard counts
    CLINIC_TIMEZONE: str = "UTC"

    # Display defaults
    DEFAULT_GRADE_LABEL: str = "غير محدد"
    DEFAULT_SCHOOL_NAME: str = "المدرسة"

    # Roster import: False matches names exactly (case and whitespace sensitive)
    IMPORT_NORMALIZE_NAMES: bool = False

    # Backup snapshot shape
    BACKUP_INCLUDE_CLINIC_APPOINTMENTS: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting (requests per minute)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTH: int = 10  # Login attempts

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for DB_PATH."""
        return f"sqlite:///{self.DB_PATH}"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    def ensure_db_directory(self) -> None:
        """Create the parent directory of DB_PATH if it does not exist."""
        if self.DB_PATH == ":memory:":
            return
        Path(self.DB_PATH).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
