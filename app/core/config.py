import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./marketplace.db"

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    BACKEND_CORS_ORIGINS: str = '["http://localhost:5173","http://localhost:3000"]'

    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Course Marketplace API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Revenue reporting
    REPORT_TIMEZONE: str = "UTC"  # IANA name used for period bucketing
    DEFAULT_INSTRUCTOR_REVENUE_PERCENTAGE: int = 70

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True
    STATISTICS_RATE_LIMIT: str = "30/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
                return parsed
            except json.JSONDecodeError:
                return ["http://localhost:5173", "http://localhost:3000"]
        return self.BACKEND_CORS_ORIGINS


settings = Settings()
