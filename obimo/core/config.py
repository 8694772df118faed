from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # PostgreSQL Configuration
    postgres_user: str = Field(default="admin", env="POSTGRES_USER")
    postgres_password: str = Field(default="admin", env="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="obimo", env="POSTGRES_DB")
    postgres_host: str = Field(default="db", env="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, env="POSTGRES_PORT")

    # Application Configuration
    app_env: str = Field(default="dev", env="APP_ENV")
    api_port: int = Field(default=8000, env="API_PORT")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Recommendation pipeline
    recommendation_limit: int = Field(default=20, env="RECOMMENDATION_LIMIT")
    recommendation_ttl_hours: int = Field(default=72, env="RECOMMENDATION_TTL_HOURS")

    # External re-ranking model (unset key disables re-ranking)
    ai_api_key: Optional[str] = Field(default=None, env="AI_API_KEY")
    ai_model: str = Field(default="gemini-2.5-flash", env="AI_MODEL")
    ai_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        env="AI_BASE_URL"
    )
    ai_timeout_seconds: float = Field(default=5.0, env="AI_TIMEOUT_SECONDS")

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # CORS - allow frontend origins (filter out None values)
    allowed_origins: List[str] = [
        origin for origin in [
            "http://localhost:3000",
            "http://localhost:19006",  # Expo web
            "http://localhost:8081",   # Expo Metro
            "exp://localhost:19000",   # Expo development
            os.getenv("FRONTEND_URL")
        ] if origin is not None
    ]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
