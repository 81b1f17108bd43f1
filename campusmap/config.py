from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    HOST: str = "localhost"
    PORT: int = 4567
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    GCP_PROJECT_ID: str = "campusmap-local"
    SERVICE_ACCOUNT_KEY_PATH: str = "service-account-key.json"

    # Cloud Spanner Graph holding the campus buildings and walkways
    SPANNER_INSTANCE_ID: str = "campusmap-graph"
    SPANNER_DATABASE_ID: str = "campus"
    MAX_PATH_HOPS: int = 100


settings = Settings()
