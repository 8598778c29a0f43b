from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./kapture.db"
    notion_api_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_timeout_seconds: float = 30.0
    token_dir: Path = Path.home() / ".kapture" / "notion"
    max_sync_attempts: int = 3
    sync_interval_minutes: int = 15
    connectivity_url: str = "https://api.notion.com"
    connectivity_timeout_seconds: float = 3.0
    suggestion_window_hours: int = 2
    suggestion_candidates: int = 20
    destination_cache_seconds: int = 300  # 5 minutes
    log_level: str = "INFO"

    class Config:
        env_prefix = "KAPTURE_"
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
