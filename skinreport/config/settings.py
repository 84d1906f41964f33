"""
Application-wide settings using pydantic-settings.
All runtime env access in skinreport/ should go through this module.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "./logs"
    LOG_FILE_NAME: str = "skinreport.debug.log"
    LOG_FILE_WHEN: str = "midnight"
    LOG_FILE_INTERVAL: int = 1
    LOG_FILE_BACKUP_COUNT: int = 7
    LOG_FILE_ENCODING: str = "utf-8"
    LOG_FILE_LEVEL: str = "DEBUG"

    # Runtime
    LOG_TRUNCATE: int = 600

    # Extraction
    RULES_FILE: str = ""

    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def rules_path(self) -> Path | None:
        raw = (self.RULES_FILE or "").strip()
        if not raw:
            return None
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


settings = Settings()
