import logging
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Determine project root based on this file's location
# This assumes config.py is in textkit/core/
PROJECT_ROOT = Path(__file__).parent.parent.parent

# .env 파일 로딩 시도 (선택적)
load_dotenv()

class Settings(BaseSettings):
    # API 구성
    api_title: str = "textkit"
    api_description: str = "Text utility tools behind a uniform tool-call API (Unicode language & character classification)."
    api_version: str = "0.1.0"
    api_v1_prefix: str = "/api/v1" # API prefix
    cors_allow_origins: List[str] = ["*"]

    # 분석 설정
    max_input_length: int = 1_000_000 # in UTF-16 code units, 0 disables the limit
    default_encoding_label: str = "UTF-16 (default)"

    # 로깅 및 디버깅
    log_level: str = "INFO"
    log_dir: Optional[str] = None # Log directory, defaults below
    request_log_enabled: bool = True # Only written when log level is DEBUG

    # Environment
    environment: str = "development" # 'development' or 'production'

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TEXTKIT_",
        extra='ignore' # 명시적으로 정의되지 않은 필드는 무시
    )

    def __init__(self, **values):
        super().__init__(**values)
        if self.log_dir is None:
            self.log_dir = str(PROJECT_ROOT / "logs")

    @property
    def calculated_log_dir_path(self) -> Path:
        """Returns the log directory as a Path object."""
        return Path(self.log_dir)

    @property
    def request_log_path(self) -> Path:
        """Returns the path of the JSON-lines tool-call log."""
        return self.calculated_log_dir_path / "requests.jsonl"

# Function to get settings instance, cached for efficiency
@lru_cache()
def get_settings() -> Settings:
    logger.info("Loading application settings...")
    try:
        settings_instance = Settings()

        if settings_instance.max_input_length < 0:
            raise ValueError(f"max_input_length must be >= 0, got {settings_instance.max_input_length}")

        logger.info(f"Using log directory: {settings_instance.calculated_log_dir_path}")
        logger.info("Settings loaded and validated successfully.")
        return settings_instance
    except Exception as e:
        logger.error(f"Fatal error loading settings: {e}", exc_info=True)
        raise

settings = get_settings()

def log_settings(current: Settings) -> None:
    """Logs the effective configuration (called once at application startup)."""
    logger.info("--- Application Configuration ---")
    logger.info(f"API Title: {current.api_title} v{current.api_version}")
    logger.info(f"Environment: {current.environment}")
    logger.info(f"Log Level: {current.log_level}")
    logger.info(f"Log Directory: {current.calculated_log_dir_path}")
    logger.info(f"Request Log Enabled: {current.request_log_enabled}")
    logger.info(f"Max Input Length: {current.max_input_length or 'unlimited'}")
    logger.info(f"Default Encoding Label: {current.default_encoding_label}")
    logger.info("-------------------------------")
