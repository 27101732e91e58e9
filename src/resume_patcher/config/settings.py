"""Patcher settings using Pydantic Settings."""

import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class Settings(BaseSettings):
    """Patcher configuration loaded from RESUME_PATCHER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RESUME_PATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Section lookup (case-insensitive substring match, first hit wins)
    heading_phrases: list[str] = ["experience", "employment history"]

    # Bullet template detection and generation
    bullet_markers: list[str] = ["•", "-"]
    bullet_prefix: str = "• "
    bullet_lookahead: int = 5

    # Package layout
    main_part: str = "word/document.xml"

    # patch_file output naming: <stem><output_suffix><ext>
    output_suffix: str = "_updated"

    # Application
    log_level: str = "INFO"

    def configure_logging(self, format_string: str | None = None) -> None:
        """Configure stdout logging for a host process.

        Args:
            format_string: Custom format string (default: LOG_FORMAT)
        """
        level = LOG_LEVEL_MAP.get(self.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format=format_string or LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )


# Global settings instance
settings = Settings()
