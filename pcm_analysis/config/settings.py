"""
Configuration settings for PCM analysis.

Loads configuration from environment variables with sensible defaults.
"""

import math
import os
from typing import Optional


class Settings:
    """
    Runtime settings for analysis runs and batch execution.

    All settings are loaded from environment variables with defaults.
    """

    def __init__(self):
        """Initialize settings from environment variables."""
        # Logging Configuration
        self.log_level: str = os.getenv('PCM_ANALYSIS_LOG_LEVEL', 'INFO')
        self.json_logs: bool = self._parse_bool(os.getenv('PCM_ANALYSIS_JSON_LOGS', 'true'))

        # Batch Configuration
        self.max_workers: int = int(os.getenv('PCM_ANALYSIS_MAX_WORKERS', str(os.cpu_count() or 1)))
        self.render_interval_ms: int = int(os.getenv('PCM_ANALYSIS_RENDER_INTERVAL_MS', '80'))

        # Decoding Configuration
        self.read_block_frames: int = int(os.getenv('PCM_ANALYSIS_READ_BLOCK_FRAMES', '4096'))

        # Analysis Defaults
        self.min_limit_db: float = float(os.getenv('PCM_ANALYSIS_MIN_LIMIT_DB', '-120.0'))

        # Validate configuration
        self._validate()

    def _parse_bool(self, value: str) -> bool:
        """
        Parse boolean value from string.

        Args:
            value: String value to parse

        Returns:
            Boolean value
        """
        return value.lower() in ('true', '1', 'yes', 'on')

    def _validate(self):
        """Validate configuration values."""
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.log_level.upper() not in valid_log_levels:
            raise ValueError(
                f"Invalid PCM_ANALYSIS_LOG_LEVEL: {self.log_level}. "
                f"Must be one of {valid_log_levels}"
            )

        if self.max_workers <= 0:
            raise ValueError(f"PCM_ANALYSIS_MAX_WORKERS must be positive, got {self.max_workers}")

        if self.render_interval_ms < 0:
            raise ValueError(
                f"PCM_ANALYSIS_RENDER_INTERVAL_MS must be non-negative, got {self.render_interval_ms}"
            )

        if self.read_block_frames <= 0:
            raise ValueError(
                f"PCM_ANALYSIS_READ_BLOCK_FRAMES must be positive, got {self.read_block_frames}"
            )

        if math.isnan(self.min_limit_db) or math.isinf(self.min_limit_db):
            raise ValueError(f"PCM_ANALYSIS_MIN_LIMIT_DB must be finite, got {self.min_limit_db}")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance (singleton pattern).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
