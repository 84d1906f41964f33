"""Configuration exports."""

from skinreport.config.logger import configure_logging, get_logger, log_stage
from skinreport.config.settings import settings

__all__ = ["configure_logging", "get_logger", "log_stage", "settings"]
