import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from skinreport.config.settings import settings

_BASE_LOGGER_NAME = "skinreport"
_CONFIGURED = False
_DEBUG_FILE_HANDLER_MARK = "_skinreport_debug_file"


def _resolve_log_level(level_name: str) -> int:
    level = getattr(logging, (level_name or "").strip().upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def _is_valid_log_level(level_name: str) -> bool:
    return isinstance(getattr(logging, (level_name or "").strip().upper(), None), int)


def _has_debug_file_handler(base_logger: logging.Logger) -> bool:
    return any(getattr(handler, _DEBUG_FILE_HANDLER_MARK, False) for handler in base_logger.handlers)


def _file_backup_count(base_logger: logging.Logger) -> int:
    count = settings.LOG_FILE_BACKUP_COUNT
    if count >= 0:
        return count
    base_logger.warning("[logger] Invalid LOG_FILE_BACKUP_COUNT '%s', fallback to 7", count)
    return 7


def _file_level(base_logger: logging.Logger) -> int:
    if _is_valid_log_level(settings.LOG_FILE_LEVEL):
        return _resolve_log_level(settings.LOG_FILE_LEVEL)
    base_logger.warning("[logger] Invalid LOG_FILE_LEVEL '%s', fallback to DEBUG", settings.LOG_FILE_LEVEL)
    return logging.DEBUG


def _ensure_debug_file_handler(base_logger: logging.Logger) -> None:
    """Attach one rotating debug file handler under ``LOG_DIR``; failures only warn."""
    if _has_debug_file_handler(base_logger):
        return

    backup_count = _file_backup_count(base_logger)
    file_level = _file_level(base_logger)
    log_path = Path(settings.LOG_DIR) / settings.LOG_FILE_NAME
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=str(log_path),
            when=settings.LOG_FILE_WHEN,
            interval=settings.LOG_FILE_INTERVAL,
            backupCount=backup_count,
            encoding=settings.LOG_FILE_ENCODING,
        )
    except (OSError, ValueError) as exc:
        base_logger.warning("[logger] Failed to open debug log file '%s': %s", log_path, exc)
        return

    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
    setattr(file_handler, _DEBUG_FILE_HANDLER_MARK, True)
    base_logger.addHandler(file_handler)


def configure_logging() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    base_logger = logging.getLogger(_BASE_LOGGER_NAME)
    log_level = (
        _resolve_log_level(settings.LOG_LEVEL)
        if _is_valid_log_level(settings.LOG_LEVEL)
        else logging.INFO
    )

    if base_logger.handlers:
        base_logger.setLevel(log_level)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        base_logger.addHandler(handler)
        base_logger.setLevel(log_level)
        base_logger.propagate = False

    if not _is_valid_log_level(settings.LOG_LEVEL):
        base_logger.warning(
            "[logger] Invalid LOG_LEVEL '%s', fallback to INFO",
            settings.LOG_LEVEL,
        )

    if settings.LOG_TO_FILE:
        _ensure_debug_file_handler(base_logger)

    _CONFIGURED = True


def get_logger(name: str | None = None) -> logging.Logger:
    configure_logging()
    base_logger = logging.getLogger(_BASE_LOGGER_NAME)
    if not name:
        return base_logger
    if name == _BASE_LOGGER_NAME or name.startswith(_BASE_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return base_logger.getChild(name)


def _stringify_log_content(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, BaseModel):
        return json.dumps(content.model_dump(mode="json"), ensure_ascii=False)
    if isinstance(content, dict):
        return json.dumps(content, ensure_ascii=False, default=str)
    return str(content)


def log_stage(logger: logging.Logger, stage: str, content: Any) -> None:
    text = _stringify_log_content(content)

    if not text:
        logger.info("[%s] output:\n[EMPTY]", stage)
        return

    if len(text) <= settings.LOG_TRUNCATE:
        truncated = text
    else:
        truncated = (
            f"{text[:settings.LOG_TRUNCATE]} "
            f"...[truncated {len(text) - settings.LOG_TRUNCATE} chars]"
        )

    logger.info("[%s] output:\n%s", stage, truncated)
