"""
Реализации логгеров, общие для всех слоев.
"""
import json
import logging
import sys
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# Атрибуты LogRecord, которые нельзя перезаписывать через extra
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime"}


class ConsoleLogger:
    """Простая реализация логгера, выводящая сообщения в консоль."""

    def __init__(self, debug: bool = False):
        self._debug = debug

    def _emit(self, level: str, message: str, stream, **kwargs: Any) -> None:
        print(f"[{level}] {message}", file=stream, flush=True)
        if kwargs:
            print(
                "  Context:",
                json.dumps(kwargs, default=str, indent=2, ensure_ascii=False),
                file=stream,
                flush=True,
            )

    def debug(self, message: str, **kwargs: Any) -> None:
        if self._debug:
            self._emit("DEBUG", message, sys.stdout, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("INFO", message, sys.stdout, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("WARNING", message, sys.stderr, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("ERROR", message, sys.stderr, **kwargs)


class StandardLogger:
    """
    Адаптер над стандартным модулем logging.

    Контекст передается в запись через ``extra``, поэтому JSON-форматтер
    выводит его отдельными полями.
    """

    def __init__(self, name: str = "room_booking"):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    @staticmethod
    def _extra(context: dict) -> dict:
        return {
            (f"ctx_{key}" if key in _RESERVED_ATTRS else key): value
            for key, value in context.items()
        }

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, extra=self._extra(kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, extra=self._extra(kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, extra=self._extra(kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, extra=self._extra(kwargs))


class CustomJsonFormatter(JsonFormatter):
    """JSON-форматтер с уровнем и именем логгера."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(level)s %(logger)s %(message)s"


def configure_logging(name: str, level: str = "INFO", fmt: str = "text") -> None:
    """Настраивает обработчик логгера приложения."""
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())
    logger.propagate = False

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(CustomJsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    # Повторная настройка заменяет прежний обработчик
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
