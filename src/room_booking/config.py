"""
Конфигурация приложения.

Значения читаются из переменных окружения с префиксом ``ROOM_BOOKING_``
и из файла ``.env``, если он существует.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки приложения с поддержкой переменных окружения."""

    model_config = SettingsConfigDict(
        env_prefix="ROOM_BOOKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Адрес по умолчанию для новых номеров
    default_room_address: str = Field(default="Budapest", max_length=100)

    # Логирование
    log_level: str = "INFO"
    log_format: Literal["text", "json", "console"] = "text"
    logger_name: str = "room_booking"

    # Формат отчета по истории бронирований
    history_date_format: str = "%Y-%m-%d"
    history_timestamp_format: str = "%Y-%m-%d %H:%M"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Возвращает закешированный экземпляр настроек."""
    return Settings()
