"""
Общее ядро (Shared Kernel) системы бронирования.

Содержит общие типы данных, исключения и утилиты.
"""

from .domain import (
    BookingNotFoundException,
    BookingOverlapException,
    ConflictException,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    NotFoundException,
    RoomDeletionException,
    RoomNotFoundException,
    ValidationException,
    # Утилиты
    days_between,
    now,
    overlaps,
)
from .infrastructure import ConsoleLogger, StandardLogger, configure_logging

__all__ = [
    # Базовые типы
    "EntityId",
    # Исключения
    "DomainException",
    "ValidationException",
    "NotFoundException",
    "RoomNotFoundException",
    "BookingNotFoundException",
    "ConflictException",
    "BookingOverlapException",
    "RoomDeletionException",
    # Утилиты
    "overlaps",
    "days_between",
    "now",
    # Логгеры
    "ConsoleLogger",
    "StandardLogger",
    "configure_logging",
]
