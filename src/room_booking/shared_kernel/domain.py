"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import datetime, timezone
from typing import Optional

# Идентификаторы назначаются хранилищем при добавлении
EntityId = int


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """
    Проверяет пересечение полуоткрытых интервалов [a_start, a_end) и [b_start, b_end).

    Соприкасающиеся границы (a_end == b_start) пересечением не считаются.
    """
    return not (a_end <= b_start or a_start >= b_end)


def days_between(start: datetime, end: datetime) -> int:
    """Количество календарных дней между датами начала и окончания."""
    return (end.date() - start.date()).days


def now() -> datetime:
    """Возвращает текущую дату и время (UTC)."""
    return datetime.now(timezone.utc)


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    code = "DOMAIN_ERROR"


class ValidationException(DomainException):
    """Некорректные входные данные (диапазон дат, пустое имя и т.п.)."""

    code = "VALIDATION_ERROR"


class NotFoundException(DomainException):
    """Запрошенный ресурс не существует."""

    code = "RESOURCE_NOT_FOUND"


class RoomNotFoundException(NotFoundException):
    code = "ROOM_NOT_FOUND"

    def __init__(self, room_id: EntityId):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class BookingNotFoundException(NotFoundException):
    code = "BOOKING_NOT_FOUND"

    def __init__(self, booking_id: EntityId):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class ConflictException(DomainException):
    """Операция конфликтует с текущим состоянием."""

    code = "CONFLICT"


class BookingOverlapException(ConflictException):
    """Номер уже забронирован на пересекающийся период."""

    code = "BOOKING_CONFLICT"

    def __init__(
        self,
        room_id: EntityId,
        start: datetime,
        end: datetime,
        message: Optional[str] = None,
    ):
        self.room_id = room_id
        self.start = start
        self.end = end
        super().__init__(
            message
            or f"Room {room_id} is already booked between "
            f"{start.isoformat()} and {end.isoformat()}"
        )


class RoomDeletionException(ConflictException):
    """Удаление номера заблокировано активными бронированиями."""

    code = "ROOM_DELETION_BLOCKED"
