"""
Доменная модель контекста бронирования.

Содержит сущности Room и Booking, а также политики,
определяющие правила бронирования и расчета стоимости.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..shared_kernel import (
    EntityId,
    ValidationException,
    days_between,
    now,
    overlaps,
)

DEFAULT_ROOM_ADDRESS = "Budapest"


class Room(BaseModel):
    """Переговорная комната."""

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[EntityId] = Field(default=None, frozen=True)
    name: str = Field(..., min_length=1, max_length=200)
    capacity: int = Field(..., gt=0)
    price_per_day: Decimal = Field(..., gt=0)
    description: str = Field("", max_length=500)
    address: str = Field(DEFAULT_ROOM_ADDRESS, max_length=100)


class BookingPolicy:
    """Политики и бизнес-правила для бронирований."""

    MIN_BOOKING_DAYS = 1

    @classmethod
    def validate_period(cls, start: datetime, end: datetime) -> None:
        """Проверяет, что период бронирования соответствует политикам."""
        if end <= start:
            raise ValidationException("End date must be after start date")

        # Считаются календарные дни, а не прошедшие часы
        if days_between(start, end) < cls.MIN_BOOKING_DAYS:
            raise ValidationException(
                "End date must be at least one day after start date"
            )

    @staticmethod
    def number_of_days(start: datetime, end: datetime) -> int:
        return max(1, days_between(start, end))

    @classmethod
    def calculate_total_price(
        cls, price_per_day: Decimal, start: datetime, end: datetime
    ) -> Decimal:
        """Стоимость = цена за день × количество дней (не меньше одного)."""
        return price_per_day * cls.number_of_days(start, end)


class Booking(BaseModel):
    """Бронирование комнаты."""

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[EntityId] = Field(default=None, frozen=True)
    room_id: EntityId = Field(..., gt=0)
    start: datetime
    end: datetime
    booker: str = Field(..., min_length=1, max_length=200)
    total_price: Decimal = Field(..., gt=0)
    booking_date: datetime = Field(default_factory=now, frozen=True)
    is_cancelled: bool = False

    @model_validator(mode="after")
    def end_after_start(self) -> "Booking":
        if self.end <= self.start:
            raise ValueError("End date must be after start date")
        return self

    @property
    def number_of_days(self) -> int:
        return BookingPolicy.number_of_days(self.start, self.end)

    def cancel(self) -> bool:
        """
        Отменяет бронирование.

        Повторная отмена ничего не меняет. Возвращает True,
        если состояние изменилось.
        """
        if self.is_cancelled:
            return False
        self.is_cancelled = True
        return True

    def is_active(self) -> bool:
        return not self.is_cancelled

    def overlaps_with(self, start: datetime, end: datetime) -> bool:
        """Пересекается ли активное бронирование с периодом [start, end)."""
        return self.is_active() and overlaps(self.start, self.end, start, end)

    @classmethod
    def create(
        cls,
        room: Room,
        start: datetime,
        end: datetime,
        booker: str,
        booking_date: Optional[datetime] = None,
    ) -> "Booking":
        """Создает новое бронирование с рассчитанной стоимостью."""
        BookingPolicy.validate_period(start, end)

        return cls(
            room_id=room.id,
            start=start,
            end=end,
            booker=booker,
            total_price=BookingPolicy.calculate_total_price(
                room.price_per_day, start, end
            ),
            booking_date=booking_date if booking_date is not None else now(),
        )
