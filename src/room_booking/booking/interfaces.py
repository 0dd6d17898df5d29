"""
Интерфейсы (порты) для контекста бронирования.

Хранилища обязаны обеспечивать сериализуемую изоляцию в пределах
единицы работы: проверка пересечений и последующая вставка
не должны перемежаться с записями других запросов.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Protocol

from ..shared_kernel import EntityId
from .domain import Booking, Room


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class IBookingRepository(Protocol):
    """Интерфейс репозитория для бронирований."""

    def add(self, booking: Booking) -> Booking: ...
    def get_by_id(self, booking_id: EntityId) -> Booking | None: ...
    def update(self, booking: Booking) -> Booking: ...
    def remove(self, booking: Booking) -> None: ...
    def get_for_room(self, room_id: EntityId) -> List[Booking]: ...
    def get_user_history(
        self,
        booker: str,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Booking]: ...
    def any_overlap(
        self,
        room_id: EntityId,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[EntityId] = None,
    ) -> bool: ...


class IRoomRepository(Protocol):
    """Интерфейс репозитория для комнат."""

    def list_all(self) -> List[Room]: ...
    def get_by_id(self, room_id: EntityId) -> Room | None: ...
    def add(self, room: Room) -> Room: ...
    def update(self, room: Room) -> Room: ...
    def exists(self, room_id: EntityId) -> bool: ...
    def remove(self, room: Room) -> None: ...
    def find_available_rooms(
        self,
        start: datetime,
        end: datetime,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Room]: ...


class IBookingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста бронирования."""

    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def rooms(self) -> IRoomRepository: ...

    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
