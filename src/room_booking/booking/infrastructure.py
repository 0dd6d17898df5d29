"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев в памяти и единицу работы,
которая фиксирует или откатывает все изменения разом.
"""
import threading
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from ..shared_kernel import ConsoleLogger, EntityId
from . import interfaces as ports
from .domain import Booking, Room


class _JournaledStore:
    """
    Хранилище в памяти с журналом отмены.

    Пока открыта транзакция, перед первым изменением записи (или
    перед выдачей ее через ``get_by_id``) в журнал кладется копия
    исходного значения. Откат возвращает только затронутые записи,
    поэтому его стоимость не зависит от размера хранилища.
    """

    def __init__(self):
        self._items: Dict[EntityId, object] = {}
        self._next_id = 1
        self._journal: Optional[Dict[EntityId, object]] = None
        self._journal_next_id = 1

    def _remember(self, item_id: EntityId) -> None:
        if self._journal is None or item_id in self._journal:
            return
        original = self._items.get(item_id)
        self._journal[item_id] = (
            original.model_copy(deep=True) if original is not None else None
        )

    def _store_new(self, item):
        stored = item.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._remember(stored.id)
        self._items[stored.id] = stored
        return stored

    def begin(self) -> None:
        self._journal = {}
        self._journal_next_id = self._next_id

    def accept(self) -> None:
        if self._journal is not None:
            self.begin()

    def revert(self) -> None:
        if self._journal is None:
            return
        for item_id, original in self._journal.items():
            if original is None:
                self._items.pop(item_id, None)
            else:
                self._items[item_id] = original
        self._next_id = self._journal_next_id
        self.begin()

    def end(self) -> None:
        self._journal = None


class InMemoryBookingRepository(_JournaledStore, ports.IBookingRepository):
    """Реализация репозитория бронирований в памяти."""

    def get_by_id(self, booking_id: EntityId) -> Optional[Booking]:
        self._remember(booking_id)
        return self._items.get(booking_id)

    def add(self, booking: Booking) -> Booking:
        if booking.id is not None and booking.id in self._items:
            raise ValueError(f"Booking with id {booking.id} already exists")
        return self._store_new(booking)

    def update(self, booking: Booking) -> Booking:
        if booking.id not in self._items:
            raise KeyError(f"Booking with id {booking.id} not found")
        self._remember(booking.id)
        self._items[booking.id] = booking
        return booking

    def remove(self, booking: Booking) -> None:
        if booking.id not in self._items:
            raise KeyError(f"Booking with id {booking.id} not found")
        self._remember(booking.id)
        del self._items[booking.id]

    def list_all(self) -> List[Booking]:
        return list(self._items.values())

    def get_for_room(self, room_id: EntityId) -> List[Booking]:
        bookings = [
            booking for booking in self._items.values()
            if booking.room_id == room_id and booking.is_active()
        ]
        return sorted(bookings, key=lambda b: b.start, reverse=True)

    def get_user_history(
        self,
        booker: str,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Booking]:
        result = []

        for booking in self._items.values():
            if booking.booker != booker:
                continue
            if from_date is not None and booking.start < from_date:
                continue
            if to_date is not None and booking.start > to_date:
                continue
            if min_price is not None and booking.total_price < min_price:
                continue
            if max_price is not None and booking.total_price > max_price:
                continue
            result.append(booking)

        return sorted(
            result, key=lambda b: (b.booking_date, b.start), reverse=True
        )

    def any_overlap(
        self,
        room_id: EntityId,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[EntityId] = None,
    ) -> bool:
        return any(
            booking.overlaps_with(start, end)
            for booking in self._items.values()
            if booking.room_id == room_id and booking.id != exclude_booking_id
        )


class InMemoryRoomRepository(_JournaledStore, ports.IRoomRepository):
    """Реализация репозитория комнат в памяти."""

    def __init__(self, booking_repository: InMemoryBookingRepository):
        super().__init__()
        # Аналог загрузки комнат вместе с их бронированиями
        self._booking_repository = booking_repository

    def list_all(self) -> List[Room]:
        return sorted(self._items.values(), key=lambda r: r.id)

    def get_by_id(self, room_id: EntityId) -> Optional[Room]:
        self._remember(room_id)
        return self._items.get(room_id)

    def add(self, room: Room) -> Room:
        if room.id is not None and room.id in self._items:
            raise ValueError(f"Room with id {room.id} already exists")
        return self._store_new(room)

    def update(self, room: Room) -> Room:
        if room.id not in self._items:
            raise KeyError(f"Room with id {room.id} not found")
        self._remember(room.id)
        self._items[room.id] = room
        return room

    def exists(self, room_id: EntityId) -> bool:
        return room_id in self._items

    def remove(self, room: Room) -> None:
        if room.id not in self._items:
            raise KeyError(f"Room with id {room.id} not found")
        self._remember(room.id)
        del self._items[room.id]

    def find_available_rooms(
        self,
        start: datetime,
        end: datetime,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Room]:
        result = []

        for room in self.list_all():
            if min_price is not None and room.price_per_day < min_price:
                continue
            if max_price is not None and room.price_per_day > max_price:
                continue
            if self._booking_repository.any_overlap(room.id, start, end):
                continue
            result.append(room)

        return result


class BookingUnitOfWork(ports.IBookingUnitOfWork):
    """
    Единица работы для контекста бронирования.

    Вход в контекст захватывает блокировку и открывает журнал отмены
    в обоих хранилищах. Пока блокировка удерживается, другие запросы
    не могут ни вклиниться между проверкой пересечений и вставкой,
    ни читать хранилища посреди чужой записи. ``rollback`` возвращает
    записи, затронутые с последней фиксации, ``commit`` принимает
    текущее состояние.

    Откатываются изменения записей, полученных через ``get_by_id``
    или сохраненных через ``add``/``update``/``remove``.
    """

    def __init__(
        self,
        bookings_repo: Optional[InMemoryBookingRepository] = None,
        rooms_repo: Optional[InMemoryRoomRepository] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        self._bookings = bookings_repo or InMemoryBookingRepository()
        self._rooms = rooms_repo or InMemoryRoomRepository(self._bookings)
        self._logger = logger or ConsoleLogger()
        self._lock = threading.RLock()
        self._depth = 0
        self._committed = False

    @property
    def bookings(self) -> InMemoryBookingRepository:
        return self._bookings

    @property
    def rooms(self) -> InMemoryRoomRepository:
        return self._rooms

    def commit(self) -> None:
        """Фиксирует все изменения."""
        self._bookings.accept()
        self._rooms.accept()
        self._committed = True
        self._logger.debug("BookingUnitOfWork committed")

    def rollback(self) -> None:
        """Откатывает все изменения с момента последней фиксации."""
        self._bookings.revert()
        self._rooms.revert()
        self._committed = False
        self._logger.warning("BookingUnitOfWork rolled back")

    def __enter__(self):
        self._lock.acquire()
        self._depth += 1
        if self._depth == 1:
            self._bookings.begin()
            self._rooms.begin()
            self._committed = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if self._depth == 1:
                if exc_type is not None:
                    self.rollback()
                elif not self._committed:
                    self.commit()
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._bookings.end()
                self._rooms.end()
            self._lock.release()
        return False  # Пробрасываем исключение дальше, если оно было
