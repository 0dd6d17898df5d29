"""
Прикладной слой контекста бронирования.

Содержит сервисы приложения, которые координируют
взаимодействие между внешними интерфейсами и доменной моделью.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from ..shared_kernel import (
    BookingNotFoundException,
    BookingOverlapException,
    ConflictException,
    ConsoleLogger,
    EntityId,
    RoomDeletionException,
    RoomNotFoundException,
    ValidationException,
    now,
)
from . import interfaces as ports
from .domain import DEFAULT_ROOM_ADDRESS, Booking, BookingPolicy, Room

# DTO (Data Transfer Objects) для входящих данных


class CreateBookingRequest(BaseModel):
    """Запрос на создание бронирования."""

    room_id: EntityId
    start: datetime
    end: datetime
    booker: str = Field(..., min_length=1, max_length=200)


class SwapBookingRequest(BaseModel):
    """Запрос на перенос бронирования в другую комнату."""

    existing_booking_id: EntityId
    new_room_id: EntityId


class CreateRoomRequest(BaseModel):
    """Запрос на создание комнаты."""

    name: str = Field(..., min_length=1, max_length=200)
    capacity: int = Field(..., gt=0)
    price_per_day: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=100)


class UpdateRoomRequest(BaseModel):
    """Запрос на изменение названия и вместимости комнаты."""

    name: str = Field(..., min_length=1, max_length=200)
    capacity: int = Field(..., gt=0)


# DTO для исходящих данных


class RoomDTO(BaseModel):
    """DTO для представления комнаты."""

    id: EntityId
    name: str
    capacity: int
    price_per_day: Decimal
    description: str
    address: str

    @classmethod
    def from_domain(cls, room: Room) -> "RoomDTO":
        """Создает DTO из доменной модели."""
        return cls(
            id=room.id,
            name=room.name,
            capacity=room.capacity,
            price_per_day=room.price_per_day,
            description=room.description,
            address=room.address,
        )


class BookingDTO(BaseModel):
    """DTO для представления бронирования."""

    id: EntityId
    room_id: EntityId
    start: datetime
    end: datetime
    booker: str
    total_price: Decimal
    booking_date: datetime
    is_cancelled: bool
    room: Optional[RoomDTO] = None

    @classmethod
    def from_domain(cls, booking: Booking, room: Optional[Room] = None) -> "BookingDTO":
        """Создает DTO из доменной модели, при наличии прикрепляя комнату."""
        return cls(
            id=booking.id,
            room_id=booking.room_id,
            start=booking.start,
            end=booking.end,
            booker=booking.booker,
            total_price=booking.total_price,
            booking_date=booking.booking_date,
            is_cancelled=booking.is_cancelled,
            room=RoomDTO.from_domain(room) if room is not None else None,
        )


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для работы с бронированиями."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        logger: Optional[ports.ILogger] = None,
        clock: Callable[[], datetime] = now,
        date_format: str = "%Y-%m-%d",
        timestamp_format: str = "%Y-%m-%d %H:%M",
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._logger = logger or ConsoleLogger()
        self._clock = clock
        self._date_format = date_format
        self._timestamp_format = timestamp_format

    @property
    def uow(self) -> ports.IBookingUnitOfWork:
        return self._uow

    def _get_booking_or_raise(self, booking_id: EntityId) -> Booking:
        booking = self._uow.bookings.get_by_id(booking_id)
        if booking is None:
            self._logger.warning("Booking not found", booking_id=booking_id)
            raise BookingNotFoundException(booking_id)
        return booking

    def _get_room_or_raise(self, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            self._logger.warning("Room not found", room_id=room_id)
            raise RoomNotFoundException(room_id)
        return room

    def _to_dto(self, booking: Booking) -> BookingDTO:
        return BookingDTO.from_domain(booking, self._uow.rooms.get_by_id(booking.room_id))

    def create_booking(self, request: CreateBookingRequest) -> BookingDTO:
        """Создает новое бронирование."""
        self._logger.info(
            "Creating booking",
            room_id=request.room_id,
            start=request.start,
            end=request.end,
            booker=request.booker,
        )

        try:
            BookingPolicy.validate_period(request.start, request.end)
        except ValidationException as e:
            self._logger.warning(
                "Invalid booking period",
                reason=str(e),
                start=request.start,
                end=request.end,
            )
            raise

        with self._uow:
            room = self._get_room_or_raise(request.room_id)

            if self._uow.bookings.any_overlap(room.id, request.start, request.end):
                self._logger.warning(
                    "Booking conflict detected",
                    room_id=room.id,
                    start=request.start,
                    end=request.end,
                )
                raise BookingOverlapException(room.id, request.start, request.end)

            booking = Booking.create(
                room=room,
                start=request.start,
                end=request.end,
                booker=request.booker,
                booking_date=self._clock(),
            )
            booking = self._uow.bookings.add(booking)
            self._uow.commit()

        self._logger.info(
            "Booking created", booking_id=booking.id, room_id=booking.room_id
        )
        return BookingDTO.from_domain(booking, room)

    def get_booking(self, booking_id: EntityId) -> BookingDTO:
        """Возвращает информацию о бронировании."""
        with self._uow:
            booking = self._get_booking_or_raise(booking_id)
            return self._to_dto(booking)

    def get_bookings_for_room(self, room_id: EntityId) -> List[BookingDTO]:
        """Возвращает активные бронирования комнаты, начиная с самых поздних."""
        with self._uow:
            room = self._uow.rooms.get_by_id(room_id)
            return [
                BookingDTO.from_domain(booking, room)
                for booking in self._uow.bookings.get_for_room(room_id)
            ]

    def any_overlap(self, room_id: EntityId, start: datetime, end: datetime) -> bool:
        """Проверяет, пересекается ли период с активными бронированиями комнаты."""
        with self._uow:
            return self._uow.bookings.any_overlap(room_id, start, end)

    def cancel_booking(self, booking_id: EntityId) -> BookingDTO:
        """Отменяет бронирование. Повторная отмена ничего не делает."""
        with self._uow:
            booking = self._get_booking_or_raise(booking_id)

            if booking.cancel():
                self._uow.bookings.update(booking)
                self._uow.commit()
                self._logger.info("Booking cancelled", booking_id=booking_id)
            else:
                self._logger.info("Booking already cancelled", booking_id=booking_id)

            return self._to_dto(booking)

    def swap_booking(self, request: SwapBookingRequest) -> BookingDTO:
        """
        Переносит бронирование в другую комнату.

        Новое бронирование сохраняет период, автора и дату создания
        исходного, стоимость пересчитывается по цене новой комнаты.
        Исходное бронирование отменяется. Оба изменения фиксируются
        вместе: при любой ошибке состояние не меняется.
        """
        self._logger.info(
            "Swapping booking",
            booking_id=request.existing_booking_id,
            new_room_id=request.new_room_id,
        )

        with self._uow:
            existing = self._get_booking_or_raise(request.existing_booking_id)
            new_room = self._get_room_or_raise(request.new_room_id)

            if existing.is_cancelled:
                self._logger.warning(
                    "Cannot swap cancelled booking", booking_id=existing.id
                )
                raise ConflictException(
                    f"Booking {existing.id} is cancelled and cannot be swapped"
                )

            if self._uow.bookings.any_overlap(
                new_room.id,
                existing.start,
                existing.end,
                exclude_booking_id=existing.id,
            ):
                self._logger.warning(
                    "New room is not available",
                    room_id=new_room.id,
                    start=existing.start,
                    end=existing.end,
                )
                raise BookingOverlapException(new_room.id, existing.start, existing.end)

            new_booking = Booking.create(
                room=new_room,
                start=existing.start,
                end=existing.end,
                booker=existing.booker,
                booking_date=existing.booking_date,
            )

            existing.cancel()
            self._uow.bookings.update(existing)
            new_booking = self._uow.bookings.add(new_booking)
            self._uow.commit()

        self._logger.info(
            "Booking swapped",
            booking_id=existing.id,
            old_room_id=existing.room_id,
            new_room_id=new_room.id,
            new_booking_id=new_booking.id,
        )
        return BookingDTO.from_domain(new_booking, new_room)

    def get_user_history(
        self,
        booker: str,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[BookingDTO]:
        """
        Возвращает историю бронирований пользователя, включая отмененные.

        Все фильтры необязательны и применяются совместно. Результат
        отсортирован по дате создания, затем по дате начала (по убыванию).
        """
        self._logger.info(
            "Retrieving booking history",
            booker=booker,
            from_date=from_date,
            to_date=to_date,
            min_price=min_price,
            max_price=max_price,
        )
        self._validate_booker(booker)

        bookings = self._load_history(booker, from_date, to_date, min_price, max_price)

        self._logger.info(
            "Booking history retrieved", booker=booker, count=len(bookings)
        )
        return bookings

    def _load_history(self, booker: str, *filters) -> List[BookingDTO]:
        with self._uow:
            return [
                self._to_dto(booking)
                for booking in self._uow.bookings.get_user_history(booker, *filters)
            ]

    def print_user_history(self, booker: str) -> None:
        """Выводит историю бронирований пользователя в лог в виде отчета."""
        self._validate_booker(booker)
        self._logger.info("Retrieving booking history", booker=booker)

        bookings = self._load_history(booker)
        if not bookings:
            self._logger.info("No booking history found", booker=booker)
            return

        self._logger.info(f"=== BOOKING HISTORY FOR USER: {booker} ===")
        self._logger.info(f"Total bookings found: {len(bookings)}")
        self._logger.info("========================================")

        for booking in bookings:
            self._logger.info(
                f"Booking ID: {booking.id} | Room: {booking.room_id} | "
                f"Start: {booking.start.strftime(self._date_format)} | "
                f"End: {booking.end.strftime(self._date_format)} | "
                f"Total Price: ${booking.total_price} | "
                f"Booked On: {booking.booking_date.strftime(self._timestamp_format)} | "
                f"Cancelled: {booking.is_cancelled}"
            )

        self._logger.info(f"=== END OF BOOKING HISTORY FOR {booker} ===")

    def purge_booking(self, booking_id: EntityId) -> None:
        """
        Физически удаляет запись о бронировании.

        Административная операция; для обычной отмены используется
        cancel_booking.
        """
        with self._uow:
            booking = self._get_booking_or_raise(booking_id)
            self._uow.bookings.remove(booking)
            self._uow.commit()

        self._logger.info("Booking purged", booking_id=booking_id)

    def _validate_booker(self, booker: Optional[str]) -> None:
        if booker is None or not booker.strip():
            self._logger.warning("Invalid booker name", booker=booker)
            raise ValidationException("Booker name cannot be empty or null")


class RoomApplicationService:
    """Сервис приложения для работы с комнатами."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        logger: Optional[ports.ILogger] = None,
        default_address: str = DEFAULT_ROOM_ADDRESS,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._logger = logger or ConsoleLogger()
        self._default_address = default_address

    @property
    def uow(self) -> ports.IBookingUnitOfWork:
        return self._uow

    def _get_room_or_raise(self, room_id: EntityId) -> Room:
        room = self._uow.rooms.get_by_id(room_id)
        if room is None:
            self._logger.warning("Room not found", room_id=room_id)
            raise RoomNotFoundException(room_id)
        return room

    def list_rooms(self) -> List[RoomDTO]:
        """Возвращает все комнаты."""
        with self._uow:
            return [RoomDTO.from_domain(room) for room in self._uow.rooms.list_all()]

    def get_room(self, room_id: EntityId) -> RoomDTO:
        """Возвращает информацию о комнате."""
        with self._uow:
            return RoomDTO.from_domain(self._get_room_or_raise(room_id))

    def create_room(self, request: CreateRoomRequest) -> RoomDTO:
        """Создает новую комнату."""
        room = Room(
            name=request.name,
            capacity=request.capacity,
            price_per_day=request.price_per_day,
            description=request.description or "",
            address=request.address if request.address is not None else self._default_address,
        )

        with self._uow:
            room = self._uow.rooms.add(room)
            self._uow.commit()

        self._logger.info("Room created", room_id=room.id, room_name=room.name)
        return RoomDTO.from_domain(room)

    def update_room(self, room_id: EntityId, request: UpdateRoomRequest) -> RoomDTO:
        """Изменяет название и вместимость комнаты."""
        with self._uow:
            room = self._get_room_or_raise(room_id)
            room.name = request.name
            room.capacity = request.capacity
            self._uow.rooms.update(room)
            self._uow.commit()

        self._logger.info("Room updated", room_id=room_id)
        return RoomDTO.from_domain(room)

    def list_available_rooms(
        self,
        start: datetime,
        end: datetime,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[RoomDTO]:
        """Возвращает комнаты без активных бронирований на период [start, end)."""
        if end <= start:
            self._logger.warning("Invalid availability period", start=start, end=end)
            raise ValidationException("End date must be after start date")

        with self._uow:
            rooms = self._uow.rooms.find_available_rooms(start, end, min_price, max_price)
        self._logger.info(
            "Available rooms found", count=len(rooms), start=start, end=end
        )
        return [RoomDTO.from_domain(room) for room in rooms]

    def delete_room(self, room_id: EntityId) -> None:
        """Удаляет комнату, если у нее нет активных бронирований."""
        self._logger.info("Attempting to delete room", room_id=room_id)

        with self._uow:
            room = self._get_room_or_raise(room_id)

            active_bookings = self._uow.bookings.get_for_room(room_id)
            if active_bookings:
                self._logger.warning(
                    "Cannot delete room with existing bookings",
                    room_id=room_id,
                    booking_count=len(active_bookings),
                )
                raise RoomDeletionException("Cannot delete room with existing bookings")

            self._uow.rooms.remove(room)
            self._uow.commit()

        self._logger.info("Room deleted", room_id=room_id, room_name=room.name)
