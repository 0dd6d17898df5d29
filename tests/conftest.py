"""
Общие фикстуры для тестов.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from room_booking.booking.application import (
    BookingApplicationService,
    CreateRoomRequest,
    RoomApplicationService,
)
from room_booking.booking.infrastructure import BookingUnitOfWork


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class RecordingLogger:
    """Логгер, запоминающий все сообщения для проверок в тестах."""

    def __init__(self):
        self.records = []

    def _record(self, level, message, **kwargs):
        self.records.append((level, message, kwargs))

    def debug(self, message, **kwargs):
        self._record("debug", message, **kwargs)

    def info(self, message, **kwargs):
        self._record("info", message, **kwargs)

    def warning(self, message, **kwargs):
        self._record("warning", message, **kwargs)

    def error(self, message, **kwargs):
        self._record("error", message, **kwargs)

    def messages(self, level=None):
        return [m for lvl, m, _ in self.records if level is None or lvl == level]


class FakeClock:
    """Часы, которые сдвигаются на минуту при каждом вызове."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2023, 12, 1, 12, 0))


@pytest.fixture
def uow(logger) -> BookingUnitOfWork:
    return BookingUnitOfWork(logger=logger)


@pytest.fixture
def booking_service(uow, logger, clock) -> BookingApplicationService:
    return BookingApplicationService(uow, logger=logger, clock=clock)


@pytest.fixture
def room_service(uow, logger) -> RoomApplicationService:
    return RoomApplicationService(uow, logger=logger)


@pytest.fixture
def room_a(room_service):
    """Комната A, 50 за день."""
    return room_service.create_room(
        CreateRoomRequest(name="Room A", capacity=4, price_per_day=Decimal("50"))
    )


@pytest.fixture
def room_b(room_service):
    """Комната B, 75 за день."""
    return room_service.create_room(
        CreateRoomRequest(name="Room B", capacity=8, price_per_day=Decimal("75"))
    )
