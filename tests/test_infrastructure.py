"""
Тесты репозиториев в памяти и единицы работы.
"""
from decimal import Decimal

import pytest

from room_booking.booking.domain import Booking, Room
from room_booking.booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    InMemoryRoomRepository,
)

from .conftest import utc


def make_booking(room_id=1, start_day=1, end_day=3, booker="Alice", price="100", booked_on=None):
    return Booking(
        room_id=room_id,
        start=utc(2024, 1, start_day),
        end=utc(2024, 1, end_day),
        booker=booker,
        total_price=Decimal(price),
        booking_date=booked_on or utc(2023, 12, 1),
    )


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def room_repo(booking_repo) -> InMemoryRoomRepository:
    return InMemoryRoomRepository(booking_repo)


class TestInMemoryBookingRepository:
    """Тесты для InMemoryBookingRepository."""

    def test_add_assigns_sequential_ids(self, booking_repo):
        first = booking_repo.add(make_booking())
        second = booking_repo.add(make_booking(start_day=5, end_day=6))

        assert first.id == 1
        assert second.id == 2
        assert booking_repo.get_by_id(1) is first

    def test_get_missing_returns_none(self, booking_repo):
        assert booking_repo.get_by_id(42) is None

    def test_get_for_room_skips_cancelled_and_sorts_newest_first(self, booking_repo):
        early = booking_repo.add(make_booking(start_day=1, end_day=2))
        late = booking_repo.add(make_booking(start_day=10, end_day=12))
        cancelled = booking_repo.add(make_booking(start_day=5, end_day=6))
        cancelled.cancel()
        booking_repo.add(make_booking(room_id=2))

        result = booking_repo.get_for_room(1)

        assert [b.id for b in result] == [late.id, early.id]

    def test_any_overlap(self, booking_repo):
        existing = booking_repo.add(make_booking(start_day=1, end_day=5))

        assert booking_repo.any_overlap(1, utc(2024, 1, 4), utc(2024, 1, 6)) is True
        assert booking_repo.any_overlap(1, utc(2024, 1, 5), utc(2024, 1, 6)) is False
        assert booking_repo.any_overlap(2, utc(2024, 1, 2), utc(2024, 1, 3)) is False
        assert (
            booking_repo.any_overlap(
                1, utc(2024, 1, 2), utc(2024, 1, 3), exclude_booking_id=existing.id
            )
            is False
        )

    def test_any_overlap_ignores_cancelled(self, booking_repo):
        booking = booking_repo.add(make_booking(start_day=1, end_day=5))
        booking.cancel()

        assert booking_repo.any_overlap(1, utc(2024, 1, 2), utc(2024, 1, 3)) is False

    def test_user_history_filters(self, booking_repo):
        booking_repo.add(make_booking(start_day=1, end_day=2, price="40"))
        mid = booking_repo.add(make_booking(start_day=5, end_day=7, price="100"))
        booking_repo.add(make_booking(start_day=10, end_day=14, price="300"))
        booking_repo.add(make_booking(booker="Bob", price="100"))

        by_price = booking_repo.get_user_history(
            "Alice", min_price=Decimal("50"), max_price=Decimal("200")
        )
        by_date = booking_repo.get_user_history(
            "Alice", from_date=utc(2024, 1, 3), to_date=utc(2024, 1, 5)
        )

        assert [b.id for b in by_price] == [mid.id]
        assert [b.id for b in by_date] == [mid.id]

    def test_user_history_ordering(self, booking_repo):
        older = booking_repo.add(make_booking(start_day=20, end_day=21, booked_on=utc(2023, 11, 1)))
        newer_early = booking_repo.add(make_booking(start_day=1, end_day=2, booked_on=utc(2023, 12, 1)))
        newer_late = booking_repo.add(make_booking(start_day=5, end_day=6, booked_on=utc(2023, 12, 1)))

        result = booking_repo.get_user_history("Alice")

        assert [b.id for b in result] == [newer_late.id, newer_early.id, older.id]

    def test_remove(self, booking_repo):
        booking = booking_repo.add(make_booking())
        booking_repo.remove(booking)

        assert booking_repo.get_by_id(booking.id) is None
        with pytest.raises(KeyError):
            booking_repo.remove(booking)


class TestInMemoryRoomRepository:
    """Тесты для InMemoryRoomRepository."""

    def test_add_exists_remove(self, room_repo):
        room = room_repo.add(Room(name="Blue", capacity=4, price_per_day=Decimal("50")))

        assert room.id == 1
        assert room_repo.exists(1) is True

        room_repo.remove(room)
        assert room_repo.exists(1) is False
        assert room_repo.get_by_id(1) is None

    def test_find_available_rooms(self, room_repo, booking_repo):
        cheap = room_repo.add(Room(name="Cheap", capacity=2, price_per_day=Decimal("30")))
        busy = room_repo.add(Room(name="Busy", capacity=2, price_per_day=Decimal("60")))
        pricey = room_repo.add(Room(name="Pricey", capacity=2, price_per_day=Decimal("500")))
        booking_repo.add(make_booking(room_id=busy.id, start_day=1, end_day=5))

        window = (utc(2024, 1, 2), utc(2024, 1, 3))

        assert [r.id for r in room_repo.find_available_rooms(*window)] == [cheap.id, pricey.id]
        assert [
            r.id
            for r in room_repo.find_available_rooms(
                *window, min_price=Decimal("50"), max_price=Decimal("100")
            )
        ] == []
        assert [
            r.id for r in room_repo.find_available_rooms(utc(2024, 1, 5), utc(2024, 1, 6))
        ] == [cheap.id, busy.id, pricey.id]


class TestBookingUnitOfWork:
    """Тесты единицы работы."""

    def test_clean_exit_commits(self, logger):
        uow = BookingUnitOfWork(logger=logger)
        with uow:
            uow.rooms.add(Room(name="Blue", capacity=4, price_per_day=Decimal("50")))

        assert uow.rooms.exists(1) is True

    def test_exception_rolls_back_all_changes(self, logger):
        uow = BookingUnitOfWork(logger=logger)
        with uow:
            room = uow.rooms.add(Room(name="Blue", capacity=4, price_per_day=Decimal("50")))
            booking = uow.bookings.add(make_booking(room_id=room.id))

        with pytest.raises(RuntimeError):
            with uow:
                stored = uow.bookings.get_by_id(booking.id)
                stored.cancel()
                uow.bookings.add(make_booking(room_id=room.id, start_day=10, end_day=11))
                raise RuntimeError("boom")

        assert uow.bookings.get_by_id(booking.id).is_cancelled is False
        assert len(uow.bookings.list_all()) == 1
        assert "BookingUnitOfWork rolled back" in logger.messages("warning")

    def test_rollback_restores_id_sequence(self, logger):
        uow = BookingUnitOfWork(logger=logger)
        with uow:
            uow.bookings.add(make_booking())

        with pytest.raises(RuntimeError):
            with uow:
                uow.bookings.add(make_booking(start_day=5, end_day=6))
                raise RuntimeError("boom")

        with uow:
            added = uow.bookings.add(make_booking(start_day=7, end_day=8))

        assert added.id == 2

    def test_nested_context_rolls_back_at_outermost_level(self, logger):
        uow = BookingUnitOfWork(logger=logger)

        with pytest.raises(RuntimeError):
            with uow:
                with uow:
                    uow.bookings.add(make_booking())
                raise RuntimeError("boom")

        assert uow.bookings.list_all() == []

    def test_rollback_keeps_changes_committed_inside_the_block(self, logger):
        uow = BookingUnitOfWork(logger=logger)

        with pytest.raises(RuntimeError):
            with uow:
                kept = uow.bookings.add(make_booking())
                uow.commit()
                uow.bookings.get_by_id(kept.id).cancel()
                uow.bookings.add(make_booking(start_day=5, end_day=6))
                raise RuntimeError("boom")

        assert [b.id for b in uow.bookings.list_all()] == [kept.id]
        assert uow.bookings.get_by_id(kept.id).is_cancelled is False

    def test_changes_outside_unit_of_work_are_not_journaled(self, booking_repo):
        booking = booking_repo.add(make_booking())

        booking_repo.revert()

        assert booking_repo.get_by_id(booking.id) is booking
