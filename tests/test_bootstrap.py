"""
Тесты настроек и сборки приложения.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from room_booking.booking.application import CreateBookingRequest, CreateRoomRequest
from room_booking.bootstrap import bootstrap_app
from room_booking.config import Settings, get_settings
from room_booking.shared_kernel import ConsoleLogger, StandardLogger


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("ROOM_BOOKING_LOG_LEVEL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.default_room_address == "Budapest"
    assert settings.log_level == "INFO"
    assert settings.log_format == "text"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ROOM_BOOKING_DEFAULT_ROOM_ADDRESS", "Prague")
    monkeypatch.setenv("ROOM_BOOKING_LOG_LEVEL", "debug")
    monkeypatch.setenv("ROOM_BOOKING_LOG_FORMAT", "json")

    settings = Settings(_env_file=None)

    assert settings.default_room_address == "Prague"
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"


def test_settings_reject_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="verbose")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_bootstrap_with_console_logger():
    app = bootstrap_app(Settings(_env_file=None, log_format="console"))

    assert isinstance(app["logger"], ConsoleLogger)


def test_bootstrap_wires_services():
    settings = Settings(
        _env_file=None, default_room_address="Prague", logger_name="tests.bootstrap"
    )
    app = bootstrap_app(settings)

    assert isinstance(app["logger"], StandardLogger)
    assert app["booking_service"].uow is app["uow"]
    assert app["room_service"].uow is app["uow"]

    room = app["room_service"].create_room(
        CreateRoomRequest(name="Room", capacity=2, price_per_day=Decimal("40"))
    )
    assert room.address == "Prague"

    booking = app["booking_service"].create_booking(
        CreateBookingRequest(
            room_id=room.id,
            start=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end=datetime(2024, 1, 4, tzinfo=timezone.utc),
            booker="Alice",
        )
    )
    assert booking.total_price == Decimal("120")
