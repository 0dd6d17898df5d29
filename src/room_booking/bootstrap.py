from typing import Optional

from .booking.application import BookingApplicationService, RoomApplicationService
from .booking.infrastructure import BookingUnitOfWork
from .config import Settings, get_settings
from .shared_kernel import ConsoleLogger, StandardLogger, configure_logging


def create_logger(settings: Settings):
    """Создает логгер в соответствии с настройками."""
    if settings.log_format == "console":
        return ConsoleLogger(debug=settings.log_level == "DEBUG")

    configure_logging(settings.logger_name, settings.log_level, settings.log_format)
    return StandardLogger(settings.logger_name)


def bootstrap_app(settings: Optional[Settings] = None):
    """Создает и настраивает все компоненты приложения."""
    settings = settings or get_settings()

    # 1. Логгер передается каждому компоненту явно
    logger = create_logger(settings)

    # 2. Единица работы общая для обоих сервисов
    uow = BookingUnitOfWork(logger=logger)

    # 3. Сервисы приложения
    booking_service = BookingApplicationService(
        uow,
        logger=logger,
        date_format=settings.history_date_format,
        timestamp_format=settings.history_timestamp_format,
    )
    room_service = RoomApplicationService(
        uow, logger=logger, default_address=settings.default_room_address
    )

    return {
        "settings": settings,
        "logger": logger,
        "uow": uow,
        "booking_service": booking_service,
        "room_service": room_service,
    }
