"""
Модуль контекста бронирования (Booking Context).

Отвечает за управление комнатами и бронированиями, включая:
- Создание, отмену и перенос бронирований
- Проверку пересечений и доступности комнат
- Историю бронирований пользователя
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    'domain',
    'application',
    'infrastructure',
    'interfaces',
]
