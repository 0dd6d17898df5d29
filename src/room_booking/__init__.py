"""
Система бронирования переговорных комнат.
"""

__version__ = "0.1.0"
