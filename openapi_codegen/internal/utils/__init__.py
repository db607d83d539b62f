"""Утилиты для генератора"""

from .naming import (
    is_reserved_word,
    sanitize_class_name,
    sanitize_property_name,
    snake_case,
)

__all__ = [
    "is_reserved_word",
    "sanitize_class_name",
    "sanitize_property_name",
    "snake_case",
]
