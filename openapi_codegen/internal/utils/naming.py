"""Утилиты для работы с именами классов, полей и методов"""

import keyword
import re
from typing import Optional

from pydantic import BaseModel

# Префикс, который pydantic резервирует за атрибутами BaseModel
PROTECTED_PREFIX = "model_"

# Имена, которые нельзя использовать как поле модели или параметр метода:
# ключевые слова, типы из аннотаций и публичные атрибуты BaseModel
RESERVED_WORDS = frozenset(
    [word.lower() for word in keyword.kwlist]
    + [
        "self",
        "str",
        "int",
        "float",
        "bool",
        "bytes",
        "date",
        "datetime",
        "time",
    ]
    + [name.lower() for name in dir(BaseModel) if not name.startswith("_")]
)


def _is_word_char(char: str) -> bool:
    return char == "_" or (char.isalnum() and ("x" + char).isidentifier())


def _replace_invalid_chars(name: str) -> str:
    return "".join(c if _is_word_char(c) else "_" for c in name)


def is_reserved_word(name: str) -> bool:
    """Проверка имени по списку зарезервированных слов (без учета регистра)"""
    return name.lower() in RESERVED_WORDS


def snake_case(name: str) -> str:
    """
    Преобразование в snake_case с учетом аббревиатур.

    Examples:
        >>> snake_case("HTTPValidationError")
        'http_validation_error'
        >>> snake_case("GetProductsAsync")
        'get_products_async'
    """
    name = name.replace("-", "_")

    # Подчеркивание перед заглавной буквой, за которой идут строчные
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    # Подчеркивание между строчной буквой и заглавной
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    # Последовательности заглавных букв: HTTPError -> HTTP_Error
    s3 = re.sub("([A-Z]+)([A-Z][a-z])", r"\1_\2", s2)
    s4 = re.sub("_+", "_", s3)
    return s4.lower()


def sanitize_class_name(name: Optional[str]) -> str:
    """
    Очистка имени схемы для использования как имя класса.

    Пробелы и дефисы удаляются целиком, первая буква становится заглавной,
    остальные недопустимые символы заменяются на подчеркивание.

    Examples:
        >>> sanitize_class_name("Product-DTO")
        'ProductDTO'
        >>> sanitize_class_name("my class")
        'Myclass'
        >>> sanitize_class_name("")
        'Model'
    """
    if name is None or not name.strip():
        return "Model"

    sanitized = name.replace(" ", "").replace("-", "")
    if not sanitized:
        return "Model"

    if sanitized[0].islower():
        sanitized = sanitized[0].upper() + sanitized[1:]

    sanitized = _replace_invalid_chars(sanitized)

    if sanitized[0].isdigit():
        sanitized = "_" + sanitized

    return sanitized


def sanitize_property_name(name: Optional[str]) -> str:
    """
    Очистка имени свойства для использования как поле модели или параметр.

    Результат в snake_case. Зарезервированные слова экранируются
    подчеркиванием в конце (class -> class_), имя с цифрой в начале
    получает префикс field_ (pydantic не принимает поля с _ в начале),
    как и имя из пространства model_ атрибутов BaseModel.

    Examples:
        >>> sanitize_property_name("productName")
        'product_name'
        >>> sanitize_property_name("class")
        'class_'
        >>> sanitize_property_name("123invalid")
        'field_123invalid'
        >>> sanitize_property_name("modelDump")
        'field_model_dump'
    """
    if name is None or not name.strip():
        return "property"

    sanitized = snake_case(_replace_invalid_chars(name.strip())).lstrip("_")
    if not sanitized:
        return "property"

    if sanitized[0].isdigit() or sanitized.startswith(PROTECTED_PREFIX):
        sanitized = f"field_{sanitized}"

    if is_reserved_word(sanitized):
        sanitized = f"{sanitized}_"

    return sanitized
