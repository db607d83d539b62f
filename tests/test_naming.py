"""
Тесты для утилит имен
"""

import keyword

import pytest
from pydantic import BaseModel

from openapi_codegen.internal.utils import (
    is_reserved_word,
    sanitize_class_name,
    sanitize_property_name,
    snake_case,
)


class TestSanitizeClassName:
    """Тесты очистки имен классов"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Product", "Product"),
            ("product", "Product"),
            ("Product-DTO", "ProductDTO"),
            ("my class", "Myclass"),
            ("123abc", "_123abc"),
            ("a.b", "A_b"),
            ("KeyValuePair`2", "KeyValuePair_2"),
        ],
    )
    def test_sanitize(self, name, expected):
        """Тест основных преобразований"""
        assert sanitize_class_name(name) == expected

    @pytest.mark.parametrize("name", [None, "", "   ", "- -"])
    def test_empty_fallback(self, name):
        """Тест пустого имени"""
        assert sanitize_class_name(name) == "Model"

    @pytest.mark.parametrize("name", ["Product-DTO", "my class", "123abc", "a.b", ""])
    def test_idempotent(self, name):
        """Тест повторной очистки"""
        once = sanitize_class_name(name)
        assert sanitize_class_name(once) == once

    def test_result_is_identifier(self):
        """Тест что результат - допустимый идентификатор"""
        for name in ["1", "a-b c", "x/y", "Ünïcode", "9lives"]:
            assert sanitize_class_name(name).isidentifier()


class TestSanitizePropertyName:
    """Тесты очистки имен свойств"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("productName", "product_name"),
            ("id", "id"),
            ("first-name", "first_name"),
            ("user.id", "user_id"),
            ("HTTPStatus", "http_status"),
            ("123invalid", "field_123invalid"),
        ],
    )
    def test_sanitize(self, name, expected):
        """Тест основных преобразований"""
        assert sanitize_property_name(name) == expected

    @pytest.mark.parametrize("name", [None, "", "  ", "___"])
    def test_empty_fallback(self, name):
        """Тест пустого имени"""
        assert sanitize_property_name(name) == "property"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("class", "class_"),
            ("Class", "class_"),
            ("return", "return_"),
            ("self", "self_"),
            ("date", "date_"),
            ("str", "str_"),
            ("model_config", "field_model_config"),
            ("copy", "copy_"),
            ("dict", "dict_"),
        ],
    )
    def test_reserved_words(self, name, expected):
        """Тест экранирования зарезервированных слов"""
        assert sanitize_property_name(name) == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("modelDump", "field_model_dump"),
            ("model_validate", "field_model_validate"),
            ("modelJsonSchema", "field_model_json_schema"),
            ("model_version", "field_model_version"),
        ],
    )
    def test_pydantic_namespace(self, name, expected):
        """Тест имен из пространства model_ атрибутов BaseModel"""
        assert sanitize_property_name(name) == expected

    def test_base_model_members_escaped(self):
        """Тест что поле не перекрывает атрибуты BaseModel"""
        for member in dir(BaseModel):
            if member.startswith("_"):
                continue
            result = sanitize_property_name(member)
            assert result not in dir(BaseModel)
            assert not result.startswith("model_")

    def test_result_is_not_keyword(self):
        """Тест что ключевые слова никогда не остаются без экранирования"""
        for word in keyword.kwlist:
            result = sanitize_property_name(word)
            assert not keyword.iskeyword(result)
            assert result.isidentifier()


class TestHelpers:
    """Тесты вспомогательных функций"""

    def test_is_reserved_word_case_insensitive(self):
        """Тест проверки без учета регистра"""
        assert is_reserved_word("class")
        assert is_reserved_word("CLASS")
        assert is_reserved_word("Self")
        assert not is_reserved_word("product")

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("GetProductsAsync", "get_products_async"),
            ("HTTPValidationError", "http_validation_error"),
            ("ProductDTO", "product_dto"),
            ("GetApiV1UsersAsync", "get_api_v1_users_async"),
            ("already_snake", "already_snake"),
        ],
    )
    def test_snake_case(self, name, expected):
        """Тест преобразования в snake_case"""
        assert snake_case(name) == expected
