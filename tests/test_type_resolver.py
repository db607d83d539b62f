"""
Тесты разрешения схем в аннотации типов
"""

import logging

import pytest

from openapi_codegen.internal.types import SchemaNode, TypeResolver
from openapi_codegen.internal.types.type_resolver import is_value_type, strip_optional

REGISTRY = {
    "Product": SchemaNode.object({"id": SchemaNode.primitive("integer")}),
    "product-dto": SchemaNode.object({}),
}


@pytest.fixture
def resolver():
    return TypeResolver(REGISTRY)


class TestPrimitiveTypes:
    """Тесты примитивных типов"""

    @pytest.mark.parametrize(
        "primitive_type, schema_format, expected",
        [
            ("integer", None, "int"),
            ("integer", "int32", "int"),
            ("integer", "int64", "int"),
            ("number", None, "float"),
            ("number", "float", "float"),
            ("number", "double", "float"),
            ("number", "decimal", "Decimal"),
            ("string", None, "str"),
            ("string", "date-time", "datetime"),
            ("string", "date", "date"),
            ("string", "time", "time"),
            ("string", "uuid", "UUID"),
            ("string", "byte", "bytes"),
            ("string", "binary", "bytes"),
            ("string", "email", "str"),
            ("boolean", None, "bool"),
            ("file", None, "Any"),
        ],
    )
    def test_primitive_mapping(self, resolver, primitive_type, schema_format, expected):
        """Тест таблицы соответствия типов"""
        schema = SchemaNode.primitive(primitive_type, schema_format)
        assert resolver.resolve(schema) == expected

    def test_type_inferred_from_format(self, resolver):
        """Тест вывода типа из format, если type не указан"""
        assert resolver.resolve(SchemaNode.primitive(None, "uuid")) == "UUID"
        assert resolver.resolve(SchemaNode.primitive(None, "int64")) == "int"

    def test_missing_schema(self, resolver):
        """Тест отсутствующей схемы"""
        assert resolver.resolve(None) == "Any"
        assert resolver.resolve(SchemaNode()) == "Any"

    def test_nullable(self, resolver):
        """Тест nullable обертки"""
        assert resolver.resolve(SchemaNode.primitive("integer"), True) == "Optional[int]"
        assert resolver.resolve(None, True) == "Optional[Any]"


class TestCompositeTypes:
    """Тесты ссылок, массивов, словарей и oneOf"""

    def test_reference(self, resolver):
        """Тест ссылки на схему"""
        assert resolver.resolve(SchemaNode.ref("Product")) == "Product"
        assert resolver.resolve(SchemaNode.ref("product-dto")) == "Productdto"

    def test_array(self, resolver):
        """Тест массивов"""
        assert resolver.resolve(SchemaNode.array(SchemaNode.ref("Product"))) == "List[Product]"
        assert resolver.resolve(SchemaNode.array()) == "List[Any]"
        nested = SchemaNode.array(SchemaNode.array(SchemaNode.primitive("string")))
        assert resolver.resolve(nested) == "List[List[str]]"
        nested = SchemaNode.array(SchemaNode.array(SchemaNode.ref("Product")))
        assert resolver.resolve(nested) == "List[List[Product]]"
        assert resolver.resolve(nested, True) == "Optional[List[List[Product]]]"

    def test_array_items_never_optional(self, resolver):
        """Тест что элементы массива не оборачиваются в Optional"""
        schema = SchemaNode.array(SchemaNode.ref("Product"))
        assert resolver.resolve(schema, True) == "Optional[List[Product]]"

    def test_map(self, resolver):
        """Тест словарей"""
        schema = SchemaNode.map_of(SchemaNode.primitive("integer", "int64"))
        assert resolver.resolve(schema) == "Dict[str, int]"
        schema = SchemaNode.map_of(SchemaNode.array(SchemaNode.ref("Product")))
        assert resolver.resolve(schema) == "Dict[str, List[Product]]"

    def test_one_of_with_null(self, resolver):
        """Тест oneOf [ссылка, null] - nullable ссылка"""
        schema = SchemaNode.union(SchemaNode.primitive("null"), SchemaNode.ref("Product"))
        assert resolver.resolve(schema) == "Optional[Product]"

    def test_one_of_not_double_wrapped(self, resolver):
        """Тест что Optional не оборачивается дважды"""
        schema = SchemaNode.union(SchemaNode.ref("Product"), SchemaNode.primitive("null"))
        assert resolver.resolve(schema, True) == "Optional[Product]"

    def test_one_of_only_null(self, resolver):
        """Тест oneOf без значимых вариантов"""
        schema = SchemaNode.union(SchemaNode.primitive("null"))
        assert resolver.resolve(schema) == "Any"


class TestReferences:
    """Тесты разрешения ссылок"""

    def test_missing_reference_warns_once(self, resolver, caplog):
        """Тест отсутствующей схемы: Any и одно предупреждение"""
        with caplog.at_level(logging.WARNING):
            assert resolver.resolve(SchemaNode.ref("Missing")) == "Any"
            assert resolver.resolve(SchemaNode.array(SchemaNode.ref("Missing"))) == "List[Any]"

        warnings = [r for r in caplog.records if "Missing" in r.getMessage()]
        assert len(warnings) == 1
        assert warnings[0].levelno == logging.WARNING

    def test_collect_references(self, resolver):
        """Тест сбора зависимостей"""
        schema = SchemaNode.map_of(SchemaNode.array(SchemaNode.ref("Product")))
        assert resolver.collect_references(schema) == {"Product"}
        assert resolver.collect_references(SchemaNode.ref("Missing")) == set()
        assert resolver.collect_references(SchemaNode.primitive("string")) == set()


class TestValueTypes:
    """Тесты классификации типов"""

    def test_value_types(self):
        for type_expression in ["int", "float", "bool", "Decimal", "datetime", "UUID"]:
            assert is_value_type(type_expression)
        assert is_value_type("Optional[int]")

    def test_reference_types(self):
        for type_expression in ["str", "bytes", "Any", "List[int]", "Product"]:
            assert not is_value_type(type_expression)

    def test_strip_optional(self):
        assert strip_optional("Optional[List[int]]") == "List[int]"
        assert strip_optional("List[int]") == "List[int]"
