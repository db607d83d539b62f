import logging
from typing import Optional, Set

from ..utils import sanitize_class_name
from .models import Variable
from .schema import SchemaKind, SchemaNode, SchemaRegistry

logger = logging.getLogger(__name__)

UNTYPED = "Any"

# Тип, выводимый из format, если type не указан
FORMAT_TO_TYPE = {
    "int32": "integer",
    "int64": "integer",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "date-time": "string",
    "date": "string",
    "time": "string",
    "uuid": "string",
    "byte": "string",
    "binary": "string",
}

INTEGER_FORMATS = {"int64": "int", "int32": "int"}
NUMBER_FORMATS = {"float": "float", "double": "float", "decimal": "Decimal"}
STRING_FORMATS = {
    "date-time": "datetime",
    "date": "date",
    "time": "time",
    "uuid": "UUID",
    "byte": "bytes",
    "binary": "bytes",
}

# Типы, значение которых не может быть "отсутствующим" после десериализации
VALUE_TYPES = frozenset(
    ["int", "float", "bool", "Decimal", "datetime", "date", "time", "UUID"]
)


def strip_optional(type_expression: str) -> str:
    if type_expression.startswith("Optional[") and type_expression.endswith("]"):
        return type_expression[len("Optional[") : -1]
    return type_expression


def is_value_type(type_expression: str) -> bool:
    return strip_optional(type_expression) in VALUE_TYPES


def infer_primitive_type(schema: SchemaNode) -> Optional[str]:
    """Тип примитива: явный или выведенный из format"""
    if schema.primitive_type:
        return schema.primitive_type
    return FORMAT_TO_TYPE.get(schema.format)


class TypeResolver:
    """Разрешение схем OpenAPI в аннотации типов Python"""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry
        self._missing_references: Set[str] = set()

    def resolve(self, schema: Optional[SchemaNode], nullable: bool = False) -> str:
        """Аннотация типа для схемы, Optional[...] если nullable"""
        return str(self._resolve(schema, nullable))

    def resolve_reference(self, name: str) -> Optional[str]:
        """Имя класса для ссылки или None, если схемы нет в реестре"""
        if name in self.registry:
            return sanitize_class_name(name)

        if name not in self._missing_references:
            self._missing_references.add(name)
            logger.warning(f"Схема {name!r} не найдена, используется {UNTYPED}")
        return None

    def collect_references(self, schema: Optional[SchemaNode]) -> Set[str]:
        """Имена классов, которые попадут в аннотацию типа схемы"""
        if schema is None:
            return set()

        if schema.kind == SchemaKind.REFERENCE:
            class_name = self.resolve_reference(schema.reference)
            return {class_name} if class_name else set()
        if schema.kind == SchemaKind.ARRAY:
            return self.collect_references(schema.items)
        if schema.kind == SchemaKind.MAP:
            return self.collect_references(schema.additional_properties)
        if schema.kind == SchemaKind.UNION:
            return self.collect_references(self._union_member(schema))

        return set()

    def _resolve(self, schema: Optional[SchemaNode], nullable: bool) -> Variable:
        if schema is None:
            return self._optional(Variable(value=UNTYPED), nullable)

        if schema.kind == SchemaKind.REFERENCE:
            class_name = self.resolve_reference(schema.reference)
            return self._optional(Variable(value=class_name or UNTYPED), nullable)

        if schema.kind == SchemaKind.ARRAY:
            item_type = (
                self._resolve(schema.items, False)
                if schema.items is not None
                else Variable(value=UNTYPED)
            )
            return self._optional(Variable(value=item_type, wrap_name="List"), nullable)

        if schema.kind == SchemaKind.MAP:
            value_type = self._resolve(schema.additional_properties, False)
            return self._optional(
                Variable(value=["str", value_type], wrap_name="Dict"), nullable
            )

        if schema.kind == SchemaKind.UNION:
            # oneOf с веткой null - так в спецификации кодируется nullable ссылка
            member = self._union_member(schema)
            if member is not None:
                return self._resolve(member, True)

        if schema.kind == SchemaKind.PRIMITIVE:
            return self._optional(Variable(value=self._map_primitive(schema)), nullable)

        return self._optional(Variable(value=UNTYPED), nullable)

    @staticmethod
    def _union_member(schema: SchemaNode) -> Optional[SchemaNode]:
        return next((m for m in schema.one_of if not m.is_null_marker), None)

    @staticmethod
    def _map_primitive(schema: SchemaNode) -> str:
        primitive_type = infer_primitive_type(schema)
        schema_format = schema.format

        if primitive_type == "integer":
            return INTEGER_FORMATS.get(schema_format, "int")
        if primitive_type == "number":
            return NUMBER_FORMATS.get(schema_format, "float")
        if primitive_type == "string":
            return STRING_FORMATS.get(schema_format, "str")
        if primitive_type == "boolean":
            return "bool"

        return UNTYPED

    @staticmethod
    def _optional(variable: Variable, nullable: bool) -> Variable:
        if not nullable or variable.wrap_name == "Optional":
            return variable
        return Variable(value=variable, wrap_name="Optional")
