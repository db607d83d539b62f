"""
Структуры разобранной OpenAPI спецификации
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

DEFAULT_TAG = "Default"


class SchemaKind(str, Enum):
    PRIMITIVE = "primitive"
    ARRAY = "array"
    OBJECT = "object"
    MAP = "map"
    REFERENCE = "reference"
    UNION = "union"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class SchemaNode:
    """
    Одна схема OpenAPI (именованная или inline).

    Узел-ссылка хранит только имя цели: разрешение идет по реестру схем
    в момент генерации, поэтому циклические ссылки не раскрываются.
    properties=None означает, что у схемы вообще нет карты свойств.
    """

    kind: SchemaKind = SchemaKind.UNSPECIFIED
    primitive_type: Optional[str] = None
    format: Optional[str] = None
    items: Optional["SchemaNode"] = None
    additional_properties: Optional["SchemaNode"] = None
    additional_properties_allowed: bool = False
    reference: Optional[str] = None
    one_of: Tuple["SchemaNode", ...] = ()
    properties: Optional[Dict[str, "SchemaNode"]] = None
    required: FrozenSet[str] = frozenset()
    description: Optional[str] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    nullable: bool = False

    @classmethod
    def primitive(cls, primitive_type: Optional[str], format: str = None, **kwargs):
        return cls(
            kind=SchemaKind.PRIMITIVE,
            primitive_type=primitive_type,
            format=format,
            **kwargs,
        )

    @classmethod
    def ref(cls, name: str, **kwargs):
        return cls(kind=SchemaKind.REFERENCE, reference=name, **kwargs)

    @classmethod
    def array(cls, items: Optional["SchemaNode"] = None, **kwargs):
        return cls(kind=SchemaKind.ARRAY, items=items, **kwargs)

    @classmethod
    def map_of(cls, values: "SchemaNode", **kwargs):
        return cls(kind=SchemaKind.MAP, additional_properties=values, **kwargs)

    @classmethod
    def union(cls, *members: "SchemaNode", **kwargs):
        return cls(kind=SchemaKind.UNION, one_of=tuple(members), **kwargs)

    @classmethod
    def object(
        cls,
        properties: Dict[str, "SchemaNode"] = None,
        required=(),
        **kwargs,
    ):
        return cls(
            kind=SchemaKind.OBJECT,
            properties=dict(properties) if properties is not None else None,
            required=frozenset(required),
            **kwargs,
        )

    @property
    def is_null_marker(self) -> bool:
        return self.kind == SchemaKind.PRIMITIVE and self.primitive_type == "null"


SchemaRegistry = Dict[str, SchemaNode]


@dataclass(frozen=True)
class ParameterRecord:
    name: str
    location: str
    required: bool = False
    schema: Optional[SchemaNode] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class RequestBodyRecord:
    content: Dict[str, Optional[SchemaNode]] = field(default_factory=dict)
    required: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class ResponseRecord:
    content: Dict[str, Optional[SchemaNode]] = field(default_factory=dict)
    description: Optional[str] = None


def find_json_schema(content: Dict[str, Optional[SchemaNode]]) -> Optional[SchemaNode]:
    """Схема первого media type, содержащего "json" """
    for media_type, schema in content.items():
        if "json" in media_type:
            return schema
    return None


@dataclass(frozen=True)
class OperationRecord:
    """Одна HTTP операция (путь + метод)"""

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    parameters: Tuple[ParameterRecord, ...] = ()
    request_body: Optional[RequestBodyRecord] = None
    responses: Dict[str, ResponseRecord] = field(default_factory=dict)

    @property
    def first_tag(self) -> str:
        return self.tags[0] if self.tags else DEFAULT_TAG

    def parameters_in(self, location: str) -> List[ParameterRecord]:
        return [p for p in self.parameters if p.location == location]


@dataclass
class ApiDocument:
    """Результат разбора спецификации"""

    title: str = "API"
    description: Optional[str] = None
    version: Optional[str] = None
    base_url: Optional[str] = None
    schemas: SchemaRegistry = field(default_factory=dict)
    operations: List[OperationRecord] = field(default_factory=list)

    def operations_by_tag(self) -> Dict[str, List[OperationRecord]]:
        """Группировка операций по всем их тегам"""
        operations_by_tag = defaultdict(list)
        for operation in self.operations:
            for tag in operation.tags or (DEFAULT_TAG,):
                operations_by_tag[tag].append(operation)
        return dict(operations_by_tag)
