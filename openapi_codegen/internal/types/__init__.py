from .schema import (
    DEFAULT_TAG,
    ApiDocument,
    OperationRecord,
    ParameterRecord,
    RequestBodyRecord,
    ResponseRecord,
    SchemaKind,
    SchemaNode,
    SchemaRegistry,
)
from .type_resolver import TypeResolver

__all__ = [
    "DEFAULT_TAG",
    "ApiDocument",
    "OperationRecord",
    "ParameterRecord",
    "RequestBodyRecord",
    "ResponseRecord",
    "SchemaKind",
    "SchemaNode",
    "SchemaRegistry",
    "TypeResolver",
]
