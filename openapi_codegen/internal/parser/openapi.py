import json
import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import httpx
import jsonref
import yaml

from ...exceptions import SpecNotFoundError, SpecParseError
from ..types.schema import (
    ApiDocument,
    OperationRecord,
    ParameterRecord,
    RequestBodyRecord,
    ResponseRecord,
    SchemaKind,
    SchemaNode,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
SCHEMA_REF_MARKERS = ("/components/schemas/", "/definitions/")


def load_document(source: str) -> Dict[str, Any]:
    """Загрузка OpenAPI спецификации из файла (JSON/YAML) или по URL"""
    if source.startswith(("http://", "https://")):
        try:
            response = httpx.get(source, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SpecNotFoundError(source) from exc
        text = response.text
    else:
        if not os.path.isfile(source):
            raise SpecNotFoundError(source)
        with open(source, "r", encoding="utf-8") as f:
            text = f.read()

    logger.info(f"Загрузка OpenAPI спецификации из {source}")
    return parse_document_text(text, source)


def parse_document_text(text: str, source: str = None) -> Dict[str, Any]:
    """Десериализация текста спецификации: сначала JSON, затем YAML"""
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SpecParseError(f"документ не является JSON или YAML: {exc}", source)

    if not isinstance(document, dict):
        raise SpecParseError("корень документа должен быть объектом", source)
    if "openapi" not in document and "swagger" not in document:
        raise SpecParseError("нет поля 'openapi' или 'swagger'", source)

    return document


def _schema_ref_name(ref: str) -> Optional[str]:
    """Имя схемы из $ref вида #/components/schemas/Name или #/definitions/Name"""
    for marker in SCHEMA_REF_MARKERS:
        if marker in ref:
            name = ref.rsplit("/", 1)[-1]
            return unquote(name).replace("~1", "/").replace("~0", "~")
    return None


def _is_schema_object(value: Any) -> bool:
    # JsonRef проверяется первым: isinstance(proxy, dict) загружает цель ссылки
    return isinstance(value, jsonref.JsonRef) or isinstance(value, dict)


class OpenApiParser:
    """Парсер OpenAPI 3.x / Swagger 2.0 спецификации в ApiDocument"""

    def __init__(self, openapi_dict: Dict[str, Any], source: str = None):
        self.openapi_dict = openapi_dict
        self.source = source
        self._resolved = jsonref.replace_refs(openapi_dict, lazy_load=True)

    def parse(self) -> ApiDocument:
        """Разбор спецификации"""
        try:
            document = self._parse_document()
        except jsonref.JsonRefError as exc:
            raise SpecParseError(f"не удалось разрешить ссылку: {exc}", self.source)
        except (AttributeError, TypeError) as exc:
            raise SpecParseError(f"неверная структура документа: {exc}", self.source)

        logger.info(f"Загружено: {document.title}")
        logger.info(f"  Версия: {document.version}")
        logger.info(f"  Base URL: {document.base_url}")
        logger.info(f"  Схем: {len(document.schemas)}")
        logger.info(f"  Операций: {len(document.operations)}")
        return document

    def _parse_document(self) -> ApiDocument:
        info = self._resolved.get("info") or {}

        return ApiDocument(
            title=info.get("title") or "API",
            description=info.get("description"),
            version=info.get("version"),
            base_url=self._base_url(),
            schemas=self._parse_schemas(),
            operations=self._parse_operations(),
        )

    def _base_url(self) -> Optional[str]:
        servers = self._resolved.get("servers") or []
        if servers:
            return servers[0].get("url")

        host = self._resolved.get("host")
        if host:
            schemes = self._resolved.get("schemes") or ["https"]
            return f"{schemes[0]}://{host}{self._resolved.get('basePath', '')}"

        return None

    def _parse_schemas(self) -> Dict[str, SchemaNode]:
        schemas = (self._resolved.get("components") or {}).get("schemas")
        if schemas is None:
            schemas = self._resolved.get("definitions") or {}

        return {name: self._schema(raw) for name, raw in schemas.items()}

    def _parse_operations(self) -> List[OperationRecord]:
        operations = []

        for path, path_item in (self._resolved.get("paths") or {}).items():
            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if operation is None:
                    continue
                operations.append(
                    self._parse_operation(path, method, path_item, operation)
                )

        return operations

    def _parse_operation(
        self, path: str, method: str, path_item: Dict, operation: Dict
    ) -> OperationRecord:
        parameters = []
        request_body = self._request_body(operation.get("requestBody"))

        for raw in self._merged_parameters(path_item, operation):
            location = raw.get("in")
            if location == "body":
                request_body = RequestBodyRecord(
                    content={"application/json": self._schema(raw.get("schema"))},
                    required=bool(raw.get("required", False)),
                    description=raw.get("description"),
                )
                continue

            schema = raw.get("schema")
            if schema is None and "type" in raw:
                schema = raw

            parameters.append(
                ParameterRecord(
                    name=raw.get("name", ""),
                    location=location,
                    required=bool(raw.get("required", location == "path")),
                    schema=self._schema(schema),
                    description=raw.get("description"),
                )
            )

        return OperationRecord(
            path=path,
            method=method,
            operation_id=operation.get("operationId"),
            summary=operation.get("summary"),
            description=operation.get("description"),
            tags=tuple(operation.get("tags") or ()),
            parameters=tuple(parameters),
            request_body=request_body,
            responses={
                str(code): self._response(response)
                for code, response in (operation.get("responses") or {}).items()
            },
        )

    @staticmethod
    def _merged_parameters(path_item: Dict, operation: Dict) -> List[Dict]:
        """Параметры пути + параметры операции (последние переопределяют)"""
        merged = {}
        for raw in list(path_item.get("parameters") or []) + list(
            operation.get("parameters") or []
        ):
            merged[(raw.get("name"), raw.get("in"))] = raw
        return list(merged.values())

    def _content(self, content: Optional[Dict]) -> Dict[str, Optional[SchemaNode]]:
        return {
            media_type: self._schema((media or {}).get("schema"))
            for media_type, media in (content or {}).items()
        }

    def _request_body(self, raw: Optional[Dict]) -> Optional[RequestBodyRecord]:
        if raw is None:
            return None
        return RequestBodyRecord(
            content=self._content(raw.get("content")),
            required=bool(raw.get("required", False)),
            description=raw.get("description"),
        )

    def _response(self, raw: Optional[Dict]) -> ResponseRecord:
        raw = raw or {}
        if "content" in raw:
            content = self._content(raw.get("content"))
        elif "schema" in raw:
            # Swagger 2.0: схема ответа без content
            content = {"application/json": self._schema(raw["schema"])}
        else:
            content = {}
        return ResponseRecord(content=content, description=raw.get("description"))

    def _schema(self, raw: Any) -> Optional[SchemaNode]:
        if raw is None:
            return None

        if isinstance(raw, jsonref.JsonRef):
            name = _schema_ref_name(raw.__reference__.get("$ref", ""))
            if name is not None:
                return SchemaNode.ref(name)

        if not isinstance(raw, dict):
            # Булевы схемы (true/false) и прочее - без формы
            return SchemaNode()

        return self._parse_schema(raw)

    def _parse_schema(self, raw: Dict) -> SchemaNode:
        schema_type = raw.get("type")
        nullable = bool(raw.get("nullable", False))

        # OpenAPI 3.1: type: [string, "null"]
        if isinstance(schema_type, list):
            non_null = [t for t in schema_type if t != "null"]
            nullable = nullable or len(non_null) < len(schema_type)
            schema_type = non_null[0] if non_null else "null"

        properties = raw.get("properties")
        common = dict(
            primitive_type=schema_type,
            format=raw.get("format"),
            properties=(
                {name: self._schema(prop) for name, prop in properties.items()}
                if properties is not None
                else None
            ),
            required=frozenset(raw.get("required") or ()),
            description=raw.get("description"),
            pattern=raw.get("pattern"),
            min_length=raw.get("minLength"),
            max_length=raw.get("maxLength"),
            minimum=raw.get("minimum"),
            maximum=raw.get("maximum"),
            nullable=nullable,
        )

        if schema_type == "array":
            return SchemaNode(
                kind=SchemaKind.ARRAY, items=self._schema(raw.get("items")), **common
            )

        if schema_type == "object" or (schema_type is None and properties is not None):
            additional = raw.get("additionalProperties")
            if schema_type == "object" and _is_schema_object(additional):
                return SchemaNode(
                    kind=SchemaKind.MAP,
                    additional_properties=self._schema(additional),
                    **common,
                )
            return SchemaNode(
                kind=SchemaKind.OBJECT,
                additional_properties_allowed=additional is True,
                **common,
            )

        if raw.get("oneOf"):
            return SchemaNode(
                kind=SchemaKind.UNION,
                one_of=tuple(self._schema(member) for member in raw["oneOf"]),
                **common,
            )

        if schema_type or raw.get("format"):
            return SchemaNode(kind=SchemaKind.PRIMITIVE, **common)

        return SchemaNode(**common)
