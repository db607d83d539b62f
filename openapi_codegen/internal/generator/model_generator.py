import json
import logging
from typing import Dict, List, Optional, Tuple

from ..types.models import (
    CodeBlock,
    CodeFile,
    GeneratedModelMeta,
    Parameter,
    PropertyInfo,
)
from ..types.schema import SchemaNode, SchemaRegistry
from ..types.type_resolver import TypeResolver, infer_primitive_type, strip_optional
from ..utils import sanitize_class_name, sanitize_property_name, snake_case
from .context import GenerationRun

logger = logging.getLogger(__name__)

MODEL_IMPORTS = [
    "from __future__ import annotations",
    "",
    "from datetime import date, datetime, time",
    "from decimal import Decimal",
    "from typing import TYPE_CHECKING, Any, Dict, List, Optional",
    "from uuid import UUID",
    "",
    "from pydantic import BaseModel, ConfigDict, Field",
]

# Верхняя граница диапазона, если maximum не указан
INT32_MAX = 2147483647
INT64_MAX = 9223372036854775807
FLOAT32_MAX = 3.4028234663852886e38
FLOAT64_MAX = 1.7976931348623157e308

NUMERIC_TYPES = {"int", "float", "Decimal"}
LENGTH_TYPES = {"str", "bytes"}


def is_property_nullable(parent: SchemaNode, property_name: str) -> bool:
    """
    Поле не nullable, только если оно в required родителя и само не
    помечено nullable. Все остальные поля (в том числе когда у родителя
    нет карты свойств) считаются nullable.
    """
    if parent.properties is None or property_name not in parent.properties:
        return True

    property_schema = parent.properties[property_name]
    if property_name in parent.required and not (
        property_schema is not None and property_schema.nullable
    ):
        return False

    return True


def string_literal(value: str) -> str:
    """Строковый литерал Python (обратные слэши и кавычки удваиваются)"""
    return json.dumps(value, ensure_ascii=False)


def type_max_value(schema: SchemaNode):
    primitive_type = infer_primitive_type(schema)
    if primitive_type == "integer":
        return INT64_MAX if schema.format == "int64" else INT32_MAX
    if schema.format == "float":
        return FLOAT32_MAX
    return FLOAT64_MAX


class ModelGenerator:
    """Генератор pydantic моделей из components/schemas"""

    def __init__(self, run: GenerationRun, resolver: TypeResolver):
        self.run = run
        self.resolver = resolver

    @property
    def add_validation(self) -> bool:
        return self.run.options.add_validation

    def generate(
        self, registry: SchemaRegistry
    ) -> Tuple[Dict[str, str], List[GeneratedModelMeta]]:
        """Исходный код каждой новой модели и накопленные метаданные"""
        self._assign_modules(registry)
        sources = {}

        for schema_name, schema in registry.items():
            class_name = sanitize_class_name(schema_name)

            if class_name in self.run.emitted_models:
                if self.run.emitted_models[class_name] != schema:
                    logger.warning(
                        f"  Пропуск {class_name}: схема {schema_name!r} "
                        "отличается от уже сгенерированной с тем же именем"
                    )
                else:
                    logger.info(f"  Пропуск {class_name} (уже сгенерирована)")
                continue

            self.run.emitted_models[class_name] = schema
            logger.info(f"  Генерация {class_name}...")

            sources[class_name] = str(self._generate_model(class_name, schema))

        logger.info(f"Сгенерировано моделей: {len(self.run.emitted_models)}")
        return sources, list(self.run.models)

    def module_name(self, class_name: str) -> str:
        return self.run.model_modules[class_name]

    def generate_package_init(self) -> str:
        """models/__init__.py: импорт всех моделей и разрешение forward references"""
        code_file = CodeFile(file_name="models/__init__.py")
        class_names = list(self.run.emitted_models)

        code_file.imports.append("# Auto-generated models")
        code_file.imports.extend(
            f"from .{self.module_name(name)} import {name}" for name in class_names
        )
        code_file.add_code_block(f"__all__ = {sorted(class_names)!r}", order=1)

        if class_names:
            code_file.add_code_block(
                "\n".join(f"{name}.model_rebuild()" for name in class_names)
            )
        return str(code_file)

    def _assign_modules(self, registry: SchemaRegistry):
        used = set(self.run.model_modules.values())

        for schema_name in registry:
            class_name = sanitize_class_name(schema_name)
            if class_name in self.run.model_modules:
                continue

            module = snake_case(class_name).lstrip("_") or "model"
            candidate, counter = module, 1
            while candidate in used:
                candidate = f"{module}_{counter}"
                counter += 1

            used.add(candidate)
            self.run.model_modules[class_name] = candidate

    def _generate_model(self, class_name: str, schema: SchemaNode) -> CodeFile:
        code_file = CodeFile(
            file_name=f"models/{self.module_name(class_name)}.py",
            imports=list(MODEL_IMPORTS),
        )
        model_class = code_file.add_class(
            class_name, inherits=["BaseModel"], description=schema.description
        )

        dependencies = set()
        properties = []
        has_aliases = False
        used_names = set()

        for raw_name, property_schema in (schema.properties or {}).items():
            name = sanitize_property_name(raw_name)
            candidate, counter = name, 1
            while candidate in used_names:
                candidate = f"{name}_{counter}"
                counter += 1
            name = candidate
            used_names.add(name)

            parameter, info = self._generate_field(
                name, raw_name, property_schema, schema
            )
            model_class.parameters.append(parameter)
            properties.append(info)
            has_aliases = has_aliases or name != raw_name
            dependencies |= self.resolver.collect_references(property_schema)

        config = []
        if has_aliases:
            config.append("populate_by_name=True")
        if schema.additional_properties_allowed:
            config.append('extra="allow"')
        if config:
            model_class.add_code_block(
                CodeBlock(code=f"model_config = ConfigDict({', '.join(config)})")
            )

        dependencies.discard(class_name)
        dependency_imports = [
            f"    from .{self.module_name(dep)} import {dep}"
            for dep in sorted(dependencies)
            if dep in self.run.model_modules
        ]
        if dependency_imports:
            code_file.imports.extend(["", "if TYPE_CHECKING:"] + dependency_imports)

        self.run.models.append(
            GeneratedModelMeta(
                name=class_name,
                description=schema.description or f"{class_name} data transfer object",
                properties=properties,
            )
        )
        return code_file

    def _generate_field(
        self,
        name: str,
        raw_name: str,
        property_schema: Optional[SchemaNode],
        parent: SchemaNode,
    ) -> Tuple[Parameter, PropertyInfo]:
        nullable = is_property_nullable(parent, raw_name)
        field_type = self.resolver.resolve(property_schema, nullable)
        description = property_schema.description if property_schema else None

        arguments = []
        if nullable:
            arguments.append("default=None")
        elif self.add_validation:
            arguments.append("...")

        if name != raw_name:
            arguments.append(f"alias={string_literal(raw_name)}")
        if description:
            arguments.append(f"description={string_literal(description)}")
        if self.add_validation and property_schema is not None:
            arguments.extend(self._constraints(property_schema, field_type))

        if not arguments:
            default = None
        elif arguments == ["default=None"]:
            default = "None"
        else:
            default = f"Field({', '.join(arguments)})"

        parameter = Parameter(name=name, var_type=field_type, default=default)
        return parameter, PropertyInfo(
            name=name, type=field_type, description=description
        )

    def _constraints(self, schema: SchemaNode, field_type: str) -> List[str]:
        """Ограничения валидации из pattern/minLength/maxLength/minimum/maximum"""
        base_type = strip_optional(field_type)
        applicable = []
        extra = {}

        if schema.pattern is not None:
            if base_type == "str":
                applicable.append(f"pattern={string_literal(schema.pattern)}")
            else:
                extra["pattern"] = string_literal(schema.pattern)

        supports_length = base_type in LENGTH_TYPES or base_type.startswith(
            ("List[", "Dict[")
        )
        for facet, keyword, value in (
            ("minLength", "min_length", schema.min_length),
            ("maxLength", "max_length", schema.max_length),
        ):
            if value is None:
                continue
            if supports_length:
                applicable.append(f"{keyword}={value!r}")
            else:
                extra[facet] = repr(value)

        if schema.minimum is not None:
            maximum = (
                schema.maximum if schema.maximum is not None else type_max_value(schema)
            )
            if base_type in NUMERIC_TYPES:
                applicable.append(f"ge={self._bound(schema.minimum, base_type)}")
                applicable.append(f"le={self._bound(maximum, base_type)}")
            else:
                extra["minimum"] = repr(schema.minimum)
                extra["maximum"] = repr(maximum)

        if extra:
            items = ", ".join(f'"{key}": {value}' for key, value in extra.items())
            applicable.append(f"json_schema_extra={{{items}}}")

        return applicable

    @staticmethod
    def _bound(value, base_type: str) -> str:
        if base_type == "Decimal":
            return f'Decimal("{value!r}")'
        if base_type == "int" and isinstance(value, float) and value.is_integer():
            return repr(int(value))
        return repr(value)
