import keyword
import logging
import re
from typing import Dict, List, Optional, Tuple

from ..types.models import (
    CodeBlock,
    CodeFile,
    Function,
    GeneratedEndpointMeta,
    Parameter,
)
from ..types.schema import ApiDocument, OperationRecord, find_json_schema
from ..types.type_resolver import TypeResolver, is_value_type
from ..utils import sanitize_class_name, sanitize_property_name, snake_case
from .context import GenerationRun
from .model_generator import string_literal
from .templates import templates

logger = logging.getLogger(__name__)

VERB_PREFIXES = {
    "get": "Get",
    "post": "Create",
    "put": "Update",
    "delete": "Delete",
    "patch": "Patch",
}
HTTP_VERB_PREFIXES = {
    "get": "Get",
    "post": "Post",
    "put": "Put",
    "delete": "Delete",
    "patch": "Patch",
}

# Методы, при отправке которых без тела уходит пустой payload
BODY_METHODS = {"post", "put", "patch"}

# Имена, занятые в сигнатуре метода клиента
RESERVED_ARGUMENTS = {"self", "request", "timeout"}

# Методы и атрибуты BaseApiClient
RESERVED_METHODS = {
    "close",
    "update_headers",
    "_send",
    "_ensure_session",
    "_ensure_success",
    "_base_url",
    "_headers",
    "_session",
    "_owns_session",
    "_retries",
}

PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def derive_method_name(
    operation: OperationRecord,
    use_async_suffix: bool = True,
    use_http_verb_names: bool = False,
) -> str:
    """
    Имя метода клиента: из operationId или из HTTP метода и пути.

    >>> derive_method_name(OperationRecord(path="/products", method="get"))
    'get_products_async'
    >>> operation = OperationRecord(path="/pets", method="get", operation_id="listPets")
    >>> derive_method_name(operation)
    'list_pets_async'
    """
    if operation.operation_id and operation.operation_id.strip():
        name = sanitize_class_name(operation.operation_id)
        if use_async_suffix and not name.endswith("Async"):
            name += "Async"
    else:
        prefixes = HTTP_VERB_PREFIXES if use_http_verb_names else VERB_PREFIXES
        method = operation.method.lower()
        segments = [
            sanitize_class_name(segment)
            for segment in operation.path.split("/")
            if segment and not segment.startswith("{")
        ]
        name = prefixes.get(method, method.capitalize()) + "".join(segments)
        if use_async_suffix:
            name += "Async"

    name = snake_case(name)
    if keyword.iskeyword(name) or name in RESERVED_METHODS:
        name += "_"
    return name


def derive_return_type(operation: OperationRecord, resolver: TypeResolver) -> str:
    """Тип результата по первому 2xx ответу, "None" если тела нет"""
    for status_code, response in operation.responses.items():
        if not status_code.startswith("2"):
            continue

        schema = find_json_schema(response.content)
        if schema is None:
            return "None"
        return resolver.resolve(schema)

    return "None"


def url_template(path: str, arguments: Dict[str, str]) -> str:
    """
    f-string для пути: объявленные плейсхолдеры подставляются,
    остальные фигурные скобки экранируются.

    >>> url_template("/products/{id}", {"id": "id"})
    'f"/products/{id}"'
    """
    parts = []
    for part in re.split(r"(\{[^{}]*\})", path):
        match = PLACEHOLDER.fullmatch(part)
        if match and match.group(1) in arguments:
            parts.append("{" + arguments[match.group(1)] + "}")
        else:
            parts.append(
                part.replace("\\", "\\\\")
                .replace('"', '\\"')
                .replace("{", "{{")
                .replace("}", "}}")
            )
    return 'f"' + "".join(parts) + '"'


class ClientGenerator:
    """Генератор класса ApiClient с методом на каждую операцию"""

    def __init__(self, run: GenerationRun, resolver: TypeResolver):
        self.run = run
        self.resolver = resolver

    @property
    def options(self):
        return self.run.options

    def generate(
        self,
        document: ApiDocument,
        operations_by_tag: Dict[str, List[OperationRecord]],
    ) -> Tuple[str, List[GeneratedEndpointMeta]]:
        """Исходный код client.py и метаданные методов"""
        code_file = CodeFile(
            file_name="client.py", imports=list(templates.client_imports)
        )

        model_names = list(self.run.emitted_models)
        if model_names:
            code_file.imports.append(
                "from .models import (\n"
                + "".join(f"    {name},\n" for name in model_names)
                + ")"
            )
        code_file.add_code_block("logger = logging.getLogger(__name__)", order=1)

        description = f"API client for {document.title}"
        if document.description:
            description += f"\n\n{document.description.strip()}"
        client_class = code_file.add_class(
            "ApiClient", inherits=["BaseApiClient"], description=description
        )
        client_class.add_code_block(CodeBlock(code=str(self._init_function(document))))

        for tag in sorted(operations_by_tag):
            methods = []
            for operation in operations_by_tag[tag]:
                method = self._generate_method(operation)
                if method is not None:
                    methods.append(str(method))

            if methods:
                region = "\n\n".join(methods)
                client_class.add_code_block(
                    CodeBlock(
                        code=f"\n# region {tag}\n{region}\n# endregion", order=-1
                    )
                )

        logger.info(f"Сгенерировано методов: {len(self.run.emitted_methods)}")
        return str(code_file), list(self.run.endpoints)

    @staticmethod
    def _init_function(document: ApiDocument) -> Function:
        function = Function(
            name="__init__",
            parameters=[
                Parameter(name="self"),
                Parameter(
                    name="base_url",
                    var_type="str",
                    default=string_literal(document.base_url or ""),
                ),
                Parameter(name="**kwargs"),
            ],
        )
        return function.set_code_block(
            "super().__init__(base_url=base_url, **kwargs)"
        )

    def _generate_method(self, operation: OperationRecord) -> Optional[Function]:
        method_name = derive_method_name(
            operation,
            self.options.use_async_suffix,
            self.options.use_http_verb_names,
        )
        if method_name in self.run.emitted_methods:
            logger.info(
                f"  Пропуск {operation.method.upper()} {operation.path}: "
                f"метод {method_name} уже сгенерирован"
            )
            return None
        self.run.emitted_methods.add(method_name)

        return_type = derive_return_type(operation, self.resolver)
        summary = (
            operation.summary
            or operation.description
            or f"{operation.method.upper()} {operation.path}"
        )

        parameters = [Parameter(name="self")]
        arguments_doc = []
        used_names = set(RESERVED_ARGUMENTS)

        path_arguments = {}
        for record in operation.parameters_in("path"):
            name = self._argument_name(record.name, used_names)
            path_arguments[record.name] = name
            var_type = self.resolver.resolve(record.schema, not record.required)
            parameters.append(Parameter(name=name, var_type=var_type))
            arguments_doc.append((name, var_type, record.description))

        body_schema = None
        if operation.request_body is not None:
            body_schema = find_json_schema(operation.request_body.content)
        if body_schema is not None:
            var_type = self.resolver.resolve(body_schema)
            parameters.append(Parameter(name="request", var_type=var_type))
            arguments_doc.append(
                ("request", var_type, operation.request_body.description)
            )

        query_arguments = []
        for record in operation.parameters_in("query"):
            name = self._argument_name(record.name, used_names)
            query_arguments.append((record.name, name))
            var_type = self.resolver.resolve(record.schema, True)
            parameters.append(Parameter(name=name, var_type=var_type, default="None"))
            arguments_doc.append((name, var_type, record.description))

        parameters.append(
            Parameter(name="timeout", var_type="Optional[float]", default="None")
        )

        function = Function(
            name=method_name,
            parameters=parameters,
            response=return_type,
            async_def=True,
            description=self._method_docstring(summary, arguments_doc, return_type),
        )
        function.set_code_block(
            self._method_body(
                operation,
                method_name,
                return_type,
                path_arguments,
                query_arguments,
                body_schema is not None,
            )
        )

        self.run.endpoints.append(
            GeneratedEndpointMeta(
                method_name=method_name,
                http_method=operation.method.upper(),
                path=operation.path,
                summary=summary,
                return_type=return_type,
                tag=operation.first_tag,
            )
        )
        return function

    @staticmethod
    def _argument_name(raw_name: str, used_names: set) -> str:
        name = sanitize_property_name(raw_name)
        if name in RESERVED_ARGUMENTS:
            name += "_"

        candidate, counter = name, 1
        while candidate in used_names:
            candidate = f"{name}_{counter}"
            counter += 1

        used_names.add(candidate)
        return candidate

    def _method_docstring(
        self,
        summary: str,
        arguments: List[Tuple[str, str, Optional[str]]],
        return_type: str,
    ) -> str:
        lines = [summary.strip()]

        if arguments:
            lines += ["", "Args:"]
            for name, var_type, description in arguments:
                line = f"    {name} ({var_type})"
                if description:
                    line += f": {' '.join(description.split())}"
                lines.append(line)

        if return_type != "None":
            lines += ["", "Returns:", f"    {return_type}"]

        if self.options.enable_retry_policy:
            lines += [
                "",
                "Transient transport errors are retried by BaseApiClient (see retries).",
            ]
        return "\n".join(lines)

    def _method_body(
        self,
        operation: OperationRecord,
        method_name: str,
        return_type: str,
        path_arguments: Dict[str, str],
        query_arguments: List[Tuple[str, str]],
        has_body: bool,
    ) -> str:
        http_method = operation.method.upper()
        lines = []

        if self.options.enable_logging:
            lines += [
                "logger.debug("
                + string_literal(f"Calling {method_name}: {http_method} {operation.path}")
                + ")",
                "",
            ]

        lines.append(f"_url = {url_template(operation.path, path_arguments)}")

        if query_arguments:
            lines.append("_query = []")
            for raw_name, name in query_arguments:
                lines += [
                    f"if {name} is not None:",
                    f"\t_query.append(({string_literal(raw_name)}, {name}))",
                ]
            lines += ["if _query:", '\t_url += "?" + build_query(_query)']

        lines.append("")

        if has_body:
            content = "json.dumps(serialize_value(request))"
        elif operation.method.lower() in BODY_METHODS:
            content = '""'
        else:
            content = None

        if content is None:
            lines.append(
                f'_response = await self._send("{http_method}", _url, timeout=timeout)'
            )
        else:
            lines += [
                "_response = await self._send(",
                f'\t"{http_method}", _url, content={content}, timeout=timeout',
                ")",
            ]
        lines.append("await self._ensure_success(_response)")

        if self.options.enable_logging:
            lines.append(
                f'logger.debug(f"{method_name} completed with status {{_response.status_code}}")'
            )

        if return_type != "None":
            lines.append("")
            if is_value_type(return_type):
                lines.append(
                    f"return parse_response({return_type}, _response.text, required=False)"
                )
            else:
                lines.append(f"return parse_response({return_type}, _response.text)")

        return "\n".join(lines)
