import keyword
from collections import defaultdict
from typing import Dict, List, Optional

from ...config import GeneratorOptions
from ..types.models import GeneratedEndpointMeta, GeneratedModelMeta
from ..types.schema import ApiDocument

DEFAULT_BASE_URL = "https://api.example.com"

# Сколько примеров вызова показывать на тег
EXAMPLES_PER_TAG = 3


def table_cell(text: Optional[str]) -> str:
    """Текст для ячейки markdown таблицы"""
    if not text or not text.strip():
        return "-"
    return " ".join(text.split()).replace("|", "\\|")


def example_variable(method_name: str) -> str:
    """
    Имя переменной для примера вызова.

    >>> example_variable("get_products_async")
    'products'
    """
    name = method_name
    for prefix in ("get_", "list_"):
        if name.startswith(prefix):
            name = name[len(prefix) :]
            break
    if name.endswith("_async"):
        name = name[: -len("_async")]
    name = name.strip("_")
    if not name.isidentifier() or keyword.iskeyword(name):
        return "result"
    return name


class ReadmeGenerator:
    """Генератор README.md для сгенерированного пакета"""

    def __init__(self, document: ApiDocument, options: GeneratorOptions):
        self.document = document
        self.options = options

    @property
    def base_url(self) -> str:
        return self.document.base_url or DEFAULT_BASE_URL

    def generate(
        self,
        models: List[GeneratedModelMeta],
        endpoints: List[GeneratedEndpointMeta],
    ) -> str:
        sections = [
            self._header(),
            self._table_of_contents(),
            self._installation(),
            self._quick_start(),
            self._authentication(),
            self._configuration(),
            self._usage_examples(endpoints),
            self._endpoints(endpoints),
            self._models(models),
            self._error_handling(),
        ]
        return "\n\n".join(filter(bool, sections)) + "\n"

    def _header(self) -> str:
        lines = [f"# {self.document.title or 'API Client'}"]
        if self.document.description:
            lines += ["", self.document.description.strip()]
        lines += ["", "This is an auto-generated Python API client."]
        if self.document.version:
            lines += ["", f"API version: `{self.document.version}`"]
        return "\n".join(lines)

    @staticmethod
    def _table_of_contents() -> str:
        return "\n".join(
            [
                "## Table of Contents",
                "",
                "- [Installation](#installation)",
                "- [Quick Start](#quick-start)",
                "- [Authentication](#authentication)",
                "- [Configuration](#configuration)",
                "- [Usage Examples](#usage-examples)",
                "- [Available Endpoints](#available-endpoints)",
                "- [Models](#models)",
                "- [Error Handling](#error-handling)",
            ]
        )

    @staticmethod
    def _installation() -> str:
        return "\n".join(
            [
                "## Installation",
                "",
                "### Prerequisites",
                "",
                "- Python 3.9 or higher",
                "",
                "### Required packages",
                "",
                "```bash",
                "pip install aiohttp pydantic",
                "```",
            ]
        )

    def _quick_start(self) -> str:
        return "\n".join(
            [
                "## Quick Start",
                "",
                "```python",
                "import asyncio",
                "",
                f"from {self.options.namespace} import ApiClient",
                "",
                "",
                "async def main():",
                f'    async with ApiClient("{self.base_url}") as client:',
                "        # Call API methods",
                "        ...",
                "",
                "",
                "asyncio.run(main())",
                "```",
            ]
        )

    def _authentication(self) -> str:
        return "\n".join(
            [
                "## Authentication",
                "",
                "Pass the headers when creating the client or update them later:",
                "",
                "```python",
                "client = ApiClient(",
                f'    "{self.base_url}",',
                '    headers={"Authorization": "Bearer your-token-here"},',
                ")",
                'client.update_headers(Authorization="Bearer another-token")',
                "```",
            ]
        )

    def _configuration(self) -> str:
        lines = [
            "## Configuration",
            "",
            "### Base URL",
            "",
            f"The default base URL is `{self.base_url}`. You can override it:",
            "",
            "```python",
            'client = ApiClient("https://your-custom-url.com")',
            "```",
        ]

        if self.options.enable_retry_policy:
            lines += [
                "",
                "### Retry Policy",
                "",
                "Transient transport failures (connection errors and timeouts) "
                "are retried up to 3 times by default:",
                "",
                "```python",
                f'client = ApiClient("{self.base_url}", retries=5)',
                "```",
            ]

        if self.options.enable_logging:
            lines += [
                "",
                "### Logging",
                "",
                "The client logs through the standard `logging` module:",
                "",
                "```python",
                "import logging",
                "",
                f'logging.getLogger("{self.options.namespace}").setLevel(logging.DEBUG)',
                "```",
            ]

        return "\n".join(lines)

    @staticmethod
    def _by_tag(
        endpoints: List[GeneratedEndpointMeta],
    ) -> Dict[str, List[GeneratedEndpointMeta]]:
        grouped = defaultdict(list)
        for endpoint in endpoints:
            grouped[endpoint.tag].append(endpoint)
        return {tag: grouped[tag] for tag in sorted(grouped)}

    def _usage_examples(self, endpoints: List[GeneratedEndpointMeta]) -> str:
        lines = ["## Usage Examples"]

        for tag, group in self._by_tag(endpoints).items():
            lines += ["", f"### {tag}"]
            for endpoint in group[:EXAMPLES_PER_TAG]:
                lines += ["", f"#### {table_cell(endpoint.summary)}", "", "```python"]
                if endpoint.return_type == "None":
                    lines.append(f"await client.{endpoint.method_name}(...)")
                else:
                    variable = example_variable(endpoint.method_name)
                    lines.append(f"{variable} = await client.{endpoint.method_name}(...)")
                lines.append("```")

        return "\n".join(lines)

    def _endpoints(self, endpoints: List[GeneratedEndpointMeta]) -> str:
        lines = ["## Available Endpoints"]

        for tag, group in self._by_tag(endpoints).items():
            lines += [
                "",
                f"### {tag}",
                "",
                "| Method | HTTP | Path | Returns |",
                "|--------|------|------|---------|",
            ]
            for endpoint in sorted(group, key=lambda e: e.path):
                lines.append(
                    f"| `{endpoint.method_name}` | {endpoint.http_method} "
                    f"| `{endpoint.path}` | `{endpoint.return_type}` |"
                )

        return "\n".join(lines)

    @staticmethod
    def _models(models: List[GeneratedModelMeta]) -> str:
        lines = [
            "## Models",
            "",
            f"The client includes {len(models)} pydantic models:",
        ]

        for model in sorted(models, key=lambda m: m.name):
            lines += ["", f"### {model.name}", "", model.description.strip()]
            if model.properties:
                lines += [
                    "",
                    "| Property | Type | Description |",
                    "|----------|------|-------------|",
                ]
                for prop in model.properties:
                    lines.append(
                        f"| `{prop.name}` | `{prop.type}` | {table_cell(prop.description)} |"
                    )

        return "\n".join(lines)

    def _error_handling(self) -> str:
        return "\n".join(
            [
                "## Error Handling",
                "",
                "Non-2xx responses raise `ApiRequestError`, "
                "an unreadable response body raises `DeserializationError`:",
                "",
                "```python",
                f"from {self.options.namespace} import ApiRequestError, DeserializationError",
                "",
                "try:",
                "    result = await client.get_data_async()",
                "except ApiRequestError as exc:",
                "    if exc.status_code == 404:",
                "        ...  # Not Found",
                "    elif exc.status_code == 401:",
                "        ...  # Unauthorized",
                "except DeserializationError:",
                "    ...",
                "```",
            ]
        )
