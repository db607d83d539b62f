"""
Тесты генерации README.md
"""

from openapi_codegen.config import GeneratorOptions
from openapi_codegen.internal.generator import ReadmeGenerator
from openapi_codegen.internal.generator.readme_generator import (
    example_variable,
    table_cell,
)
from openapi_codegen.internal.types import ApiDocument
from openapi_codegen.internal.types.models import (
    GeneratedEndpointMeta,
    GeneratedModelMeta,
    PropertyInfo,
)

DOCUMENT = ApiDocument(
    title="Test API",
    description="A comprehensive test API",
    version="1.0.0",
    base_url="https://api.example.com",
)

MODELS = [
    GeneratedModelMeta(
        name="Product",
        description="Product data transfer object",
        properties=[
            PropertyInfo(name="id", type="int"),
            PropertyInfo(name="name", type="Optional[str]", description="Display | name"),
        ],
    )
]

ENDPOINTS = [
    GeneratedEndpointMeta(
        method_name="get_products_async",
        http_method="GET",
        path="/products",
        summary="List products",
        return_type="List[Product]",
        tag="Products",
    ),
    GeneratedEndpointMeta(
        method_name="delete_products_async",
        http_method="DELETE",
        path="/products/{id}",
        summary="Delete product",
        return_type="None",
        tag="Products",
    ),
]


def _readme(**options):
    generator = ReadmeGenerator(DOCUMENT, GeneratorOptions(namespace="shop_api", **options))
    return generator.generate(MODELS, ENDPOINTS)


class TestReadmeGenerator:
    """Тесты содержимого README"""

    def test_header(self):
        content = _readme()

        assert content.startswith("# Test API\n")
        assert "A comprehensive test API" in content
        assert "API version: `1.0.0`" in content

    def test_table_of_contents(self):
        content = _readme()

        assert "## Table of Contents" in content
        assert "- [Installation](#installation)" in content
        assert "- [Quick Start](#quick-start)" in content
        assert "- [Configuration](#configuration)" in content

    def test_quick_start(self):
        content = _readme()

        assert "from shop_api import ApiClient" in content
        assert 'async with ApiClient("https://api.example.com") as client:' in content

    def test_endpoints_table(self):
        content = _readme()

        assert "### Products" in content
        assert "| `get_products_async` | GET | `/products` | `List[Product]` |" in content
        assert "| `delete_products_async` | DELETE | `/products/{id}` | `None` |" in content

    def test_usage_examples(self):
        content = _readme()

        assert "products = await client.get_products_async(...)" in content
        assert "await client.delete_products_async(...)" in content

    def test_models(self):
        content = _readme()

        assert "The client includes 1 pydantic models:" in content
        assert "### Product" in content
        assert "| `id` | `int` | - |" in content
        assert "| `name` | `Optional[str]` | Display \\| name |" in content

    def test_optional_sections(self):
        """Тест разделов, зависящих от настроек"""
        content = _readme()
        assert "### Retry Policy" in content
        assert "### Logging" in content

        content = _readme(enable_retry_policy=False, enable_logging=False)
        assert "### Retry Policy" not in content
        assert "### Logging" not in content

    def test_default_base_url(self):
        generator = ReadmeGenerator(ApiDocument(), GeneratorOptions())
        content = generator.generate([], [])

        assert content.startswith("# API\n")
        assert "https://api.example.com" in content


class TestHelpers:
    def test_table_cell(self):
        assert table_cell(None) == "-"
        assert table_cell("a\nb  c") == "a b c"
        assert table_cell("x|y") == "x\\|y"

    def test_example_variable(self):
        assert example_variable("get_products_async") == "products"
        assert example_variable("list_pets") == "pets"
        assert example_variable("create_order_async") == "create_order"
        assert example_variable("get_async") == "result"
