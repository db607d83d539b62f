"""
Главный модуль генератора - чистый интерфейс
"""

import logging
from typing import Any, Dict

from .config import GeneratorOptions
from .internal.generator import (
    ClientGenerator,
    GenerationRun,
    ModelGenerator,
    ReadmeGenerator,
)
from .internal.generator.templates import templates
from .internal.parser.openapi import OpenApiParser
from .internal.types.models import CodeBlock, CodeFile, Project
from .internal.types.schema import ApiDocument
from .internal.types.type_resolver import TypeResolver

logger = logging.getLogger(__name__)


def _text_file(file_name: str, text: str) -> CodeFile:
    return CodeFile(file_name=file_name, code_blocks=[CodeBlock(code=text.rstrip("\n"))])


class ApiClientGenerator:
    """Чистый интерфейс для генерации API клиентов"""

    def __init__(
        self,
        openapi_spec: Dict[str, Any],
        options: GeneratorOptions = None,
        source_url: str = None,
    ):
        self.options = options or GeneratorOptions()
        self.document: ApiDocument = OpenApiParser(openapi_spec, source_url).parse()

    def generate(self) -> Project:
        """Генерация проекта клиента"""
        run = GenerationRun(options=self.options)
        resolver = TypeResolver(self.document.schemas)
        project = Project(name=self.options.namespace)

        logger.info("Генерация моделей...")
        model_generator = ModelGenerator(run, resolver)
        model_sources, models = model_generator.generate(self.document.schemas)
        for class_name, source in model_sources.items():
            project.add_file(
                _text_file(f"models/{model_generator.module_name(class_name)}.py", source)
            )
        project.add_file(
            _text_file("models/__init__.py", model_generator.generate_package_init())
        )

        logger.info("Генерация клиента...")
        client_source, endpoints = ClientGenerator(run, resolver).generate(
            self.document, self.document.operations_by_tag()
        )
        project.add_file(_text_file("client.py", client_source))
        project.add_file(_text_file("common.py", templates.render_common(self.options)))
        project.add_file(_text_file("__init__.py", templates.package_init))

        if self.options.generate_readme:
            logger.info("Генерация README.md...")
            readme = ReadmeGenerator(self.document, self.options).generate(
                models, endpoints
            )
            project.add_file(_text_file("README.md", readme))

        return project


def generate_client(
    openapi_spec: Dict[str, Any],
    options: GeneratorOptions = None,
    source_url: str = None,
) -> Project:
    """Создание API клиента из OpenAPI спецификации"""
    generator = ApiClientGenerator(openapi_spec, options, source_url)
    return generator.generate()
