import argparse
import logging
import os
import sys

from openapi_codegen.config import CONFIG_FILE_NAME, GeneratorOptions
from openapi_codegen.exceptions import CodegenError
from openapi_codegen.generator import ApiClientGenerator
from openapi_codegen.internal.parser.openapi import load_document
from openapi_codegen.internal.types.models import Project


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Генерация типизированного Python клиента из OpenAPI"
    )
    parser.add_argument("-i", "--input", type=str, help="Путь или URL к спецификации")
    parser.add_argument(
        "-o", "--output", type=str, help="Директория, в которой создается пакет"
    )
    parser.add_argument("-n", "--namespace", type=str, help="Имя генерируемого пакета")
    parser.add_argument(
        "--no-validation", action="store_true", help="Не добавлять ограничения Field(...)"
    )
    parser.add_argument(
        "--no-async-suffix", action="store_true", help="Не добавлять суффикс _async"
    )
    parser.add_argument(
        "--http-verb-names",
        action="store_true",
        help="Префиксы методов по HTTP глаголам (post_ вместо create_)",
    )
    parser.add_argument(
        "--no-logging", action="store_true", help="Без логирования в клиенте"
    )
    parser.add_argument(
        "--no-retry", action="store_true", help="Без повторов запросов по умолчанию"
    )
    parser.add_argument(
        "--no-readme", action="store_true", help="Не генерировать README.md"
    )
    parser.add_argument(
        "--init-config", action="store_true", help="Создать конфиг файл openapi.toml"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Подробный лог")
    return parser


def _generate_client_core(options: GeneratorOptions) -> Project:
    """Ядро генерации клиента - только генерация без сохранения"""
    print(f"🚀 Генерация клиента из {options.input}")

    print("📥 Загрузка OpenAPI спецификации...")
    openapi_spec = load_document(options.input)

    print("🔧 Генерация моделей и клиента...")
    return ApiClientGenerator(openapi_spec, options, options.input).generate()


def _save_project_files(project: Project, target_path: str):
    """Сохранение файлов проекта"""
    print(f"💾 Сохранение {len(project.files)} файлов...")

    for code_model in project.files:
        path = os.path.join(target_path, code_model.file_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(str(code_model))

    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {os.path.abspath(target_path)}")


def generate(argv=None):
    """Команда генерации OpenAPI клиента"""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Инициализация конфига
    if args.init_config:
        GeneratorOptions().merge_with_args(args).save_to_file()
        print(f"✅ Создан конфиг файл {CONFIG_FILE_NAME}")
        return

    file_options = GeneratorOptions.from_file()
    if file_options:
        print(f"📋 Используется конфиг из {CONFIG_FILE_NAME}")
    options = (file_options or GeneratorOptions()).merge_with_args(args)

    if not options.input:
        print("❌ Ошибка: Укажите --input или создайте конфиг с --init-config")
        sys.exit(1)

    try:
        project = _generate_client_core(options)
        package_path = os.path.join(options.output, options.namespace)
        _save_project_files(project, package_path)
    except CodegenError as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
