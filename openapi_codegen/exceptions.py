"""
Исключения генератора
"""


class CodegenError(Exception):
    """Базовая ошибка генератора"""


class SpecNotFoundError(CodegenError, FileNotFoundError):
    """Файл спецификации не найден"""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"OpenAPI спецификация не найдена: {source}")


class SpecParseError(CodegenError, ValueError):
    """Спецификация не читается или имеет неверную структуру"""

    def __init__(self, message: str, source: str = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)
