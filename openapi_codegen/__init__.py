from .config import GeneratorOptions
from .exceptions import CodegenError, SpecNotFoundError, SpecParseError
from .generator import ApiClientGenerator, generate_client

__all__ = [
    "ApiClientGenerator",
    "GeneratorOptions",
    "generate_client",
    "CodegenError",
    "SpecNotFoundError",
    "SpecParseError",
]
