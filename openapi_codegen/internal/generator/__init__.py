from .client_generator import ClientGenerator, derive_method_name, derive_return_type
from .context import GenerationRun
from .model_generator import ModelGenerator
from .readme_generator import ReadmeGenerator

__all__ = [
    "ClientGenerator",
    "GenerationRun",
    "ModelGenerator",
    "ReadmeGenerator",
    "derive_method_name",
    "derive_return_type",
]
