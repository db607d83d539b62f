from dataclasses import dataclass, field
from typing import Dict, List, Set

from ...config import GeneratorOptions
from ..types.models import GeneratedEndpointMeta, GeneratedModelMeta
from ..types.schema import SchemaNode


@dataclass
class GenerationRun:
    """
    Состояние одного прогона генерации.

    Множества уже сгенерированных имен живут здесь, а не на уровне модуля,
    чтобы повторные и параллельные прогоны не влияли друг на друга.
    """

    options: GeneratorOptions = field(default_factory=GeneratorOptions)

    emitted_models: Dict[str, SchemaNode] = field(default_factory=dict)
    model_modules: Dict[str, str] = field(default_factory=dict)
    emitted_methods: Set[str] = field(default_factory=set)

    models: List[GeneratedModelMeta] = field(default_factory=list)
    endpoints: List[GeneratedEndpointMeta] = field(default_factory=list)
