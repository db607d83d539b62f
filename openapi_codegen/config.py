"""
Конфигурация генератора клиента
"""

import os
from dataclasses import asdict, dataclass, fields
from typing import Optional

import toml

CONFIG_FILE_NAME = "openapi.toml"


@dataclass
class GeneratorOptions:
    """Настройки генератора, читаемые ядром только на чтение"""

    input: Optional[str] = None
    output: str = "."
    namespace: str = "generated_api"

    add_validation: bool = True
    use_async_suffix: bool = True
    use_http_verb_names: bool = False
    enable_logging: bool = True
    enable_retry_policy: bool = True
    generate_readme: bool = True

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE_NAME, search_dir: str = None
    ) -> Optional["GeneratorOptions"]:
        """Загрузка конфигурации из файла"""
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE_NAME)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (OSError, toml.TomlDecodeError):
            return None

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_data.items() if k in known})

    def save_to_file(self, config_path: str = CONFIG_FILE_NAME) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {k: v for k, v in asdict(self).items() if v is not None}

        with open(config_path, "w") as f:
            toml.dump(config_data, f)

    def merge_with_args(self, args) -> "GeneratorOptions":
        """Объединение с аргументами командной строки (аргументы важнее)"""
        merged = GeneratorOptions(**asdict(self))
        for name in ("input", "output", "namespace"):
            value = getattr(args, name, None)
            if value:
                setattr(merged, name, value)

        for name, flag in (
            ("add_validation", "no_validation"),
            ("use_async_suffix", "no_async_suffix"),
            ("enable_logging", "no_logging"),
            ("enable_retry_policy", "no_retry"),
            ("generate_readme", "no_readme"),
        ):
            if getattr(args, flag, False):
                setattr(merged, name, False)

        if getattr(args, "http_verb_names", False):
            merged.use_http_verb_names = True

        return merged
