from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, field_validator


class Variable(BaseModel):
    """Выражение типа: value, обернутое в wrap_name[...]"""

    value: list[Union["Variable", str]] = []
    wrap_name: Optional[str] = None

    @field_validator("value", mode="before")
    def value_check(cls, value):
        _value = value

        if not isinstance(value, list):
            _value = [value]

        return _value

    def __str__(self):
        _value = ", ".join(str(_) for _ in self.value)

        if self.wrap_name is None:
            return _value

        return f"{self.wrap_name}[{_value}]" if _value else "Any"


def _as_variable(value):
    if isinstance(value, str):
        return Variable(value=value)
    return value


class Parameter(BaseModel):
    name: str

    default: Optional[Variable] = None
    var_type: Optional[Variable] = None

    @field_validator("default", "var_type", mode="before")
    def variable_check(cls, value):
        return _as_variable(value)

    def __str__(self):
        return (
            self.name
            + (f": {self.var_type}" if self.var_type is not None else "")
            + (f" = {self.default}" if self.default is not None else "")
        )


class CodeBlock(BaseModel):
    order: int = 0
    code: str = "pass"

    def __str__(self):
        return self.code.replace("\t", "    ")


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line if line.strip() else "" for line in text.split("\n"))


def _docstring(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.strip().replace("\\", "\\\\")
    if text.endswith('"'):
        # Кавычка вплотную к закрывающим """ ломает литерал
        text = text[:-1] + '\\"'
    text = text.replace('"""', '\\"\\"\\"')
    if "\n" in text:
        return f'"""\n{text}\n"""'
    return f'"""{text}"""'


class Function(BaseModel):
    name: str
    parameters: list[Parameter] = []
    response: str = "None"

    async_def: bool = False
    description: Optional[str] = None

    code: CodeBlock = CodeBlock(order=0, code="pass")

    def __str__(self) -> str:
        signature = f"{'async ' if self.async_def else ''}def {self.name}("
        if len(self.parameters) > 1:
            signature += (
                "\n" + "".join(f"\t{parameter},\n" for parameter in self.parameters)
            )
        else:
            signature += ", ".join(map(str, self.parameters))
        signature += f") -> {self.response}:"

        body = "\n\n".join(filter(bool, [_docstring(self.description), str(self.code)]))

        return (
            "\n".join([signature, _indent(body)])
        ).replace("\t", "    ")

    def set_code_block(self, code_block: Union["CodeBlock", str]) -> "Function":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block)

        self.code = code_block
        return self


class Class(BaseModel):
    name: str
    description: Optional[str] = None

    code_blocks: list["CodeBlock"] = []
    parameters: list[Parameter] = []

    inherits: list[str] = []

    order: int = 0

    def __str__(self) -> str:
        sections = [
            _docstring(self.description),
            "\n".join(
                map(str, sorted(self.code_blocks, key=lambda x: x.order, reverse=True))
            ),
            "\n".join(map(str, self.parameters)),
        ]
        body = "\n\n".join(filter(bool, sections)) or "pass"

        return (
            f"class {self.name}"
            + (f"({', '.join(self.inherits)})" if self.inherits else "")
            + ":\n"
            + _indent(body)
        ).replace("\t", "    ")

    def add_code_block(self, code_block: Union["CodeBlock", str], **kwargs) -> "Class":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class CodeFile(BaseModel):
    file_name: str

    imports: list[str] = []
    classes: dict[str, "Class"] = {}
    code_blocks: list["CodeBlock"] = []

    def __str__(self):
        return (
            "\n\n\n".join(
                filter(
                    bool,
                    [
                        "\n".join(self.imports),
                        "\n\n\n".join(
                            map(
                                str,
                                sorted(
                                    self.code_blocks + list(self.classes.values()),
                                    key=lambda x: x.order,
                                    reverse=True,
                                ),
                            )
                        ),
                    ],
                )
            )
            + "\n"
        ).replace("\t", "    ")

    def add_class(self, cls: Union["Class", str], **kwargs) -> "Class":
        if isinstance(cls, str):
            cls = Class(name=cls, **kwargs)

        self.classes[cls.name] = cls
        return cls

    def add_code_block(self, code_block: Union["CodeBlock", str], **kwargs) -> "CodeFile":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        if isinstance(file_name, str):
            file_name = CodeFile(file_name=file_name, **kwargs)

        self.files.append(file_name)
        return file_name

    def get_file(self, file_name: str) -> Optional[CodeFile]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None


@dataclass
class PropertyInfo:
    """Метаданные поля сгенерированной модели"""

    name: str
    type: str
    description: Optional[str] = None


@dataclass
class GeneratedModelMeta:
    """Метаданные сгенерированной модели"""

    name: str
    description: str
    properties: List[PropertyInfo] = field(default_factory=list)


@dataclass
class GeneratedEndpointMeta:
    """Метаданные сгенерированного метода клиента"""

    method_name: str
    http_method: str
    path: str
    summary: str
    return_type: str
    tag: str
