"""Python source rendering for generated modules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from avro_codegen.schema_management.schema_models import (
    ArrayType,
    EnumDefinition,
    FieldDefinition,
    FixedDefinition,
    MapType,
    NamedType,
    PrimitiveType,
    RecordDefinition,
    TypeDefinition,
    TypeReference,
    UnionType,
)

from .module_builder import ModuleDefinition, SourceRenderError, module_name, python_identifier

GENERATED_HEADER = "# Generated by avro-codegen from Avro schemas. Do not edit."

_PRIMITIVE_HINTS = {
    "null": "None",
    "boolean": "bool",
    "int": "int",
    "long": "int",
    "float": "float",
    "double": "float",
    "bytes": "bytes",
    "string": "str",
}
# logical type -> (module to import, hint)
_LOGICAL_HINTS = {
    "date": ("datetime", "datetime.date"),
    "time-millis": ("datetime", "datetime.time"),
    "time-micros": ("datetime", "datetime.time"),
    "timestamp-millis": ("datetime", "datetime.datetime"),
    "timestamp-micros": ("datetime", "datetime.datetime"),
    "local-timestamp-millis": ("datetime", "datetime.datetime"),
    "local-timestamp-micros": ("datetime", "datetime.datetime"),
    "uuid": ("uuid", "uuid.UUID"),
    "decimal": ("decimal", "decimal.Decimal"),
}
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass
class _Imports:
    modules: set[str] = field(default_factory=set)
    type_checking: set[str] = field(default_factory=set)
    typing_names: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class _Default:
    expression: str
    factory: bool = False


def render_module(module: ModuleDefinition, definitions: Mapping[str, TypeDefinition]) -> str:
    """Render one module of enums, fixed aliases and dataclasses."""
    renderer = _ModuleRenderer(module, definitions)
    blocks = [renderer.definition(definition) for definition in module.definitions]
    return renderer.header() + "\n\n\n" + "\n\n\n".join(blocks) + "\n"


class _ModuleRenderer:
    def __init__(self, module: ModuleDefinition, definitions: Mapping[str, TypeDefinition]):
        self._module = module
        self._definitions = definitions
        self._imports = _Imports()

    def header(self) -> str:
        namespace = self._module.namespace or "the default namespace"
        lines = [
            GENERATED_HEADER,
            f'"""Avro types of {namespace}."""',
            "",
            "from __future__ import annotations",
            "",
        ]
        lines.extend(f"import {name}" for name in sorted(self._imports.modules))
        typing_names = set(self._imports.typing_names)
        if self._imports.type_checking:
            typing_names.add("TYPE_CHECKING")
        if typing_names:
            lines.append(f"from typing import {', '.join(sorted(typing_names))}")
        if self._imports.type_checking:
            lines.extend(["", "if TYPE_CHECKING:"])
            lines.extend(f"    import {name}" for name in sorted(self._imports.type_checking))
        return "\n".join(lines).rstrip()

    def definition(self, definition: TypeDefinition) -> str:
        if isinstance(definition, EnumDefinition):
            return self._enum(definition)
        if isinstance(definition, FixedDefinition):
            return self._fixed(definition)
        return self._record(definition)

    def _enum(self, definition: EnumDefinition) -> str:
        self._imports.modules.add("enum")
        lines = [f"class {python_identifier(definition.name)}(str, enum.Enum):"]
        docstring = _docstring(definition.doc)
        lines.extend(docstring)
        if docstring and definition.symbols:
            lines.append("")
        lines.extend(
            f"    {python_identifier(symbol)} = {symbol!r}" for symbol in definition.symbols
        )
        if not definition.symbols:
            lines.append("    pass")
        return "\n".join(lines)

    def _fixed(self, definition: FixedDefinition) -> str:
        self._imports.typing_names.add("NewType")
        name = python_identifier(definition.name)
        lines = [f"#: {line}" for line in (definition.doc or "").splitlines()]
        lines.append(f"{name} = NewType({definition.name!r}, bytes)")
        lines.append(f"{_constant_name(definition.name)}_SIZE = {definition.size}")
        return "\n".join(lines)

    def _record(self, definition: RecordDefinition) -> str:
        self._imports.modules.add("dataclasses")
        if definition.is_error:
            lines = ["@dataclasses.dataclass(kw_only=True)"]
            lines.append(f"class {python_identifier(definition.name)}(Exception):")
        else:
            lines = ["@dataclasses.dataclass(frozen=True, kw_only=True)"]
            lines.append(f"class {python_identifier(definition.name)}:")
        docstring = _docstring(definition.doc)
        lines.extend(docstring)
        if docstring and definition.fields:
            lines.append("")
        for item in definition.fields:
            lines.extend(self._field(item))
        if not definition.fields and not docstring:
            lines.append("    pass")
        return "\n".join(lines)

    def _field(self, item: FieldDefinition) -> list[str]:
        lines = [f"    #: {line}" for line in (item.doc or "").splitlines()]
        declaration = f"    {python_identifier(item.name)}: {self._hint(item.type)}"
        default = self._default(item.type, item.default) if item.has_default else None
        if default is None:
            lines.append(declaration)
        elif default.factory:
            lines.append(f"{declaration} = dataclasses.field(default_factory={default.expression})")
        else:
            lines.append(f"{declaration} = {default.expression}")
        return lines

    def _hint(self, reference: TypeReference) -> str:
        if isinstance(reference, PrimitiveType):
            if reference.logical_type in _LOGICAL_HINTS:
                module, hint = _LOGICAL_HINTS[reference.logical_type]
                self._imports.modules.add(module)
                return hint
            return _PRIMITIVE_HINTS[reference.name]
        if isinstance(reference, NamedType):
            return self._named_hint(reference)
        if isinstance(reference, ArrayType):
            return f"list[{self._hint(reference.items)}]"
        if isinstance(reference, MapType):
            return f"dict[str, {self._hint(reference.values)}]"
        if isinstance(reference, UnionType):
            hints = list(dict.fromkeys(self._hint(branch) for branch in reference.branches))
            return " | ".join(hints)
        raise SourceRenderError(f"Unsupported type reference: {reference!r}")

    def _named_hint(self, reference: NamedType) -> str:
        definition = self._lookup(reference)
        class_name = python_identifier(definition.name)
        if definition.namespace == self._module.namespace:
            return class_name
        target_module = module_name(definition.namespace)
        self._imports.type_checking.add(target_module)
        return f"{target_module}.{class_name}"

    def _default(self, reference: TypeReference, value: Any) -> _Default | None:
        if isinstance(reference, UnionType):
            return self._default(reference.branches[0], value) if reference.branches else None
        if isinstance(reference, PrimitiveType):
            return _primitive_default(reference, value)
        if isinstance(reference, NamedType):
            definition = self._lookup(reference)
            if not isinstance(definition, EnumDefinition) or not isinstance(value, str):
                return None
            if definition.namespace == self._module.namespace:
                return _Default(f"{python_identifier(definition.name)}.{python_identifier(value)}")
            return _Default(repr(value))
        if isinstance(reference, ArrayType) and isinstance(value, list):
            if not value:
                return _Default("list", factory=True)
            items = [self._default(reference.items, item) for item in value]
            if any(item is None or item.factory for item in items):
                return None
            return _Default(
                f"lambda: [{', '.join(item.expression for item in items if item)}]", factory=True
            )
        if isinstance(reference, MapType) and isinstance(value, dict):
            if not value:
                return _Default("dict", factory=True)
            entries = {key: self._default(reference.values, item) for key, item in value.items()}
            if any(entry is None or entry.factory for entry in entries.values()):
                return None
            rendered = ", ".join(
                f"{key!r}: {entry.expression}" for key, entry in entries.items() if entry
            )
            return _Default(f"lambda: {{{rendered}}}", factory=True)
        return None

    def _lookup(self, reference: NamedType) -> TypeDefinition:
        definition = self._definitions.get(reference.full_name)
        if definition is None:
            raise SourceRenderError(f"Undefined name: {reference.full_name}")
        return definition


def _primitive_default(reference: PrimitiveType, value: Any) -> _Default | None:
    if reference.logical_type is not None:
        return None
    if reference.name == "null":
        return _Default("None") if value is None else None
    if reference.name == "boolean" and isinstance(value, bool):
        return _Default(repr(value))
    if reference.name in ("int", "long") and isinstance(value, int) and not isinstance(value, bool):
        return _Default(repr(value))
    if reference.name in ("float", "double") and isinstance(value, (int, float)):
        return _Default(repr(float(value)))
    if reference.name == "string" and isinstance(value, str):
        return _Default(repr(value))
    return None


def _docstring(doc: str | None) -> list[str]:
    if not doc:
        return []
    text = doc.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    doc_lines = text.splitlines()
    if len(doc_lines) == 1:
        return [f'    """{doc_lines[0]}"""']
    body = [f"    {line}" if line else "" for line in doc_lines[1:]]
    return [f'    """{doc_lines[0]}', *body, '    """']


def _constant_name(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).upper()
