"""
Python code generation backend.

Generates dataclasses, string enums and union aliases from the type model.
"""

from __future__ import annotations

import collections
import json
from typing import Any

from ...utils import pascal_to_snake_case, to_class_name, to_constant_name, to_python_identifier
from ..analyzer.type_model import (
    AnyType,
    ArrayType,
    ConstType,
    Entity,
    EnumType,
    Field,
    FieldType,
    MapType,
    NamedType,
    PrimitiveType,
    TupleType,
    TypeModel,
    UnionType,
)
from ..config import CodeGeneratorConfig
from .base import CodeBackend


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    TYPE_MAP = {
        "integer": "int",
        "string": "str",
        "boolean": "bool",
        "number": "float",
        "null": "None",
    }

    def __init__(self, config: CodeGeneratorConfig):
        super().__init__(config)
        self.python_imports: set[tuple[str, str]] = set()
        self.class_names: dict[str, str] = {}
        self.forward_aliases: set[str] = set()

    def generate(self, model: TypeModel, generation_comment: str | None = None) -> str:
        """Generate Python code from the type model."""
        # Reset import tracking; rendering the definitions fills it
        self.python_imports = set()
        if self.config.use_future_annotations:
            self.python_imports.add(("__future__", "annotations"))

        self.forward_aliases = set()
        # Model names that already are identifiers keep priority over converted ones
        used = {name for name in model.names() if to_class_name(name) == name}
        self.class_names = {
            name: name if name in used else self._unique(to_class_name(name), used) for name in model.names()
        }
        return super().generate(model, generation_comment)

    def render_prefix(self, model: TypeModel, generation_comment: str | None) -> str:
        return self.prefix_template.render(
            generation_comment=generation_comment,
            required_imports=self._assemble_imports(),
        )

    def render_enum(self, enum: EnumType) -> str:
        self.python_imports.add(("enum", "Enum"))

        members = []
        used: set[str] = set()
        for value in enum.values:
            member = self._unique(to_constant_name(value), used)
            members.append((member, json.dumps(value)))

        return self.enum_template.render(
            CLASS_NAME=self.class_names[enum.name],
            DOCSTRING=self._docstring([enum.description] if enum.description else []),
            members=members,
        )

    def render_entity(self, entity: Entity) -> str:
        self.python_imports.add(("dataclasses", "dataclass"))
        self.python_imports.add(("dataclasses_json", "dataclass_json"))

        used: set[str] = set()
        declarations = []
        for f in self._order_fields(entity.fields):
            declarations.append(self._field_declaration(f, used))

        decorator = "@dataclass_json"
        if entity.catch_all is not None:
            # Unknown keys are collected into the CatchAll field and written back by to_dict()
            self.python_imports.add(("dataclasses", "field"))
            self.python_imports.update({("dataclasses_json", "CatchAll"), ("dataclasses_json", "Undefined")})
            decorator = "@dataclass_json(undefined=Undefined.INCLUDE)"
            name = self._unique(to_python_identifier(self.config.catch_all_field_name), used)
            declaration = f"{name}: CatchAll = field(default_factory=dict)"
            if not isinstance(entity.catch_all, AnyType):
                declaration += f"  # values: {self.translate_type(entity.catch_all)}"
            declarations.append(declaration)

        lines = [entity.description] if entity.description else []
        if entity.groups:
            if lines:
                lines.append("")
            members = ", ".join(f"{self.class_names[g.type_name]} ({g.field_name})" for g in entity.groups)
            lines.append(f"Composed of: {members}.")

        return self.class_template.render(
            CLASS_NAME=self.class_names[entity.name],
            DECORATOR=decorator,
            DOCSTRING=self._docstring(lines),
            fields=declarations,
        )

    def render_union(self, union: UnionType) -> str:
        class_name = self.class_names[union.name]
        variants = [self.class_names[variant] for variant in union.variants]

        alias = " | ".join(variants)
        if any(variant not in self.emitted or variant in self.forward_aliases for variant in union.variants):
            # Union reference cycle: a variant is defined further down or is itself a string alias
            self.forward_aliases.add(union.name)
            self.python_imports.add(("typing", "TypeAlias"))
            alias_line = f'{class_name}: TypeAlias = "{alias}"'
        else:
            alias_line = f"{class_name} = {alias}"

        tags = []
        if union.is_discriminated:
            comment = f"Discriminated by '{union.discriminator}'"
            tags = [(json.dumps(union.tags[variant]), self.class_names[variant]) for variant in union.variants]
        else:
            order = ", ".join(variants)
            if union.exclusive:
                comment = f"Untagged: exactly one of {order}"
            else:
                comment = f"Untagged: first match in order {order}"
            if union.fallback_reason:
                comment += f" ({union.fallback_reason})"

        return self.union_template.render(
            CLASS_NAME=class_name,
            ALIAS=alias_line,
            DESCRIPTION=union.description,
            COMMENT=comment,
            TAGS_NAME=f"{to_constant_name(class_name)}_TAGS",
            TAGS=tags,
            DISCRIMINATOR=json.dumps(union.discriminator),
            DECODER_NAME=f"{pascal_to_snake_case(class_name)}_from_dict",
        )

    def translate_type(self, field_type: FieldType) -> str:
        """Translate a model type to a Python type string."""
        if isinstance(field_type, NamedType):
            return self.class_names[field_type.name]

        if isinstance(field_type, PrimitiveType):
            return self.TYPE_MAP.get(field_type.type, "Any")

        if isinstance(field_type, ConstType):
            self.python_imports.add(("typing", "Literal"))
            return f"Literal[{self._format_literal_value(field_type.value)}]"

        if isinstance(field_type, ArrayType):
            if field_type.items is None:
                return "list"
            return f"list[{self.translate_type(field_type.items)}]"

        if isinstance(field_type, TupleType):
            if not field_type.items:
                return "tuple[()]"
            return f"tuple[{', '.join(self.translate_type(t) for t in field_type.items)}]"

        if isinstance(field_type, MapType):
            if field_type.values is None:
                self.python_imports.add(("typing", "Any"))
                return "dict[str, Any]"
            return f"dict[str, {self.translate_type(field_type.values)}]"

        self.python_imports.add(("typing", "Any"))
        return "Any"

    def _field_declaration(self, f: Field, used: set[str]) -> str:
        name = self._unique(to_python_identifier(f.name), used)
        annotation = self.translate_type(f.field_type)

        default = None
        if f.required and isinstance(f.field_type, ConstType):
            default = self._format_literal_value(f.field_type.value)
        elif not f.required:
            if annotation != "None":
                annotation = f"{annotation} | None"
            default = "None"
        annotation = self._quote(annotation, f.field_type)

        if name != f.name:
            # Keep the JSON key for dataclasses_json encoding and decoding
            self.python_imports.add(("dataclasses", "field"))
            self.python_imports.add(("dataclasses_json", "config"))
            metadata = f"metadata=config(field_name={json.dumps(f.name)})"
            if default is None:
                return f"{name}: {annotation} = field({metadata})"
            return f"{name}: {annotation} = field(default={default}, {metadata})"

        if default is None:
            return f"{name}: {annotation}"
        return f"{name}: {annotation} = {default}"

    def _quote(self, annotation: str, field_type: FieldType) -> str:
        """Quote annotations that name generated types when annotations are evaluated eagerly."""
        if self.config.use_future_annotations or not self._names_types(field_type):
            return annotation
        return f'"{annotation}"'

    def _names_types(self, field_type: FieldType) -> bool:
        if isinstance(field_type, NamedType):
            return True
        if isinstance(field_type, ArrayType):
            return field_type.items is not None and self._names_types(field_type.items)
        if isinstance(field_type, TupleType):
            return any(self._names_types(t) for t in field_type.items)
        if isinstance(field_type, MapType):
            return field_type.values is not None and self._names_types(field_type.values)
        return False

    def _has_default(self, field: Field) -> bool:
        # Required consts default to their literal
        return isinstance(field.field_type, ConstType) or not field.required

    def _docstring(self, lines: list[str]) -> str | None:
        """Render docstring lines, indented for a class body."""
        text = [line.rstrip() for paragraph in lines for line in (paragraph.splitlines() or [""])]
        if not text:
            return None
        if len(text) == 1:
            return f'    """{text[0]}"""'
        body = "\n".join(f"    {line}" if line else "" for line in text)
        return f'    """\n{body}\n    """'

    @staticmethod
    def _unique(name: str, used: set[str]) -> str:
        """Suffix a generated identifier until it is unused."""
        candidate = name
        counter = 2
        while candidate in used:
            candidate = f"{name}_{counter}"
            counter += 1
        used.add(candidate)
        return candidate

    def _format_literal_value(self, value: Any) -> str:
        """Format a value for Literal type."""
        if isinstance(value, str):
            return json.dumps(value)
        if value is None or isinstance(value, (bool, int, float)):
            return repr(value)
        return json.dumps(value)

    def _assemble_imports(self) -> list[str]:
        """Assemble Python import statements."""
        # Group imports by module
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)

        assembled = []

        # __future__ imports first
        if "__future__" in import_groups:
            assembled.append(f"from __future__ import {', '.join(sorted(import_groups['__future__']))}")
            if len(import_groups) > 1:
                assembled.append("")

        for module in sorted(m for m in import_groups if m != "__future__"):
            names = sorted(import_groups[module])
            assembled.append(f"from {module} import {', '.join(names)}")

        return assembled
