"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
Backends only consume the TypeModel; they never look at schema nodes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.type_model import Entity, EnumType, Field, FieldType, TypeModel, UnionType
from ..config import CodeGeneratorConfig


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from schema primitive types to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.union_template = self.jinja_env.get_template(f"union.{self.FILE_EXTENSION}.jinja2")

    def generate(self, model: TypeModel, generation_comment: str | None = None) -> str:
        """
        Generate code from the type model.

        Args:
            model: The resolved type model
            generation_comment: Optional comment placed at the top of the output

        Returns:
            Generated code as a string
        """
        blocks = []
        # Names already rendered
        self.emitted: set[str] = set()
        for definition in model.types.values():
            if isinstance(definition, EnumType):
                blocks.append(self.render_enum(definition))
            elif isinstance(definition, UnionType):
                blocks.append(self.render_union(definition))
            else:
                blocks.append(self.render_entity(definition))
            self.emitted.add(definition.name)

        prefix = self.render_prefix(model, generation_comment if self.config.add_generation_comment else None)
        return self.assemble(prefix, blocks)

    @abstractmethod
    def render_prefix(self, model: TypeModel, generation_comment: str | None) -> str:
        """Render the file header (comment and imports)."""

    @abstractmethod
    def render_enum(self, enum: EnumType) -> str:
        """Render one EnumType."""

    @abstractmethod
    def render_entity(self, entity: Entity) -> str:
        """Render one Entity."""

    @abstractmethod
    def render_union(self, union: UnionType) -> str:
        """Render one UnionType."""

    @abstractmethod
    def translate_type(self, field_type: FieldType) -> str:
        """
        Translate a model type to a language-specific type string.

        Args:
            field_type: The field type

        Returns:
            Language-specific type string
        """

    def assemble(self, prefix: str, blocks: list[str]) -> str:
        """Join the header and the rendered definitions."""
        parts = [prefix.rstrip("\n")] if prefix.strip() else []
        parts.extend(block.rstrip("\n") for block in blocks)
        return "\n\n\n".join(parts) + "\n"

    def _order_fields(self, fields: tuple[Field, ...]) -> list[Field]:
        """Order fields so that the ones without a default come first."""
        required_fields = [f for f in fields if not self._has_default(f)]
        other_fields = [f for f in fields if self._has_default(f)]
        return required_fields + other_fields

    def _has_default(self, field: Field) -> bool:
        return not field.required
