"""
Pipeline generator wiring the resolution stages together.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .analyzer.analyzer import SchemaAnalyzer
from .analyzer.composition_resolver import CompositionResolver
from .analyzer.constraint_validator import ConstraintValidator
from .analyzer.name_resolver import NameResolver
from .analyzer.reference_resolver import ReferenceResolver
from .analyzer.type_model import TypeModel
from .backends import CodeBackend, PythonBackend
from .config import CodeGeneratorConfig
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)

BACKENDS: dict[str, type[CodeBackend]] = {
    "python": PythonBackend,
}


class PipelineGenerator:
    """
    Derives a TypeModel from a document and renders it with a backend.

    Phases:
        1. Parse `components/schemas` into schema nodes
        2. Resolve references
        3. Validate the supported subset
        4. Resolve type names
        5. Resolve compositions
        6. Assemble the TypeModel
        7. Render code (optional)
    """

    def __init__(
        self,
        document: Mapping[str, Any],
        config: CodeGeneratorConfig | None = None,
        language: str = "python",
    ):
        """
        Initialize the generator.

        Args:
            document: The loaded document (a mapping exposing components.schemas)
            config: Configuration options
            language: Target language for generate()
        """
        if language not in BACKENDS:
            raise ValueError(f"Unsupported language: {language}")
        self.document = document
        self.config = config or CodeGeneratorConfig()
        self.language = language
        self._model: TypeModel | None = None

    def build_model(self) -> TypeModel:
        """
        Run the resolution pipeline.

        Returns:
            The frozen TypeModel (built once and cached)

        Raises:
            SchemaError: On the first diagnostic of any stage
        """
        if self._model is not None:
            return self._model

        schema_document = SchemaParser().parse(self.document)
        references = ReferenceResolver(schema_document).resolve_all()
        ConstraintValidator(schema_document).validate()
        names = NameResolver(self.config).resolve_names(schema_document)
        compositions = CompositionResolver(schema_document, references, names, self.config).resolve_all()
        self._model = SchemaAnalyzer(self.config).analyze(schema_document, references, names, compositions)

        logger.info("Derived %d types from %d schemas", len(self._model), len(self._model.schema_names))
        return self._model

    def generate(self, generation_comment: str | None = None) -> str:
        """
        Generate code for the document.

        Args:
            generation_comment: Optional comment (e.g. the command line) for the file header

        Returns:
            Generated source code
        """
        model = self.build_model()
        backend = BACKENDS[self.language](self.config)
        return backend.generate(model, generation_comment)
