"""AsyncAPI to Code Generator

A Python package deriving a canonical type model (entities, enums and
tagged/untagged unions) from the `components/schemas` section of AsyncAPI
documents, and generating Python dataclasses from it.
"""

__version__ = "0.1.0"

from .loader import DocumentLoadError, load_document, loads_document
from .pipeline import (
    CodeGeneratorConfig,
    PipelineGenerator,
    SchemaError,
    TypeModel,
    VariantMatcher,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "TypeModel",
    "VariantMatcher",
    "SchemaError",
    "DocumentLoadError",
    "load_document",
    "loads_document",
]
