"""
Pipeline - schema resolution and type model derivation.

Multi-phase architecture turning the `components/schemas` section of an
AsyncAPI document into a TypeModel, then into code:

1. Phase 1 (Parser): Parse the document into schema nodes
2. Phase 2 (Analyzer): Resolve references, validate the supported subset,
   resolve names and compositions, and assemble the TypeModel
3. Phase 3 (Backend): Render the TypeModel with Jinja2 templates
"""

from __future__ import annotations

from .analyzer import TypeModel, VariantMatcher
from .config import CodeGeneratorConfig
from .errors import SchemaError
from .generator import PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "TypeModel",
    "VariantMatcher",
    "SchemaError",
]
