"""
Analyzer module.

Contains reference resolution, constraint validation, name resolution,
composition resolution and type model assembly.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .composition_resolver import AllOfComposition, CompositionResolver, CompositionTable, UnionComposition
from .constraint_validator import ConstraintValidator
from .name_resolver import NameResolver, NameTable
from .reference_resolver import ReferenceResolver, ReferenceTable, ResolvedRef
from .type_model import (
    AnyType,
    ArrayType,
    ConstType,
    Entity,
    EnumType,
    Field,
    FieldGroup,
    FieldType,
    MapType,
    NamedType,
    PrimitiveType,
    TaggingMode,
    TupleType,
    TypeModel,
    UnionType,
)
from .variant_matcher import VariantMatcher

__all__ = [
    "SchemaAnalyzer",
    "ReferenceResolver",
    "ReferenceTable",
    "ResolvedRef",
    "ConstraintValidator",
    "NameResolver",
    "NameTable",
    "CompositionResolver",
    "CompositionTable",
    "AllOfComposition",
    "UnionComposition",
    "TypeModel",
    "Entity",
    "EnumType",
    "UnionType",
    "TaggingMode",
    "Field",
    "FieldGroup",
    "FieldType",
    "NamedType",
    "PrimitiveType",
    "ConstType",
    "ArrayType",
    "TupleType",
    "MapType",
    "AnyType",
    "VariantMatcher",
]
