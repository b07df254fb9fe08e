"""
Configuration for the resolution pipeline and the code backends.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class CodeGeneratorConfig:
    """Configuration options for type model resolution and code generation."""

    # Suffix for anonymous allOf members (GetUser -> GetUserInner)
    inner_suffix: str = "Inner"

    # Suffix for anonymous oneOf/anyOf variants
    variant_suffix: str = "Variant"

    # Suffix for anonymous array items (Order.lines -> OrderLinesItem)
    item_suffix: str = "Item"

    # Suffix for anonymous map values
    value_suffix: str = "Value"

    # Suffix for an entity's anonymous additionalProperties schema
    additional_properties_suffix: str = "AdditionalProperties"

    # Raise instead of falling back to an untagged union when tags are ambiguous
    strict_discriminator: bool = False

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Use from __future__ import annotations
    use_future_annotations: bool = True

    # Field name used for the catch-all (additionalProperties) field
    catch_all_field_name: str = "additional_properties"

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary, ignoring unknown keys."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
