"""Document loader for AsyncAPI YAML/JSON files."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml


class DocumentLoadError(Exception):
    """Raised when a document cannot be read or is not a mapping."""


def loads_document(text: str) -> Mapping[str, Any]:
    """Parse YAML (or JSON) text into a document mapping."""
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentLoadError(f"Failed to parse document: {exc}") from exc

    if not isinstance(parsed, Mapping):
        raise DocumentLoadError("Document root must be a mapping.")
    return parsed


def load_document(document_path: Path | str) -> Mapping[str, Any]:
    """Load a YAML or JSON document from disk."""
    path = Path(document_path)
    if not path.exists():
        raise DocumentLoadError(f"Document not found: {path}")
    return loads_document(path.read_text(encoding="utf-8"))
