"""Loading of raw manifest templates shipped alongside the operator."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


class ManifestError(Exception):
    """Raised when a manifest directory or document is unusable."""


def load_manifests(directory: Path | str, kind: str | None = None) -> list[dict[str, Any]]:
    """Load every YAML document from a directory.

    Files are read in name order so the result is deterministic.

    Args:
        directory: Directory containing *.yaml or *.yml files
        kind: If given, only documents of this kind are returned

    Returns:
        List of parsed documents

    Raises:
        ManifestError: If the directory is missing or a document is malformed
    """
    path = Path(directory)
    if not path.is_dir():
        raise ManifestError(f"Manifests directory {path} does not exist")

    documents: list[dict[str, Any]] = []
    files = sorted(p for p in path.iterdir() if p.suffix in (".yaml", ".yml"))
    for manifest_file in files:
        try:
            with manifest_file.open(encoding="utf-8") as f:
                loaded = list(yaml.safe_load_all(f))
        except yaml.YAMLError as e:
            raise ManifestError(f"Failed to parse {manifest_file}: {e}") from e

        for doc in loaded:
            if not doc:
                continue
            if not isinstance(doc, dict) or "kind" not in doc or "metadata" not in doc:
                raise ManifestError(f"{manifest_file} contains a document without kind or metadata")
            if kind is None or doc["kind"] == kind:
                documents.append(doc)

    return documents
