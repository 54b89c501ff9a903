"""Helpers to persist a package manifest for debugging."""
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict

from slidepack.opc.package import Package

MANIFEST_NAME = "package_manifest.json"


class DebugDumper:
    """Writes a JSON description of an assembled package onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, package: Package) -> Path:
        """Persist parts, content types and relationships of ``package`` as JSON."""
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / MANIFEST_NAME
        target.write_text(json.dumps(self.manifest(package), indent=2))
        return target

    def manifest(self, package: Package) -> Dict[str, Any]:
        content_types = package.content_types
        return {
            "defaults": self._serialize(content_types.defaults),
            "overrides": self._serialize(content_types.overrides),
            "parts": [
                {
                    "name": part.name,
                    "content_type": content_types.resolve(part.name),
                    "size": len(part.blob),
                }
                for part in package.parts
            ],
            "relationships": {
                registry.source_part or "/": self._serialize(list(registry))
                for registry in package.iter_registries()
                if len(registry)
            },
        }

    def _serialize(self, value: Any) -> Any:
        if is_dataclass(value):
            return {k: self._serialize(v) for k, v in asdict(value).items()}
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
