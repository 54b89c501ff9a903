"""Write a finished package into a single OPC zip archive."""
from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import List, Tuple, Union

from slidepack.opc.package import Package
from slidepack.utils.logger import get_logger
from slidepack.utils.paths import CONTENT_TYPES_PART
from slidepack.utils.xml_utils import serialize_xml

LOGGER = get_logger(__name__)

# Fixed member timestamp so identical packages produce identical archives
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

Entry = Tuple[str, bytes]


class PackageSerializer:
    """Validate a package and emit its archive entries in a deterministic order.

    Nothing is produced unless every part resolves a content type and every
    internal relationship resolves to an existing part.
    """

    def __init__(self, package: Package, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._package = package
        self._compression = compression

    def validate(self) -> None:
        """Final consistency sweep across parts, content types and relationships."""
        package = self._package
        part_names = set(package.parts.names())
        for part in package.parts:
            package.content_types.resolve(part.name)
        for registry in package.iter_registries():
            if not len(registry):
                continue
            package.content_types.resolve(registry.rels_part_name)
            registry.resolve_targets(part_names)

    def entries(self) -> List[Entry]:
        """Return ``(archive name, bytes)`` pairs, validating first."""
        self._package.freeze()
        self.validate()

        package = self._package
        entries: List[Entry] = [(CONTENT_TYPES_PART, serialize_xml(package.content_types.to_xml()))]
        if len(package.relationships):
            entries.append((package.relationships.rels_part_name, serialize_xml(package.relationships.to_xml())))
        for part in package.parts:
            entries.append((part.name, part.blob))
            if len(part.relationships):
                entries.append((part.relationships.rels_part_name, serialize_xml(part.relationships.to_xml())))
        return entries

    def to_bytes(self) -> bytes:
        """Serialize the whole package into an in-memory zip archive."""
        entries = self.entries()
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, data in entries:
                info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
                info.compress_type = self._compression
                info.external_attr = 0o644 << 16
                archive.writestr(info, data)
        LOGGER.debug("Serialized %d archive entries", len(entries))
        return buffer.getvalue()

    def write(self, output_path: Union[str, Path]) -> Path:
        """Write the archive to ``output_path``; the file is untouched on failure."""
        data = self.to_bytes()
        path = Path(output_path)
        path.write_bytes(data)
        LOGGER.info("Wrote %s (%d bytes)", path.name, len(data))
        return path


def serialize_package(package: Package, compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Convenience wrapper returning the archive bytes for ``package``."""
    return PackageSerializer(package, compression).to_bytes()
