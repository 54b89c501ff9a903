"""Read a serialized package back into raw parts, content types and relationships."""
from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, List, Mapping, Optional, Union
from xml.etree import ElementTree as ET

from slidepack.opc.relationships import Relationships
from slidepack.utils.logger import get_logger
from slidepack.utils.paths import CONTENT_TYPES_PART, extension_of
from slidepack.utils.xml_utils import Namespaces, parse_xml

LOGGER = get_logger(__name__)

PackageSource = Union[str, Path, bytes, BinaryIO]


@dataclass(slots=True)
class PackageContents:
    """Container for the parts of an OPC archive, keyed by archive name."""

    raw_parts: Mapping[str, bytes]
    names: List[str] = field(default_factory=list)
    defaults: Dict[str, str] = field(default_factory=dict)
    overrides: Dict[str, str] = field(default_factory=dict)
    xml_cache: Dict[str, ET.ElementTree] = field(default_factory=dict)
    relationships: Relationships = field(init=False)

    @classmethod
    def load(cls, source: PackageSource) -> "PackageContents":
        """Open an archive from a path, raw bytes or a binary stream."""
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        with zipfile.ZipFile(source) as archive:
            names = archive.namelist()
            parts = {name: archive.read(name) for name in names}

        LOGGER.debug("Loaded %d parts", len(parts))

        contents = cls(raw_parts=parts, names=names)
        contents._initialize()
        return contents

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        if name in self.xml_cache:
            return self.xml_cache[name]
        data = self.raw_parts.get(name)
        if data is None:
            return None
        tree = parse_xml(data)
        self.xml_cache[name] = tree
        return tree

    def require_xml_part(self, name: str) -> ET.ElementTree:
        tree = self.get_xml_part(name)
        if tree is None:
            raise KeyError(f"Required part missing: {name}")
        return tree

    def content_type_of(self, name: str) -> Optional[str]:
        """Resolve a part's content type the way a consumer would."""
        return self.overrides.get(name) or self.defaults.get(extension_of(name))

    def _initialize(self) -> None:
        types_tree = self.require_xml_part(CONTENT_TYPES_PART)
        for el in types_tree.findall("ct:Default", Namespaces.CONTENT_TYPES):
            self.defaults[el.attrib["Extension"].lower()] = el.attrib["ContentType"]
        for el in types_tree.findall("ct:Override", Namespaces.CONTENT_TYPES):
            self.overrides[el.attrib["PartName"].lstrip("/")] = el.attrib["ContentType"]
        self.relationships = Relationships.from_package(self.raw_parts)
