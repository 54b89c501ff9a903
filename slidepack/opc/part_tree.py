"""Named parts that make up a package."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union
from xml.etree import ElementTree as ET

from slidepack.opc.errors import DuplicatePart, InvalidPartName, PackageFrozen
from slidepack.opc.relationships import RelationshipRegistry
from slidepack.utils.logger import get_logger
from slidepack.utils.paths import CONTENT_TYPES_PART, RELS_DIR, normalize_part_name
from slidepack.utils.xml_utils import serialize_xml

LOGGER = get_logger(__name__)

Payload = Union[ET.Element, bytes]


@dataclass(frozen=True)
class Part:
    """One entry of the package: an XML tree or an opaque binary payload."""

    name: str
    payload: Payload
    relationships: RelationshipRegistry

    @property
    def is_xml(self) -> bool:
        return not isinstance(self.payload, (bytes, bytearray))

    @property
    def blob(self) -> bytes:
        """Serialized bytes as they will appear in the archive."""
        if self.is_xml:
            return serialize_xml(self.payload)  # type: ignore[arg-type]
        return bytes(self.payload)  # type: ignore[arg-type]


class PartTree:
    """Insertion-ordered set of parts with package-wide unique names.

    Names compare case-insensitively; a part keeps the spelling it was added
    with. Relationship parts and ``[Content_Types].xml`` are derived at
    serialization time; their names are reserved here so a regular part can
    never collide with them.
    """

    def __init__(self) -> None:
        self._parts: Dict[str, Part] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def check_new_part(self, name: str, relationships: Optional[RelationshipRegistry] = None) -> str:
        """Raise whatever :meth:`add_part` would raise; return the normalized name."""
        if self._frozen:
            raise PackageFrozen(f"Cannot add {name}: part tree is frozen")
        part_name = self.validate_name(name)
        if part_name.lower() in self._parts:
            raise DuplicatePart(part_name)
        if relationships is not None and relationships.source_part.lower() != part_name.lower():
            raise ValueError(
                f"Relationship registry belongs to {relationships.source_part!r}, not {part_name!r}"
            )
        return part_name

    def add_part(
        self,
        name: str,
        payload: Payload,
        relationships: Optional[RelationshipRegistry] = None,
    ) -> Part:
        part_name = self.check_new_part(name, relationships)
        if relationships is None:
            relationships = RelationshipRegistry(part_name)
        part = Part(name=part_name, payload=payload, relationships=relationships)
        self._parts[part_name.lower()] = part
        LOGGER.debug("Added part %s (%d relationships)", part_name, len(relationships))
        return part

    def get(self, name: str) -> Part:
        try:
            return self._parts[self._key(name)]
        except KeyError:
            raise KeyError(f"Part not found in package: {name}") from None

    def names(self) -> List[str]:
        return [part.name for part in self._parts.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._parts

    def __iter__(self) -> Iterator[Part]:
        return iter(list(self._parts.values()))

    def __len__(self) -> int:
        return len(self._parts)

    @staticmethod
    def _key(name: str) -> str:
        return name.lstrip("/").lower()

    @staticmethod
    def validate_name(name: str) -> str:
        try:
            part_name = normalize_part_name(name)
        except ValueError as exc:
            raise InvalidPartName(name, str(exc)) from exc
        folded = part_name.lower()
        if folded == CONTENT_TYPES_PART.lower():
            raise InvalidPartName(name, "reserved for the content-type registry")
        if RELS_DIR in folded.split("/"):
            raise InvalidPartName(name, "relationship parts are derived from their source part")
        return part_name
