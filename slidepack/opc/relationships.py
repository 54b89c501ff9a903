"""Open Packaging Convention relationships: per-part registries and a reader index."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Dict, Iterable, Iterator, List, Mapping, Optional
from xml.etree import ElementTree as ET

from slidepack.opc.errors import InvalidPartName, PackageFrozen, UnresolvedRelationship
from slidepack.utils.logger import get_logger
from slidepack.utils.paths import (
    is_rels_part,
    normalize_part_name,
    relative_target,
    rels_part_name,
    resolve_target,
    source_from_rels_part,
)
from slidepack.utils.xml_utils import Namespaces, parse_xml

LOGGER = get_logger(__name__)

OFFICE_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

RELTYPE_OFFICE_DOCUMENT = f"{OFFICE_REL_NS}/officeDocument"
RELTYPE_CORE_PROPERTIES = f"{PACKAGE_REL_NS}/metadata/core-properties"
RELTYPE_EXTENDED_PROPERTIES = f"{OFFICE_REL_NS}/extended-properties"
RELTYPE_SLIDE = f"{OFFICE_REL_NS}/slide"
RELTYPE_SLIDE_MASTER = f"{OFFICE_REL_NS}/slideMaster"
RELTYPE_SLIDE_LAYOUT = f"{OFFICE_REL_NS}/slideLayout"
RELTYPE_THEME = f"{OFFICE_REL_NS}/theme"
RELTYPE_PRES_PROPS = f"{OFFICE_REL_NS}/presProps"
RELTYPE_VIEW_PROPS = f"{OFFICE_REL_NS}/viewProps"
RELTYPE_TABLE_STYLES = f"{OFFICE_REL_NS}/tableStyles"
RELTYPE_IMAGE = f"{OFFICE_REL_NS}/image"
RELTYPE_HYPERLINK = f"{OFFICE_REL_NS}/hyperlink"


@dataclass(frozen=True)
class Relationship:
    """Represents a single OPC relationship."""

    source_part: str
    r_id: str
    target: str
    rel_type: str
    is_external: bool = False


class RelationshipRegistry:
    """Outgoing relationships of one part, in insertion order.

    Ids are handed out here and nowhere else: ``rId1``, ``rId2``, ... with no
    gaps and no reuse. Internal targets are stored as absolute part names and
    only turned into relative references when the ``.rels`` part is written.
    """

    def __init__(self, source_part: str = "") -> None:
        self.source_part = self._normalize(source_part) if source_part else ""
        self._relationships: Dict[str, Relationship] = {}
        self._next_id = 1
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    @property
    def rels_part_name(self) -> str:
        return rels_part_name(self.source_part)

    def add(self, rel_type: str, target: str, external: bool = False) -> str:
        """Register a relationship and return its freshly allocated id."""
        if self._frozen:
            source = self.source_part or "<package>"
            raise PackageFrozen(f"Cannot relate {target}: relationships of {source} are frozen")
        if not external:
            target = self._normalize(target)
        r_id = f"rId{self._next_id}"
        self._next_id += 1
        self._relationships[r_id] = Relationship(
            source_part=self.source_part,
            r_id=r_id,
            target=target,
            rel_type=rel_type,
            is_external=external,
        )
        LOGGER.debug("Relationship %s of %s -> %s", r_id, self.source_part or "<package>", target)
        return r_id

    def get_or_add(self, rel_type: str, target: str, external: bool = False) -> str:
        """Return the id of an identical relationship, adding one when absent."""
        if not external:
            target = self._normalize(target)
        for rel in self._relationships.values():
            if rel.rel_type == rel_type and rel.target == target and rel.is_external == external:
                return rel.r_id
        return self.add(rel_type, target, external=external)

    def find(self, r_id: str) -> Optional[Relationship]:
        return self._relationships.get(r_id)

    def by_type(self, rel_type: str) -> List[Relationship]:
        return [rel for rel in self._relationships.values() if rel.rel_type == rel_type]

    def __iter__(self) -> Iterator[Relationship]:
        return iter(list(self._relationships.values()))

    def __len__(self) -> int:
        return len(self._relationships)

    def resolve_targets(self, part_names: Collection[str]) -> None:
        """Fail on the first internal target that is not an existing part.

        Part names compare case-insensitively.
        """
        known = {name.lower() for name in part_names}
        for rel in self._relationships.values():
            if rel.is_external:
                continue
            if rel.target.lower() not in known:
                raise UnresolvedRelationship(self.source_part, rel.r_id, rel.target)

    def to_xml(self) -> ET.Element:
        """Render the ``Relationships`` root of this part's ``.rels`` file."""
        root = ET.Element("Relationships", xmlns=Namespaces.RELS["rel"])
        for rel in self._relationships.values():
            attrib = {"Id": rel.r_id, "Type": rel.rel_type}
            if rel.is_external:
                attrib["Target"] = rel.target
                attrib["TargetMode"] = "External"
            else:
                attrib["Target"] = relative_target(self.source_part, rel.target)
            ET.SubElement(root, "Relationship", attrib=attrib)
        return root

    @staticmethod
    def _normalize(name: str) -> str:
        try:
            return normalize_part_name(name)
        except ValueError as exc:
            raise InvalidPartName(name, str(exc)) from exc


class Relationships:
    """Read-side index of every relationship found in a serialized package."""

    def __init__(self, relationships: Dict[str, Dict[str, Relationship]]) -> None:
        self._by_source = relationships

    @classmethod
    def from_package(cls, parts: Mapping[str, bytes]) -> "Relationships":
        """Collect relationships from all .rels parts within the package."""
        by_source: Dict[str, Dict[str, Relationship]] = {}
        for name, payload in parts.items():
            if not is_rels_part(name):
                continue
            source = source_from_rels_part(name)
            parsed = cls._parse_relationship_part(source, parse_xml(payload))
            if parsed:
                by_source[source] = parsed
        return cls(by_source)

    def find(self, part_name: str, r_id: str) -> Optional[Relationship]:
        """Return a relationship by part and id if present."""
        return self._by_source.get(self._normalize_source(part_name), {}).get(r_id)

    def for_source(self, part_name: str) -> Dict[str, Relationship]:
        """Return all relationships for a given source part, keyed by id in file order."""
        return dict(self._by_source.get(self._normalize_source(part_name), {}))

    def iter_all(self) -> Iterable[Relationship]:
        for rels in self._by_source.values():
            yield from rels.values()

    def sources(self) -> List[str]:
        return list(self._by_source)

    @staticmethod
    def _parse_relationship_part(source_part: str, tree: ET.ElementTree) -> Dict[str, Relationship]:
        result: Dict[str, Relationship] = {}
        for rel_el in tree.findall(".//rel:Relationship", Namespaces.RELS):
            r_id = rel_el.attrib["Id"]
            target = rel_el.attrib.get("Target", "")
            is_external = rel_el.attrib.get("TargetMode") == "External"
            result[r_id] = Relationship(
                source_part=source_part,
                r_id=r_id,
                target=target if is_external else resolve_target(source_part, target),
                rel_type=rel_el.attrib.get("Type", ""),
                is_external=is_external,
            )
        return result

    @staticmethod
    def _normalize_source(part_name: str) -> str:
        if is_rels_part(part_name):
            return source_from_rels_part(part_name)
        return part_name.lstrip("/")
