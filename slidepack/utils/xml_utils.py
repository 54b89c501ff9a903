"""Helper functions to work with XML namespaces, parsing and serialization."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
from xml.etree import ElementTree as ET

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


@dataclass(frozen=True)
class Namespaces:
    """Common OpenXML namespace prefixes used across builders and readers."""

    PRESENTATION: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    CONTENT_TYPES: Dict[str, str] = None  # type: ignore[assignment]
    PROPERTIES: Dict[str, str] = None  # type: ignore[assignment]
    ALL: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.PRESENTATION = {  # type: ignore[attr-defined]
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}
Namespaces.CONTENT_TYPES = {  # type: ignore[attr-defined]
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
}
Namespaces.PROPERTIES = {  # type: ignore[attr-defined]
    "cp": "http://schemas.openxmlformats.org/package/2006/metadata/core-properties",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "dcmitype": "http://purl.org/dc/dcmitype/",
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "ep": "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties",
    "vt": "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes",
}
Namespaces.ALL = {  # type: ignore[attr-defined]
    **Namespaces.PRESENTATION,
    **Namespaces.RELS,
    **Namespaces.CONTENT_TYPES,
    **Namespaces.PROPERTIES,
}

# Prefixes used on output. Package-level parts (rels, content types, extended
# properties) put their namespace on the default prefix instead.
for _prefix in ("a", "r", "p", "cp", "dc", "dcterms", "dcmitype", "xsi", "vt"):
    ET.register_namespace(_prefix, Namespaces.ALL[_prefix])


def qn(tag: str) -> str:
    """Expand a ``prefix:local`` name into Clark notation."""
    prefix, local = tag.split(":", 1)
    return f"{{{Namespaces.ALL[prefix]}}}{local}"


def sub_element(parent: ET.Element, tag: str, **attrib: str) -> ET.Element:
    """Append a child using a prefixed tag; ``None`` attributes are skipped."""
    attrs = {_qualify_attr(key): str(value) for key, value in attrib.items() if value is not None}
    return ET.SubElement(parent, qn(tag), attrs)


def make_element(tag: str, **attrib: str) -> ET.Element:
    """Create a detached element using a prefixed tag."""
    attrs = {_qualify_attr(key): str(value) for key, value in attrib.items() if value is not None}
    return ET.Element(qn(tag), attrs)


def _qualify_attr(name: str) -> str:
    # r_embed -> r:embed; plain keyword names stay unqualified.
    if "_" in name:
        prefix, local = name.split("_", 1)
        if prefix in Namespaces.ALL:
            return qn(f"{prefix}:{local}")
    return name


def parse_xml(data: bytes) -> ET.ElementTree:
    """Parse XML from raw bytes with sane defaults."""
    return ET.ElementTree(ET.fromstring(data))


def serialize_xml(element: ET.Element) -> bytes:
    """Serialize an element into a standalone UTF-8 XML document."""
    body = ET.tostring(element, encoding="unicode", short_empty_elements=True)
    return XML_DECLARATION + body.encode("utf-8")

