"""Registry behind the ``[Content_Types].xml`` part."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List
from xml.etree import ElementTree as ET

from slidepack.opc.errors import ContentTypeConflict, InvalidPartName, PackageFrozen, UnknownContentType
from slidepack.utils.logger import get_logger
from slidepack.utils.paths import extension_of, normalize_part_name
from slidepack.utils.xml_utils import Namespaces

LOGGER = get_logger(__name__)

CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_CORE_PROPERTIES = "application/vnd.openxmlformats-package.core-properties+xml"
CT_EXTENDED_PROPERTIES = "application/vnd.openxmlformats-officedocument.extended-properties+xml"
CT_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
CT_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
CT_SLIDE_MASTER = "application/vnd.openxmlformats-officedocument.presentationml.slideMaster+xml"
CT_SLIDE_LAYOUT = "application/vnd.openxmlformats-officedocument.presentationml.slideLayout+xml"
CT_THEME = "application/vnd.openxmlformats-officedocument.theme+xml"
CT_PRES_PROPS = "application/vnd.openxmlformats-officedocument.presentationml.presProps+xml"
CT_VIEW_PROPS = "application/vnd.openxmlformats-officedocument.presentationml.viewProps+xml"
CT_TABLE_STYLES = "application/vnd.openxmlformats-officedocument.presentationml.tableStyles+xml"


@dataclass(frozen=True)
class DefaultEntry:
    """Content type applied to every part with a given extension."""

    extension: str
    content_type: str


@dataclass(frozen=True)
class OverrideEntry:
    """Content type pinned to one specific part."""

    part_name: str
    content_type: str


class ContentTypeRegistry:
    """Default (by extension) and Override (by part) content-type mappings.

    Part names compare case-insensitively, as OPC requires; the spelling of
    the first registration is what gets written.
    """

    def __init__(self) -> None:
        self._defaults: Dict[str, str] = {}
        self._overrides: Dict[str, OverrideEntry] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register_default(self, extension: str, content_type: str) -> None:
        """Map ``extension`` to ``content_type``; identical repeats are no-ops."""
        key = extension.lstrip(".").lower()
        if not key:
            raise ValueError("Default content types need a non-empty extension")
        existing = self._defaults.get(key)
        if existing is not None:
            if existing != content_type:
                raise ContentTypeConflict(key, existing, content_type)
            return
        self._check_mutable(f"Default for {key!r}")
        self._defaults[key] = content_type
        LOGGER.debug("Default content type %s -> %s", key, content_type)

    def register_override(self, part_name: str, content_type: str) -> None:
        """Pin ``content_type`` to ``part_name``; identical repeats are no-ops."""
        name = self._normalize(part_name)
        existing = self._overrides.get(name.lower())
        if existing is not None:
            if existing.content_type != content_type:
                raise ContentTypeConflict(existing.part_name, existing.content_type, content_type)
            return
        self._check_mutable(f"Override for {name}")
        self._overrides[name.lower()] = OverrideEntry(name, content_type)
        LOGGER.debug("Override content type %s -> %s", name, content_type)

    def resolve(self, part_name: str) -> str:
        """Return the content type a consumer would assign to ``part_name``."""
        name = self._normalize(part_name)
        override = self._overrides.get(name.lower())
        if override is not None:
            return override.content_type
        default = self._defaults.get(extension_of(name))
        if default is not None:
            return default
        raise UnknownContentType(name)

    @property
    def defaults(self) -> List[DefaultEntry]:
        return [DefaultEntry(ext, ct) for ext, ct in self._defaults.items()]

    @property
    def overrides(self) -> List[OverrideEntry]:
        return list(self._overrides.values())

    def to_xml(self) -> ET.Element:
        """Render the registry as the ``Types`` root of ``[Content_Types].xml``."""
        root = ET.Element("Types", xmlns=Namespaces.CONTENT_TYPES["ct"])
        for extension, content_type in self._defaults.items():
            ET.SubElement(root, "Default", attrib={"Extension": extension, "ContentType": content_type})
        for entry in self._overrides.values():
            ET.SubElement(root, "Override", attrib={"PartName": f"/{entry.part_name}", "ContentType": entry.content_type})
        return root

    def _check_mutable(self, what: str) -> None:
        if self._frozen:
            raise PackageFrozen(f"Cannot register {what}: content types are frozen")

    @staticmethod
    def _normalize(part_name: str) -> str:
        try:
            return normalize_part_name(part_name)
        except ValueError as exc:
            raise InvalidPartName(part_name, str(exc)) from exc
