"""Root aggregate tying parts, relationships and content types together."""
from __future__ import annotations

from typing import Iterator, Optional

from slidepack.opc.content_types import ContentTypeRegistry
from slidepack.opc.errors import PackageFrozen
from slidepack.opc.part_tree import Part, PartTree, Payload
from slidepack.opc.relationships import RelationshipRegistry


class Package:
    """Everything a single build accumulates before it is serialized.

    Each instance owns its registries and counters; nothing is shared
    between packages. Parts are only ever appended, and once frozen the
    package rejects further additions.
    """

    def __init__(self) -> None:
        self.parts = PartTree()
        self.content_types = ContentTypeRegistry()
        self.relationships = RelationshipRegistry("")
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Package":
        """Stop every registry of this package from accepting changes."""
        self._frozen = True
        self.parts.freeze()
        self.content_types.freeze()
        for registry in self.iter_registries():
            registry.freeze()
        return self

    def add_part(
        self,
        name: str,
        payload: Payload,
        content_type: Optional[str] = None,
        relationships: Optional[RelationshipRegistry] = None,
    ) -> Part:
        """Insert a part, optionally pinning its content type with an Override."""
        if self._frozen:
            raise PackageFrozen(f"Cannot add {name}: package is frozen")
        part_name = self.parts.check_new_part(name, relationships)
        if content_type is not None:
            self.content_types.register_override(part_name, content_type)
        return self.parts.add_part(part_name, payload, relationships)

    def relate(self, rel_type: str, target: str, external: bool = False) -> str:
        """Add a package-level relationship (``_rels/.rels``)."""
        if self._frozen:
            raise PackageFrozen(f"Cannot relate {target}: package is frozen")
        return self.relationships.add(rel_type, target, external=external)

    def iter_registries(self) -> Iterator[RelationshipRegistry]:
        """Package registry first, then each part's registry in part order."""
        yield self.relationships
        for part in self.parts:
            yield part.relationships
