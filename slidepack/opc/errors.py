"""Exceptions raised while assembling or serializing a package."""
from __future__ import annotations


class PackageError(ValueError):
    """Base class for every package consistency failure."""


class DuplicatePart(PackageError):
    """Two insertions target the same archive path."""

    def __init__(self, part_name: str) -> None:
        super().__init__(f"Part already present in package: {part_name}")
        self.part_name = part_name


class InvalidPartName(PackageError):
    """A part name is absolute, escapes the archive root or is reserved."""

    def __init__(self, part_name: str, reason: str) -> None:
        super().__init__(f"Invalid part name {part_name!r}: {reason}")
        self.part_name = part_name


class ContentTypeConflict(PackageError):
    """A Default or Override registration disagrees with an existing one."""

    def __init__(self, key: str, existing: str, requested: str) -> None:
        super().__init__(f"Content type for {key!r} already registered as {existing!r}, got {requested!r}")
        self.key = key
        self.existing = existing
        self.requested = requested


class UnknownContentType(PackageError, KeyError):
    """A part has neither an Override nor a Default for its extension."""

    def __init__(self, part_name: str) -> None:
        super().__init__(f"No content type registered for part: {part_name}")
        self.part_name = part_name

    def __str__(self) -> str:
        return self.args[0]


class UnresolvedRelationship(PackageError):
    """An internal relationship target names a part that does not exist."""

    def __init__(self, source_part: str, r_id: str, target: str) -> None:
        source = source_part or "<package>"
        super().__init__(f"Relationship {r_id} of {source} points at missing part: {target}")
        self.source_part = source_part
        self.r_id = r_id
        self.target = target


class MissingAsset(PackageError, KeyError):
    """A slide references a media asset that was not supplied."""

    def __init__(self, asset_key: str) -> None:
        super().__init__(f"No media asset supplied for key: {asset_key}")
        self.asset_key = asset_key

    def __str__(self) -> str:
        return self.args[0]


class PackageFrozen(PackageError):
    """The package was modified after serialization began."""
