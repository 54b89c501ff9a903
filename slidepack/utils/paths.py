"""Part-name arithmetic for Open Packaging Convention archives."""
from __future__ import annotations

import posixpath

CONTENT_TYPES_PART = "[Content_Types].xml"
PACKAGE_RELS_PART = "_rels/.rels"
RELS_DIR = "_rels"
RELS_SUFFIX = ".rels"


def normalize_part_name(name: str) -> str:
    """Return the canonical archive name for a part.

    Names are archive-relative with forward slashes; a single leading ``/``
    (the form used in ``[Content_Types].xml``) is accepted and dropped.
    Raises ``ValueError`` for names that could escape the archive root.
    """
    if not name:
        raise ValueError("part name is empty")
    if "\\" in name:
        raise ValueError(f"part name {name!r} contains a backslash")
    if name.startswith("/"):
        name = name[1:]
    if not name or name.startswith("/") or name.endswith("/"):
        raise ValueError(f"part name {name!r} is not a file path")
    if any(segment in ("", ".", "..") for segment in name.split("/")):
        raise ValueError(f"part name {name!r} contains empty or relative segments")
    return name


def rels_part_name(source_part: str) -> str:
    """Return the relationship part that belongs to ``source_part``.

    The package itself is the empty source and owns ``_rels/.rels``.
    """
    if not source_part:
        return PACKAGE_RELS_PART
    folder, _, file_name = source_part.rpartition("/")
    if folder:
        return f"{folder}/{RELS_DIR}/{file_name}{RELS_SUFFIX}"
    return f"{RELS_DIR}/{file_name}{RELS_SUFFIX}"


def source_from_rels_part(rel_part: str) -> str:
    """Invert :func:`rels_part_name`."""
    if rel_part == PACKAGE_RELS_PART:
        return ""
    folder, _, file_name = rel_part.rpartition("/")
    base = file_name[: -len(RELS_SUFFIX)]
    if folder == RELS_DIR:
        return base
    parent = folder[: -len(RELS_DIR) - 1]
    return f"{parent}/{base}"


def is_rels_part(name: str) -> bool:
    return name.endswith(RELS_SUFFIX) and (name.startswith(f"{RELS_DIR}/") or f"/{RELS_DIR}/" in name)


def relative_target(source_part: str, target_part: str) -> str:
    """Express ``target_part`` relative to the directory holding ``source_part``."""
    base_dir = posixpath.dirname(source_part) or "."
    return posixpath.relpath(target_part, start=base_dir)


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship ``Target`` written in ``source_part``'s rels file."""
    if target.startswith("/"):
        return posixpath.normpath(target[1:])
    base_dir = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base_dir, target))


def extension_of(part_name: str) -> str:
    """Lower-cased extension without the dot; empty when the name has none."""
    file_name = part_name.rsplit("/", 1)[-1]
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()
