"""Tests for archive serialization."""
import io
import tempfile
import unittest
import zipfile
from datetime import datetime, timezone
from pathlib import Path

from slidepack.builder.assembler import assemble_presentation
from slidepack.model.elements import BulletList, MediaAsset, Picture, SlideDescription, Title
from slidepack.model.options import PresentationOptions
from slidepack.opc.content_types import CT_RELATIONSHIPS, CT_XML
from slidepack.opc.errors import UnknownContentType, UnresolvedRelationship
from slidepack.opc.package import Package
from slidepack.opc.package_reader import PackageContents
from slidepack.opc.relationships import RELTYPE_IMAGE, RELTYPE_OFFICE_DOCUMENT, RelationshipRegistry
from slidepack.renderer.package_serializer import PackageSerializer, serialize_package
from slidepack.utils.paths import CONTENT_TYPES_PART

PNG = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x10\x00\x00\x00\x10\x08\x02\x00\x00\x00'


def _deck():
    return [
        SlideDescription.of(Title("Cover", style="center")),
        SlideDescription.of(Title("Agenda"), BulletList(("a", "b")), Picture("logo")),
    ]


class PackageSerializerTest(unittest.TestCase):
    """Ordering, validation and determinism of the written archive."""

    def setUp(self):
        self.options = PresentationOptions(created=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assets = {"logo": MediaAsset(PNG, "png")}

    def _package(self):
        return assemble_presentation(_deck(), self.assets, self.options)

    def test_entry_order(self):
        names = [name for name, _ in PackageSerializer(self._package()).entries()]

        self.assertEqual(names[:3], [CONTENT_TYPES_PART, "_rels/.rels", "docProps/core.xml"])
        self.assertEqual(len(names), len(set(names)))
        # Each part's relationships follow it directly
        presentation = names.index("ppt/presentation.xml")
        self.assertEqual(names[presentation + 1], "ppt/_rels/presentation.xml.rels")
        slide = names.index("ppt/slides/slide2.xml")
        self.assertEqual(names[slide + 1], "ppt/slides/_rels/slide2.xml.rels")
        self.assertNotIn("ppt/slides/_rels/slide1.xml.rels", names)

    def test_archive_matches_entries(self):
        package = self._package()
        data = serialize_package(package)

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            self.assertEqual(archive.namelist(), [name for name, _ in PackageSerializer(package).entries()])
            self.assertTrue(all(info.date_time == (1980, 1, 1, 0, 0, 0) for info in archive.infolist()))

    def test_every_member_has_a_content_type(self):
        contents = PackageContents.load(serialize_package(self._package()))

        for name in contents.names:
            if name == CONTENT_TYPES_PART:
                continue
            self.assertIsNotNone(contents.content_type_of(name), name)
        self.assertEqual(contents.content_type_of("ppt/media/image1.png"), "image/png")

    def test_every_internal_relationship_resolves(self):
        contents = PackageContents.load(serialize_package(self._package()))

        for rel in contents.relationships.iter_all():
            if not rel.is_external:
                self.assertIn(rel.target, contents.raw_parts, rel)

    def test_rebuild_is_byte_identical(self):
        first = serialize_package(self._package())
        second = serialize_package(self._package())

        self.assertEqual(first, second)

    def test_stored_compression(self):
        data = PackageSerializer(self._package(), zipfile.ZIP_STORED).to_bytes()

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            self.assertTrue(all(info.compress_type == zipfile.ZIP_STORED for info in archive.infolist()))

    def test_unknown_content_type_fails(self):
        package = Package()
        package.content_types.register_default("xml", CT_XML)
        package.add_part("ppt/media/clip.bin", b"\x00")

        with self.assertRaises(UnknownContentType):
            PackageSerializer(package).to_bytes()

    def test_unresolved_relationship_fails(self):
        package = Package()
        package.content_types.register_default("xml", CT_XML)
        package.content_types.register_default("rels", CT_RELATIONSHIPS)
        package.relate(RELTYPE_OFFICE_DOCUMENT, "ppt/presentation.xml")
        rels = RelationshipRegistry("ppt/presentation.xml")
        rels.add(RELTYPE_IMAGE, "ppt/media/image1.png")
        package.add_part("ppt/presentation.xml", b"<x/>", relationships=rels)

        with self.assertRaises(UnresolvedRelationship) as ctx:
            PackageSerializer(package).to_bytes()
        self.assertEqual(ctx.exception.source_part, "ppt/presentation.xml")

    def test_nothing_written_on_failure(self):
        package = Package()
        package.add_part("ppt/media/clip.bin", b"\x00")

        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "deck.pptx"
            with self.assertRaises(UnknownContentType):
                PackageSerializer(package).write(target)
            self.assertFalse(target.exists())

    def test_write_creates_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = PackageSerializer(self._package()).write(Path(tmp) / "deck.pptx")

            self.assertTrue(zipfile.is_zipfile(target))

    def test_xml_parts_carry_declaration(self):
        contents = PackageContents.load(serialize_package(self._package()))

        for name in (CONTENT_TYPES_PART, "_rels/.rels", "ppt/slides/slide2.xml"):
            self.assertTrue(contents.raw_parts[name].startswith(b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'))


if __name__ == '__main__':
    unittest.main()
