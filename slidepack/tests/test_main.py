"""Tests for the command-line entry point and debug manifest."""
import json
import struct
import tempfile
import unittest
import zipfile
from pathlib import Path

from slidepack.builder.assembler import assemble_presentation
from slidepack.main import build_presentation, load_assets, main
from slidepack.model.elements import MediaAsset, Picture, SlideDescription, Title
from slidepack.utils.debug import MANIFEST_NAME, DebugDumper

PNG = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR' + struct.pack('>II', 8, 8) + b'\x08\x02\x00\x00\x00'


class MainTest(unittest.TestCase):
    """Deck file in, .pptx out."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        (self.root / "logo.png").write_bytes(PNG)

    def _write_deck(self, deck):
        path = self.root / "deck.json"
        path.write_text(json.dumps(deck), encoding="utf-8")
        return path

    def test_builds_archive_from_deck(self):
        deck = self._write_deck({
            "assets": {"logo": "logo.png"},
            "slides": [
                {"shapes": [{"type": "title", "text": "Hi"}, {"type": "picture", "asset": "logo"}]},
            ],
        })
        output = self.root / "out.pptx"

        status = main([str(deck), "-o", str(output), "--debug", str(self.root / "debug")])

        self.assertEqual(status, 0)
        with zipfile.ZipFile(output) as archive:
            self.assertIn("ppt/slides/slide1.xml", archive.namelist())
            self.assertIn("ppt/media/image1.png", archive.namelist())
        manifest = json.loads((self.root / "debug" / MANIFEST_NAME).read_text())
        self.assertIn("ppt/slides/slide1.xml", [part["name"] for part in manifest["parts"]])

    def test_default_output_next_to_deck(self):
        deck = self._write_deck({"slides": [{"shapes": []}]})

        self.assertEqual(main([str(deck)]), 0)
        self.assertTrue((self.root / "deck.pptx").exists())

    def test_package_error_exits_non_zero(self):
        deck = self._write_deck({"slides": [{"shapes": [{"type": "picture", "asset": "ghost"}]}]})
        output = self.root / "out.pptx"

        with self.assertLogs("slidepack.main", level="ERROR"):
            status = main([str(deck), "-o", str(output)])

        self.assertEqual(status, 1)
        self.assertFalse(output.exists())

    def test_missing_asset_file(self):
        with self.assertRaises(FileNotFoundError):
            load_assets({"logo": "missing.png"}, self.root)

    def test_assets_resolved_relative_to_base(self):
        assets = load_assets({"logo": "logo.png"}, self.root)

        self.assertEqual(assets["logo"].data, PNG)
        self.assertEqual(assets["logo"].extension, "png")

    def test_missing_deck_file(self):
        with self.assertRaises(FileNotFoundError):
            main([str(self.root / "nope.json")])

    def test_build_presentation_writes_file(self):
        output = self.root / "direct.pptx"
        package = build_presentation([SlideDescription.of(Title("x"))], {}, output)

        self.assertTrue(package.frozen)
        self.assertTrue(zipfile.is_zipfile(output))


class DebugDumperTest(unittest.TestCase):
    """Manifest describing an assembled package."""

    def test_manifest_contents(self):
        package = assemble_presentation(
            [SlideDescription.of(Picture("logo"))], {"logo": MediaAsset(PNG, "png")}
        )
        manifest = DebugDumper(Path(".")).manifest(package)

        self.assertIn({"extension": "png", "content_type": "image/png"}, manifest["defaults"])
        parts = {part["name"]: part["content_type"] for part in manifest["parts"]}
        self.assertEqual(parts["ppt/media/image1.png"], "image/png")
        self.assertIn("/", manifest["relationships"])
        slide_rels = manifest["relationships"]["ppt/slides/slide1.xml"]
        self.assertEqual(slide_rels[0]["target"], "ppt/media/image1.png")


if __name__ == '__main__':
    unittest.main()
