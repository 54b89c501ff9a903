"""Tests for part-name arithmetic."""
import unittest

from slidepack.utils.paths import (
    extension_of,
    is_rels_part,
    normalize_part_name,
    relative_target,
    rels_part_name,
    resolve_target,
    source_from_rels_part,
)


class PartNameTest(unittest.TestCase):
    """Normalization and relationship-part naming."""

    def test_normalize_accepts_leading_slash(self):
        self.assertEqual(normalize_part_name("/ppt/presentation.xml"), "ppt/presentation.xml")
        self.assertEqual(normalize_part_name("ppt/presentation.xml"), "ppt/presentation.xml")

    def test_normalize_rejects_escaping_names(self):
        for name in ("", "/", "//ppt/a.xml", "ppt/./a.xml", "ppt/../../a.xml", "a\\b.xml", "ppt/"):
            with self.assertRaises(ValueError, msg=name):
                normalize_part_name(name)

    def test_rels_part_name_round_trip(self):
        test_cases = [
            ("", "_rels/.rels"),
            ("ppt/presentation.xml", "ppt/_rels/presentation.xml.rels"),
            ("ppt/slides/slide3.xml", "ppt/slides/_rels/slide3.xml.rels"),
            ("root.xml", "_rels/root.xml.rels"),
        ]
        for source, expected in test_cases:
            self.assertEqual(rels_part_name(source), expected)
            self.assertEqual(source_from_rels_part(expected), source)

    def test_is_rels_part(self):
        self.assertTrue(is_rels_part("_rels/.rels"))
        self.assertTrue(is_rels_part("ppt/slides/_rels/slide1.xml.rels"))
        self.assertFalse(is_rels_part("ppt/slides/slide1.xml"))
        self.assertFalse(is_rels_part("ppt/media/notes.rels"))


class TargetTest(unittest.TestCase):
    """Relative targets written into .rels files and their resolution."""

    def test_relative_target(self):
        test_cases = [
            ("", "ppt/presentation.xml", "ppt/presentation.xml"),
            ("ppt/presentation.xml", "ppt/slides/slide1.xml", "slides/slide1.xml"),
            ("ppt/slides/slide1.xml", "ppt/media/image1.png", "../media/image1.png"),
            ("ppt/slideMasters/slideMaster1.xml", "ppt/theme/theme1.xml", "../theme/theme1.xml"),
        ]
        for source, target, expected in test_cases:
            self.assertEqual(relative_target(source, target), expected)
            self.assertEqual(resolve_target(source, expected), target)

    def test_resolve_absolute_target(self):
        self.assertEqual(resolve_target("ppt/slides/slide1.xml", "/ppt/media/image1.png"), "ppt/media/image1.png")

    def test_extension_of(self):
        self.assertEqual(extension_of("ppt/media/image1.PNG"), "png")
        self.assertEqual(extension_of("ppt/slides/slide1.xml"), "xml")
        self.assertEqual(extension_of("_rels/.rels"), "rels")
        self.assertEqual(extension_of("ppt.dir/noext"), "")


if __name__ == '__main__':
    unittest.main()
