"""Tests for slide XML generation."""
import unittest

from slidepack.builder.slide_builder import MediaReference, SlideContentBuilder
from slidepack.model.elements import (
    Background,
    BulletList,
    Geometry,
    Picture,
    SlideDescription,
    Timing,
    TimingStep,
    Title,
)
from slidepack.model.options import PresentationOptions
from slidepack.opc.errors import MissingAsset
from slidepack.utils.xml_utils import Namespaces, qn

NS = Namespaces.PRESENTATION


class SlideContentBuilderTest(unittest.TestCase):
    """Shape ids, shape markup and reveal steps of a single slide."""

    def setUp(self):
        self.options = PresentationOptions()
        self.builder = SlideContentBuilder(self.options)
        self.media = {
            "bg": MediaReference(r_id="rId1", pixel_size=(1920, 1080)),
            "chart": MediaReference(r_id="rId2", pixel_size=(200, 100)),
            "unsized": MediaReference(r_id="rId3"),
        }

    def _shape_ids(self, element):
        sp_tree = element.find("p:cSld/p:spTree", NS)
        return [int(el.get("id")) for el in sp_tree.iter(qn("p:cNvPr"))]

    def test_empty_slide(self):
        built = self.builder.build(SlideDescription(), {})

        self.assertEqual(built.element.tag, qn("p:sld"))
        self.assertEqual(self._shape_ids(built.element), [1])
        self.assertIsNone(built.element.find("p:timing", NS))
        self.assertFalse(built.has_timing)

    def test_shape_ids_start_at_two(self):
        slide = SlideDescription.of(
            Background("bg"),
            Title("Agenda"),
            BulletList(("one", "two")),
            Picture("chart"),
        )
        built = self.builder.build(slide, self.media)

        self.assertEqual(built.shape_ids, [2, 3, 4])
        self.assertEqual(self._shape_ids(built.element), [1, 2, 3, 4])

    def test_background_fill_references_media(self):
        built = self.builder.build(SlideDescription.of(Background("bg")), self.media)

        blip = built.element.find("p:cSld/p:bg/p:bgPr/a:blipFill/a:blip", NS)
        self.assertEqual(blip.get(qn("r:embed")), "rId1")
        # The background must come before the shape tree
        self.assertEqual([child.tag for child in built.element.find("p:cSld", NS)], [qn("p:bg"), qn("p:spTree")])

    def test_two_backgrounds_rejected(self):
        with self.assertRaises(ValueError):
            self.builder.build(SlideDescription.of(Background("bg"), Background("bg")), self.media)

    def test_title_styles(self):
        built = self.builder.build(SlideDescription.of(Title("Cover", style="center"), Title("Heading")), self.media)

        placeholders = [ph.get("type") for ph in built.element.iter(qn("p:ph"))]
        self.assertEqual(placeholders, ["ctrTitle", "title"])
        texts = [t.text for t in built.element.iter(qn("a:t"))]
        self.assertEqual(texts, ["Cover", "Heading"])

    def test_bullets_reveal_one_paragraph_per_step(self):
        built = self.builder.build(SlideDescription.of(Title("T"), BulletList(("a", "b", "c"))), self.media)

        self.assertEqual([(s.shape_id, s.paragraphs) for s in built.timing_steps], [(3, (0, 0)), (3, (1, 1)), (3, (2, 2))])
        self.assertIsNotNone(built.element.find("p:timing", NS))
        self.assertEqual(built.element[-1].tag, qn("p:timing"))

    def test_bullet_markup(self):
        built = self.builder.build(SlideDescription.of(BulletList(("first", "second"), animate=False)), self.media)

        paragraphs = built.element.findall(".//p:sp/p:txBody/a:p", NS)
        self.assertEqual(len(paragraphs), 2)
        bullet = paragraphs[0].find("a:pPr/a:buChar", NS)
        self.assertEqual(bullet.get("char"), self.options.bullet_char)
        self.assertFalse(built.has_timing)

    def test_empty_bullet_list_keeps_one_paragraph(self):
        built = self.builder.build(SlideDescription.of(BulletList(())), self.media)

        paragraphs = built.element.findall(".//p:sp/p:txBody/a:p", NS)
        self.assertEqual(len(paragraphs), 1)
        self.assertFalse(built.has_timing)

    def test_picture_with_explicit_geometry(self):
        geometry = Geometry(x=10, y=20, cx=300, cy=400)
        built = self.builder.build(SlideDescription.of(Picture("chart", geometry=geometry, name="Chart")), self.media)

        pic = built.element.find("p:cSld/p:spTree/p:pic", NS)
        self.assertEqual(pic.find("p:nvPicPr/p:cNvPr", NS).get("name"), "Chart")
        self.assertEqual(pic.find("p:blipFill/a:blip", NS).get(qn("r:embed")), "rId2")
        ext = pic.find("p:spPr/a:xfrm/a:ext", NS)
        self.assertEqual((ext.get("cx"), ext.get("cy")), ("300", "400"))

    def test_picture_fitted_into_body_area(self):
        built = self.builder.build(SlideDescription.of(Picture("chart")), self.media)

        body = self.options.body_geometry
        off = built.element.find(".//p:pic/p:spPr/a:xfrm/a:off", NS)
        ext = built.element.find(".//p:pic/p:spPr/a:xfrm/a:ext", NS)
        cx, cy = int(ext.get("cx")), int(ext.get("cy"))
        # 200x100 px at 96 dpi fits without scaling
        self.assertEqual((cx, cy), (1905000, 952500))
        self.assertEqual(int(off.get("x")), body.x + (body.cx - cx) // 2)
        self.assertEqual(int(off.get("y")), body.y + (body.cy - cy) // 2)

    def test_picture_without_size_fills_body_area(self):
        built = self.builder.build(SlideDescription.of(Picture("unsized")), self.media)

        ext = built.element.find(".//p:pic/p:spPr/a:xfrm/a:ext", NS)
        body = self.options.body_geometry
        self.assertEqual((int(ext.get("cx")), int(ext.get("cy"))), (body.cx, body.cy))

    def test_explicit_timing_keeps_shape_order(self):
        slide = SlideDescription.of(
            Timing((TimingStep(2, (0, 0)),)),
            Title("T"),
            BulletList(("a", "b")),
        )
        built = self.builder.build(slide, self.media)

        self.assertEqual([(s.shape_id, s.paragraphs) for s in built.timing_steps], [(2, (0, 0)), (3, (0, 0)), (3, (1, 1))])

    def test_explicit_timing_between_shapes(self):
        slide = SlideDescription.of(
            Title("T"),
            Timing((TimingStep(2, (0, 0)),)),
            BulletList(("a", "b")),
        )
        built = self.builder.build(slide, self.media)

        self.assertEqual([(s.shape_id, s.paragraphs) for s in built.timing_steps], [(2, (0, 0)), (3, (0, 0)), (3, (1, 1))])

    def test_explicit_timing_after_bullets(self):
        slide = SlideDescription.of(
            Title("T"),
            BulletList(("a", "b")),
            Timing((TimingStep(2, (0, 0)),)),
        )
        built = self.builder.build(slide, self.media)

        self.assertEqual([(s.shape_id, s.paragraphs) for s in built.timing_steps], [(3, (0, 0)), (3, (1, 1)), (2, (0, 0))])

    def test_explicit_timing_validated(self):
        with self.assertRaises(ValueError):
            self.builder.build(SlideDescription.of(BulletList(("a",)), Timing((TimingStep(9, (0, 0)),))), self.media)
        with self.assertRaises(ValueError):
            self.builder.build(SlideDescription.of(BulletList(("a",)), Timing((TimingStep(2, (0, 1)),))), self.media)
        with self.assertRaises(ValueError):
            self.builder.build(SlideDescription.of(Picture("chart"), Timing((TimingStep(2, (0, 0)),))), self.media)

    def test_missing_media_reference(self):
        with self.assertRaises(MissingAsset):
            self.builder.build(SlideDescription.of(Picture("ghost")), self.media)

    def test_text_is_normalized(self):
        built = self.builder.build(SlideDescription.of(Title("  Q3\x00  results\u200b ")), self.media)

        self.assertEqual([t.text for t in built.element.iter(qn("a:t"))], ["Q3 results"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
