"""Build the PresentationML payload of a single slide."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple
from xml.etree import ElementTree as ET

from slidepack.builder.timing_builder import TimingBuilder
from slidepack.model.elements import (
    TITLE_STYLE_CENTER,
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
from slidepack.utils.logger import get_logger
from slidepack.utils.text_normalizer import normalize_slide_text
from slidepack.utils.units import pixels_to_emu, points_to_font_size
from slidepack.utils.xml_utils import make_element, sub_element

LOGGER = get_logger(__name__)

ROOT_SHAPE_ID = 1
FIRST_SHAPE_ID = 2


@dataclass(frozen=True)
class MediaReference:
    """Relationship id already allocated for an asset, plus its pixel size if known."""

    r_id: str
    pixel_size: Optional[Tuple[int, int]] = None


@dataclass(slots=True)
class BuiltSlide:
    """Slide XML together with the ids and reveal steps it ended up with."""

    element: ET.Element
    shape_ids: List[int] = field(default_factory=list)
    timing_steps: List[TimingStep] = field(default_factory=list)

    @property
    def has_timing(self) -> bool:
        return bool(self.timing_steps)


class _SlideContext:
    """Per-slide counters and bookkeeping; never shared between slides."""

    def __init__(self) -> None:
        self.next_shape_id = FIRST_SHAPE_ID
        self.shape_ids: List[int] = []
        self.paragraph_counts: Dict[int, int] = {}
        self.steps: List[TimingStep] = []

    def allocate_shape_id(self) -> int:
        shape_id = self.next_shape_id
        self.next_shape_id += 1
        self.shape_ids.append(shape_id)
        return shape_id


class SlideContentBuilder:
    """Render a :class:`SlideDescription` into a ``p:sld`` element tree."""

    def __init__(self, options: Optional[PresentationOptions] = None) -> None:
        self._options = options or PresentationOptions()
        self._timing = TimingBuilder(self._options.reveal_duration_ms)

    def build(self, slide: SlideDescription, media: Mapping[str, MediaReference]) -> BuiltSlide:
        ctx = _SlideContext()
        sld = make_element("p:sld")
        c_sld = sub_element(sld, "p:cSld")

        backgrounds = [shape for shape in slide.shapes if isinstance(shape, Background)]
        if len(backgrounds) > 1:
            raise ValueError("A slide can carry at most one background")
        if backgrounds:
            self._background(c_sld, self._media(media, backgrounds[0].asset))

        sp_tree = self._shape_tree(c_sld)
        explicit_steps: List[TimingStep] = []
        for shape in slide.shapes:
            if isinstance(shape, Title):
                self._title(sp_tree, ctx, shape)
            elif isinstance(shape, BulletList):
                self._bullets(sp_tree, ctx, shape)
            elif isinstance(shape, Picture):
                self._picture(sp_tree, ctx, shape, self._media(media, shape.asset))
            elif isinstance(shape, Timing):
                ctx.steps.extend(shape.steps)
                explicit_steps.extend(shape.steps)
            elif not isinstance(shape, Background):
                raise TypeError(f"Unsupported shape: {shape!r}")

        # Explicit steps may point at shapes declared after them
        for step in explicit_steps:
            self._check_step(ctx, step)

        clr_map = sub_element(sld, "p:clrMapOvr")
        sub_element(clr_map, "a:masterClrMapping")

        timing = self._timing.build(ctx.steps)
        if timing is not None:
            sld.append(timing)

        LOGGER.debug("Built slide with shapes %s and %d timing steps", ctx.shape_ids, len(ctx.steps))
        return BuiltSlide(element=sld, shape_ids=list(ctx.shape_ids), timing_steps=list(ctx.steps))

    # ------------------------------------------------------------------
    # Shapes
    def _background(self, c_sld: ET.Element, ref: MediaReference) -> None:
        bg_pr = sub_element(sub_element(c_sld, "p:bg"), "p:bgPr")
        blip_fill = sub_element(bg_pr, "a:blipFill", dpi="0", rotWithShape="1")
        sub_element(blip_fill, "a:blip", r_embed=ref.r_id)
        sub_element(blip_fill, "a:srcRect")
        sub_element(sub_element(blip_fill, "a:stretch"), "a:fillRect")
        sub_element(bg_pr, "a:effectLst")

    def _shape_tree(self, c_sld: ET.Element) -> ET.Element:
        sp_tree = sub_element(c_sld, "p:spTree")
        nv_grp = sub_element(sp_tree, "p:nvGrpSpPr")
        sub_element(nv_grp, "p:cNvPr", id=str(ROOT_SHAPE_ID), name="")
        sub_element(nv_grp, "p:cNvGrpSpPr")
        sub_element(nv_grp, "p:nvPr")
        xfrm = sub_element(sub_element(sp_tree, "p:grpSpPr"), "a:xfrm")
        for tag, attrs in (("a:off", {"x": "0", "y": "0"}), ("a:ext", {"cx": "0", "cy": "0"}),
                           ("a:chOff", {"x": "0", "y": "0"}), ("a:chExt", {"cx": "0", "cy": "0"})):
            sub_element(xfrm, tag, **attrs)
        return sp_tree

    def _title(self, sp_tree: ET.Element, ctx: _SlideContext, title: Title) -> None:
        shape_id = ctx.allocate_shape_id()
        centered = title.style == TITLE_STYLE_CENTER
        opts = self._options
        geometry = opts.center_title_geometry if centered else opts.title_geometry

        sp = sub_element(sp_tree, "p:sp")
        nv_sp = sub_element(sp, "p:nvSpPr")
        sub_element(nv_sp, "p:cNvPr", id=str(shape_id), name=f"Title {shape_id}")
        sub_element(sub_element(nv_sp, "p:cNvSpPr"), "a:spLocks", noGrp="1")
        sub_element(sub_element(nv_sp, "p:nvPr"), "p:ph", type="ctrTitle" if centered else "title")
        self._sp_pr(sp, geometry)

        tx_body = self._text_body(sp, anchor="ctr" if centered else "b")
        size = opts.center_title_size_pt if centered else opts.title_size_pt
        paragraph = sub_element(tx_body, "a:p")
        if centered:
            sub_element(paragraph, "a:pPr", algn="ctr")
        self._run(paragraph, title.text, opts.title_font, size)
        ctx.paragraph_counts[shape_id] = 1

    def _bullets(self, sp_tree: ET.Element, ctx: _SlideContext, bullets: BulletList) -> None:
        shape_id = ctx.allocate_shape_id()
        opts = self._options

        sp = sub_element(sp_tree, "p:sp")
        nv_sp = sub_element(sp, "p:nvSpPr")
        sub_element(nv_sp, "p:cNvPr", id=str(shape_id), name=f"Content {shape_id}")
        sub_element(nv_sp, "p:cNvSpPr", txBox="1")
        sub_element(nv_sp, "p:nvPr")
        self._sp_pr(sp, bullets.geometry or opts.body_geometry)

        tx_body = self._text_body(sp, anchor="t")
        for item in bullets.items:
            paragraph = sub_element(tx_body, "a:p")
            p_pr = sub_element(paragraph, "a:pPr", marL=str(opts.bullet_indent_emu), indent=str(-opts.bullet_indent_emu))
            sub_element(p_pr, "a:buFont", typeface="Arial")
            sub_element(p_pr, "a:buChar", char=opts.bullet_char)
            self._run(paragraph, item, opts.body_font, opts.body_size_pt)
        if not bullets.items:
            empty = sub_element(tx_body, "a:p")
            sub_element(empty, "a:endParaRPr", lang="en-US", sz=str(points_to_font_size(opts.body_size_pt)))

        ctx.paragraph_counts[shape_id] = len(bullets.items)
        if bullets.animate:
            ctx.steps.extend(TimingStep(shape_id=shape_id, paragraphs=(index, index)) for index in range(len(bullets.items)))

    def _picture(self, sp_tree: ET.Element, ctx: _SlideContext, picture: Picture, ref: MediaReference) -> None:
        shape_id = ctx.allocate_shape_id()
        geometry = picture.geometry or self._fit_picture(ref.pixel_size)

        pic = sub_element(sp_tree, "p:pic")
        nv_pic = sub_element(pic, "p:nvPicPr")
        sub_element(nv_pic, "p:cNvPr", id=str(shape_id), name=picture.name or f"Picture {shape_id}")
        sub_element(sub_element(nv_pic, "p:cNvPicPr"), "a:picLocks", noChangeAspect="1")
        sub_element(nv_pic, "p:nvPr")

        blip_fill = sub_element(pic, "p:blipFill")
        sub_element(blip_fill, "a:blip", r_embed=ref.r_id)
        sub_element(sub_element(blip_fill, "a:stretch"), "a:fillRect")
        sp_pr = self._sp_pr(pic, geometry)
        sub_element(sub_element(sp_pr, "a:prstGeom", prst="rect"), "a:avLst")

    # ------------------------------------------------------------------
    # Helpers
    @staticmethod
    def _media(media: Mapping[str, MediaReference], key: str) -> MediaReference:
        ref = media.get(key)
        if ref is None:
            raise MissingAsset(key)
        return ref

    @staticmethod
    def _sp_pr(parent: ET.Element, geometry: Geometry) -> ET.Element:
        sp_pr = sub_element(parent, "p:spPr")
        xfrm = sub_element(sp_pr, "a:xfrm")
        sub_element(xfrm, "a:off", x=str(geometry.x), y=str(geometry.y))
        sub_element(xfrm, "a:ext", cx=str(geometry.cx), cy=str(geometry.cy))
        return sp_pr

    @staticmethod
    def _text_body(sp: ET.Element, anchor: str) -> ET.Element:
        tx_body = sub_element(sp, "p:txBody")
        sub_element(tx_body, "a:bodyPr", wrap="square", anchor=anchor)
        sub_element(tx_body, "a:lstStyle")
        return tx_body

    @staticmethod
    def _run(paragraph: ET.Element, text: str, font: str, size_pt: float) -> None:
        run = sub_element(paragraph, "a:r")
        r_pr = sub_element(run, "a:rPr", lang="en-US", sz=str(points_to_font_size(size_pt)), dirty="0")
        sub_element(r_pr, "a:latin", typeface=font)
        sub_element(run, "a:t").text = normalize_slide_text(text)

    def _fit_picture(self, pixel_size: Optional[Tuple[int, int]]) -> Geometry:
        """Fit the image's natural size into the body area, centered."""
        area = self._options.body_geometry
        if not pixel_size or not all(pixel_size):
            return area
        width, height = (pixels_to_emu(value) for value in pixel_size)
        scale = min(1.0, area.cx / width, area.cy / height)
        cx, cy = int(width * scale), int(height * scale)
        return Geometry(x=area.x + (area.cx - cx) // 2, y=area.y + (area.cy - cy) // 2, cx=cx, cy=cy)

    @staticmethod
    def _check_step(ctx: _SlideContext, step: TimingStep) -> None:
        count = ctx.paragraph_counts.get(step.shape_id)
        if count is None:
            raise ValueError(f"Timing step targets shape {step.shape_id}, which has no text on this slide")
        if step.paragraphs[1] >= count:
            raise ValueError(
                f"Timing step range {step.paragraphs} exceeds the {count} paragraph(s) of shape {step.shape_id}"
            )
