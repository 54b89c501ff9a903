"""Assemble a complete presentation package from slide descriptions."""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from slidepack.builder import scaffolding
from slidepack.builder.media import MediaLibrary
from slidepack.builder.slide_builder import MediaReference, SlideContentBuilder
from slidepack.model.elements import MediaAsset, SlideDescription, Title
from slidepack.model.options import PresentationOptions
from slidepack.opc.content_types import (
    CT_CORE_PROPERTIES,
    CT_EXTENDED_PROPERTIES,
    CT_PRES_PROPS,
    CT_PRESENTATION,
    CT_RELATIONSHIPS,
    CT_SLIDE,
    CT_SLIDE_LAYOUT,
    CT_SLIDE_MASTER,
    CT_TABLE_STYLES,
    CT_THEME,
    CT_VIEW_PROPS,
    CT_XML,
)
from slidepack.opc.package import Package
from slidepack.opc.relationships import (
    RELTYPE_CORE_PROPERTIES,
    RELTYPE_EXTENDED_PROPERTIES,
    RELTYPE_IMAGE,
    RELTYPE_OFFICE_DOCUMENT,
    RELTYPE_PRES_PROPS,
    RELTYPE_SLIDE,
    RELTYPE_SLIDE_LAYOUT,
    RELTYPE_SLIDE_MASTER,
    RELTYPE_TABLE_STYLES,
    RELTYPE_THEME,
    RELTYPE_VIEW_PROPS,
    RelationshipRegistry,
)
from slidepack.utils.logger import get_logger

LOGGER = get_logger(__name__)

CORE_PROPS_PART = "docProps/core.xml"
APP_PROPS_PART = "docProps/app.xml"
PRESENTATION_PART = "ppt/presentation.xml"
PRES_PROPS_PART = "ppt/presProps.xml"
VIEW_PROPS_PART = "ppt/viewProps.xml"
TABLE_STYLES_PART = "ppt/tableStyles.xml"
THEME_PART = "ppt/theme/theme1.xml"
SLIDE_MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
SLIDE_LAYOUT_PART = "ppt/slideLayouts/slideLayout1.xml"


def slide_part_name(position: int) -> str:
    """Part name of the slide at 1-based ``position`` in presentation order."""
    return f"ppt/slides/slide{position}.xml"


class PackageAssembler:
    """Builds the scaffolding, slides and media of one presentation.

    Every call to :meth:`assemble` works on a brand-new :class:`Package`, so
    an assembler can be reused for independent builds.
    """

    def __init__(self, options: Optional[PresentationOptions] = None) -> None:
        self._options = options or PresentationOptions()
        self._slide_builder = SlideContentBuilder(self._options)

    def assemble(
        self,
        slides: Sequence[SlideDescription],
        assets: Optional[Mapping[str, MediaAsset]] = None,
    ) -> Package:
        package = Package()
        package.content_types.register_default("rels", CT_RELATIONSHIPS)
        package.content_types.register_default("xml", CT_XML)
        media = MediaLibrary(package, assets or {})

        # Slide names are fixed by input position, so the presentation can
        # reference them before the slide parts exist.
        slide_names = [slide_part_name(position) for position in range(1, len(slides) + 1)]

        self._add_metadata(package, slides)
        self._add_presentation(package, slide_names)
        self._add_design(package)
        for name, slide in zip(slide_names, slides):
            self._add_slide(package, media, name, slide)

        LOGGER.info(
            "Assembled package with %d slides, %d media parts, %d parts total",
            len(slides),
            len(media.placed),
            len(package.parts),
        )
        return package.freeze()

    # ------------------------------------------------------------------
    def _add_metadata(self, package: Package, slides: Sequence[SlideDescription]) -> None:
        opts = self._options
        package.relate(RELTYPE_OFFICE_DOCUMENT, PRESENTATION_PART)
        package.relate(RELTYPE_CORE_PROPERTIES, CORE_PROPS_PART)
        package.relate(RELTYPE_EXTENDED_PROPERTIES, APP_PROPS_PART)

        title = opts.title or self._first_title(slides)
        package.add_part(
            CORE_PROPS_PART,
            scaffolding.core_properties_xml(title, opts.creator, opts.created_at()),
            CT_CORE_PROPERTIES,
        )
        slide_titles = [self._first_title([slide]) for slide in slides]
        package.add_part(APP_PROPS_PART, scaffolding.app_properties_xml(slide_titles, opts.theme_name), CT_EXTENDED_PROPERTIES)

    def _add_presentation(self, package: Package, slide_names: Sequence[str]) -> None:
        rels = RelationshipRegistry(PRESENTATION_PART)
        master_r_id = rels.add(RELTYPE_SLIDE_MASTER, SLIDE_MASTER_PART)
        slide_r_ids = [rels.add(RELTYPE_SLIDE, name) for name in slide_names]
        rels.add(RELTYPE_PRES_PROPS, PRES_PROPS_PART)
        rels.add(RELTYPE_VIEW_PROPS, VIEW_PROPS_PART)
        rels.add(RELTYPE_THEME, THEME_PART)
        rels.add(RELTYPE_TABLE_STYLES, TABLE_STYLES_PART)

        element = scaffolding.presentation_xml(
            master_r_id, slide_r_ids, self._options.slide_width, self._options.slide_height
        )
        package.add_part(PRESENTATION_PART, element, CT_PRESENTATION, rels)
        package.add_part(PRES_PROPS_PART, scaffolding.pres_props_xml(), CT_PRES_PROPS)
        package.add_part(VIEW_PROPS_PART, scaffolding.view_props_xml(), CT_VIEW_PROPS)
        package.add_part(TABLE_STYLES_PART, scaffolding.table_styles_xml(), CT_TABLE_STYLES)

    def _add_design(self, package: Package) -> None:
        package.add_part(THEME_PART, scaffolding.theme_xml(self._options.theme_name), CT_THEME)

        master_rels = RelationshipRegistry(SLIDE_MASTER_PART)
        layout_r_id = master_rels.add(RELTYPE_SLIDE_LAYOUT, SLIDE_LAYOUT_PART)
        master_rels.add(RELTYPE_THEME, THEME_PART)
        package.add_part(SLIDE_MASTER_PART, scaffolding.slide_master_xml(layout_r_id), CT_SLIDE_MASTER, master_rels)

        layout_rels = RelationshipRegistry(SLIDE_LAYOUT_PART)
        layout_rels.add(RELTYPE_SLIDE_MASTER, SLIDE_MASTER_PART)
        package.add_part(SLIDE_LAYOUT_PART, scaffolding.slide_layout_xml(), CT_SLIDE_LAYOUT, layout_rels)

    def _add_slide(self, package: Package, media: MediaLibrary, name: str, slide: SlideDescription) -> None:
        keys = slide.asset_keys()
        # Fail before touching the package if any asset is missing
        for key in keys:
            media.require(key)

        rels = RelationshipRegistry(name)
        if self._options.link_slide_layout:
            rels.add(RELTYPE_SLIDE_LAYOUT, SLIDE_LAYOUT_PART)

        references: Dict[str, MediaReference] = {}
        for key in keys:
            placed = media.ensure(key)
            r_id = rels.get_or_add(RELTYPE_IMAGE, placed.part_name)
            references[key] = MediaReference(r_id=r_id, pixel_size=placed.pixel_size)

        built = self._slide_builder.build(slide, references)
        package.add_part(name, built.element, CT_SLIDE, rels)

    @staticmethod
    def _first_title(slides: Sequence[SlideDescription]) -> str:
        for slide in slides:
            for shape in slide.shapes:
                if isinstance(shape, Title):
                    return shape.text
        return ""


def assemble_presentation(
    slides: Sequence[SlideDescription],
    assets: Optional[Mapping[str, MediaAsset]] = None,
    options: Optional[PresentationOptions] = None,
) -> Package:
    """Convenience wrapper around :class:`PackageAssembler`."""
    return PackageAssembler(options).assemble(slides, assets)