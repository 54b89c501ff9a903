"""Fixed structural parts every presentation needs regardless of its slides."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence
from xml.etree import ElementTree as ET

from slidepack.utils.text_normalizer import normalize_slide_text
from slidepack.utils.xml_utils import Namespaces, make_element, parse_xml, sub_element

NS_A = Namespaces.PRESENTATION["a"]
NS_R = Namespaces.PRESENTATION["r"]
NS_P = Namespaces.PRESENTATION["p"]

FIRST_SLIDE_ID = 256
SLIDE_MASTER_ID = 2147483648
SLIDE_LAYOUT_ID = 2147483649
NOTES_WIDTH_EMU = 6858000
NOTES_HEIGHT_EMU = 9144000

_EMPTY_SHAPE_TREE = """
    <p:spTree>
      <p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>
      <p:grpSpPr>
        <a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/><a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm>
      </p:grpSpPr>
    </p:spTree>"""

_SLIDE_MASTER = f"""
<p:sldMaster xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}">
  <p:cSld>
    <p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>{_EMPTY_SHAPE_TREE}
  </p:cSld>
  <p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6" hlink="hlink" folHlink="folHlink"/>
  <p:txStyles>
    <p:titleStyle>
      <a:lvl1pPr algn="l"><a:defRPr sz="4000"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill><a:latin typeface="+mj-lt"/></a:defRPr></a:lvl1pPr>
    </p:titleStyle>
    <p:bodyStyle>
      <a:lvl1pPr marL="342900" indent="-342900"><a:buFont typeface="Arial"/><a:buChar char="&#8226;"/><a:defRPr sz="2400"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill><a:latin typeface="+mn-lt"/></a:defRPr></a:lvl1pPr>
    </p:bodyStyle>
    <p:otherStyle>
      <a:lvl1pPr marL="0"><a:defRPr sz="1800"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill></a:defRPr></a:lvl1pPr>
    </p:otherStyle>
  </p:txStyles>
</p:sldMaster>
"""

_SLIDE_LAYOUT = f"""
<p:sldLayout xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}" type="blank" preserve="1">
  <p:cSld name="Blank">{_EMPTY_SHAPE_TREE}
  </p:cSld>
  <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
</p:sldLayout>
"""

_THEME = f"""
<a:theme xmlns:a="{NS_A}" name="Office Theme">
  <a:themeElements>
    <a:clrScheme name="Office">
      <a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>
      <a:lt1><a:sysClr val="window" lastClr="FFFFFF"/></a:lt1>
      <a:dk2><a:srgbClr val="44546A"/></a:dk2>
      <a:lt2><a:srgbClr val="E7E6E6"/></a:lt2>
      <a:accent1><a:srgbClr val="4472C4"/></a:accent1>
      <a:accent2><a:srgbClr val="ED7D31"/></a:accent2>
      <a:accent3><a:srgbClr val="A5A5A5"/></a:accent3>
      <a:accent4><a:srgbClr val="FFC000"/></a:accent4>
      <a:accent5><a:srgbClr val="5B9BD5"/></a:accent5>
      <a:accent6><a:srgbClr val="70AD47"/></a:accent6>
      <a:hlink><a:srgbClr val="0563C1"/></a:hlink>
      <a:folHlink><a:srgbClr val="954F72"/></a:folHlink>
    </a:clrScheme>
    <a:fontScheme name="Office">
      <a:majorFont><a:latin typeface="Calibri Light"/><a:ea typeface=""/><a:cs typeface=""/></a:majorFont>
      <a:minorFont><a:latin typeface="Calibri"/><a:ea typeface=""/><a:cs typeface=""/></a:minorFont>
    </a:fontScheme>
    <a:fmtScheme name="Office">
      <a:fillStyleLst>
        <a:solidFill><a:schemeClr val="phClr"/></a:solidFill>
        <a:solidFill><a:schemeClr val="phClr"><a:tint val="50000"/></a:schemeClr></a:solidFill>
        <a:solidFill><a:schemeClr val="phClr"><a:shade val="80000"/></a:schemeClr></a:solidFill>
      </a:fillStyleLst>
      <a:lnStyleLst>
        <a:ln w="6350" cap="flat" cmpd="sng" algn="ctr"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill><a:prstDash val="solid"/><a:miter lim="800000"/></a:ln>
        <a:ln w="12700" cap="flat" cmpd="sng" algn="ctr"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill><a:prstDash val="solid"/><a:miter lim="800000"/></a:ln>
        <a:ln w="19050" cap="flat" cmpd="sng" algn="ctr"><a:solidFill><a:schemeClr val="phClr"/></a:solidFill><a:prstDash val="solid"/><a:miter lim="800000"/></a:ln>
      </a:lnStyleLst>
      <a:effectStyleLst>
        <a:effectStyle><a:effectLst/></a:effectStyle>
        <a:effectStyle><a:effectLst/></a:effectStyle>
        <a:effectStyle><a:effectLst/></a:effectStyle>
      </a:effectStyleLst>
      <a:bgFillStyleLst>
        <a:solidFill><a:schemeClr val="phClr"/></a:solidFill>
        <a:solidFill><a:schemeClr val="phClr"><a:tint val="95000"/></a:schemeClr></a:solidFill>
        <a:solidFill><a:schemeClr val="phClr"><a:shade val="90000"/></a:schemeClr></a:solidFill>
      </a:bgFillStyleLst>
    </a:fmtScheme>
  </a:themeElements>
  <a:objectDefaults/>
  <a:extraClrSchemeLst/>
</a:theme>
"""


def _from_template(template: str) -> ET.Element:
    return parse_xml(template.strip().encode("utf-8")).getroot()


def slide_master_xml(layout_r_id: str) -> ET.Element:
    """Master with a single layout entry pointing at ``layout_r_id``."""
    master = _from_template(_SLIDE_MASTER)
    layout_ids = make_element("p:sldLayoutIdLst")
    sub_element(layout_ids, "p:sldLayoutId", id=str(SLIDE_LAYOUT_ID), r_id=layout_r_id)
    # sldLayoutIdLst follows clrMap in the master schema
    clr_map = master.find("p:clrMap", Namespaces.PRESENTATION)
    master.insert(list(master).index(clr_map) + 1, layout_ids)
    return master


def slide_layout_xml() -> ET.Element:
    return _from_template(_SLIDE_LAYOUT)


def theme_xml(name: str) -> ET.Element:
    theme = _from_template(_THEME)
    theme.set("name", normalize_slide_text(name) or "Office Theme")
    return theme


def presentation_xml(
    master_r_id: str,
    slide_r_ids: Sequence[str],
    slide_width: int,
    slide_height: int,
) -> ET.Element:
    """Main document part; ``p:sldIdLst`` follows ``slide_r_ids`` order exactly."""
    presentation = make_element("p:presentation", saveSubsetFonts="1")
    masters = sub_element(presentation, "p:sldMasterIdLst")
    sub_element(masters, "p:sldMasterId", id=str(SLIDE_MASTER_ID), r_id=master_r_id)
    if slide_r_ids:
        slide_list = sub_element(presentation, "p:sldIdLst")
        for offset, r_id in enumerate(slide_r_ids):
            sub_element(slide_list, "p:sldId", id=str(FIRST_SLIDE_ID + offset), r_id=r_id)
    sub_element(presentation, "p:sldSz", cx=str(slide_width), cy=str(slide_height))
    sub_element(presentation, "p:notesSz", cx=str(NOTES_WIDTH_EMU), cy=str(NOTES_HEIGHT_EMU))
    text_style = sub_element(presentation, "p:defaultTextStyle")
    sub_element(text_style, "a:defPPr")
    return presentation


def pres_props_xml() -> ET.Element:
    return make_element("p:presentationPr")


def view_props_xml() -> ET.Element:
    view = make_element("p:viewPr")
    normal = sub_element(view, "p:normalViewPr")
    sub_element(normal, "p:restoredLeft", sz="15620")
    sub_element(normal, "p:restoredTop", sz="94660")
    sub_element(view, "p:gridSpacing", cx="72008", cy="72008")
    return view


def table_styles_xml() -> ET.Element:
    return make_element("a:tblStyleLst", **{"def": "{5C22544A-7EE6-4342-B048-85BDC9FD1C3A}"})


def w3cdtf(moment: datetime) -> str:
    """Format a timestamp the way ``dcterms:W3CDTF`` expects (UTC, second precision)."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def core_properties_xml(title: str, creator: str, created: datetime) -> ET.Element:
    core = make_element("cp:coreProperties")
    sub_element(core, "dc:title").text = normalize_slide_text(title)
    sub_element(core, "dc:creator").text = normalize_slide_text(creator)
    sub_element(core, "cp:lastModifiedBy").text = normalize_slide_text(creator)
    sub_element(core, "cp:revision").text = "1"
    stamp = w3cdtf(created)
    sub_element(core, "dcterms:created", xsi_type="dcterms:W3CDTF").text = stamp
    sub_element(core, "dcterms:modified", xsi_type="dcterms:W3CDTF").text = stamp
    return core


def app_properties_xml(slide_titles: Sequence[str], theme_name: str) -> ET.Element:
    """Extended properties: application name, slide count and the parts list."""
    props = ET.Element("Properties", xmlns=Namespaces.PROPERTIES["ep"])
    ET.SubElement(props, "Application").text = "slidepack"
    ET.SubElement(props, "Slides").text = str(len(slide_titles))
    ET.SubElement(props, "Notes").text = "0"
    ET.SubElement(props, "HiddenSlides").text = "0"

    heading_pairs = sub_element(ET.SubElement(props, "HeadingPairs"), "vt:vector", size="4", baseType="variant")
    for label, count in (("Theme", 1), ("Slide Titles", len(slide_titles))):
        sub_element(sub_element(heading_pairs, "vt:variant"), "vt:lpstr").text = label
        sub_element(sub_element(heading_pairs, "vt:variant"), "vt:i4").text = str(count)

    names = [normalize_slide_text(theme_name)] + [normalize_slide_text(title) for title in slide_titles]
    titles = sub_element(ET.SubElement(props, "TitlesOfParts"), "vt:vector", size=str(len(names)), baseType="lpstr")
    for name in names:
        sub_element(titles, "vt:lpstr").text = name
    ET.SubElement(props, "AppVersion").text = "16.0000"
    return props
