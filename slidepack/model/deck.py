"""Convert a JSON-style deck description into slide model objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from slidepack.model.elements import (
    TITLE_STYLE_HEADING,
    Background,
    BulletList,
    Geometry,
    Picture,
    Shape,
    SlideDescription,
    Timing,
    TimingStep,
    Title,
)
from slidepack.model.options import PresentationOptions


@dataclass(slots=True)
class DeckDescription:
    """Slides, options and asset locations parsed from a deck file."""

    slides: List[SlideDescription]
    options: PresentationOptions
    asset_paths: Dict[str, str] = field(default_factory=dict)


def _geometry(raw: Optional[Mapping[str, Any]]) -> Optional[Geometry]:
    if raw is None:
        return None
    return Geometry(x=int(raw["x"]), y=int(raw["y"]), cx=int(raw["cx"]), cy=int(raw["cy"]))


def _background(raw: Mapping[str, Any]) -> Shape:
    return Background(asset=raw["asset"])


def _title(raw: Mapping[str, Any]) -> Shape:
    return Title(text=str(raw.get("text", "")), style=raw.get("style", TITLE_STYLE_HEADING))


def _bullets(raw: Mapping[str, Any]) -> Shape:
    return BulletList(
        items=tuple(str(item) for item in raw.get("items", ())),
        geometry=_geometry(raw.get("geometry")),
        animate=bool(raw.get("animate", True)),
    )


def _picture(raw: Mapping[str, Any]) -> Shape:
    return Picture(asset=raw["asset"], geometry=_geometry(raw.get("geometry")), name=raw.get("name"))


def _timing(raw: Mapping[str, Any]) -> Shape:
    steps = [TimingStep(shape_id=int(step["shape_id"]), paragraphs=tuple(step["paragraphs"])) for step in raw.get("steps", ())]
    return Timing(steps=tuple(steps))


SHAPE_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Shape]] = {
    "background": _background,
    "title": _title,
    "bullets": _bullets,
    "picture": _picture,
    "timing": _timing,
}


def parse_shape(raw: Mapping[str, Any]) -> Shape:
    shape_type = raw.get("type")
    parser = SHAPE_PARSERS.get(shape_type)  # type: ignore[arg-type]
    if parser is None:
        raise ValueError(f"Unknown shape type {shape_type!r}; expected one of {sorted(SHAPE_PARSERS)}")
    try:
        return parser(raw)
    except KeyError as exc:
        raise ValueError(f"Shape {shape_type!r} is missing field {exc.args[0]!r}") from exc


def parse_deck(payload: Mapping[str, Any]) -> DeckDescription:
    """Build a :class:`DeckDescription` from decoded deck JSON."""
    options = PresentationOptions.from_mapping(payload.get("options", {}))
    slides = [
        SlideDescription(shapes=tuple(parse_shape(shape) for shape in slide.get("shapes", ())))
        for slide in payload.get("slides", ())
    ]
    asset_paths = {str(key): str(path) for key, path in payload.get("assets", {}).items()}
    return DeckDescription(slides=slides, options=options, asset_paths=asset_paths)
