"""Declarative description of slide content handed to the assembler."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

TITLE_STYLE_HEADING = "title"
TITLE_STYLE_CENTER = "center"
TITLE_STYLES = (TITLE_STYLE_HEADING, TITLE_STYLE_CENTER)


@dataclass(frozen=True, slots=True)
class Geometry:
    """Offset and extent of a shape, in EMU."""

    x: int
    y: int
    cx: int
    cy: int


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """Binary asset supplied by the caller; named once it lands in the package."""

    data: bytes
    extension: str

    def __post_init__(self) -> None:
        if not self.extension.lstrip("."):
            raise ValueError("Media assets need a file extension")


@dataclass(frozen=True, slots=True)
class Background:
    """Full-slide picture fill referencing a media asset."""

    asset: str


@dataclass(frozen=True, slots=True)
class Title:
    """Slide title; ``center`` places it as a cover title."""

    text: str
    style: str = TITLE_STYLE_HEADING

    def __post_init__(self) -> None:
        if self.style not in TITLE_STYLES:
            raise ValueError(f"Unknown title style {self.style!r}; expected one of {TITLE_STYLES}")


@dataclass(frozen=True, slots=True)
class BulletList:
    """Bulleted text body; ``animate`` reveals the items one paragraph at a time."""

    items: Tuple[str, ...]
    geometry: Optional[Geometry] = None
    animate: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True, slots=True)
class Picture:
    """Embedded picture; sized from the image itself when no geometry is given."""

    asset: str
    geometry: Optional[Geometry] = None
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TimingStep:
    """Reveal of an inclusive paragraph range of one shape."""

    shape_id: int
    paragraphs: Tuple[int, int]

    def __post_init__(self) -> None:
        start, end = self.paragraphs
        if start < 0 or end < start:
            raise ValueError(f"Invalid paragraph range {self.paragraphs!r}")
        object.__setattr__(self, "paragraphs", (int(start), int(end)))


@dataclass(frozen=True, slots=True)
class Timing:
    """Explicit reveal steps, appended to the slide's timing graph in order."""

    steps: Tuple[TimingStep, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))


Shape = Union[Background, Title, BulletList, Picture, Timing]


@dataclass(frozen=True, slots=True)
class SlideDescription:
    """Ordered shapes making up one slide."""

    shapes: Tuple[Shape, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "shapes", tuple(self.shapes))

    @classmethod
    def of(cls, *shapes: Shape) -> "SlideDescription":
        return cls(shapes=shapes)

    def asset_keys(self) -> Sequence[str]:
        """Asset keys referenced by this slide, in first-use order."""
        keys = []
        for shape in self.shapes:
            if isinstance(shape, (Background, Picture)) and shape.asset not in keys:
                keys.append(shape.asset)
        return keys
