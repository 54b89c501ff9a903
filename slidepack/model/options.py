"""Build-time configuration for a presentation package."""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from zipfile import ZIP_DEFLATED, ZIP_STORED

from slidepack.model.elements import Geometry
from slidepack.utils.units import inches_to_emu

SLIDE_WIDTH_EMU = 12192000
SLIDE_HEIGHT_EMU = 6858000

COMPRESSION_MODES = {"deflated": ZIP_DEFLATED, "stored": ZIP_STORED}


def _default_title_geometry(width: int, height: int) -> Geometry:
    margin = inches_to_emu(0.6)
    return Geometry(x=margin, y=inches_to_emu(0.4), cx=width - 2 * margin, cy=inches_to_emu(1.2))


def _default_center_title_geometry(width: int, height: int) -> Geometry:
    margin = inches_to_emu(1.0)
    cy = inches_to_emu(1.5)
    return Geometry(x=margin, y=(height - cy) // 2, cx=width - 2 * margin, cy=cy)


def _default_body_geometry(width: int, height: int) -> Geometry:
    margin = inches_to_emu(0.8)
    top = inches_to_emu(1.8)
    return Geometry(x=margin, y=top, cx=width - 2 * margin, cy=height - top - inches_to_emu(0.6))


@dataclass(slots=True)
class PresentationOptions:
    """Knobs that shape the generated package; every field has a working default."""

    slide_width: int = SLIDE_WIDTH_EMU
    slide_height: int = SLIDE_HEIGHT_EMU
    title_geometry: Optional[Geometry] = None
    center_title_geometry: Optional[Geometry] = None
    body_geometry: Optional[Geometry] = None
    title_font: str = "Calibri Light"
    body_font: str = "Calibri"
    title_size_pt: float = 40
    center_title_size_pt: float = 54
    body_size_pt: float = 24
    bullet_char: str = "\u2022"
    bullet_indent_emu: int = 342900
    reveal_duration_ms: int = 500
    title: str = ""
    creator: str = "slidepack"
    created: Optional[datetime] = None
    theme_name: str = "Office Theme"
    link_slide_layout: bool = False
    compression: str = "deflated"

    def __post_init__(self) -> None:
        if self.compression not in COMPRESSION_MODES:
            raise ValueError(f"Unknown compression {self.compression!r}; expected one of {sorted(COMPRESSION_MODES)}")
        if self.reveal_duration_ms <= 0:
            raise ValueError("reveal_duration_ms must be positive")
        if self.slide_width <= 0 or self.slide_height <= 0:
            raise ValueError("Slide dimensions must be positive")
        if self.title_geometry is None:
            self.title_geometry = _default_title_geometry(self.slide_width, self.slide_height)
        if self.center_title_geometry is None:
            self.center_title_geometry = _default_center_title_geometry(self.slide_width, self.slide_height)
        if self.body_geometry is None:
            self.body_geometry = _default_body_geometry(self.slide_width, self.slide_height)

    @property
    def zip_compression(self) -> int:
        return COMPRESSION_MODES[self.compression]

    def created_at(self) -> datetime:
        """Creation timestamp, defaulting to the current UTC time."""
        if self.created is None:
            return datetime.now(timezone.utc).replace(microsecond=0)
        return self.created

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PresentationOptions":
        """Build options from a plain mapping such as the ``options`` block of a deck file."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown presentation options: {', '.join(unknown)}")
        kwargs = dict(values)
        for key in ("title_geometry", "center_title_geometry", "body_geometry"):
            if isinstance(kwargs.get(key), Mapping):
                kwargs[key] = Geometry(**kwargs[key])
        created = kwargs.get("created")
        if isinstance(created, str):
            kwargs["created"] = datetime.fromisoformat(created.replace("Z", "+00:00"))
        return cls(**kwargs)
