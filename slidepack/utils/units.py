"""Unit conversion helpers for DrawingML measurements."""
from __future__ import annotations

EMU_PER_INCH = 914400
DEFAULT_DPI = 96


def inches_to_emu(value: float) -> int:
    """Convert inches to English Metric Units."""
    return int(round(value * EMU_PER_INCH))


def pixels_to_emu(value: int, dpi: int = DEFAULT_DPI) -> int:
    """Convert pixels at ``dpi`` to English Metric Units."""
    return int(round(value * EMU_PER_INCH / dpi))


def points_to_font_size(value: float) -> int:
    """Convert points to the hundredths-of-a-point used by ``sz`` attributes."""
    return int(round(value * 100))
