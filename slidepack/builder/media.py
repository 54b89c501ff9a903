"""
Media parts for a presentation package.

Copies caller-supplied assets into ``ppt/media`` exactly once per asset key,
registers the Default content type for each extension in use and exposes
the pixel size of images so pictures without an explicit geometry can be
laid out.
"""

import mimetypes
import struct
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from slidepack.model.elements import MediaAsset
from slidepack.opc.errors import MissingAsset
from slidepack.opc.package import Package
from slidepack.utils.logger import get_logger

LOGGER = get_logger(__name__)

MEDIA_DIR = "ppt/media"

MEDIA_CONTENT_TYPES = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'gif': 'image/gif',
    'bmp': 'image/bmp',
    'tif': 'image/tiff',
    'tiff': 'image/tiff',
    'svg': 'image/svg+xml',
    'emf': 'image/x-emf',
    'wmf': 'image/x-wmf',
    'mp3': 'audio/mpeg',
    'wav': 'audio/wav',
    'mp4': 'video/mp4',
}


def media_content_type(extension: str) -> str:
    """Determine the MIME type for a media extension."""
    ext = extension.lstrip('.').lower()
    if ext in MEDIA_CONTENT_TYPES:
        return MEDIA_CONTENT_TYPES[ext]
    mime_type, _ = mimetypes.guess_type(f"media.{ext}")
    return mime_type or 'application/octet-stream'


def image_pixel_size(data: bytes) -> Optional[Tuple[int, int]]:
    """Read width and height from PNG, GIF or JPEG headers."""
    # PNG: IHDR is always the first chunk
    if data.startswith(b'\x89PNG\r\n\x1a\n') and len(data) >= 24:
        width, height = struct.unpack('>II', data[16:24])
        return width, height

    if data[:6] in (b'GIF87a', b'GIF89a') and len(data) >= 10:
        width, height = struct.unpack('<HH', data[6:10])
        return width, height

    if data.startswith(b'\xff\xd8'):
        return _jpeg_pixel_size(data)

    return None


def _jpeg_pixel_size(data: bytes) -> Optional[Tuple[int, int]]:
    offset = 2
    while offset + 4 <= len(data):
        if data[offset] != 0xFF:
            return None
        marker = data[offset + 1]
        if marker in (0xD8, 0x01) or 0xD0 <= marker <= 0xD7:
            offset += 2
            continue
        segment_length = struct.unpack('>H', data[offset + 2:offset + 4])[0]
        # Start-of-frame markers carry the dimensions (C4, C8 and CC are not frames)
        if 0xC0 <= marker <= 0xCF and marker not in (0xC4, 0xC8, 0xCC):
            if offset + 9 > len(data):
                return None
            height, width = struct.unpack('>HH', data[offset + 5:offset + 9])
            return width, height
        offset += 2 + segment_length
    return None


@dataclass(frozen=True)
class MediaPart:
    """A media asset after it has been placed into the package."""

    key: str
    part_name: str
    pixel_size: Optional[Tuple[int, int]]


class MediaLibrary:
    """Maps asset keys to media parts, creating each part on first use."""

    def __init__(self, package: Package, assets: Mapping[str, MediaAsset]) -> None:
        self._package = package
        self._assets = dict(assets)
        self._placed: Dict[str, MediaPart] = {}

    def require(self, key: str) -> MediaAsset:
        asset = self._assets.get(key)
        if asset is None:
            raise MissingAsset(key)
        return asset

    def ensure(self, key: str) -> MediaPart:
        """Return the media part for ``key``, copying the asset in if needed."""
        placed = self._placed.get(key)
        if placed is not None:
            LOGGER.debug("Reusing media part %s for asset %s", placed.part_name, key)
            return placed

        asset = self.require(key)
        extension = asset.extension.lstrip('.').lower()
        part_name = f"{MEDIA_DIR}/image{len(self._placed) + 1}.{extension}"
        self._package.content_types.register_default(extension, media_content_type(extension))
        self._package.add_part(part_name, bytes(asset.data))

        placed = MediaPart(key=key, part_name=part_name, pixel_size=image_pixel_size(asset.data))
        self._placed[key] = placed
        LOGGER.debug("Placed asset %s as %s (%d bytes)", key, part_name, len(asset.data))
        return placed

    @property
    def placed(self) -> Dict[str, MediaPart]:
        return dict(self._placed)
