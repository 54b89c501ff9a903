"""Entry-point for the deck description to .pptx pipeline."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Union

from slidepack.builder.assembler import assemble_presentation
from slidepack.model.deck import DeckDescription, parse_deck
from slidepack.model.elements import MediaAsset, SlideDescription
from slidepack.model.options import PresentationOptions
from slidepack.opc.errors import PackageError
from slidepack.opc.package import Package
from slidepack.renderer.package_serializer import PackageSerializer
from slidepack.utils.debug import DebugDumper
from slidepack.utils.logger import configure_logging, get_logger
from slidepack.utils.paths import extension_of

LOGGER = get_logger(__name__)


def build_presentation(
    slides: Sequence[SlideDescription],
    assets: Mapping[str, MediaAsset],
    output_path: Union[str, Path],
    options: Optional[PresentationOptions] = None,
) -> Package:
    """Assemble ``slides`` and write the archive to ``output_path``."""
    options = options or PresentationOptions()
    package = assemble_presentation(slides, assets, options)
    PackageSerializer(package, options.zip_compression).write(output_path)
    return package


def load_deck(deck_path: Path) -> DeckDescription:
    """Read and parse a JSON deck description."""
    if not deck_path.exists():
        raise FileNotFoundError(f"Deck file not found: {deck_path}")
    return parse_deck(json.loads(deck_path.read_text(encoding="utf-8")))


def load_assets(asset_paths: Mapping[str, str], base_dir: Path) -> Dict[str, MediaAsset]:
    """Read every asset file, resolving relative paths against ``base_dir``."""
    assets: Dict[str, MediaAsset] = {}
    for key, raw_path in asset_paths.items():
        path = Path(raw_path)
        if not path.is_absolute():
            path = base_dir / path
        if not path.exists():
            raise FileNotFoundError(f"Asset {key!r} not found: {path}")
        assets[key] = MediaAsset(data=path.read_bytes(), extension=extension_of(path.name))
    return assets


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the deck JSON → package → archive pipeline."""
    parser = argparse.ArgumentParser(description="Assemble a .pptx package from a JSON deck description")
    parser.add_argument("deck_file", help="Path to the deck description (.json)")
    parser.add_argument("-o", "--output", help="Where to write the .pptx (defaults next to the deck)")
    parser.add_argument("--debug", help="Directory to write a JSON manifest of the package")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(logging.DEBUG)

    deck_path = Path(args.deck_file).resolve()
    deck = load_deck(deck_path)
    assets = load_assets(deck.asset_paths, deck_path.parent)
    output_path = Path(args.output).resolve() if args.output else deck_path.with_suffix(".pptx")

    LOGGER.info("Building %d slides from %s", len(deck.slides), deck_path.name)
    try:
        package = build_presentation(deck.slides, assets, output_path, deck.options)
    except PackageError as exc:
        LOGGER.error("Could not build %s: %s", output_path.name, exc)
        return 1

    if args.debug:
        DebugDumper(Path(args.debug)).dump(package)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
