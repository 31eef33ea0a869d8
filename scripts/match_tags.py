#!/usr/bin/env python3
"""Match a set of tags against a preset catalog.

Usage:
    python scripts/match_tags.py shop=bakery name="Le Fournil" --geometry point
    python scripts/match_tags.py building=yes addr:housenumber=12 -g area --catalog my_presets.json
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from presetkit.engine.preset_index import PresetIndex
from presetkit.loaders import load_catalog
from presetkit.schemas.preset_schema import GEOMETRIES


def parse_tags(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a tag mapping, keeping their order."""
    tags: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        tags[key] = value
    return tags


def main():
    parser = argparse.ArgumentParser(description="Find the best preset for a tag set")
    parser.add_argument("tags", nargs="+", help="Tags as key=value")
    parser.add_argument("-g", "--geometry", choices=GEOMETRIES, default="point",
                        help="Geometry of the feature (default: point)")
    parser.add_argument("--catalog", type=Path, default=None,
                        help="Catalog JSON/YAML (default: built-in catalog)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        tags = parse_tags(args.tags)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    catalog = None
    if args.catalog is not None:
        if not args.catalog.exists():
            print(f"Error: Catalog not found: {args.catalog}", file=sys.stderr)
            sys.exit(1)
        catalog = load_catalog(args.catalog)

    index = PresetIndex(builtin_catalog=catalog).init()
    preset = index.match_tags(tags, args.geometry)
    if preset is None:
        print(f"No preset matched and the catalog has no generic {args.geometry} preset")
        sys.exit(1)

    print(f"Preset: {preset.id} ({preset.name or 'unnamed'})")
    print(f"Score: {preset.match_score(tags)}")
    print(f"Generic: {'yes' if preset.is_fallback() else 'no'}")
    if preset.fields:
        print(f"Fields: {', '.join(f.id for f in preset.fields)}")


if __name__ == "__main__":
    main()
