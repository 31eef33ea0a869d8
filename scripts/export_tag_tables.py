#!/usr/bin/env python3
"""Export the area/point/vertex classification tables derived from a catalog.

Usage:
    python scripts/export_tag_tables.py -o workspace/tag_tables.json
    python scripts/export_tag_tables.py --catalog my_presets.yaml -o tables.json
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from presetkit.engine.preset_index import PresetIndex
from presetkit.loaders import load_catalog
from presetkit.utils.file_utils import save_json


def _sorted_table(table: dict[str, set[str]]) -> dict[str, list[str]]:
    return {key: sorted(values) for key, values in sorted(table.items())}


def main():
    parser = argparse.ArgumentParser(description="Export classification tables as JSON")
    parser.add_argument("-o", "--output", type=Path, default=Path("tag_tables.json"),
                        help="Output JSON path (default: tag_tables.json)")
    parser.add_argument("--catalog", type=Path, default=None,
                        help="Catalog JSON/YAML (default: built-in catalog)")
    args = parser.parse_args()

    catalog = None
    if args.catalog is not None:
        if not args.catalog.exists():
            print(f"Error: Catalog not found: {args.catalog}", file=sys.stderr)
            sys.exit(1)
        catalog = load_catalog(args.catalog)

    index = PresetIndex(builtin_catalog=catalog).init()
    tables = {
        "areaKeys": _sorted_table(index.area_keys()),
        "pointTags": _sorted_table(index.point_tags()),
        "vertexTags": _sorted_table(index.vertex_tags()),
    }
    save_json(tables, args.output)

    print(f"Tag tables written: {args.output}")
    print(f"  Area keys: {len(tables['areaKeys'])}")
    print(f"  Point keys: {len(tables['pointTags'])}")
    print(f"  Vertex keys: {len(tables['vertexTags'])}")


if __name__ == "__main__":
    main()
