#!/usr/bin/env python3
"""Validate a JSON or YAML file against a named Pydantic schema.

Usage:
    python scripts/validate_catalog.py <file> [schema_name]

Schema names:
    Catalog        -- Preset catalog (presets, fields, categories, defaults)
    IndexSettings  -- Preset index configuration
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import yaml
from pydantic import BaseModel, ValidationError

from presetkit.schemas.preset_schema import Catalog
from presetkit.schemas.settings import IndexSettings
from presetkit.engine.preset_index import PresetIndex


SCHEMA_MAP: dict[str, type[BaseModel]] = {
    "Catalog": Catalog,
    "IndexSettings": IndexSettings,
}


def _read(path: Path):
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(raw)
    return json.loads(raw)


def main():
    parser = argparse.ArgumentParser(description="Validate a catalog or settings file")
    parser.add_argument("file", type=Path, help="Path to JSON/YAML file to validate")
    parser.add_argument("schema_name", nargs="?", default="Catalog", choices=list(SCHEMA_MAP.keys()),
                        help="Name of the Pydantic schema to validate against (default: Catalog)")
    args = parser.parse_args()

    if not args.file.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        sys.exit(1)

    try:
        data = _read(args.file)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        print(f"Error: Could not parse {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    schema_cls = SCHEMA_MAP[args.schema_name]
    try:
        instance = schema_cls.model_validate(data)
    except ValidationError as e:
        print(f"Validation FAILED: {args.file} does not conform to {args.schema_name}", file=sys.stderr)
        print(f"  Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Validation PASSED: {args.file} conforms to {args.schema_name}")

    if args.schema_name == "Catalog":
        print(f"  Presets: {len(instance.presets)}")
        print(f"  Fields: {len(instance.fields)}")
        print(f"  Categories: {len(instance.categories)}")

        # Defaults and generic presets must resolve once built
        index = PresetIndex(builtin_catalog=instance).init()
        missing_fallbacks = [g for g in ("point", "line", "area", "relation") if index.fallback(g) is None]
        if missing_fallbacks:
            print(f"  Warning: no generic preset for: {', '.join(missing_fallbacks)}")
        if instance.defaults is not None:
            for geometry, ids in instance.defaults.model_dump().items():
                unknown = [i for i in ids if index.item(i) is None]
                if unknown:
                    print(f"  Warning: unknown {geometry} defaults: {', '.join(unknown)}")
    elif args.schema_name == "IndexSettings":
        print(f"  Favorites limit: {instance.favorites_limit}")
        print(f"  Recents limit: {instance.recents_limit}")


if __name__ == "__main__":
    main()
