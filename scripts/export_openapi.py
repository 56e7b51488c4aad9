#!/usr/bin/env python3
"""
Write the API's OpenAPI document to openapi/schema.json.
The front end generates its client types from it; --check fails when the
committed file is stale.
"""

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from app import app

DEFAULT_OUTPUT = ROOT / "openapi" / "schema.json"


def strip_extensions(obj):
    """Drop x- vendor keys, which code generators reject"""
    if isinstance(obj, dict):
        return {key: strip_extensions(value) for key, value in obj.items() if not key.startswith("x-")}
    if isinstance(obj, list):
        return [strip_extensions(item) for item in obj]
    return obj


def render_schema() -> str:
    return json.dumps(strip_extensions(app.openapi()), indent=2, ensure_ascii=False, sort_keys=True) + "\n"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--check", action="store_true", help="exit 1 if the file differs from the live schema")
    args = parser.parse_args(argv)

    rendered = render_schema()

    if args.check:
        current = args.output.read_text() if args.output.exists() else ""
        if current != rendered:
            print(f"❌ {args.output} is out of date; run scripts/export_openapi.py")
            return 1
        print(f"✅ {args.output} is up to date")
        return 0

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(rendered)
    print(f"✅ OpenAPI schema exported to {args.output} ({len(app.openapi().get('paths', {}))} paths)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
