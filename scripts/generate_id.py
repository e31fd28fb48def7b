#!/usr/bin/env python3
"""
Quick ID generator.

Generates IDs in the format {prefix}{8-char-base36}.

Usage:
    python scripts/generate_id.py [type] [count]

Examples:
    python scripts/generate_id.py jingle 5
    python scripts/generate_id.py cancion
    python scripts/generate_id.py artista 10
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from jingledb.ids import EntityKind, generate_ids


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate entity IDs")
    parser.add_argument("type", nargs="?", default="jingle", help="Entity type (default: jingle)")
    parser.add_argument("count", nargs="?", type=int, default=1, help="Number of IDs, 1-100 (default: 1)")
    args = parser.parse_args(argv)

    try:
        kind = EntityKind.from_name(args.type)
        ids = generate_ids(kind, args.count)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Available types: {', '.join(EntityKind.names())}", file=sys.stderr)
        return 1

    print(f"\nGenerating {len(ids)} ID(s) for {kind.value.lower()}:\n")
    for i, new_id in enumerate(ids, 1):
        print(f"  {i}. {new_id}")

    print("\nCopy-paste ready:\n" + "\n".join(ids) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
