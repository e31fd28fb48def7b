#!/usr/bin/env python3
"""
Initialize the jingle catalogue graph schema.

Drops existing constraints, then creates every constraint and index the
catalogue relies on. Statements use IF NOT EXISTS, so re-running is safe.

Usage:
    python scripts/setup_schema.py [--keep-existing] [--info]

Options:
    --keep-existing  Do not drop existing constraints first
    --info           Print the resulting schema afterwards
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from jingledb.database import GraphConfigurationError, create_client
from jingledb.schema import get_schema_info, setup_schema
from jingledb.utils.logging import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the jingle catalogue graph schema")
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Do not drop existing constraints before creating",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print labels, constraints and indexes after setup",
    )
    args = parser.parse_args(argv)
    setup_logging()

    logger.info("=" * 60)
    logger.info("Graph Schema Initialization")
    logger.info("=" * 60)

    try:
        client = create_client()
    except GraphConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if not client.verify_connection():
            logger.error("Cannot reach the graph database, check NEO4J_URI and credentials")
            sys.exit(1)

        result = setup_schema(client, drop_existing=not args.keep_existing)

        if args.info:
            info = get_schema_info(client)
            logger.info(f"Labels: {info['labels']}")
            logger.info(f"Relationship types: {info['relationship_types']}")
            logger.info(f"Constraints: {[c['name'] for c in info['constraints']]}")
            logger.info(f"Indexes: {[i['name'] for i in info['indexes']]}")

        logger.info("=" * 60)
        logger.info(f"Schema initialization complete ({result.failed} warning(s))")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Error during schema setup: {e}")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    main()
