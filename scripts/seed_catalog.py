#!/usr/bin/env python
"""
Seed the novel catalog cache from a JSON export.

Usage:
    python scripts/seed_catalog.py novels.json
    python scripts/seed_catalog.py novels.json --ttl 86400
    python scripts/seed_catalog.py novels.json --keep-invalid
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from novellize.config import get_settings
from novellize.core.cache import CacheService
from novellize.ingestion.catalog_loader import load_catalog_file, seed_catalog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def main(args) -> int:
    settings = get_settings()
    novels = load_catalog_file(args.path)
    logger.info(f"Loaded {len(novels)} novels from {args.path}")

    cache = CacheService()
    try:
        result = await seed_catalog(
            cache,
            novels,
            ttl=args.ttl or settings.novel_cache_ttl_seconds,
            drop_invalid=not args.keep_invalid,
        )
    finally:
        await cache.close()

    if not result.written:
        logger.error("Catalog was NOT written")
        return 1
    logger.info(f"Catalog written under '{settings.novel_cache_key}'")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Write a novel catalog export into the Redis cache"
    )
    parser.add_argument("path", help="JSON file with a list of novels")
    parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        help="Expiry in seconds (default: NOVEL_CACHE_TTL_SECONDS)",
    )
    parser.add_argument(
        "--keep-invalid",
        action="store_true",
        help="Write entries that fail validation as-is",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args)))
