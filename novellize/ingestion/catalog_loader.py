"""Load a novel catalog export into the cache.

The production catalog is written by the document-database export job; this
loader covers local development and manual refreshes from a JSON export.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from novellize.core.cache import CacheService
from novellize.services.recommendation_service import validate_catalog

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    """Outcome of a catalog seed run."""

    total: int
    valid: int
    written: bool


def load_catalog_file(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON export: either a list of novels or {"novels": [...]}."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and isinstance(data.get("novels"), list):
        data = data["novels"]
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of novels")
    return data


async def seed_catalog(
    cache: CacheService,
    novels: list[dict[str, Any]],
    ttl: int | None = None,
    drop_invalid: bool = True,
) -> SeedResult:
    """Write the catalog snapshot, optionally keeping only valid entries."""
    valid = validate_catalog(novels)
    payload = novels
    if drop_invalid:
        payload = [novel.model_dump(by_alias=True, exclude_unset=True) for novel in valid]

    if not payload:
        logger.error("Refusing to write an empty catalog")
        return SeedResult(total=len(novels), valid=len(valid), written=False)

    written = await cache.set_catalog(payload, ttl)
    logger.info(f"Catalog seed: {len(valid)}/{len(novels)} valid, written={written}")
    return SeedResult(total=len(novels), valid=len(valid), written=written)
