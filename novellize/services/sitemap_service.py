"""Sitemap generation for the public site.

Novel and author pages are taken from the cached catalog, so the sitemap is
as fresh as the last ingestion run.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence
from xml.sax.saxutils import escape

from novellize.db.schemas import Novel

logger = logging.getLogger(__name__)

_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}


@dataclass
class SitemapEntry:
    """One <url> element."""

    path: str
    changefreq: str
    priority: float


STATIC_ENTRIES = [
    SitemapEntry("", "daily", 1.0),
    SitemapEntry("/browse", "daily", 0.9),
    SitemapEntry("/forum", "hourly", 0.8),
    SitemapEntry("/auth/login", "monthly", 0.5),
    SitemapEntry("/auth/register", "monthly", 0.5),
]


def _author_id(novel: Novel) -> str | None:
    extra = novel.model_extra or {}
    author = extra.get("uploader") or extra.get("authorId")
    if author is None:
        return None
    author = str(author).strip()
    return author or None


def collect_entries(novels: Sequence[Novel]) -> list[SitemapEntry]:
    """Static routes, then one entry per novel, then one per distinct author."""
    entries = list(STATIC_ENTRIES)
    authors: dict[str, None] = {}

    for novel in novels:
        entries.append(SitemapEntry(f"/novel/{novel.novel_id}", "daily", 0.8))
        author = _author_id(novel)
        if author:
            authors.setdefault(author)

    entries.extend(SitemapEntry(f"/author/{author}", "weekly", 0.7) for author in authors)
    return entries


def render_sitemap(
    entries: Sequence[SitemapEntry],
    base_url: str,
    lastmod: datetime | None = None,
) -> str:
    """Render entries as a sitemaps.org urlset document."""
    lastmod = lastmod or datetime.now(timezone.utc)
    stamp = lastmod.isoformat()
    base_url = base_url.rstrip("/")

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        loc = escape(f"{base_url}{entry.path}", _XML_ENTITIES)
        lines.extend([
            "  <url>",
            f"    <loc>{loc}</loc>",
            f"    <lastmod>{stamp}</lastmod>",
            f"    <changefreq>{entry.changefreq}</changefreq>",
            f"    <priority>{entry.priority:.1f}</priority>",
            "  </url>",
        ])
    lines.append("</urlset>")

    if len(entries) == len(STATIC_ENTRIES):
        logger.warning("Sitemap generated without any novel pages")
    return "\n".join(lines) + "\n"
