from datetime import datetime, timezone

from novellize.db.schemas import Novel
from novellize.services.sitemap_service import (
    STATIC_ENTRIES,
    collect_entries,
    render_sitemap,
)

from conftest import make_novel


def test_collects_novels_and_distinct_authors():
    novels = [
        Novel.model_validate(make_novel("n1", "One", uploader="alice")),
        Novel.model_validate(make_novel("n2", "Two", uploader="alice")),
        Novel.model_validate(make_novel("n3", "Three", authorId="bob")),
        Novel.model_validate(make_novel("n4", "Four")),
    ]

    paths = [e.path for e in collect_entries(novels)]

    assert paths[:len(STATIC_ENTRIES)] == [e.path for e in STATIC_ENTRIES]
    assert paths[len(STATIC_ENTRIES):] == [
        "/novel/n1", "/novel/n2", "/novel/n3", "/novel/n4",
        "/author/alice", "/author/bob",
    ]


def test_render_escapes_and_formats():
    novel = Novel.model_validate(make_novel("a&b<c>", "Odd id"))
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    xml = render_sitemap(collect_entries([novel]), "https://example.com/", lastmod=stamp)

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://example.com</loc>" in xml
    assert "<loc>https://example.com/novel/a&amp;b&lt;c&gt;</loc>" in xml
    assert "<lastmod>2024-01-02T03:04:05+00:00</lastmod>" in xml
    assert "<priority>1.0</priority>" in xml
    assert xml.count("<url>") == len(STATIC_ENTRIES) + 1
