"""Keyword parsing and tag suggestion helpers."""

from typing import Iterable, Optional

from shiori_share.constants import MAX_RECENT_TAGS
from shiori_share.models import Tag, TagRef


def normalize_tag(name: str) -> str:
    return name.strip().lower()


def parse_keywords(keywords: Optional[str]) -> Optional[list[TagRef]]:
    """Parse a comma-separated keyword string into tag references.

    Pieces are trimmed and lowercased, empty pieces are dropped and internal
    whitespace is kept ("machine learning" stays one tag). Returns ``None``
    rather than an empty list when nothing is left, so callers can omit the
    tags field altogether.
    """
    if keywords is None:
        return None

    tags = [
        TagRef(name=name)
        for name in (normalize_tag(piece) for piece in keywords.split(","))
        if name
    ]
    return tags or None


def merge_recent_tags(
    existing: Iterable[str], new_tags: Iterable[str], limit: int = MAX_RECENT_TAGS
) -> list[str]:
    """Put ``new_tags`` at the front of ``existing`` in most-recent-first order.

    A tag already present (compared case-insensitively) is moved rather than
    duplicated. The result is capped at ``limit`` entries.
    """
    merged = list(existing)
    for tag in reversed([normalize_tag(t) for t in new_tags]):
        if not tag:
            continue
        merged = [t for t in merged if t.lower() != tag]
        merged.insert(0, tag)
    return merged[:limit]


def popular_tag_names(tags: Iterable[Tag], limit: int = MAX_RECENT_TAGS) -> list[str]:
    """Names of the most used tags, highest bookmark count first."""
    names: list[str] = []
    seen: set[str] = set()
    for tag in sorted(tags, key=lambda t: t.bookmark_count, reverse=True):
        name = normalize_tag(tag.name)
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
        if len(names) >= limit:
            break
    return names
