from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .config import Layout, Settings
from .content import ContentKind, Converter, Item, load_item
from .errors import IoError
from .render import Theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Site:
    context: dict
    articles: list[Item]
    pages: list[Item]
    theme: Theme
    layout: Layout


def list_sources(source_dir: Path) -> list[Path]:
    """Return source files in directory order; ordering is not guaranteed."""
    try:
        entries = list(source_dir.iterdir())
    except OSError as exc:
        raise IoError("error listing source directory", source_dir) from exc
    sources = []
    for entry in entries:
        if entry.name.startswith(".") or not entry.is_file():
            logger.debug("skipping %s", entry)
            continue
        sources.append(entry)
    return sources


def partition(items: Iterable[Item]) -> tuple[list[Item], list[Item]]:
    articles: list[Item] = []
    pages: list[Item] = []
    buckets = {ContentKind.ARTICLE: articles, ContentKind.PAGE: pages}
    for item in items:
        buckets[item.kind].append(item)
    return articles, pages


def sort_items(items: Iterable[Item]) -> list[Item]:
    # sorted() is stable with reverse=True, so equal timestamps keep their order.
    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def build_context(articles: list[Item], pages: list[Item], settings: Settings) -> dict:
    context = {
        "articles": articles,
        "pages": pages,
        "conf": settings.as_context(),
    }
    if articles:
        context["latest_article"] = articles[0]
    return context


def collect(settings: Settings, layout: Optional[Layout] = None, converter: Optional[Converter] = None) -> Site:
    layout = layout or Layout()
    in_dir = Path(settings.in_dir)
    theme = Theme.compile(in_dir / layout.theme_dir, layout.required_templates())

    items = [load_item(path, converter) for path in list_sources(in_dir / layout.source_dir)]
    articles, pages = partition(items)
    articles = sort_items(articles)
    pages = sort_items(pages)
    logger.debug("collected %d articles and %d pages", len(articles), len(pages))

    return Site(
        context=build_context(articles, pages, settings),
        articles=articles,
        pages=pages,
        theme=theme,
        layout=layout,
    )
