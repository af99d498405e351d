import datetime as dt
from pathlib import Path

import pytest

from inkpot.config import Layout, Settings
from inkpot.content import ContentKind, Item, ItemMeta, resolve_url
from inkpot.scaffold import create_site


def write_source(directory: Path, name: str, meta: str, body: str = "") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(f"{meta}%%%\n{body}", encoding="utf-8")
    return path


def make_item(link: str, timestamp: dt.datetime, kind: ContentKind = ContentKind.ARTICLE) -> Item:
    meta = ItemMeta(
        title=link.title(),
        link=link,
        url_template="/{{ link }}.html",
        timestamp=timestamp,
        kind=kind,
    )
    return Item(source=Path(f"{link}.md"), meta=meta, content="", url=resolve_url(meta))


@pytest.fixture
def site_dir(tmp_path):
    """A freshly scaffolded site with the bundled templates."""
    root = tmp_path / "site"
    create_site(root)
    return root


@pytest.fixture
def settings(site_dir, tmp_path):
    return Settings(title="Test Site", force=False, in_dir=str(site_dir), out_dir=str(tmp_path / "out"))


@pytest.fixture
def layout():
    return Layout()
