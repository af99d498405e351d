from __future__ import annotations

from pathlib import Path

from .content import Item, output_path
from .render import write_file
from .site import Site

ITEM_NAME = "post"


def item_context(site: Site, item: Item) -> dict:
    context = dict(site.context)
    context[ITEM_NAME] = item
    return context


def build_item(site: Site, item: Item, out_dir: Path, force: bool) -> Path:
    rel = output_path(item.url)
    rendered = site.theme.render(site.layout.post_template, item_context(site, item), source=item.source)
    print(f"generating {rel}")
    target = out_dir / rel
    write_file(target, rendered, force)
    return target


def build_site_page(site: Site, name: str, out_dir: Path, force: bool) -> Path:
    rendered = site.theme.render(name, site.context, source=site.theme.directory / name)
    print(f"generating {name}")
    target = out_dir / name
    write_file(target, rendered, force)
    return target


def render_site(site: Site, out_dir: Path, force: bool) -> list[Path]:
    """Render every item, then the home and archive pages, into ``out_dir``.

    Stops at the first failure; files written before it stay on disk.
    """
    out_dir = Path(out_dir)
    written = []
    for item in [*site.articles, *site.pages]:
        written.append(build_item(site, item, out_dir, force))
    for name in site.layout.site_templates():
        written.append(build_site_page(site, name, out_dir, force))
    return written
