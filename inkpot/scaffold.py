from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import Layout, Settings
from .content import METADATA_DELIM, ContentKind, default_meta, now, serialize_metadata
from .errors import IoError, ValidationError
from .render import write_file
from .utils import is_valid_link, slugify

SKELETON_DIR = Path(__file__).resolve().parent / "skeleton"
SKELETON_CONFIG = "site.toml"
SKELETON_TEMPLATES = ("post.html", "index.html", "archive.html")


def read_skeleton(name: str) -> str:
    return SKELETON_DIR.joinpath(name).read_text(encoding="utf-8")


def create_site(directory: Path, force: bool = False, layout: Optional[Layout] = None) -> None:
    layout = layout or Layout()
    directory = Path(directory)
    for name in (layout.source_dir, layout.theme_dir):
        path = directory / name
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoError("error creating directory", path) from exc

    write_file(directory / layout.config_file, read_skeleton(SKELETON_CONFIG), force)
    write_file(directory / layout.nojekyll_file, "", force)

    targets = (layout.post_template, layout.index_template, layout.archive_template)
    for bundled, target in zip(SKELETON_TEMPLATES, targets):
        text = read_skeleton(f"theme/{bundled}")
        write_file(directory / layout.theme_dir / target, text, force)


def create_item(
    settings: Settings,
    name: str,
    kind: ContentKind = ContentKind.ARTICLE,
    force: bool = False,
    layout: Optional[Layout] = None,
) -> Path:
    """Write a new source file holding default metadata and an empty body."""
    layout = layout or Layout()
    link = slugify(name)
    if not is_valid_link(link):
        raise ValidationError(f"cannot derive a link from {name!r}")
    meta = default_meta(kind, link, title=name, timestamp=now())
    path = Path(settings.in_dir) / layout.source_dir / f"{link}.md"
    write_file(path, f"{serialize_metadata(meta)}{METADATA_DELIM}\n", force)
    return path
