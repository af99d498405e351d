from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Optional

import markdown
import yaml
from jinja2 import Environment, StrictUndefined

from .errors import IoError, ParseError, ResolutionError, ValidationError
from .utils import is_valid_link, slugify

METADATA_DELIM = "%%%"
MARKDOWN_SUFFIXES = {".md", ".markdown"}
MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]

DEFAULT_TITLE = "Default Title"
DEFAULT_LINK = "default-link"
DEFAULT_ARTICLE_URL = "/{{ year }}/{{ month }}/{{ day }}/{{ link }}.html"
DEFAULT_PAGE_URL = "/{{ link }}.html"

META_KEYS = ("title", "link", "url", "timestamp", "kind")

Converter = Callable[[str], str]


class ContentKind(enum.Enum):
    ARTICLE = "Article"
    PAGE = "Page"


DEFAULT_URLS = {
    ContentKind.ARTICLE: DEFAULT_ARTICLE_URL,
    ContentKind.PAGE: DEFAULT_PAGE_URL,
}


def now() -> dt.datetime:
    return dt.datetime.now().astimezone()


@dataclass(frozen=True)
class ItemMeta:
    title: str = DEFAULT_TITLE
    link: str = DEFAULT_LINK
    url_template: str = DEFAULT_ARTICLE_URL
    timestamp: dt.datetime = field(default_factory=now)
    kind: ContentKind = ContentKind.ARTICLE


@dataclass(frozen=True)
class Item:
    source: Path
    meta: ItemMeta
    content: str
    url: str

    @property
    def title(self) -> str:
        return self.meta.title

    @property
    def link(self) -> str:
        return self.meta.link

    @property
    def timestamp(self) -> dt.datetime:
        return self.meta.timestamp

    @property
    def kind(self) -> ContentKind:
        return self.meta.kind


def default_meta(kind: ContentKind = ContentKind.ARTICLE, link: str = DEFAULT_LINK, **overrides) -> ItemMeta:
    return ItemMeta(link=link, url_template=DEFAULT_URLS[kind], kind=kind, **overrides)


def split_metadata(stream: BinaryIO, path: Path) -> tuple[str, bytes]:
    """Split a source stream at the first delimiter line.

    Returns the metadata text (lines before the delimiter) and the raw bytes
    following it. Reaching the end of the stream without a delimiter is an
    error rather than an empty result.
    """
    delim = METADATA_DELIM.encode("ascii")
    lines: list[bytes] = []
    for line in iter(stream.readline, b""):
        if line.rstrip(b"\r\n") == delim:
            break
        lines.append(line)
    else:
        raise ParseError("unterminated metadata block", path)
    try:
        meta_text = b"".join(lines).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("invalid UTF-8 in metadata", path) from exc
    return meta_text, stream.read()


def parse_kind(value: object, path: Path) -> ContentKind:
    if isinstance(value, str):
        wanted = value.strip().lower()
        for kind in ContentKind:
            if kind.value.lower() == wanted:
                return kind
    raise ParseError(f"unknown content kind {value!r}", path)


def parse_timestamp(value: object, path: Path) -> dt.datetime:
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime.combine(value, dt.time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError as exc:
            raise ParseError(f"invalid timestamp {value!r}", path) from exc
    else:
        raise ParseError(f"invalid timestamp {value!r}", path)
    if parsed.tzinfo is None:
        # Naive values are local time.
        parsed = parsed.astimezone()
    return parsed


def parse_metadata(text: str, path: Path, default_link: str = DEFAULT_LINK) -> ItemMeta:
    """Parse a YAML metadata block into an ItemMeta.

    An empty block (or one holding only comments) yields the default metadata
    with ``default_link`` as its link. Missing keys fall back to their
    defaults; unknown keys are rejected.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError("error parsing metadata", path) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("metadata must be a mapping", path)

    unknown = sorted(str(key) for key in data if key not in META_KEYS)
    if unknown:
        raise ParseError(f"unknown metadata keys {', '.join(unknown)}", path)

    kind = parse_kind(data["kind"], path) if "kind" in data else ContentKind.ARTICLE
    link = data.get("link", default_link)
    if not isinstance(link, str) or not is_valid_link(link):
        raise ValidationError(f"invalid link {link!r}", path)
    url_template = data.get("url")
    if url_template is None:
        url_template = DEFAULT_URLS[kind]
    timestamp = parse_timestamp(data["timestamp"], path) if "timestamp" in data else now()
    title = data.get("title")

    return ItemMeta(
        title=DEFAULT_TITLE if title is None else str(title),
        link=link,
        url_template=str(url_template),
        timestamp=timestamp,
        kind=kind,
    )


def serialize_metadata(meta: ItemMeta) -> str:
    data = {
        "title": meta.title,
        "link": meta.link,
        "url": meta.url_template,
        "timestamp": meta.timestamp.isoformat(),
        "kind": meta.kind.value,
    }
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)


_url_env = Environment(undefined=StrictUndefined, autoescape=False)


def resolve_url(meta: ItemMeta, path: Optional[Path] = None) -> str:
    ts = meta.timestamp
    try:
        template = _url_env.from_string(meta.url_template)
        return template.render(
            year=f"{ts.year:04d}",
            month=f"{ts.month:02d}",
            day=f"{ts.day:02d}",
            link=meta.link,
        )
    except Exception as exc:  # expressions in user templates can raise anything
        raise ResolutionError(f"error resolving URL template {meta.url_template!r}", path) from exc


def output_path(url: str) -> str:
    return url.lstrip("/")


def validate_url(url: str, path: Optional[Path] = None) -> str:
    if not url:
        raise ValidationError("resolved output URL is empty", path)
    rel = output_path(url)
    if not rel:
        raise ValidationError(f"resolved output URL {url!r} names no file", path)
    if ".." in rel.replace("\\", "/").split("/"):
        raise ValidationError(f"resolved output URL {url!r} leaves the output directory", path)
    return url


def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"codehilite": {"guess_lang": False}},
    )
    return md.convert(text)


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_SUFFIXES


def load_item(path: Path, converter: Optional[Converter] = None) -> Item:
    path = Path(path)
    convert = converter or markdown_to_html
    try:
        with path.open("rb") as stream:
            meta_text, raw = split_metadata(stream, path)
    except OSError as exc:
        raise IoError("error reading", path) from exc

    meta = parse_metadata(meta_text, path, default_link=slugify(path.stem) or DEFAULT_LINK)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("invalid UTF-8 in content", path) from exc

    if is_markdown(path):
        try:
            content = convert(text)
        except Exception as exc:  # converter errors vary by extension
            raise ParseError("error converting markdown", path) from exc
    else:
        content = text

    url = validate_url(resolve_url(meta, path), path)
    return Item(source=path, meta=meta, content=content, url=url)
