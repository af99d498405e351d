from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

import yaml

from .utils import parse_bool, parse_int

DEFAULT_TITLE = "Default Title"
DEFAULT_PORT = 8000


def _config_format(path: Path) -> tuple[str, Callable[[str], object], tuple[type[Exception], ...]]:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return "TOML", toml.loads, (toml.TOMLDecodeError,)
    if suffix in {".yml", ".yaml"}:
        return "YAML", yaml.safe_load, (yaml.YAMLError,)
    return "JSON", json.loads, (json.JSONDecodeError,)


def load_config(path: Path) -> dict:
    """Read the settings file; a missing file means all defaults."""
    if not path.exists():
        return {}
    name, loads, errors = _config_format(path)
    try:
        data = loads(path.read_text(encoding="utf-8"))
    except errors as exc:
        print(f"Invalid {name} in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if data is None:
        return {}
    if not isinstance(data, dict):
        print(f"{name} config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


@dataclass
class Settings:
    title: str = DEFAULT_TITLE
    force: bool = False
    in_dir: str = "."
    out_dir: str = "."
    port: int = DEFAULT_PORT

    @classmethod
    def from_mapping(cls, data: dict) -> "Settings":
        def value_str(key: str, default: str) -> str:
            value = data.get(key)
            return default if value is None else str(value)

        return cls(
            title=value_str("title", DEFAULT_TITLE),
            force=parse_bool(data.get("force")),
            in_dir=value_str("in_dir", "."),
            out_dir=value_str("out_dir", "."),
            port=parse_int(data.get("port"), DEFAULT_PORT),
        )

    def as_context(self) -> dict:
        return {
            "title": self.title,
            "force": self.force,
            "in_dir": self.in_dir,
            "out_dir": self.out_dir,
            "port": self.port,
        }


@dataclass(frozen=True)
class Layout:
    """File and directory names of a site tree, relative to its root."""

    source_dir: str = "src"
    theme_dir: str = "theme"
    post_template: str = "post.html"
    index_template: str = "index.html"
    archive_template: str = "archive.html"
    config_file: str = "site.toml"
    nojekyll_file: str = ".nojekyll"

    def site_templates(self) -> tuple[str, ...]:
        return (self.index_template, self.archive_template)

    def required_templates(self) -> tuple[str, ...]:
        return (self.post_template,) + self.site_templates()
