from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import IoError, RenderError

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = {".html", ".htm", ".xml", ".txt"}


def is_template(name: str) -> bool:
    """Theme files compiled up front; other files (images, fonts) are ignored."""
    filename = name.rsplit("/", 1)[-1]
    return not filename.startswith(".") and Path(filename).suffix.lower() in TEMPLATE_SUFFIXES


class Theme:
    """Compiled set of site templates loaded from a single directory."""

    def __init__(self, env: Environment, directory: Path) -> None:
        self.env = env
        self.directory = directory

    @classmethod
    def compile(cls, directory: Path, required: Iterable[str] = ()) -> "Theme":
        directory = Path(directory)
        if not directory.is_dir():
            raise RenderError("templates directory not found", directory)
        env = Environment(
            loader=FileSystemLoader(str(directory)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        required = tuple(required)
        names = env.list_templates()
        for name in names:
            if not is_template(name) and name not in required:
                continue
            try:
                env.get_template(name)
            except (TemplateError, UnicodeDecodeError) as exc:
                raise RenderError("error compiling template", directory / name) from exc
            logger.debug("compiled template %s", name)
        for name in required:
            if name not in names:
                raise RenderError("missing template", directory / name)
        return cls(env, directory)

    def render(self, name: str, context: dict, source: Optional[Path] = None) -> str:
        try:
            return self.env.get_template(name).render(context)
        except Exception as exc:  # expressions in user templates can raise anything
            raise RenderError(f"error rendering {name}", source) from exc


def write_file(path: Path, text: str, force: bool) -> None:
    """Write ``text`` to ``path``, creating parent directories.

    With ``force`` an existing file is truncated; without it the write fails
    and the existing file is left as it was.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError("error creating directory", path.parent) from exc
    mode = "w" if force else "x"
    try:
        with path.open(mode, encoding="utf-8", newline="") as handle:
            handle.write(text)
    except FileExistsError as exc:
        raise IoError("refusing to overwrite existing file (use --force)", path) from exc
    except OSError as exc:
        raise IoError("error writing", path) from exc
