from __future__ import annotations

import re

LINK_RE = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$")
TRUE_WORDS = {"1", "true", "yes", "y", "on"}


def parse_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_WORDS
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def parse_int(value: object, default: int) -> int:
    if isinstance(value, int):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def is_valid_link(link: str) -> bool:
    return bool(LINK_RE.match(link))
