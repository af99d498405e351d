from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class SiteError(Exception):
    """Base error for the generation pipeline.

    Carries a human-readable message, the offending path when one is known,
    and the underlying error through the usual ``raise ... from exc`` chain.
    """

    def __init__(self, message: str, path: Optional[PathLike] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        parts = [self.message]
        if self.path is not None:
            parts.append(str(self.path))
        if self.__cause__ is not None:
            parts.append(str(self.__cause__))
        return ": ".join(parts)


class IoError(SiteError):
    pass


class ParseError(SiteError):
    pass


class ValidationError(SiteError):
    pass


class RenderError(SiteError):
    pass


class ResolutionError(SiteError):
    pass
