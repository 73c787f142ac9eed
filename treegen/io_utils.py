"""File IO helpers that report failures with the offending path."""

from __future__ import annotations

import sys
from pathlib import Path

from .errors import GeneratorIOError


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise GeneratorIOError(path, "reading", exc) from exc


def read_text_if_exists(path: Path) -> str | None:
    """Return the file's text, or None when it does not exist yet."""
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GeneratorIOError(path, "reading", exc) from exc


def write_text(path: Path, content: str) -> Path:
    """Write text content to a file, creating parent directories as needed."""

    try:
        if path.parent != Path(""):
            path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise GeneratorIOError(path, "writing", exc) from exc
    return path


def warn(msg: str) -> None:
    print(msg, file=sys.stderr)
