"""Discover markup files, parse them and produce the generated module."""

from __future__ import annotations

import difflib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

from .config import GeneratorConfig
from .emitter import emit_module
from .errors import EmissionInvariantError, GeneratorIOError
from .io_utils import read_bytes, read_text_if_exists, warn, write_text
from .model import TreeNode
from .naming import DEFAULT_SUFFIX, binding_name_for
from .parser import parse_tree
from .verify_roundtrip import verify_roundtrip

OUTPUT_FILENAME = "treegen_generated.py"


@dataclass
class GenerationResult:
    """Outcome of one generator run before anything is written."""

    source: str
    models: Dict[str, TreeNode]
    paths: List[Path]

    @property
    def node_count(self) -> int:
        return sum(1 for model in self.models.values() for _ in model.iter_tree())


def _raise_listing_error(exc: OSError) -> None:
    raise GeneratorIOError(exc.filename or "", "listing", exc) from exc


def discover_sources(root: Path, suffix: str = DEFAULT_SUFFIX) -> List[Path]:
    """Return every file below ``root`` ending with ``suffix``, sorted by path."""

    found: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_listing_error):
        for filename in filenames:
            if filename.endswith(suffix):
                found.append(Path(dirpath) / filename)
    return sorted(found)


def load_models(paths: Iterable[Path], *, suffix: str = DEFAULT_SUFFIX) -> Dict[str, TreeNode]:
    """Parse each file and bind its tree to the name derived from the file name.

    When two files derive the same name the later one replaces the earlier
    tree; the replacement is reported on stderr but not prevented.
    """

    models: Dict[str, TreeNode] = {}
    origins: Dict[str, Path] = {}
    for path in paths:
        name = binding_name_for(path, suffix)
        node = parse_tree(read_bytes(path), source=str(path))
        if name in models:
            warn(f"warning: {path} redefines '{name}' from {origins[name]}; keeping {path}")
        models[name] = node
        origins[name] = path
    return models


def generate(config: GeneratorConfig) -> GenerationResult:
    paths = discover_sources(config.root, config.suffix)
    models = load_models(paths, suffix=config.suffix)
    source = emit_module(models, namespace=config.package)
    return GenerationResult(source=source, models=models, paths=paths)


def ensure_roundtrip(result: GenerationResult) -> None:
    """Raise ``EmissionInvariantError`` unless the source rebuilds every tree."""

    errors = verify_roundtrip(result.models, result.source)
    if errors:
        raise EmissionInvariantError("round-trip verification failed:\n" + "\n".join(errors))


def check_output(path: Path, source: str) -> str:
    """Return a unified diff between ``path`` and ``source``; empty when current."""

    existing = read_text_if_exists(path)
    if existing == source:
        return ""
    diff = difflib.unified_diff(
        (existing or "").splitlines(keepends=True),
        source.splitlines(keepends=True),
        fromfile=f"{path.name} (on disk)",
        tofile=f"{path.name} (generated)",
    )
    return "".join(diff)


def write_output(path: Path, source: str) -> Path:
    return write_text(path, source)


__all__ = [
    "GenerationResult",
    "OUTPUT_FILENAME",
    "check_output",
    "discover_sources",
    "ensure_roundtrip",
    "generate",
    "load_models",
    "write_output",
]
