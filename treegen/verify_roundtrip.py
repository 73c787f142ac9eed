"""Round-trip verification between parsed trees and the emitted module."""

from __future__ import annotations

import difflib
import importlib.util
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .model import TreeNode


def _pretty_json(node: TreeNode) -> List[str]:
    return (node.model_dump_json(indent=2, by_alias=True) + "\n").splitlines(keepends=True)


def load_generated(source: str, module_name: str = "treegen_generated") -> Dict[str, Any]:
    """Import generated module source and return its global namespace.

    The source is written to a scratch directory and loaded through the
    regular import machinery; the module is not added to ``sys.modules``.
    """
    with tempfile.TemporaryDirectory(prefix="treegen-") as scratch:
        path = Path(scratch) / f"{module_name}.py"
        path.write_text(source, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(module_name, path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    return vars(module)


def verify_roundtrip(models: Mapping[str, TreeNode], source: str) -> List[str]:
    """Return one error per binding whose reconstructed tree differs."""

    namespace = load_generated(source)
    errors: List[str] = []
    for name, expected in models.items():
        restored = namespace.get(name)
        if restored == expected:
            continue
        if not isinstance(restored, TreeNode):
            errors.append(f"{name}: generated module does not bind a TreeNode")
            continue
        diff = difflib.unified_diff(
            _pretty_json(expected),
            _pretty_json(restored),
            fromfile=f"parsed/{name}",
            tofile=f"generated/{name}",
        )
        errors.append("".join(diff) or f"{name}: reconstructed tree differs")
    return errors


__all__ = ["load_generated", "verify_roundtrip"]
