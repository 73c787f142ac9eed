"""Binding names for generated display models."""

from __future__ import annotations

import keyword
import unicodedata
from pathlib import Path
from typing import Union

from .errors import BindingNameError

DEFAULT_SUFFIX = ".xml"

# Names the generated module binds itself, plus the builtin its float literals call.
RESERVED_NAMES = frozenset({"EventBinding", "TreeNode", "__all__", "__namespace__", "float"})

# Prefix of the private names that hold subexpressions moved out of deep trees.
HOISTED_PREFIX = "_treegen_"


def is_valid_binding_name(name: str) -> bool:
    """Return True when ``name`` can be bound at module level in generated code."""

    if not name.isidentifier() or keyword.iskeyword(name):
        return False
    # Python folds identifiers to NFKC, so two spellings could bind one name.
    if unicodedata.normalize("NFKC", name) != name:
        return False
    return name not in RESERVED_NAMES and not name.startswith(HOISTED_PREFIX)


def binding_name_for(path: Union[str, Path], suffix: str = DEFAULT_SUFFIX) -> str:
    """Derive the binding name for a source file by stripping ``suffix``.

    Raises ``BindingNameError`` when the result is not usable; names are never
    rewritten.
    """

    file_name = Path(path).name
    name = file_name[: -len(suffix)] if suffix and file_name.endswith(suffix) else file_name
    if not is_valid_binding_name(name):
        raise BindingNameError(path, name)
    return name


__all__ = ["DEFAULT_SUFFIX", "HOISTED_PREFIX", "RESERVED_NAMES", "binding_name_for", "is_valid_binding_name"]
