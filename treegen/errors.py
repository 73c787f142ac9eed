"""Errors raised while generating display model modules."""

from __future__ import annotations

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class TreegenError(Exception):
    """Base class for failures reported to the operator."""


class ConfigError(TreegenError):
    """The generator configuration could not be loaded or is invalid."""


class ParseError(TreegenError):
    """An input document is not a well-formed display model."""

    def __init__(self, path: PathLike, cause: object) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Error parsing {self.path}: {cause}")


class BindingNameError(TreegenError):
    """A file name does not map to a usable module-level name."""

    def __init__(self, path: PathLike, name: str) -> None:
        self.path = str(path)
        self.name = name
        super().__init__(
            f"Error naming {self.path}: {name!r} is not a valid Python identifier "
            "or is reserved by the generated module"
        )


class GeneratorIOError(TreegenError):
    """Reading an input file or writing the output file failed."""

    def __init__(self, path: PathLike, operation: str, cause: OSError) -> None:
        self.path = str(path)
        self.operation = operation
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"Error {operation} {self.path}: {reason}")


class EmissionInvariantError(RuntimeError):
    """The emitter produced, or was asked to produce, invalid code.

    This signals a defect in the generator rather than bad input and is never
    converted into an operator message.
    """


__all__ = [
    "BindingNameError",
    "ConfigError",
    "EmissionInvariantError",
    "GeneratorIOError",
    "ParseError",
    "TreegenError",
]
