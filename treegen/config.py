"""Generator configuration loaded from ``treegen.yaml`` and CLI flags."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .emitter import NAMESPACE_RE
from .errors import ConfigError, GeneratorIOError
from .naming import DEFAULT_SUFFIX

CONFIG_FILENAME = "treegen.yaml"
DEFAULT_NAMESPACE = "main"


class GeneratorConfig(BaseModel):
    """Settings for one generator run."""

    package: str = Field(
        DEFAULT_NAMESPACE,
        description="Namespace recorded in the generated module.",
    )
    root: Path = Field(
        Path("."), description="Directory searched recursively for input files."
    )
    suffix: str = Field(
        DEFAULT_SUFFIX, description="File name suffix selecting input documents."
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("package")
    @classmethod
    def _check_package(cls, value: str) -> str:
        if not NAMESPACE_RE.fullmatch(value):
            raise ValueError(f"{value!r} is not a dotted Python name")
        return value

    @field_validator("suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if len(value) < 2 or not value.startswith("."):
            raise ValueError(f"{value!r} must look like '.xml'")
        return value


def load_config(path: Optional[Path] = None) -> GeneratorConfig:
    """Load settings from ``path``, or from ``treegen.yaml`` when present.

    An explicit ``path`` must exist; the implicit file is optional.
    """

    if path is None:
        path = Path(CONFIG_FILENAME)
        if not path.exists():
            return GeneratorConfig()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GeneratorIOError(path, "reading", exc) from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of settings.")
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc


def apply_overrides(config: GeneratorConfig, overrides: Dict[str, Any]) -> GeneratorConfig:
    """Return a copy of ``config`` with the non-None ``overrides`` applied."""

    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    try:
        return GeneratorConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as exc:
        raise ConfigError(f"Invalid option: {exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_NAMESPACE",
    "GeneratorConfig",
    "apply_overrides",
    "load_config",
]
