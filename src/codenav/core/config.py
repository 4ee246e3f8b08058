"""Configuration models and loader for codenav.

All sections are frozen Pydantic models with defaults matching the engine's
fixed limits, so ``CodenavConfig()`` is always a valid configuration. A YAML
file may override any subset of fields.

Example:
    >>> config = load_config(Path("codenav.yaml"))
    >>> config.symbol_index.cache_ttl_ms
    30000

"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from codenav.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Maximum configuration file size (1MB)
MAX_CONFIG_SIZE = 1024 * 1024

DEFAULT_CODE_EXTENSIONS: tuple[str, ...] = (
    "ts", "tsx", "js", "jsx", "mts", "cts",
    "rs", "py", "go", "rb", "java", "kt",
    "c", "cpp", "h", "hpp", "cs", "swift",
)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "target",
    "dist",
    "build",
    "__pycache__",
    ".next",
    ".nuxt",
    ".venv",
    "vendor",
)


class SymbolIndexConfig(BaseModel):
    """Workspace symbol index settings.

    Attributes:
        cache_ttl_ms: Lifetime of the single-slot symbol cache.
        max_files: Maximum number of files parsed per index build.
        tree_depth: Depth limit for project tree enumeration.
        code_extensions: File extensions (without dot) considered source code.

    """

    model_config = ConfigDict(frozen=True)

    cache_ttl_ms: int = Field(
        default=30_000,
        ge=0,
        description="Symbol cache lifetime in milliseconds",
    )
    max_files: int = Field(
        default=200,
        ge=1,
        description="Maximum files parsed per index build",
    )
    tree_depth: int = Field(
        default=10,
        ge=1,
        description="Project tree enumeration depth",
    )
    code_extensions: tuple[str, ...] = Field(
        default=DEFAULT_CODE_EXTENSIONS,
        description="Source file extensions to index (without leading dot)",
    )

    @field_validator("code_extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Lowercase extensions and strip leading dots."""
        return tuple(ext.lower().lstrip(".") for ext in v if ext.strip("."))


class CallGraphConfig(BaseModel):
    """Heuristic call graph settings.

    Attributes:
        incoming_file_cap: Maximum project files scanned for incoming calls.
        tree_depth: Depth limit for the cross-file project tree walk.

    """

    model_config = ConfigDict(frozen=True)

    incoming_file_cap: int = Field(
        default=50,
        ge=0,
        description="Maximum project files scanned for incoming calls",
    )
    tree_depth: int = Field(
        default=5,
        ge=1,
        description="Project tree enumeration depth for cross-file search",
    )


class FileSystemConfig(BaseModel):
    """Local file system collaborator settings.

    Attributes:
        skip_dirs: Directory names never descended into.
        max_file_size: Files larger than this (bytes) are treated as unreadable.

    """

    model_config = ConfigDict(frozen=True)

    skip_dirs: tuple[str, ...] = Field(
        default=DEFAULT_SKIP_DIRS,
        description="Directory names excluded from tree enumeration",
    )
    max_file_size: int = Field(
        default=1024 * 1024,
        ge=1,
        description="Maximum readable file size in bytes",
    )


class CodenavConfig(BaseModel):
    """Root configuration. Every section is always present."""

    model_config = ConfigDict(frozen=True)

    symbol_index: SymbolIndexConfig = Field(default_factory=SymbolIndexConfig)
    call_graph: CallGraphConfig = Field(default_factory=CallGraphConfig)
    filesystem: FileSystemConfig = Field(default_factory=FileSystemConfig)


def load_config(path: Path | None = None) -> CodenavConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the YAML file. None returns the defaults.

    Returns:
        Validated CodenavConfig.

    Raises:
        ConfigError: On file/parse/validation errors.

    """
    if path is None:
        return CodenavConfig()

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    if not path.is_file():
        raise ConfigError(f"Config path is not a file: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if len(content) > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config file {path} exceeds 1MB limit")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # Empty file means "all defaults"
    if data is None:
        logger.debug("Config file %s is empty, using defaults", path)
        return CodenavConfig()

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must be a YAML mapping, got {type(data).__name__}"
        )

    try:
        return CodenavConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
