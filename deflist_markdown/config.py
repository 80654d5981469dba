"""Configuration loading and management."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE

CONFIG_TABLE = "deflist-markdown"
MIN_INDENTATION = 0
MAX_INDENTATION = 50

_HEX_COLOR = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{6})$")


@dataclass
class DeflistConfig:
    """Styling configuration for definition lists.

    These values only affect how terms and definitions look; they never
    change which lines are classified as terms or definitions.

    Attributes:
        term_color: Hex colour of term text.
        term_bold: Whether terms are bold.
        term_italic: Whether terms are italic.
        definition_indentation: Indentation of definitions, in pixels.
        max_file_size: Maximum file size in bytes that the CLI will read.

    Examples:
        DeflistConfig(term_color="#224466", definition_indentation=20)
    """

    # Terms
    term_color: str = "#555577"
    term_bold: bool = True
    term_italic: bool = False

    # Definitions
    definition_indentation: int = 30

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`definition_indentation` must be between 0 and 50")
    """


def load_config(search_path: Path) -> DeflistConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.deflist-markdown]`` table from `pyproject.toml` and the
    ``[deflist-markdown]`` or ``[tool.deflist-markdown]`` table from
    `.deflist-markdown.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        DeflistConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / f".{CONFIG_TABLE}.toml",
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return DeflistConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> DeflistConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> DeflistConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return DeflistConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return DeflistConfig()

    try:
        return DeflistConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: DeflistConfig) -> DeflistConfig:
    """Expand three-digit colours and lowercase the term colour.

    Examples:
        normalize_config(DeflistConfig(term_color="#ABC")).term_color  # "#aabbcc"
    """
    color = config.term_color
    if not isinstance(color, str):
        return config
    color = color.strip().lower()
    if _HEX_COLOR.match(color) and len(color) == 4:
        color = "#" + "".join(digit * 2 for digit in color[1:])
    return replace(config, term_color=color)


def validate_config(config: DeflistConfig) -> None:
    """Validate a `DeflistConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the colour is not a hex colour, a flag is not a
            boolean, the indentation is out of range, or the size limit is not
            a positive integer.

    Examples:
        validate_config(DeflistConfig(definition_indentation=12))
    """
    config = normalize_config(config)

    if not isinstance(config.term_color, str) or not _HEX_COLOR.match(config.term_color):
        raise ConfigError("`term_color` must be a hex colour such as #555577")
    if not isinstance(config.term_bold, bool):
        raise ConfigError("`term_bold` must be a boolean")
    if not isinstance(config.term_italic, bool):
        raise ConfigError("`term_italic` must be a boolean")

    _ensure_integers(
        {
            "definition_indentation": config.definition_indentation,
            "max_file_size": config.max_file_size,
        }
    )
    if not MIN_INDENTATION <= config.definition_indentation <= MAX_INDENTATION:
        raise ConfigError(
            f"`definition_indentation` must be between {MIN_INDENTATION} and {MAX_INDENTATION}"
        )
    if config.max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")


def apply_overrides(config: DeflistConfig, **overrides: object) -> DeflistConfig:
    """Apply override values to a `DeflistConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        DeflistConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `DeflistConfig`.

    Examples:
        updated = apply_overrides(config, term_bold=False, definition_indentation=12)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def reset_config(config: DeflistConfig) -> DeflistConfig:
    """Restore the styling defaults while keeping the configured limits."""
    defaults = DeflistConfig()
    return replace(
        defaults,
        max_file_size=config.max_file_size,
    )


def build_config(search_path: Path, **overrides: object) -> DeflistConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        DeflistConfig: Validated configuration ready for rendering.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), term_italic=True)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
