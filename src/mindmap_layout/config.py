"""
Configuration file support for mindmap-layout.

Provides hierarchical configuration loading from:
1. Project config: .mindmap-layout.toml or mindmap-layout.toml in project root
2. User config: ~/.config/mindmap-layout/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .layout.annealer import (
    COOLING_FACTOR,
    GAIN_THRESHOLD,
    INITIAL_TEMPERATURE,
    MIN_TEMPERATURE,
    MOVES_PER_CELL,
    STUCK_LIMIT,
    AnnealingSchedule,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

# Config file names to search for in project directories
CONFIG_FILENAMES = [".mindmap-layout.toml", "mindmap-layout.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "mindmap-layout" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"format", "verbose", "quiet"},
    "layout": {"aspect_ratio", "min_edge_length"},
    "anneal": {
        "initial_temperature",
        "cooling_factor",
        "min_temperature",
        "stuck_limit",
        "gain_threshold",
        "moves_per_cell",
        "seed",
    },
}

# Expected value type for each key; floats also accept integers
KEY_TYPES = {
    "defaults.format": str,
    "defaults.verbose": bool,
    "defaults.quiet": bool,
    "layout.aspect_ratio": float,
    "layout.min_edge_length": float,
    "anneal.initial_temperature": float,
    "anneal.cooling_factor": float,
    "anneal.min_temperature": float,
    "anneal.stuck_limit": int,
    "anneal.gain_threshold": float,
    "anneal.moves_per_cell": int,
    "anneal.seed": int,
}

OUTPUT_FORMATS = ("table", "json")

_TYPE_NAMES = {str: "a string", bool: "true or false", int: "an integer", float: "a number"}


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    format: str = "table"
    verbose: bool = False
    quiet: bool = False


@dataclass
class LayoutConfig:
    """Lattice geometry settings."""

    aspect_ratio: float = 1.0
    min_edge_length: float = 20.0


@dataclass
class AnnealConfig:
    """Annealing schedule settings."""

    initial_temperature: float = INITIAL_TEMPERATURE
    cooling_factor: float = COOLING_FACTOR
    min_temperature: float = MIN_TEMPERATURE
    stuck_limit: int = STUCK_LIMIT
    gain_threshold: float = GAIN_THRESHOLD
    moves_per_cell: int = MOVES_PER_CELL
    seed: int | None = None

    def to_schedule(self) -> AnnealingSchedule:
        """Build a validated :class:`AnnealingSchedule`.

        Raises:
            ConfigurationError: If the values do not form a valid schedule.
        """
        return AnnealingSchedule(
            initial_temperature=float(self.initial_temperature),
            cooling_factor=float(self.cooling_factor),
            min_temperature=float(self.min_temperature),
            stuck_limit=int(self.stuck_limit),
            gain_threshold=float(self.gain_threshold),
            moves_per_cell=int(self.moves_per_cell),
        )


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    anneal: AnnealConfig = field(default_factory=AnnealConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            if project_data:
                _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Return every section as plain values, keyed like the TOML file."""
        return {
            section: {key: getattr(getattr(self, section), key) for key in sorted(keys)}
            for section, keys in KNOWN_KEYS.items()
        }


class ConfigError(Exception):
    """Configuration-related errors."""

    pass


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any] | None:
    """
    Load a TOML file safely.

    Returns:
        Parsed TOML data or None if no TOML parser is available

    Raises:
        ConfigError: If TOML is invalid
    """
    if tomllib is None:
        warnings.warn(
            "tomli package not installed. Config file support requires 'pip install tomli' for Python < 3.11.",
            stacklevel=2,
        )
        return None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section, known in KNOWN_KEYS.items():
        if section not in data:
            continue
        section_data = data[section]
        if not isinstance(section_data, dict):
            raise ConfigError(f"Config section '{section}' in {source} must be a table")
        _warn_unknown_keys(section_data, known, section, source)

        target = getattr(config, section)
        for key in known:
            if key in section_data:
                value = section_data[key]
                _check_value(f"{section}.{key}", value, source)
                setattr(target, key, value)
                sources[f"{section}.{key}"] = source


def _check_value(name: str, value: Any, source: str) -> None:
    """Raise ConfigError if *value* does not have the type expected for *name*."""
    expected = KEY_TYPES[name]
    if expected is float:
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif expected is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, expected)
    if not valid:
        raise ConfigError(
            f"Config key '{name}' in {source} must be {_TYPE_NAMES[expected]}, got {value!r}"
        )
    if name == "defaults.format" and value not in OUTPUT_FORMATS:
        raise ConfigError(
            f"Config key '{name}' in {source} must be one of {', '.join(OUTPUT_FORMATS)}, got {value!r}"
        )


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# mindmap-layout configuration file
# Place as .mindmap-layout.toml in project root or ~/.config/mindmap-layout/config.toml for user defaults

[defaults]
# Output format: table, json
# format = "table"

# Enable verbose output by default
# verbose = false

# Enable quiet mode by default
# quiet = false

[layout]
# Target width/height ratio of the laid-out map
# aspect_ratio = 1.0

# Spacing between neighbouring nodes
# min_edge_length = 20.0

[anneal]
# Starting temperature, in layout units
# initial_temperature = 200.0

# Temperature multiplier applied after each plateau
# cooling_factor = 0.5

# The run stops once the temperature reaches this floor
# min_temperature = 0.05

# Consecutive low-improvement batches before cooling
# stuck_limit = 5

# Relative improvement a batch needs to count as progress
# gain_threshold = 0.1

# Proposed moves per node in each batch
# moves_per_cell = 100

# Random seed for reproducible layouts (unset for random)
# seed = 42
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
