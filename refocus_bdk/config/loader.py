"""Read the TOML layers of a bot project.

A bot keeps its configuration beside its package.json::

    my-bot/
        package.json
        config/default.toml
        config/production.toml
        web/dist/bot.zip

``default.toml`` is the base layer and ``{BDK_ENV}.toml`` is laid over it.
Either file may be missing; a bot configured only through ``BDK_*``
variables needs neither. Relative paths written in a layer are resolved
against the project root, so the bot finds its UI bundle and log directory
whatever directory it is started from.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "BDK_CONFIG_DIR"
ENVIRONMENT_ENV = "BDK_ENV"
DEFAULT_ENVIRONMENT = "development"
BASE_LAYER = "default"

# Ancestors searched for a project root before falling back to cwd
MAX_SEARCH_DEPTH = 5

# Keys holding filesystem paths, per section
PATH_KEYS: dict[str, tuple[str, ...]] = {
    "install": ("ui_bundle",),
    "logging": ("log_dir",),
}

# Sections whose variant is chosen by this key
VARIANT_KEYS: dict[str, str] = {"cache": "backend"}


@dataclass(frozen=True)
class ConfigLayers:
    """The merged TOML values of one environment and where they came from.

    Attributes:
        config_dir: Directory the layers were looked up in
        root: Bot project root; relative paths resolve against it
        environment: Value of BDK_ENV used to pick the override layer
        files: Layers that were read, base first
        values: Merged values handed to the settings source
    """

    config_dir: Path
    environment: str
    files: tuple[Path, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def root(self) -> Path:
        return self.config_dir.parent


def get_environment() -> str:
    """Name of the override layer, from BDK_ENV (default "development")."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def find_config_dir(start: Path | None = None) -> Path:
    """Locate the ``config/`` directory of the bot project.

    BDK_CONFIG_DIR names the directory explicitly. Otherwise the nearest
    ancestor of ``start`` (default cwd) holding ``config/`` or
    ``package.json`` is taken as the project root. The returned directory
    may not exist.

    Raises:
        FileNotFoundError: If BDK_CONFIG_DIR points at nothing
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        config_dir = Path(explicit)
        if not config_dir.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return config_dir.resolve()

    start = (start or Path.cwd()).resolve()
    candidate = start
    for _ in range(MAX_SEARCH_DEPTH):
        if (candidate / "config").is_dir() or (candidate / "package.json").is_file():
            return candidate / "config"
        if candidate.parent == candidate:
            break
        candidate = candidate.parent
    return start / "config"


def read_layer(path: Path, root: Path) -> dict[str, Any]:
    """Parse one layer and anchor its relative paths at ``root``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the TOML syntax is invalid
    """
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            layer = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    for section, keys in PATH_KEYS.items():
        values = layer.get(section)
        if not isinstance(values, dict):
            continue
        for key in keys:
            value = values.get(key)
            if isinstance(value, str) and value and not Path(value).is_absolute():
                values[key] = str(root / value)
    return layer


def overlay(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Lay ``layer`` over ``base`` and return a new dict.

    Sections merge key by key. A section that switches variant (for example
    the cache ``backend``) replaces the base section outright, so settings
    of the old backend such as a Redis password do not carry over.
    """
    result = dict(base)
    for key, value in layer.items():
        current = result.get(key)
        if not (isinstance(current, dict) and isinstance(value, dict)):
            result[key] = value
            continue

        variant = VARIANT_KEYS.get(key)
        if variant and variant in value and value[variant] != current.get(variant):
            result[key] = dict(value)
        else:
            result[key] = {**current, **value}
    return result


def load_config(start: Path | None = None) -> ConfigLayers:
    """Read ``default.toml`` then ``{BDK_ENV}.toml`` from the project.

    Args:
        start: Directory the project search begins in (default cwd)

    Returns:
        ConfigLayers with the merged values
    """
    config_dir = find_config_dir(start)
    root = config_dir.parent
    environment = get_environment()

    names = [BASE_LAYER]
    if environment != BASE_LAYER:
        names.append(environment)

    values: dict[str, Any] = {}
    files: list[Path] = []
    for name in names:
        path = config_dir / f"{name}.toml"
        if path.is_file():
            values = overlay(values, read_layer(path, root))
            files.append(path)

    return ConfigLayers(
        config_dir=config_dir,
        environment=environment,
        files=tuple(files),
        values=values,
    )
