"""Settings loading and validation for the YAML rfkillctl config file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from rfkillctl.core.errors import ConfigLoadError, ConfigValidationError
from rfkillctl.core.model import CHAR_DEVICE

SYSFS_ROOT = "/sys/class/rfkill"
CONFIG_ENV = "RFKILLCTL_CONFIG"
LOGGER = logging.getLogger(__name__)

_DEFAULTS: dict[str, Any] = {
    "char_device": CHAR_DEVICE,
    "sysfs_root": SYSFS_ROOT,
    "log_level": "WARNING",
}


class UniqueKeyLoader(yaml.SafeLoader):
    """Safe loader for config files; a setting given twice is an error."""


def _construct_settings_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in settings:
            line = key_node.start_mark.line + 1
            raise ConfigValidationError(f"Setting '{key}' is given more than once (line {line})")
        settings[key] = loader.construct_object(value_node, deep=deep)
    return settings


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_settings_mapping,
)


@dataclass(frozen=True)
class Settings:
    char_device: str = CHAR_DEVICE
    sysfs_root: str = SYSFS_ROOT
    log_level: str = "WARNING"
    source: str | None = None
    warnings: tuple[str, ...] = ()


@lru_cache(maxsize=1)
def _settings_validator() -> Any:
    schema_file = resources.files("rfkillctl.schemas") / "config.schema.json"
    schema = json.loads(schema_file.read_text(encoding="utf-8"))
    cls = validators.validator_for(schema)
    cls.check_schema(schema)
    return cls(schema)


def _config_path() -> Path:
    explicit = os.environ.get(CONFIG_ENV)
    if explicit:
        return Path(explicit)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "rfkillctl/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path) -> None:
    validator = _settings_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def load_settings() -> Settings:
    """Load settings from the user config file, falling back to defaults.

    ``$RFKILLCTL_CONFIG`` names an explicit file that must exist; otherwise
    ``$XDG_CONFIG_HOME/rfkillctl/config.yaml`` is used when present.
    """
    path = _config_path()
    if not path.exists():
        if os.environ.get(CONFIG_ENV):
            raise ConfigLoadError(f"Config file {path} named by {CONFIG_ENV} does not exist")
        return Settings()

    doc = _read_yaml(path)
    _validate(doc, path)

    warnings: list[str] = []
    values = {**_DEFAULTS, **doc}
    values["log_level"] = str(values["log_level"]).upper()
    for key in ("char_device", "sysfs_root"):
        if not Path(values[key]).exists():
            warning = f"Configured {key} '{values[key]}' does not exist"
            LOGGER.warning(warning)
            warnings.append(warning)

    return Settings(
        char_device=values["char_device"],
        sysfs_root=values["sysfs_root"],
        log_level=values["log_level"],
        source=str(path),
        warnings=tuple(warnings),
    )
