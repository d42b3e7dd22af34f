from __future__ import annotations

import json
import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

APP_NAME = "workstyle"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_CONFIG_RESOURCE = "default_config.toml"
DEFAULT_FALLBACK_ICON = " "
OTHER_SECTION = "other"
FALLBACK_ICON_KEY = "fallback_icon"

IconMappings = List[Tuple[str, str]]

log = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    pass


class MissingConfigDir(ConfigError):
    def __init__(self) -> None:
        super().__init__("Missing default config dir")


class NotATable(ConfigError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"Expected a map, got {type(value).__name__}")
        self.value = value


class NonStringValue(ConfigError):
    def __init__(self, key: str, value: Any) -> None:
        super().__init__(
            f"Expected for the map value to be a string: {key!r} is {type(value).__name__}"
        )
        self.key = key
        self.value = value


@dataclass(frozen=True)
class IconConfig:
    mappings: IconMappings = field(default_factory=list)
    fallback_icon: str = DEFAULT_FALLBACK_ICON
    source_path: Optional[Path] = None

    def to_json(self) -> str:
        out = {
            "source_path": str(self.source_path) if self.source_path else None,
            "fallback_icon": self.fallback_icon,
            "mappings": [[k, v] for k, v in self.mappings],
        }
        return json.dumps(out, indent=2, ensure_ascii=False)


def default_config_bytes() -> bytes:
    """Return the bundled default configuration, as shipped with the package."""
    return resources.files(__package__).joinpath(DEFAULT_CONFIG_RESOURCE).read_bytes()


def default_config_text() -> str:
    return default_config_bytes().decode("utf-8")


def decode_ordered_table(value: Any) -> IconMappings:
    """Turn a parsed TOML table into ``(key, value)`` pairs in declaration order.

    tomllib builds tables as plain dicts, which keep insertion order, so the
    order of the returned list is the order the keys appear in the source.
    Raises NotATable if ``value`` is not a table and NonStringValue on the
    first entry whose value is not a string.
    """
    if not isinstance(value, dict):
        raise NotATable(value)
    pairs: IconMappings = []
    for key, item in value.items():
        if not isinstance(item, str):
            raise NonStringValue(key, item)
        pairs.append((key, item))
    return pairs


def _mapping_table(document: Dict[str, Any]) -> Dict[str, Any]:
    # The [other] table holds settings; a root-level `other = "..."` is still an icon rule
    return {
        k: v
        for k, v in document.items()
        if not (k == OTHER_SECTION and isinstance(v, dict))
    }


def default_icon_mappings() -> IconMappings:
    # The bundled file is ours, so any error here is a packaging bug and propagates.
    return decode_ordered_table(_mapping_table(tomllib.loads(default_config_text())))


def default_fallback_icon() -> str:
    other = tomllib.loads(default_config_text()).get(OTHER_SECTION) or {}
    return other.get(FALLBACK_ICON_KEY, DEFAULT_FALLBACK_ICON)


def user_config_dir() -> Optional[Path]:
    """Return the platform's per-user configuration directory, if there is one.

    ``WORKSTYLE_CONFIG_HOME`` takes priority over the platform convention.
    """
    override = os.environ.get("WORKSTYLE_CONFIG_HOME")
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None

    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        home = None

    if sys.platform == "darwin":
        return home / "Library" / "Application Support" if home else None

    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    # XDG base dirs must be absolute; relative values are ignored
    if xdg_home and os.path.isabs(xdg_home):
        return Path(xdg_home)
    return home / ".config" if home else None


def config_file() -> Path:
    """Compute ``<user config dir>/workstyle/config.toml``, creating its directory."""
    base = user_config_dir()
    if base is None:
        raise MissingConfigDir()
    app_dir = base / APP_NAME
    if not app_dir.exists():
        log.info("Creating config directory %s", app_dir)
        app_dir.mkdir(parents=True)
    return app_dir / CONFIG_FILE_NAME


def generate_config_file_if_absent() -> Path:
    """Return the config path, seeding it with the bundled defaults on first run.

    OSErrors from creating the directory or the file are not caught.
    """
    path = config_file()
    if not path.exists():
        log.info("Writing default configuration to %s", path)
        path.write_bytes(default_config_bytes())
    return path


def _read_config(path: Path) -> Dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def get_icon_mappings(location: Optional[Path]) -> IconMappings:
    """Resolve the ordered icon mappings, falling back to the bundled defaults.

    A user file that parses is used as is, even if it is empty or leaves out
    entries present in the defaults. Nothing the user writes can make this
    raise.
    """
    if location is None:
        return default_icon_mappings()
    try:
        return decode_ordered_table(_mapping_table(_read_config(location)))
    except tomllib.TOMLDecodeError as e:
        log.error(
            "Error parsing configuration file.\nInvalid syntax in %s.\n%s", location, e
        )
    except RecursionError:
        log.error("Invalid configuration file %s: values are nested too deeply", location)
    except (OSError, UnicodeDecodeError, ConfigError) as e:
        log.error("Invalid configuration file %s: %s", location, e)
    return default_icon_mappings()


def get_fallback_icon(location: Optional[Path]) -> str:
    """Resolve ``[other].fallback_icon``, defaulting to a blank icon."""
    if location is None:
        return DEFAULT_FALLBACK_ICON
    try:
        other = _read_config(location).get(OTHER_SECTION)
    except tomllib.TOMLDecodeError as e:
        log.error(
            "Error parsing configuration file.\nInvalid syntax in %s.\n%s", location, e
        )
        return DEFAULT_FALLBACK_ICON
    except RecursionError:
        log.error("Invalid configuration file %s: values are nested too deeply", location)
        return DEFAULT_FALLBACK_ICON
    except (OSError, UnicodeDecodeError) as e:
        log.error("Could not read configuration file %s: %s", location, e)
        return DEFAULT_FALLBACK_ICON

    # A non-table `other` is an icon rule, not the settings section
    if not isinstance(other, dict):
        return DEFAULT_FALLBACK_ICON
    icon = other.get(FALLBACK_ICON_KEY, DEFAULT_FALLBACK_ICON)
    if not isinstance(icon, str):
        log.error(
            "Invalid configuration file %s: %s must be a string", location, FALLBACK_ICON_KEY
        )
        return DEFAULT_FALLBACK_ICON
    return icon


def locate_config() -> Optional[Path]:
    """Locate (and seed) the config file; ``None`` if there is no config dir.

    Seeding failures propagate: a healthy environment is expected to allow it.
    """
    try:
        return generate_config_file_if_absent()
    except MissingConfigDir as e:
        log.warning("%s; using built-in defaults", e)
        return None


def load_icon_config() -> IconConfig:
    location = locate_config()
    return IconConfig(
        mappings=get_icon_mappings(location),
        fallback_icon=get_fallback_icon(location),
        source_path=location,
    )
