"""vroomctl configuration.

Configuration is resolved once at startup into an immutable VroomConfig and
passed explicitly to the components that need it.

Environment Variables:
    VROOM_HOME_DIR: Required. Root directory for VROOM state
    VROOM_VERSION: Image tag (default: v1.12.0)
    VROOM_DOCKER_NAME: Image name (default: vroomvrp/vroom-docker)
    VROOM_ROUTER: Routing backend passed to the container (default: osrm)
    VROOM_STORE_MODE: Container ID write mode, append or upsert (default: append)
    VROOM_CONF_TEMPLATE: Optional file kept in sync inside the conf directory

Settings file (optional, <VROOM_HOME_DIR>/vroom.yaml):
    container:
        name: str - Container name (default: vroom)
        image: str - Image name
        version: str - Image tag
        router: str - Routing backend
        network: str - Network mode (default: host)
        conf_mount: str - Mount point of the conf directory (default: /conf)
    store:
        mode: str - append | upsert
    runtime:
        executable: str - Container runtime client (default: docker)
    conf:
        template: str - Path of a file to keep in sync in the conf directory

Loading order (later overrides earlier): defaults, settings file,
environment variables.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .store import WriteMode

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "VROOM_HOME_DIR"
CONF_DIR_NAME = "conf"
CONFIG_FILE_NAME = "vroom.config"
SETTINGS_FILE_NAME = "vroom.yaml"


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""
    pass


DEFAULT_SETTINGS: dict[str, Any] = {
    "container": {
        "name": "vroom",
        "image": "vroomvrp/vroom-docker",
        "version": "v1.12.0",
        "router": "osrm",
        "network": "host",
        "conf_mount": "/conf",
    },
    "store": {
        "mode": "append",
    },
    "runtime": {
        "executable": "docker",
    },
    "conf": {
        "template": None,
    },
}

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "VROOM_VERSION": ("container", "version"),
    "VROOM_DOCKER_NAME": ("container", "image"),
    "VROOM_ROUTER": ("container", "router"),
    "VROOM_STORE_MODE": ("store", "mode"),
    "VROOM_CONF_TEMPLATE": ("conf", "template"),
}


@dataclass(frozen=True)
class VroomConfig:
    """Resolved configuration for one vroom invocation."""

    home_dir: Path
    container_name: str = "vroom"
    image: str = "vroomvrp/vroom-docker"
    version: str = "v1.12.0"
    router: str = "osrm"
    network: str = "host"
    conf_mount: str = "/conf"
    store_mode: WriteMode = WriteMode.APPEND
    docker_executable: str = "docker"
    conf_template: Path | None = None

    @property
    def conf_dir(self) -> Path:
        return self.home_dir / CONF_DIR_NAME

    @property
    def config_file(self) -> Path:
        return self.home_dir / CONFIG_FILE_NAME


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base, override values taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(settings_path: Path) -> dict[str, Any]:
    """Load the optional YAML settings file merged over DEFAULT_SETTINGS.

    Raises:
        ConfigurationError: If the file exists but is not a valid YAML mapping
    """
    if not settings_path.exists():
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        with open(settings_path, encoding="utf-8") as f:
            user_settings = yaml.safe_load(f) or {}
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Invalid YAML in {settings_path}: {e}") from e

    if not isinstance(user_settings, dict):
        raise ConfigurationError(f"{settings_path} must contain a mapping")

    for section, value in user_settings.items():
        if section in DEFAULT_SETTINGS and not isinstance(value, dict):
            raise ConfigurationError(
                f"Section '{section}' in {settings_path} must be a mapping"
            )

    logger.debug(f"Loaded settings from {settings_path}")
    return _deep_merge(DEFAULT_SETTINGS, user_settings)


def _parse_store_mode(value: Any) -> WriteMode:
    try:
        return WriteMode(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(mode.value for mode in WriteMode)
        raise ConfigurationError(
            f"Invalid store mode '{value}' (expected one of: {valid})"
        ) from None


def load_config(environ: Mapping[str, str] | None = None) -> VroomConfig:
    """Build the VroomConfig for this invocation.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved VroomConfig

    Raises:
        ConfigurationError: If VROOM_HOME_DIR is missing or empty, or a
            setting is invalid
    """
    if environ is None:
        environ = os.environ

    home = environ.get(HOME_ENV_VAR, "").strip()
    if not home:
        raise ConfigurationError(f"{HOME_ENV_VAR} environment variable is not defined")

    home_dir = Path(home).expanduser()
    settings = load_settings(home_dir / SETTINGS_FILE_NAME)

    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_var)
        if value:
            logger.debug(f"{env_var} overrides {section}.{key}")
            settings[section] = {**settings.get(section, {}), key: value}

    container = settings["container"]
    template = settings["conf"].get("template")
    template_path = None
    if template:
        template_path = Path(template).expanduser()
        if not template_path.is_absolute():
            template_path = home_dir / template_path

    config = VroomConfig(
        home_dir=home_dir,
        container_name=str(container["name"]),
        image=str(container["image"]),
        version=str(container["version"]),
        router=str(container["router"]),
        network=str(container["network"]),
        conf_mount=str(container["conf_mount"]),
        store_mode=_parse_store_mode(settings["store"]["mode"]),
        docker_executable=str(settings["runtime"]["executable"]),
        conf_template=template_path,
    )

    logger.info(f"Using {config.home_dir} as VROOM home directory")
    logger.info(f"Using {config.conf_dir} as VROOM conf directory")
    logger.info(f"Using {config.config_file} as VROOM config file")
    return config
