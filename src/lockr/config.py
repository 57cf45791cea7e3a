"""Configuration management for lockr."""

import logging
import os
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
from xdg_base_dirs import xdg_config_home, xdg_data_home

from .errors import ConfigError
from .generator import PasswordPolicy


@dataclass
class Config:
    """Application configuration."""

    store_path: Optional[Path] = None
    log_level: str = "WARNING"
    policy: PasswordPolicy = field(default_factory=PasswordPolicy)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from file.

        Example::

            store_path = "~/vault/salts.json"
            log_level = "INFO"

            [generator]
            length = 24
            includeSymbols = false

        Args:
            config_path: Path to config file, defaults to XDG_CONFIG_HOME/lockr/config.toml

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigError: If the file is not valid TOML or a setting is invalid
        """
        if config_path is None:
            config_path = xdg_config_home() / "lockr" / "config.toml"

        config = cls()

        if config_path.exists():
            try:
                with open(config_path, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{config_path} is not valid TOML: {exc}") from exc

            if "store_path" in data:
                config.store_path = Path(data["store_path"]).expanduser()
            if "log_level" in data:
                config.log_level = str(data["log_level"]).upper()
                if config.log_level not in logging.getLevelNamesMapping():
                    raise ConfigError(f"{config_path}: unknown log_level {data['log_level']!r}")
            if "generator" in data:
                if not isinstance(data["generator"], dict):
                    raise ConfigError(f"{config_path}: [generator] must be a table")
                try:
                    config.policy = PasswordPolicy.from_dict(data["generator"])
                except ValueError as exc:
                    raise ConfigError(f"{config_path}: {exc}") from exc

        return config


def get_default_store_path(custom_path: Optional[Path] = None, config: Optional[Config] = None) -> Path:
    """Get the salt store path based on config and arguments.

    Lookup order:
    1. Custom path argument
    2. LOCKR_STORE environment variable
    3. Config file store_path
    4. XDG_DATA_HOME/lockr/salts.json

    Args:
        custom_path: Optional custom store path
        config: Already loaded config, loaded from disk when omitted

    Returns:
        Path to use for the salt store
    """
    if custom_path:
        return custom_path

    env_store = os.environ.get("LOCKR_STORE")
    if env_store:
        return Path(env_store)

    if config is None:
        config = Config.load()
    if config.store_path:
        return config.store_path

    return xdg_data_home() / "lockr" / "salts.json"
