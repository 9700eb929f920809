"""Configuration loading utilities."""

from __future__ import annotations

import logging
import os
import tomllib
from typing import Any

from pydantic import ValidationError

from ..errors.internal import ConfigError
from .model import ObserverConfig


class ConfigLoader:
    """Loads and validates the TOML configuration file."""

    def load_raw(self, config_file: str | os.PathLike[str]) -> dict[str, Any]:
        """Read the TOML document.

        Raises:
            ConfigError: If the file is missing, unreadable or not valid TOML.
        """
        try:
            with open(config_file, "rb") as f:
                return tomllib.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {config_file}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Deserialize toml error in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Read error for {config_file}: {e}") from e

    def get_configuration(self, config_file: str | os.PathLike[str]) -> ObserverConfig:
        """Load and validate the configuration.

        Raises:
            ConfigError: If loading or validation fails.
        """
        raw = self.load_raw(config_file)
        try:
            config = ObserverConfig.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration in {config_file}: {problems}") from e
        logging.debug(f"✅ Configuration loaded from {config_file}")
        return config


def load_config(config_file: str | os.PathLike[str]) -> ObserverConfig:
    return ConfigLoader().get_configuration(config_file)
