"""Loading of grok_exporter configuration files.

Loading is a startup gate: the YAML text is parsed, defaulted and checked
in one go, and any failure is raised to the caller.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from grok_exporter.errors import (
    ConfigError,
    ConfigLoadError,
    ConfigParseError,
    ConfigValidationError,
)
from grok_exporter.settings import Config

logger = logging.getLogger(__name__)


def parse_config(content: str | bytes) -> Config:
    """Parse YAML text into a configuration without defaults.

    Args:
        content: YAML document as text or raw bytes.

    Returns:
        Config with every field absent from the text left at its zero value.

    Raises:
        ConfigParseError: If the YAML is malformed or a value has the wrong shape.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(str(e)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Expected a mapping at the top level, got {type(data).__name__}"
        )

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(
            "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
        ) from e


def load_config_string(content: str | bytes) -> Config:
    """Parse, default and check a configuration.

    Args:
        content: YAML document as text or raw bytes.

    Returns:
        Defaulted, checked Config.

    Raises:
        ConfigParseError: If the YAML cannot be parsed.
        ConfigValidationError: If the configuration breaks a rule.
    """
    config = parse_config(content)
    logger.debug("Applying configuration defaults")
    config = config.with_defaults()
    config.check()
    return config


def load_config_file(filename: str | Path) -> Config:
    """Load a configuration from a YAML file.

    Args:
        filename: Path to the configuration file.

    Returns:
        Defaulted, checked Config.

    Raises:
        ConfigError: Any load failure, with the message prefixed by the
            file name. I/O problems are raised as ConfigLoadError.
    """
    logger.info("Loading configuration from %s", filename)
    try:
        # Decoding is left to the YAML reader so bad encodings are parse errors
        with open(filename, "rb") as f:
            content = f.read()
    except OSError as e:
        raise ConfigLoadError(f"Failed to load {filename}: {e}") from e

    try:
        return load_config_string(content)
    except ConfigValidationError as e:
        raise ConfigValidationError(
            f"Failed to load {filename}: {e}", field=e.field
        ) from e
    except ConfigError as e:
        raise e.__class__(f"Failed to load {filename}: {e}") from e


def dump_config(config: Config) -> str:
    """Render a configuration as YAML, never raising."""
    return config.to_yaml()
