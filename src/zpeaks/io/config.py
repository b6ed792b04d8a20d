"""Configuration file loading and saving."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from zpeaks.core.domain.config import ZPeaksConfig
from zpeaks.core.shared.exceptions import ConfigError


def load_config(path: Path) -> ZPeaksConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        ZPeaksConfig: Validated configuration object.

    Raises:
        ConfigError: If the file doesn't exist or the configuration is invalid.
    """
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise ConfigError(msg)

    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise ConfigError(msg) from e

    try:
        return ZPeaksConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {path}:\n{e}"
        raise ConfigError(msg) from e


def save_config(config: ZPeaksConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: Configuration object to save.
        path: Path where to save the TOML file.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)


def generate_default_config() -> str:
    """Generate a default configuration file as a string.

    Returns:
        str: TOML-formatted default configuration.
    """
    return """# ZPeaks Configuration File
# Generated automatically - edit as needed

# workers = 8  # Defaults to the number of CPUs

[pdf]
bandwidth = 50.0
normalize = false
# seed = 42  # Uncomment for a reproducible background model

[peaks]
threshold = 6.0

[sub_peaks]
mode = "skew"  # skew, standard
soft_max = 2000
hard_max = 5000
acceptable_error = 0.05

[output]
peaks = "peaks.bed"
sub_peaks = "sub_peaks.bed"
# signal = "signal.bedGraph"
signal_source = "pdf"  # pdf, coverage
signal_format = "bedgraph"  # bedgraph, wig, bigwig
"""
