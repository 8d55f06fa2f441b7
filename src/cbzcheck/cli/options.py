# ABOUTME: Shared Click options for cbzcheck CLI commands.
# ABOUTME: Provides the --config option and the helper that turns it into a CheckerConfig.

from pathlib import Path

import click

from cbzcheck.config import DEFAULT_CONFIG_PATH, CheckerConfig, ConfigError, load_config

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to a TOML config file (default: {DEFAULT_CONFIG_PATH}, if present)",
)


def load_config_or_fail(config_path: Path | None) -> CheckerConfig:
    """Load the configuration, reporting a bad file as a usage error."""
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc
