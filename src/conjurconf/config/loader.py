"""
Configuration loading and saving for Conjur clients.

Configuration is resolved in increasing order of precedence:

    1. Built-in defaults (netrc file under the home directory)
    2. System conjurrc (/etc/conjur.conf)
    3. User conjurrc (~/.conjurrc, or the path in CONJURRC)
    4. CONJUR_* environment variables

Loading never validates. Call Config.validate() before handing the result to
a client.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from conjurconf.config.settings import Config, ConfigurationError, conjurrc
from conjurconf.config.sources import merge_env, merge_yaml

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_FILE = Path("/etc/conjur.conf")
CONFIG_FILE_NAME = ".conjurrc"
NETRC_FILE_NAME = ".netrc"

# Overrides the user conjurrc location
CONFIG_PATH_VARIABLE = "CONJURRC"


def _home_dir(environ: Mapping[str, str]) -> Path:
    home = environ.get("HOME")
    if home:
        return Path(home)
    return Path.home()


def default_netrc_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the netrc path used when none is configured ($HOME/.netrc)."""
    if environ is None:
        environ = os.environ
    return _home_dir(environ) / NETRC_FILE_NAME


def get_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """
    Get the user conjurrc path.

    Returns the path from the CONJURRC environment variable if set,
    otherwise $HOME/.conjurrc.
    """
    if environ is None:
        environ = os.environ

    env_path = environ.get(CONFIG_PATH_VARIABLE)
    if env_path:
        return Path(env_path)
    return _home_dir(environ) / CONFIG_FILE_NAME


def load_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Resolve a Config from defaults, conjurrc files and the environment.

    Args:
        config_path: conjurrc file to read. If not provided, the system file
                    and then the user file (see get_config_path) are read.
        environ: Environment to read. Defaults to os.environ.

    Returns:
        A merged, unvalidated Config.

    Raises:
        ConfigurationParseError: If a conjurrc file is malformed.
        ConfigurationError: If a conjurrc file cannot be read.
    """
    if environ is None:
        environ = os.environ

    config = Config(netrc_path=str(default_netrc_path(environ)))

    if config_path is None:
        paths = [SYSTEM_CONFIG_FILE, get_config_path(environ)]
    else:
        paths = [Path(config_path)]

    for path in paths:
        merge_yaml(config, path)

    merge_env(config, environ)

    logger.debug("Loaded configuration: %r", config)
    return config


def save_config(
    config: Config,
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """
    Write a Config to a conjurrc file.

    Uses atomic write (write to temp, then rename) and owner-only
    permissions. Secret material is never written.

    Args:
        config: Config to save.
        config_path: Destination. Defaults to get_config_path().
        environ: Environment used to resolve the default destination.

    Returns:
        The path written.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    path = Path(config_path) if config_path is not None else get_config_path(environ)
    temp_path = path.with_name(path.name + ".tmp")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Created owner-only so the file is never readable by others
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(conjurrc(config))

        temp_path.replace(path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise ConfigurationError(f"Cannot write config file {path}: {e}") from e

    logger.debug("Saved configuration to %s", path)
    return path
