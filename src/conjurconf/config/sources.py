"""
Configuration sources that overlay values onto a Config.

Two sources are supported:

    - conjurrc files: YAML documents with one key per persisted setting
    - environment variables: fixed CONJUR_* names shared with the API client

Both follow the same overlay rule: a value replaces the current field only
when it is non-empty, so applying a source never clears a setting that an
earlier source provided.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from conjurconf.config.settings import (
    PERSISTED_FIELDS,
    Config,
    ConfigurationError,
    ConfigurationParseError,
)

logger = logging.getLogger(__name__)

# Environment variable name -> Config attribute
ENV_VARIABLES: dict[str, str] = {
    "CONJUR_ACCOUNT": "account",
    "CONJUR_APPLIANCE_URL": "appliance_url",
    "CONJUR_NETRC_PATH": "netrc_path",
    "CONJUR_CERT_FILE": "ssl_cert_path",
    "CONJUR_SSL_CERTIFICATE": "ssl_cert",
    "CONJUR_AUTHN_TYPE": "authn_type",
    "CONJUR_SERVICE_ID": "service_id",
    "CONJUR_AUTHN_JWT_HOST_ID": "jwt_host_id",
    "JWT_TOKEN_PATH": "jwt_file_path",
    "CONJUR_AUTHN_JWT_TOKEN": "jwt_content",
}

# Selects the jwt authenticator and names its service in one variable
JWT_SERVICE_ID_VARIABLE = "CONJUR_AUTHN_JWT_SERVICE_ID"


@dataclass
class ConjurrcDocument:
    """
    Typed view of a parsed conjurrc file.

    One attribute per recognized key. The version marker is recognized so
    older and newer files parse alike, but it is not copied to a Config.
    """

    account: str = ""
    appliance_url: str = ""
    netrc_path: str = ""
    cert_file: str = ""
    authn_type: str = ""
    service_id: str = ""
    jwt_host_id: str = ""
    jwt_file: str = ""
    version: str = ""

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], path: Path | str | None = None
    ) -> "ConjurrcDocument":
        """
        Build a document from parsed YAML, ignoring unknown keys.

        Raises:
            ConfigurationParseError: If a recognized key does not hold a
                plain text value.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, str] = {}

        for key, value in data.items():
            if key not in known or value is None:
                continue
            if not isinstance(value, str):
                raise ConfigurationParseError(
                    f"Invalid config file {path}: '{key}' must be a text value, "
                    f"got {type(value).__name__}",
                    path,
                )
            values[key] = value

        return cls(**values)

    def apply_to(self, config: Config) -> Config:
        """Overlay the non-empty values of this document onto a Config."""
        for attr, key in PERSISTED_FIELDS:
            value = getattr(self, key)
            if value:
                setattr(config, attr, value)
        return config


class ConjurrcLoader(yaml.SafeLoader):
    """
    SafeLoader that keeps plain scalars as written.

    Only the null resolver is kept, so values such as 012345, 1_000 or yes
    reach the Config as text instead of being read as numbers or booleans.
    """

    yaml_implicit_resolvers = {
        first: [
            (tag, regexp)
            for tag, regexp in resolvers
            if tag == "tag:yaml.org,2002:null"
        ]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }


def merge_env(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """
    Overlay recognized environment variables onto a Config.

    Args:
        config: Config to update in place.
        environ: Variables to read. Defaults to os.environ.

    Returns:
        The updated Config.
    """
    if environ is None:
        environ = os.environ

    for env_var, attr in ENV_VARIABLES.items():
        value = environ.get(env_var)
        if value:
            setattr(config, attr, value)
            logger.debug("Applied %s from environment", env_var)

    jwt_service_id = environ.get(JWT_SERVICE_ID_VARIABLE)
    if jwt_service_id:
        config.authn_type = "jwt"
        config.service_id = jwt_service_id
        logger.debug("Applied %s from environment", JWT_SERVICE_ID_VARIABLE)

    return config


def read_conjurrc(path: Path) -> ConjurrcDocument | None:
    """
    Parse a conjurrc file.

    Args:
        path: File to read.

    Returns:
        The parsed document, or None if the file does not exist.

    Raises:
        ConfigurationParseError: If the file is not a YAML mapping of text values.
        ConfigurationError: If the file exists but cannot be read.
    """
    try:
        with open(path) as f:
            data = yaml.load(f, Loader=ConjurrcLoader)
    except FileNotFoundError:
        return None
    except yaml.YAMLError as e:
        raise ConfigurationParseError(f"Invalid YAML in config file {path}: {e}", path) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return ConjurrcDocument()

    if not isinstance(data, Mapping):
        raise ConfigurationParseError(
            f"Invalid config file {path}: expected a mapping of settings, "
            f"got {type(data).__name__}",
            path,
        )

    return ConjurrcDocument.from_mapping(data, path)


def merge_yaml(config: Config, path: Path | str) -> Config:
    """
    Overlay the settings of a conjurrc file onto a Config.

    A missing file contributes nothing. The whole file is parsed before any
    field is touched, so a malformed file leaves the Config unchanged.

    Args:
        config: Config to update in place.
        path: conjurrc file to read.

    Returns:
        The updated Config.

    Raises:
        ConfigurationParseError: If the file is malformed.
        ConfigurationError: If the file cannot be read.
    """
    path = Path(path)
    document = read_conjurrc(path)

    if document is None:
        logger.debug("Config file %s not found, skipping", path)
        return config

    logger.debug("Merging config file %s", path)
    return document.apply_to(config)
