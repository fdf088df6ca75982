"""
Configuration management for Conjur clients.

This module handles resolving connection settings from conjurrc files and
CONJUR_* environment variables, validating them, and saving them back to a
conjurrc without any secret material.
"""

from conjurconf.config.certificates import load_ssl_certificates, read_ssl_cert
from conjurconf.config.loader import (
    default_netrc_path,
    get_config_path,
    load_config,
    save_config,
)
from conjurconf.config.settings import (
    SUPPORTED_AUTHN_TYPES,
    Config,
    ConfigurationError,
    ConfigurationParseError,
    ConfigurationValidationError,
    config_errors,
    config_to_dict,
    conjurrc,
    validate_config,
)
from conjurconf.config.sources import (
    ENV_VARIABLES,
    ConjurrcDocument,
    merge_env,
    merge_yaml,
)

__all__ = [
    # Settings
    "Config",
    "SUPPORTED_AUTHN_TYPES",
    "config_errors",
    "validate_config",
    "config_to_dict",
    "conjurrc",
    "ConfigurationError",
    "ConfigurationParseError",
    "ConfigurationValidationError",
    # Sources
    "ENV_VARIABLES",
    "ConjurrcDocument",
    "merge_env",
    "merge_yaml",
    # Loading
    "load_config",
    "save_config",
    "get_config_path",
    "default_netrc_path",
    # Certificates
    "read_ssl_cert",
    "load_ssl_certificates",
]
