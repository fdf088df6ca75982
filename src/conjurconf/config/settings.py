"""
Connection settings for a Conjur client.

This module defines the Config dataclass that holds the resolved connection
and authentication settings, the rules a Config must satisfy before it is
handed to a network client, and the projection of a Config into the YAML
form persisted in a conjurrc file.

Raw secret material (an in-memory certificate, a JWT) is held on the Config
but is never part of the persisted projection.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Authentication types accepted by the validator. Pass a different sequence
# to validate_config() to support additional authenticators.
SUPPORTED_AUTHN_TYPES: tuple[str, ...] = ("ldap", "jwt", "oidc", "azure", "gcp", "iam")

# Persisted conjurrc key for each Config attribute, in emission order
PERSISTED_FIELDS: tuple[tuple[str, str], ...] = (
    ("account", "account"),
    ("appliance_url", "appliance_url"),
    ("netrc_path", "netrc_path"),
    ("ssl_cert_path", "cert_file"),
    ("authn_type", "authn_type"),
    ("service_id", "service_id"),
    ("jwt_host_id", "jwt_host_id"),
    ("jwt_file_path", "jwt_file"),
)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class ConfigurationParseError(ConfigurationError):
    """Raised when a conjurrc file exists but is not a valid document."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationValidationError(ConfigurationError):
    """Raised when a Config violates one or more validation rules."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


@dataclass
class Config:
    """
    Resolved Conjur client configuration.

    A Config starts out empty and is filled by successive merges (defaults,
    conjurrc files, environment). A merge only ever overwrites a field with a
    non-empty value, so later sources never blank out earlier ones.

    Attributes:
        account: Organization account name.
        appliance_url: Base URL of the Conjur server.
        netrc_path: Path to the netrc file caching the API key.
        ssl_cert_path: Path to the CA certificate bundle (persisted as cert_file).
        authn_type: Authenticator name; empty selects the default authenticator.
        service_id: Authenticator service instance, required with authn_type.
        jwt_host_id: Host identity used with the jwt authenticator.
        jwt_file_path: Path to a file holding the JWT (persisted as jwt_file).
        ssl_cert: Raw PEM certificate material. Never persisted.
        jwt_content: Raw JWT. Never persisted.
    """

    account: str = ""
    appliance_url: str = ""
    netrc_path: str = ""
    ssl_cert_path: str = ""
    authn_type: str = ""
    service_id: str = ""
    jwt_host_id: str = ""
    jwt_file_path: str = ""

    # Secret material stays out of repr() and out of the conjurrc
    ssl_cert: str = field(default="", repr=False)
    jwt_content: str = field(default="", repr=False)

    def is_https(self) -> bool:
        """Return True if certificate material is configured in any form."""
        return bool(self.ssl_cert or self.ssl_cert_path)

    def validate(
        self, supported_authn_types: Iterable[str] = SUPPORTED_AUTHN_TYPES
    ) -> None:
        """Raise ConfigurationValidationError if this Config is not usable."""
        validate_config(self, supported_authn_types)

    def conjurrc(self) -> str:
        """Return the persisted conjurrc text for this Config."""
        return conjurrc(self)


def config_errors(
    config: Config,
    supported_authn_types: Iterable[str] = SUPPORTED_AUTHN_TYPES,
) -> list[str]:
    """
    Check a Config against the required-field and cross-field rules.

    Every rule is evaluated, so the result lists all problems at once.

    Args:
        config: The Config to check. It is not modified.
        supported_authn_types: Authenticator names accepted for authn_type.

    Returns:
        Human-readable reasons, empty if the Config is valid.
    """
    supported = tuple(supported_authn_types)
    errors: list[str] = []

    if not config.account:
        errors.append("Must specify an account")

    if not config.appliance_url:
        errors.append("Must specify an appliance URL")

    if config.authn_type:
        if not config.service_id:
            errors.append(f"Must specify a service id when using {config.authn_type}")

        if config.authn_type not in supported:
            errors.append(
                f"Authentication type must be one of: {', '.join(supported)}"
            )

        if config.authn_type == "jwt" and not (config.jwt_content or config.jwt_file_path):
            errors.append("Must specify a JWT token or JWT file when using jwt")

    return errors


def validate_config(
    config: Config,
    supported_authn_types: Iterable[str] = SUPPORTED_AUTHN_TYPES,
) -> None:
    """
    Validate a fully merged Config.

    Raises:
        ConfigurationValidationError: If any rule is violated. The message
            lists every failing rule.
    """
    errors = config_errors(config, supported_authn_types)
    if errors:
        raise ConfigurationValidationError(errors)


def config_to_dict(config: Config) -> dict[str, str]:
    """Convert a Config to the ordered dictionary written to a conjurrc."""
    return {
        key: getattr(config, attr)
        for attr, key in PERSISTED_FIELDS
        if getattr(config, attr)
    }


def conjurrc(config: Config) -> str:
    """
    Render a Config as conjurrc YAML.

    Fields are emitted in a fixed order and empty fields are omitted, so the
    same Config always renders to the same text. ssl_cert and jwt_content
    are never written.
    """
    data = config_to_dict(config)
    if not data:
        return ""
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
