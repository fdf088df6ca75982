"""
Access to the CA certificate material named by a Config.

A Config carries certificate material in one of two forms: raw PEM text held
in memory (ssl_cert) or the path of a PEM bundle on disk (ssl_cert_path). The
in-memory form takes precedence.
"""

from cryptography import x509

from conjurconf.config.settings import Config, ConfigurationError


def read_ssl_cert(config: Config) -> bytes:
    """
    Return the PEM certificate material configured on a Config.

    Returns:
        The raw ssl_cert, else the contents of ssl_cert_path, else b"".

    Raises:
        ConfigurationError: If ssl_cert_path cannot be read.
    """
    if config.ssl_cert:
        return config.ssl_cert.encode()

    if not config.ssl_cert_path:
        return b""

    try:
        with open(config.ssl_cert_path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read certificate file {config.ssl_cert_path}: {e}"
        ) from e


def load_ssl_certificates(config: Config) -> list[x509.Certificate]:
    """
    Parse the configured certificate material into X.509 certificates.

    Returns:
        Certificates in bundle order, empty if none is configured.

    Raises:
        ConfigurationError: If the material is unreadable or not valid PEM.
    """
    pem = read_ssl_cert(config)
    if not pem:
        return []

    try:
        return x509.load_pem_x509_certificates(pem)
    except ValueError as e:
        source = "ssl_cert" if config.ssl_cert else config.ssl_cert_path
        raise ConfigurationError(f"Invalid PEM certificate in {source}: {e}") from e
