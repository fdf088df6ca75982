"""
conjurconf - Conjur client configuration resolver

Resolves the connection and authentication settings of a Conjur client from
layered sources into a single validated Config.

Sources, lowest to highest precedence:
    - Built-in defaults
    - /etc/conjur.conf
    - ~/.conjurrc (or the file named by CONJURRC)
    - CONJUR_* environment variables

Raw certificate and token material is kept in memory only and is never
written back to a conjurrc.
"""

__version__ = "0.1.0"

from conjurconf.config import Config, load_config, save_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
    "save_config",
]
