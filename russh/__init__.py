"""
russh - synchronous SSH command execution and SFTP client

Provides a small client-side layer over paramiko, supporting:
- Password and private-key authentication with fallback
- Command execution with independent stdin/stdout/stderr streams
- SFTP with an emulated working directory and whole-file get/put
- A single tagged error type for every failure
"""

__version__ = "0.1.0"

# Export core components
from .core import (
    ClientConfig,
    ErrorKind,
    RusshError,
    ConfigError,
    SSHError,
    IdentityProvider,
    EnvIdentityProvider,
    StaticIdentityProvider,
    load_ssh_config,
)

# Export domain models
from .domain import (
    AuthMethods,
    PasswordAuth,
    PrivateKeyAuth,
    SSHClient,
    ExecOutput,
    SFTPClient,
    File,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "SSHClient",
    "ClientConfig",
    # Authentication
    "AuthMethods",
    "PasswordAuth",
    "PrivateKeyAuth",
    # Handles
    "ExecOutput",
    "SFTPClient",
    "File",
    # Errors
    "ErrorKind",
    "RusshError",
    "ConfigError",
    "SSHError",
    # Identity
    "IdentityProvider",
    "EnvIdentityProvider",
    "StaticIdentityProvider",
    # Utilities
    "load_ssh_config",
]
