"""
Core infrastructure layer
"""
from .config import ClientConfig
from .constants import *
from .exceptions import (
    ErrorContext,
    ErrorKind,
    RusshError,
    ConfigError,
    SSHError,
    translate_error,
    translating,
)
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import IdentityProvider, EnvIdentityProvider, StaticIdentityProvider
from .utils import load_ssh_config, join_remote_path

__all__ = [
    "ClientConfig",
    "ErrorContext",
    "ErrorKind",
    "RusshError",
    "ConfigError",
    "SSHError",
    "translate_error",
    "translating",
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "IdentityProvider",
    "EnvIdentityProvider",
    "StaticIdentityProvider",
    "load_ssh_config",
    "join_remote_path",
]
