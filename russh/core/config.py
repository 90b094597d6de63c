"""
Connection configuration
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .constants import DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT
from .exceptions import ConfigError
from .utils import load_ssh_config

if TYPE_CHECKING:
    from ..domain.auth import AuthMethods


@dataclass
class ClientConfig:
    """Everything needed to open one session"""
    host: str
    user: Optional[str] = None
    port: int = DEFAULT_SSH_PORT
    timeout: int = DEFAULT_SSH_TIMEOUT
    password: Optional[str] = None
    key_path: Optional[str] = None
    passphrase: Optional[str] = None

    def to_auth_methods(self) -> AuthMethods:
        """Build the credential set for this configuration"""
        from ..domain.auth import AuthMethods, PasswordAuth, PrivateKeyAuth

        return AuthMethods(
            password=PasswordAuth(self.password) if self.password is not None else None,
            private_key=(
                PrivateKeyAuth(self.key_path, self.passphrase)
                if self.key_path
                else None
            ),
        )

    @classmethod
    def from_ssh_config(
        cls,
        alias: str,
        config_path: Optional[Path] = None,
        **overrides,
    ) -> ClientConfig:
        """
        Create from an ~/.ssh/config Host entry.

        Explicit keyword overrides that are not None win over the file.
        A missing config file is not an error: the alias is used as hostname.

        Args:
            alias: Host alias or plain hostname
            config_path: Alternate config file
            **overrides: Any ClientConfig field

        Returns:
            ClientConfig instance
        """
        try:
            entry = load_ssh_config(alias, config_path)
        except ConfigError:
            if config_path is not None:
                raise
            entry = {"host": alias, "user": None, "port": DEFAULT_SSH_PORT, "key_file": None}

        values = {
            "host": entry["host"],
            "user": entry["user"],
            "port": entry["port"],
            "key_path": entry["key_file"],
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
