"""
Core interfaces for dependency injection
"""
import getpass
import os
import sys
from abc import ABC, abstractmethod
from typing import Optional


class IdentityProvider(ABC):
    """Supplies the username used when a connection does not name one"""

    @abstractmethod
    def username(self) -> str:
        """Return the default username"""
        pass


class EnvIdentityProvider(IdentityProvider):
    """Reads the current user from the environment"""

    def username(self) -> str:
        # Windows keeps the login name in %USERNAME%, everything else in $USER
        var = "USERNAME" if sys.platform.startswith("win") else "USER"
        return os.environ.get(var) or getpass.getuser()


class StaticIdentityProvider(IdentityProvider):
    """Always returns the configured username"""

    def __init__(self, name: str):
        self.name = name

    def username(self) -> str:
        return self.name


def resolve_username(username: Optional[str], identity: IdentityProvider) -> str:
    """Return ``username`` or fall back to the identity provider"""
    return username if username else identity.username()
