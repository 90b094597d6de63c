"""
Credentials and authentication selection

Credentials are tried in a fixed order: private key first, then password.
When every attempted credential fails, the error of the last attempt is
raised; earlier failures are only logged.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Tuple, Callable

import paramiko

from ..core.exceptions import ErrorContext, SSHError, translate_error
from ..core.logging import get_logger

logger = get_logger(__name__)

# Key classes probed, in order, when loading a private key file
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


@dataclass(frozen=True)
class PasswordAuth:
    """Password based authentication"""
    password: str

    def __repr__(self) -> str:
        return "PasswordAuth(password=***)"


@dataclass(frozen=True)
class PrivateKeyAuth:
    """
    Private-key based authentication.

    Args:
        private_key: Path to the private-key file (``~`` is expanded)
        passphrase: Passphrase for an encrypted key file
    """
    private_key: str
    passphrase: Optional[str] = None

    def __repr__(self) -> str:
        masked = "***" if self.passphrase is not None else None
        return f"PrivateKeyAuth(private_key={self.private_key!r}, passphrase={masked})"

    def load_key(self) -> paramiko.PKey:
        """
        Load the key file, probing each supported key type.

        Raises:
            FileNotFoundError: If the key file doesn't exist
            paramiko.SSHException: If no key type can decode the file
        """
        path = Path(self.private_key).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Private key not found: {path}")

        last_error: Optional[Exception] = None
        for key_class in _KEY_CLASSES:
            try:
                return key_class.from_private_key_file(str(path), password=self.passphrase)
            except paramiko.PasswordRequiredException:
                raise
            except (paramiko.SSHException, ValueError) as e:
                last_error = e
        raise paramiko.SSHException(f"Unsupported or invalid private key {path}: {last_error}")


@dataclass(frozen=True)
class AuthMethods:
    """At most one password and one private-key credential"""
    password: Optional[PasswordAuth] = None
    private_key: Optional[PrivateKeyAuth] = None

    def is_empty(self) -> bool:
        return self.password is None and self.private_key is None


class AuthSelector:
    """Applies the credentials of an :class:`AuthMethods` to a transport"""

    def __init__(self, methods: AuthMethods):
        self.methods = methods

    def attempts(self, username: str) -> List[Tuple[str, Callable[[paramiko.Transport], None]]]:
        """Ordered (name, attempt) pairs for the configured credentials"""
        plan = []
        key = self.methods.private_key
        if key is not None:
            def _publickey(transport: paramiko.Transport) -> None:
                transport.auth_publickey(username, key.load_key())
            plan.append(("publickey", _publickey))

        password = self.methods.password
        if password is not None:
            def _password(transport: paramiko.Transport) -> None:
                transport.auth_password(username, password.password)
            plan.append(("password", _password))

        return plan

    def authenticate(self, transport: paramiko.Transport, username: str) -> bool:
        """
        Try each credential until one succeeds.

        Args:
            transport: Handshaked transport
            username: Remote username

        Returns:
            True if a credential was accepted, False if none was configured

        Raises:
            SSHError: Error of the last attempted credential
        """
        last_error: Optional[SSHError] = None
        for name, attempt in self.attempts(username):
            logger.debug(f"Trying {name} authentication for {username}")
            try:
                attempt(transport)
            except Exception as e:
                if last_error is not None:
                    logger.debug(f"Discarding earlier failure: {last_error}")
                last_error = translate_error(e, ErrorContext.SESSION, f"{name} authentication failed")
                last_error.__cause__ = e
                logger.debug(str(last_error))
                continue
            if transport.is_authenticated():
                logger.debug(f"Authenticated {username} with {name}")
                return True
            last_error = translate_error(
                paramiko.AuthenticationException("partial authentication only"),
                ErrorContext.SESSION,
                f"{name} authentication failed",
            )

        if last_error is not None:
            raise last_error
        return False
