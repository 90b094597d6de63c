"""
SSH client session management
"""
from __future__ import annotations

import socket
from typing import Optional

import paramiko

from ..core.constants import DEFAULT_ENCODING, DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT
from ..core.exceptions import ErrorContext, ErrorKind, SSHError, translating
from ..core.interfaces import EnvIdentityProvider, IdentityProvider, resolve_username
from ..core.logging import get_logger
from .auth import AuthMethods, AuthSelector
from .exec import ExecOutput
from .sftp import SFTPClient

logger = get_logger(__name__)


class SSHClient:
    """
    The SSH client.

    Holds at most one live session (a paramiko ``Transport``). A successful
    :meth:`connect` replaces any previous session; :meth:`close` releases it.
    """

    def __init__(
        self,
        identity: Optional[IdentityProvider] = None,
        require_auth: bool = False,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        """
        Args:
            identity: Supplies the username when connect() gets none
            require_auth: Reject connect() calls that carry no credentials
            encoding: Text encoding for command output and remote files
        """
        self.identity = identity or EnvIdentityProvider()
        self.require_auth = require_auth
        self.encoding = encoding
        self._transport: Optional[paramiko.Transport] = None

    # --------------------
    # Connection management
    # --------------------
    def connect(
        self,
        host: str,
        username: Optional[str] = None,
        auth: Optional[AuthMethods] = None,
        port: int = DEFAULT_SSH_PORT,
        timeout: int = DEFAULT_SSH_TIMEOUT,
    ) -> None:
        """
        Establish an SSH connection and set the created session on the client.

        Credentials are attempted one at a time, private key first, then
        password. If all of them fail, the error of the last attempted
        method is raised.

        Args:
            host: The host name or address
            username: The SSH username (identity provider default if None)
            auth: The authentication methods to use
            port: The SSH port
            timeout: Timeout for the TCP connection and handshake, in seconds

        Raises:
            SSHError: CONNECT for resolution/TCP failures, SESSION for
                handshake or authentication failures
        """
        auth = auth or AuthMethods()
        if auth.is_empty() and self.require_auth:
            raise SSHError(ErrorKind.INVALID_ARGUMENT, "No authentication method provided")
        user = resolve_username(username, self.identity)

        logger.info(f"Connecting to {user}@{host}:{port}")
        with translating(ErrorContext.CONNECT, f"Failed to connect to {host}:{port}"):
            sock = socket.create_connection((host, port), timeout=timeout)

        transport = None
        try:
            with translating(ErrorContext.SESSION, f"SSH handshake with {host}:{port} failed"):
                transport = paramiko.Transport(sock)
                transport.banner_timeout = timeout
                transport.handshake_timeout = timeout
                transport.auth_timeout = timeout
                transport.start_client(timeout=timeout)

            if not AuthSelector(auth).authenticate(transport, user):
                logger.warning(f"No credentials supplied for {user}@{host}; skipping authentication")
        except Exception:
            if transport is not None:
                transport.close()
            else:
                sock.close()
            raise

        self._replace_transport(transport)
        logger.info(f"Connected to {host}:{port}")

    def _replace_transport(self, transport: Optional[paramiko.Transport]) -> None:
        old, self._transport = self._transport, transport
        if old is not None:
            old.close()

    def _require_transport(self) -> paramiko.Transport:
        if self._transport is None:
            raise SSHError(ErrorKind.NOT_CONNECTED, "No active SSH session; call connect() first")
        return self._transport

    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_active()

    def close(self) -> None:
        """Close the underlying session; does nothing if there is none"""
        if self._transport is not None:
            logger.info("Closing SSH session")
        self._replace_transport(None)

    # --------------------
    # Channels
    # --------------------
    def exec_command(self, command: str) -> ExecOutput:
        """
        Execute a command using the established session.

        Args:
            command: The command to run

        Returns:
            An :class:`ExecOutput` with independent stdin/stdout/stderr views
        """
        transport = self._require_transport()
        logger.debug(f"exec: {command}")
        with translating(ErrorContext.SESSION, "Failed to execute command"):
            channel = transport.open_session()
            try:
                channel.exec_command(command)
            except Exception:
                channel.close()
                raise
            return ExecOutput(channel, self.encoding)

    def open_sftp(self) -> SFTPClient:
        """Open an SFTP session; fails if connect() was not called"""
        transport = self._require_transport()
        with translating(ErrorContext.SFTP, "Failed to open SFTP subsystem"):
            sftp = paramiko.SFTPClient.from_transport(transport)
            if sftp is None:
                raise paramiko.SFTPError("SFTP subsystem unavailable")
        return SFTPClient(sftp, self.encoding)

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> SSHClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
