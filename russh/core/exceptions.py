"""
Unified exception definitions

Every failure coming out of paramiko, the socket layer or local file I/O is
translated into a single :class:`SSHError` tagged with an :class:`ErrorKind`.
"""
import errno
import socket
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

import paramiko


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced to callers"""
    CONNECT = "connect"
    SESSION = "session"
    SFTP = "sftp"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_CONNECTED = "not_connected"
    NOT_OPEN = "not_open"
    IO = "io"
    OTHER = "other"


class ErrorContext(str, Enum):
    """Which boundary a failure crossed"""
    CONNECT = "connect"
    SESSION = "session"
    SFTP = "sftp"
    LOCAL = "local"


class RusshError(Exception):
    """Base exception class"""
    pass


class ConfigError(RusshError):
    """Configuration error"""
    pass


class SSHError(RusshError):
    """Error raised by every session, channel and SFTP operation"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"SSHError({self.kind.value!r}, {self.message!r})"


_ERRNO_KINDS = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EEXIST: ErrorKind.ALREADY_EXISTS,
}


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return text if text else type(exc).__name__


def translate_error(
    exc: BaseException,
    context: ErrorContext = ErrorContext.SESSION,
    message: Optional[str] = None,
) -> SSHError:
    """
    Classify an exception into an :class:`SSHError`.

    Args:
        exc: The underlying exception
        context: Boundary the failure crossed
        message: Optional prefix for the error message

    Returns:
        SSHError with the matching ErrorKind
    """
    if isinstance(exc, SSHError):
        return exc

    detail = _describe(exc)
    if message:
        detail = f"{message}: {detail}"

    if context is ErrorContext.CONNECT and isinstance(exc, (OSError, socket.timeout)):
        return SSHError(ErrorKind.CONNECT, detail)

    if isinstance(exc, OSError) and exc.errno in _ERRNO_KINDS:
        return SSHError(_ERRNO_KINDS[exc.errno], detail)
    if isinstance(exc, FileNotFoundError):
        return SSHError(ErrorKind.NOT_FOUND, detail)
    if isinstance(exc, PermissionError):
        return SSHError(ErrorKind.PERMISSION_DENIED, detail)
    if isinstance(exc, FileExistsError):
        return SSHError(ErrorKind.ALREADY_EXISTS, detail)

    if context is ErrorContext.SFTP:
        # paramiko reports unmapped SFTP status codes as errno-less IOError
        if isinstance(exc, (paramiko.SFTPError, paramiko.SSHException, EOFError)):
            return SSHError(ErrorKind.SFTP, detail)
        if isinstance(exc, OSError) and exc.errno is None and not isinstance(exc, socket.timeout):
            return SSHError(ErrorKind.SFTP, detail)

    if isinstance(exc, (paramiko.SSHException, EOFError, socket.timeout)):
        return SSHError(ErrorKind.SESSION, detail)

    if isinstance(exc, (UnicodeError, OSError)):
        return SSHError(ErrorKind.IO, detail)
    if isinstance(exc, (ValueError, TypeError)):
        return SSHError(ErrorKind.INVALID_ARGUMENT, detail)

    return SSHError(ErrorKind.OTHER, detail)


@contextmanager
def translating(
    context: ErrorContext = ErrorContext.SESSION,
    message: Optional[str] = None,
) -> Iterator[None]:
    """
    Route failures raised inside the block through :func:`translate_error`.

    Args:
        context: Boundary the wrapped calls cross
        message: Optional prefix for the error message

    Raises:
        SSHError: For any exception raised inside the block
    """
    try:
        yield
    except SSHError:
        raise
    except Exception as e:
        raise translate_error(e, context, message) from e
