"""
SFTP client with an emulated working directory

SFTP has no server-side notion of a current directory. :class:`SFTPClient`
keeps one locally and prefixes it onto relative paths before every request.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union, Dict, Tuple, List

import paramiko
from paramiko.sftp import (
    CMD_CLOSE,
    CMD_HANDLE,
    CMD_OPEN,
    CMD_OPENDIR,
    SFTP_FLAG_APPEND,
    SFTP_FLAG_CREATE,
    SFTP_FLAG_READ,
    SFTP_FLAG_TRUNC,
    SFTP_FLAG_WRITE,
)

from ..core.constants import (
    DEFAULT_DIR_MODE,
    DEFAULT_ENCODING,
    DEFAULT_FILE_MODE,
    DEFAULT_OPEN_MODE,
)
from ..core.exceptions import ErrorContext, ErrorKind, SSHError, translating
from ..core.logging import get_logger
from ..core.utils import join_remote_path

logger = get_logger(__name__)


# Python-style mode -> (SFTP open flags, mode handed to paramiko's file object)
OPEN_MODES: Dict[str, Tuple[int, str]] = {
    "r": (SFTP_FLAG_READ, "rb"),
    "r+": (SFTP_FLAG_READ | SFTP_FLAG_WRITE, "r+b"),
    "w": (SFTP_FLAG_WRITE | SFTP_FLAG_TRUNC, "wb"),
    "w+": (SFTP_FLAG_READ | SFTP_FLAG_WRITE | SFTP_FLAG_TRUNC, "w+b"),
    "a": (SFTP_FLAG_CREATE | SFTP_FLAG_APPEND | SFTP_FLAG_WRITE, "ab"),
    "a+": (SFTP_FLAG_CREATE | SFTP_FLAG_APPEND | SFTP_FLAG_READ | SFTP_FLAG_WRITE, "a+b"),
}

# Flags used by put(): create or truncate
PUT_FLAGS = SFTP_FLAG_WRITE | SFTP_FLAG_CREATE | SFTP_FLAG_TRUNC


def parse_open_mode(mode: str) -> Tuple[int, str]:
    """
    Translate a Python-style file mode into SFTP open flags.

    A ``b`` is accepted anywhere and ignored: files are always transferred
    as bytes.

    Raises:
        SSHError: INVALID_ARGUMENT for an unrecognized mode
    """
    key = mode.replace("b", "")
    if key not in OPEN_MODES or mode.count("b") > 1:
        raise SSHError(ErrorKind.INVALID_ARGUMENT, f"Invalid file mode: {mode!r}")
    return OPEN_MODES[key]


class File:
    """A file on the remote server"""

    def __init__(self, handle: paramiko.SFTPFile, path: str, encoding: str = DEFAULT_ENCODING):
        self.path = path
        self.encoding = encoding
        self._handle: Optional[paramiko.SFTPFile] = handle

    def _require_open(self) -> paramiko.SFTPFile:
        if self._handle is None:
            raise SSHError(ErrorKind.NOT_OPEN, f"File {self.path} is closed")
        return self._handle

    def read(self) -> str:
        """Read from the current position to end-of-file"""
        handle = self._require_open()
        with translating(ErrorContext.SFTP, f"Failed to read {self.path}"):
            return handle.read().decode(self.encoding)

    def write(self, data: Union[str, bytes]) -> None:
        handle = self._require_open()
        payload = data.encode(self.encoding) if isinstance(data, str) else data
        with translating(ErrorContext.SFTP, f"Failed to write {self.path}"):
            handle.write(payload)

    def is_closed(self) -> bool:
        return self._handle is None

    def close(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            with translating(ErrorContext.SFTP, f"Failed to close {self.path}"):
                handle.close()

    def __enter__(self) -> File:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class SFTPClient:
    """
    The SFTP client.

    Only absolute working directories are meaningful; relative paths are
    concatenated onto the working directory without normalization.
    """

    def __init__(self, sftp: paramiko.SFTPClient, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding
        self._sftp: Optional[paramiko.SFTPClient] = sftp
        self._cwd: Optional[str] = None

    # --------------------
    # Helpers
    # --------------------
    def _require_open(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise SSHError(ErrorKind.NOT_OPEN, "SFTP session is closed")
        return self._sftp

    def _resolve(self, path: str) -> str:
        return join_remote_path(self._cwd, path)

    def _open(self, path: str, flags: int, mode: str) -> paramiko.SFTPFile:
        """Open ``path`` with exact SFTP flags; new files get DEFAULT_FILE_MODE"""
        sftp = self._require_open()
        attrs = paramiko.SFTPAttributes()
        if flags & SFTP_FLAG_CREATE:
            attrs.st_mode = DEFAULT_FILE_MODE
        # SFTPClient.open() derives flags itself and cannot set permissions
        t, msg = sftp._request(CMD_OPEN, path, flags, attrs)
        if t != CMD_HANDLE:
            raise paramiko.SFTPError("Expected handle")
        handle = msg.get_binary()
        logger.debug(f"Opened {path} (flags={flags:#x})")
        return paramiko.SFTPFile(sftp, handle, mode, bufsize=0)

    def _probe_dir(self, path: str) -> None:
        """Open and close ``path`` as a directory without reading its entries"""
        sftp = self._require_open()
        t, msg = sftp._request(CMD_OPENDIR, path)
        if t != CMD_HANDLE:
            raise paramiko.SFTPError("Expected handle")
        sftp._request(CMD_CLOSE, msg.get_binary())

    # --------------------
    # Working directory
    # --------------------
    def chdir(self, dir: Optional[str] = None) -> None:
        """
        Change the emulated working directory.

        ``None`` unsets it. Otherwise the directory is opened to check that
        it exists; on failure the working directory is left unchanged.

        Raises:
            SSHError: NOT_FOUND if the directory cannot be opened
        """
        if dir is None:
            self._cwd = None
            return
        self._require_open()
        path = self._resolve(dir)
        try:
            self._probe_dir(path)
        except Exception as e:
            raise SSHError(ErrorKind.NOT_FOUND, f"No such directory: {path}: {e}") from e
        self._cwd = path

    def getcwd(self) -> Optional[str]:
        return self._cwd

    # --------------------
    # Directory operations
    # --------------------
    def mkdir(self, dir: str, mode: int = DEFAULT_DIR_MODE) -> None:
        sftp = self._require_open()
        path = self._resolve(dir)
        with translating(ErrorContext.SFTP, f"Failed to create directory {path}"):
            sftp.mkdir(path, mode)

    def rmdir(self, dir: str) -> None:
        sftp = self._require_open()
        path = self._resolve(dir)
        with translating(ErrorContext.SFTP, f"Failed to remove directory {path}"):
            sftp.rmdir(path)

    def listdir(self, dir: Optional[str] = None) -> List[str]:
        """List entry names of a directory (the working directory by default)"""
        sftp = self._require_open()
        path = self._resolve(dir) if dir else (self._cwd or ".")
        with translating(ErrorContext.SFTP, f"Failed to list {path}"):
            return sorted(sftp.listdir(path))

    def unlink(self, path: str) -> None:
        sftp = self._require_open()
        target = self._resolve(path)
        with translating(ErrorContext.SFTP, f"Failed to remove {target}"):
            sftp.remove(target)

    remove = unlink

    # --------------------
    # Files
    # --------------------
    def open(self, filename: str, mode: str = DEFAULT_OPEN_MODE) -> File:
        """
        Open a remote file.

        Args:
            filename: File name relative to the working directory, or an absolute path
            mode: One of r, r+, w, w+, a, a+ (``w`` truncates but does not create)

        Returns:
            The opened :class:`File`
        """
        flags, file_mode = parse_open_mode(mode)
        path = self._resolve(filename)
        with translating(ErrorContext.SFTP, f"Failed to open {path}"):
            handle = self._open(path, flags, file_mode)
        return File(handle, path, self.encoding)

    file = open

    def get(self, remotepath: str, localpath: Union[str, Path]) -> None:
        """Copy a remote file to the local host, overwriting ``localpath``"""
        path = self._resolve(remotepath)
        with translating(ErrorContext.SFTP, f"Failed to download {path}"):
            handle = self._open(path, SFTP_FLAG_READ, "rb")
            with handle:
                data = handle.read()
        with translating(ErrorContext.LOCAL, f"Failed to write {localpath}"):
            Path(localpath).write_bytes(data)
        logger.debug(f"Downloaded {path} -> {localpath} ({len(data)} bytes)")

    def put(self, localpath: Union[str, Path], remotepath: str) -> None:
        """Copy a local file to the remote server, creating or truncating ``remotepath``"""
        with translating(ErrorContext.LOCAL, f"Failed to read {localpath}"):
            data = Path(localpath).read_bytes()
        path = self._resolve(remotepath)
        with translating(ErrorContext.SFTP, f"Failed to upload {path}"):
            handle = self._open(path, PUT_FLAGS, "wb")
            with handle:
                handle.write(data)
        logger.debug(f"Uploaded {localpath} -> {path} ({len(data)} bytes)")

    # --------------------
    # Lifecycle
    # --------------------
    def is_closed(self) -> bool:
        return self._sftp is None

    def close(self) -> None:
        sftp, self._sftp = self._sftp, None
        if sftp is not None:
            with translating(ErrorContext.SFTP, "Failed to close SFTP session"):
                sftp.close()

    def __enter__(self) -> SFTPClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
