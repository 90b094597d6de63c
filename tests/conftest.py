"""
Shared fakes for paramiko channels, transports and SFTP sessions.
"""

import errno
import io
import posixpath
from unittest.mock import MagicMock, patch

import paramiko
import pytest
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


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class FakeChannel:
    """In-memory stand-in for a paramiko session channel."""

    eof_received = True
    closed = False

    def __init__(self, stdout=b"", stderr=b"", exit_code=0):
        self.stdout = io.BytesIO(stdout)
        self.stderr = io.BytesIO(stderr)
        self.stdin = io.BytesIO()
        self.exit_code = exit_code
        self.command = None
        self.eof_sent = False
        self.close_calls = 0

    def exec_command(self, command):
        self.command = command

    def makefile_stdin(self, mode):
        return self.stdin

    def shutdown_write(self):
        self.eof_sent = True

    @staticmethod
    def _pending(stream):
        return stream.tell() < len(stream.getvalue())

    def recv_ready(self):
        return self._pending(self.stdout)

    def recv(self, size):
        return self.stdout.read(size)

    def recv_stderr_ready(self):
        return self._pending(self.stderr)

    def recv_stderr(self, size):
        return self.stderr.read(size)

    def exit_status_ready(self):
        return True

    def recv_exit_status(self):
        return self.exit_code

    def close(self):
        self.close_calls += 1


class BlockingChannel(FakeChannel):
    """Only reports an exit status once every byte of output was read.

    Models a remote process stuck writing into a full channel window.
    """

    def exit_status_ready(self):
        return not self.recv_ready() and not self.recv_stderr_ready()

    def recv_exit_status(self):
        assert self.exit_status_ready(), "exit status requested with undrained output"
        return self.exit_code


@pytest.fixture
def make_transport():
    """Build a MagicMock transport whose sessions are FakeChannels."""

    def _make(channel=None):
        transport = MagicMock()
        transport.is_authenticated.return_value = True
        transport.is_active.return_value = True
        transport.open_session.return_value = channel or FakeChannel()
        return transport

    return _make


@pytest.fixture
def create_connection():
    """Patch out the TCP connect made by SSHClient.connect()."""
    with patch("russh.domain.session.socket.create_connection") as mock_connect:
        mock_connect.return_value = MagicMock()
        yield mock_connect


@pytest.fixture
def transport_cls(make_transport):
    with patch("russh.domain.session.paramiko.Transport") as mock_cls:
        mock_cls.return_value = make_transport()
        yield mock_cls


# ---------------------------------------------------------------------------
# SFTP
# ---------------------------------------------------------------------------


class FakeSFTPServer:
    """Minimal in-memory SFTP server speaking the paramiko.SFTPClient surface."""

    def __init__(self, dirs=("/", "/tmp", "/home/user")):
        self.dirs = set(dirs)
        self.files = {}
        self.modes = {}
        self.handles = {}
        self.closed = False
        self.close_calls = 0
        self.requests = []
        self.open_dirs = set()

    def _check_parent(self, path):
        if posixpath.dirname(path) not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")

    def _request(self, t, *args):
        if t == CMD_OPENDIR:
            return self._opendir(*args)
        if t == CMD_CLOSE:
            self.open_dirs.discard(args[0])
            return CMD_HANDLE, MagicMock()
        assert t == CMD_OPEN
        path, flags, attrs = args
        self.requests.append((path, flags))
        if path not in self.files:
            if not flags & SFTP_FLAG_CREATE:
                raise IOError(errno.ENOENT, "No such file")
            self._check_parent(path)
            self.files[path] = b""
            self.modes[path] = attrs.st_mode
        if flags & SFTP_FLAG_TRUNC:
            self.files[path] = b""
        handle = f"handle-{len(self.handles)}".encode()
        self.handles[handle] = (path, flags)
        msg = MagicMock()
        msg.get_binary.return_value = handle
        return CMD_HANDLE, msg

    def _opendir(self, path):
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        handle = f"dir-{path}".encode()
        self.open_dirs.add(handle)
        msg = MagicMock()
        msg.get_binary.return_value = handle
        return CMD_HANDLE, msg

    def listdir(self, path):
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        names = [posixpath.basename(p) for p in list(self.dirs) + list(self.files)
                 if p != path and posixpath.dirname(p) == path]
        return names

    def mkdir(self, path, mode=511):
        if path in self.dirs or path in self.files:
            raise IOError("Failure")
        self._check_parent(path)
        self.dirs.add(path)
        self.modes[path] = mode

    def rmdir(self, path):
        if path not in self.dirs:
            raise IOError(errno.ENOENT, "No such file")
        self.dirs.remove(path)

    def remove(self, path):
        if path not in self.files:
            raise IOError(errno.ENOENT, "No such file")
        del self.files[path]

    def close(self):
        self.closed = True
        self.close_calls += 1


class FakeSFTPFile:
    """Replaces paramiko.SFTPFile for handles issued by FakeSFTPServer."""

    def __init__(self, sftp, handle, mode="r", bufsize=-1):
        self.sftp = sftp
        self.path, self.flags = sftp.handles[handle]
        self.mode = mode
        self.bufsize = bufsize
        self.pos = len(sftp.files[self.path]) if self.flags & SFTP_FLAG_APPEND else 0
        self.closed = False

    def read(self):
        if not self.flags & SFTP_FLAG_READ:
            raise IOError("File not open for reading")
        data = self.sftp.files[self.path][self.pos:]
        self.pos += len(data)
        return data

    def write(self, data):
        if not self.flags & SFTP_FLAG_WRITE:
            raise IOError("File not open for writing")
        content = self.sftp.files[self.path]
        if self.flags & SFTP_FLAG_APPEND:
            self.pos = len(content)
        self.sftp.files[self.path] = content[:self.pos] + data + content[self.pos + len(data):]
        self.pos += len(data)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def sftp_server(monkeypatch):
    monkeypatch.setattr(paramiko, "SFTPFile", FakeSFTPFile)
    return FakeSFTPServer()


@pytest.fixture
def sftp(sftp_server):
    from russh.domain.sftp import SFTPClient

    return SFTPClient(sftp_server)
