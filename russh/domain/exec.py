"""
Command execution handle

An :class:`ExecOutput` owns one session channel and three stream views over
it. Each of stdin, stdout, stderr and the channel is consumed at most once.
Reading one output stream also receives the other into a pending buffer so
the remote side never stalls on a full channel window.
"""
from __future__ import annotations

import time
from enum import Enum
from typing import Optional, Union

import paramiko

from ..core.constants import DEFAULT_ENCODING, DRAIN_CHUNK_SIZE, DRAIN_POLL_INTERVAL
from ..core.exceptions import ErrorContext, translating
from ..core.logging import get_logger

logger = get_logger(__name__)


class ResourceState(str, Enum):
    """Take-once state of a stream or channel"""
    AVAILABLE = "available"
    CONSUMED = "consumed"


class ExecOutput:
    """
    Output of :meth:`SSHClient.exec_command`.

    Streams that were already consumed return empty strings; a consumed
    channel reports exit status 0.
    """

    def __init__(self, channel: paramiko.Channel, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding
        self._channel = channel
        self._stdin: Optional[paramiko.ChannelFile] = channel.makefile_stdin("wb")
        # Output received for a stream while the other one was being read
        self._pending = {"stdout": bytearray(), "stderr": bytearray()}
        self.stdin_state = ResourceState.AVAILABLE
        self.stdout_state = ResourceState.AVAILABLE
        self.stderr_state = ResourceState.AVAILABLE
        self.channel_state = ResourceState.AVAILABLE

    # --------------------
    # Streams
    # --------------------
    def write_stdin(self, data: Union[str, bytes]) -> None:
        """
        Write ``data`` to stdin, then send EOF so the remote side sees closed input.

        Later calls discard their data.
        """
        if self.stdin_state is ResourceState.CONSUMED:
            return
        payload = data.encode(self.encoding) if isinstance(data, str) else data
        try:
            with translating(ErrorContext.SESSION, "Failed to write stdin"):
                self._stdin.write(payload)
                self._stdin.flush()
                self._channel.shutdown_write()
        finally:
            self._stdin = None
            self.stdin_state = ResourceState.CONSUMED

    def read_stdout(self) -> str:
        """Read stdout to EOF; later calls return an empty string"""
        if self.stdout_state is ResourceState.CONSUMED:
            return ""
        try:
            with translating(ErrorContext.SESSION, "Failed to read stdout"):
                return self._collect("stdout").decode(self.encoding)
        finally:
            self.stdout_state = ResourceState.CONSUMED

    def read_stderr(self) -> str:
        """Read stderr to EOF; later calls return an empty string"""
        if self.stderr_state is ResourceState.CONSUMED:
            return ""
        try:
            with translating(ErrorContext.SESSION, "Failed to read stderr"):
                return self._collect("stderr").decode(self.encoding)
        finally:
            self.stderr_state = ResourceState.CONSUMED

    def _collect(self, stream: str) -> bytes:
        """
        Receive ``stream`` ("stdout" or "stderr") until the remote sends EOF.

        The other stream is received at the same time. Its data is kept for a
        later read, or dropped if that stream was already consumed.
        """
        chan = self._channel
        if stream == "stdout":
            ready, recv = chan.recv_ready, chan.recv
            other_ready, other_recv = chan.recv_stderr_ready, chan.recv_stderr
            other, other_state = "stderr", self.stderr_state
        else:
            ready, recv = chan.recv_stderr_ready, chan.recv_stderr
            other_ready, other_recv = chan.recv_ready, chan.recv
            other, other_state = "stdout", self.stdout_state

        data = self._pending[stream]
        self._pending[stream] = bytearray()
        while True:
            # EOF is checked first: data always arrives before it
            finished = chan.eof_received or chan.closed
            received = False
            if other_ready():
                chunk = other_recv(DRAIN_CHUNK_SIZE)
                if other_state is ResourceState.AVAILABLE:
                    self._pending[other] += chunk
                received = True
            if ready():
                data += recv(DRAIN_CHUNK_SIZE)
                received = True
            elif finished:
                return bytes(data)
            if not received:
                time.sleep(DRAIN_POLL_INTERVAL)

    # --------------------
    # Channel
    # --------------------
    def exit_status(self) -> int:
        """
        Wait for the command to finish and return its exit status.

        Unread stdout/stderr is drained and discarded first, so a command
        blocked on a full output window can still exit. The channel is closed
        afterwards; later calls return 0.
        """
        if self.channel_state is ResourceState.CONSUMED:
            return 0
        try:
            with translating(ErrorContext.SESSION, "Failed to collect exit status"):
                if self.stdin_state is ResourceState.AVAILABLE:
                    self._channel.shutdown_write()
                self._drain()
                status = self._channel.recv_exit_status()
                self._channel.close()
        finally:
            self._release_streams()
            self.channel_state = ResourceState.CONSUMED
        logger.debug(f"Remote command exited with status {status}")
        return status

    def _drain(self) -> None:
        """Discard pending output on both streams until the remote side is done"""
        chan = self._channel
        want_stdout = self.stdout_state is ResourceState.AVAILABLE
        want_stderr = self.stderr_state is ResourceState.AVAILABLE

        while not chan.exit_status_ready() or chan.recv_ready() or chan.recv_stderr_ready():
            has_output = False
            if chan.recv_ready():
                has_output = bool(chan.recv(DRAIN_CHUNK_SIZE)) or has_output
            if chan.recv_stderr_ready():
                has_output = bool(chan.recv_stderr(DRAIN_CHUNK_SIZE)) or has_output
            if not has_output:
                time.sleep(DRAIN_POLL_INTERVAL)

        if want_stdout or want_stderr:
            logger.debug("Discarded unread command output")

    def _release_streams(self) -> None:
        self._stdin = None
        self._pending = {"stdout": bytearray(), "stderr": bytearray()}
        self.stdin_state = ResourceState.CONSUMED
        self.stdout_state = ResourceState.CONSUMED
        self.stderr_state = ResourceState.CONSUMED

    def close(self) -> None:
        """Drop all streams and close the channel if it is still open"""
        self._release_streams()
        if self.channel_state is ResourceState.AVAILABLE:
            self.channel_state = ResourceState.CONSUMED
            with translating(ErrorContext.SESSION, "Failed to close channel"):
                self._channel.close()

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> ExecOutput:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
