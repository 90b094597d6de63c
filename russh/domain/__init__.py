"""
Domain layer: sessions, command execution and SFTP
"""
from .auth import AuthMethods, AuthSelector, PasswordAuth, PrivateKeyAuth
from .exec import ExecOutput, ResourceState
from .session import SSHClient
from .sftp import File, SFTPClient, parse_open_mode

__all__ = [
    "AuthMethods",
    "AuthSelector",
    "PasswordAuth",
    "PrivateKeyAuth",
    "ExecOutput",
    "ResourceState",
    "SSHClient",
    "File",
    "SFTPClient",
    "parse_open_mode",
]
