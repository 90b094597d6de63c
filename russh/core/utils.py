"""
Core utility functions
"""
import paramiko
from pathlib import Path
from typing import Dict, Any, Optional

from .constants import SSH_CONFIG_PATH, DEFAULT_SSH_PORT
from .exceptions import ConfigError


# ============================================================
# SSH Config Management
# ============================================================

def load_ssh_config(hostname: str, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration for specified Host from ~/.ssh/config.

    Args:
        hostname: Host name in SSH configuration
        config_path: Alternate config file (defaults to ~/.ssh/config)

    Returns:
        Dictionary containing host, user, port, key_file

    Raises:
        ConfigError: If the config file doesn't exist or cannot be parsed
    """
    path = config_path or Path(SSH_CONFIG_PATH).expanduser()
    if not path.exists():
        raise ConfigError(f"{path} does not exist")

    try:
        ssh_config = paramiko.SSHConfig.from_path(str(path))
        entry = ssh_config.lookup(hostname)
        port = int(entry.get("port", DEFAULT_SSH_PORT))
    except (paramiko.ConfigParseError, ValueError) as e:
        raise ConfigError(f"Invalid SSH config {path}: {e}") from e

    return {
        "host": entry.get("hostname", hostname),
        "user": entry.get("user", None),
        "port": port,
        "key_file": entry.get("identityfile", [None])[0],
    }


# ============================================================
# Path Resolution Utilities
# ============================================================

def join_remote_path(cwd: Optional[str], path: str) -> str:
    """
    Compose a remote path against an emulated working directory.

    Plain concatenation: "." and ".." are sent to the server untouched.

    Args:
        cwd: Working directory, or None when unset
        path: Path given by the caller

    Returns:
        Path to send to the server
    """
    if cwd is None or path.startswith("/"):
        return path
    if cwd.endswith("/"):
        return cwd + path
    return f"{cwd}/{path}"
