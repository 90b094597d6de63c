"""
Connection helpers for CLI commands
"""
from typing import Optional

from ...core.config import ClientConfig
from ...core.constants import DEFAULT_SSH_TIMEOUT
from ...core.logging import get_logger
from ...domain.session import SSHClient
from .host_parser import parse_host_string
from .prompts import RichPromptProvider

logger = get_logger(__name__)


def build_config(
    target: str,
    user: Optional[str] = None,
    port: Optional[int] = None,
    key_file: Optional[str] = None,
    password: bool = False,
    timeout: int = DEFAULT_SSH_TIMEOUT,
    prompt_provider: Optional[RichPromptProvider] = None,
) -> ClientConfig:
    """
    Resolve a CLI target into a ClientConfig.

    The host part may be an ~/.ssh/config alias; explicit options win.

    Args:
        target: [user@]host[:port]
        user: Username option
        port: Port option
        key_file: Private key option
        password: Prompt for a password
        timeout: Connection timeout in seconds
        prompt_provider: Prompt implementation (Rich by default)

    Returns:
        ClientConfig instance
    """
    host, parsed_user, parsed_port = parse_host_string(target, user, port)
    config = ClientConfig.from_ssh_config(
        host,
        user=parsed_user,
        port=parsed_port,
        key_path=key_file,
        timeout=timeout,
    )
    if password:
        prompts = prompt_provider or RichPromptProvider()
        config.password = prompts.password(f"Password for {config.user or ''}@{config.host}")
    return config


def open_client(config: ClientConfig) -> SSHClient:
    """
    Create and connect an SSHClient.

    Raises:
        SSHError: If connection or authentication fails
    """
    logger.debug(f"Opening session to {config.host}:{config.port}")
    client = SSHClient(require_auth=False)
    client.connect(
        config.host,
        username=config.user,
        auth=config.to_auth_methods(),
        port=config.port,
        timeout=config.timeout,
    )
    return client
