"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.constants import DEFAULT_SSH_TIMEOUT
from ...core.exceptions import ConfigError, SSHError
from ...core.logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .connection import build_config, open_client

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

# Create main app
app = typer.Typer(
    name="russh",
    add_completion=False,
    help="Run commands and transfer files over SSH",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Options shared by every command
TARGET = typer.Argument(..., help="[user@]host[:port] or SSH config alias")
USER = typer.Option(None, "--user", "-u", help="Username")
PORT = typer.Option(None, "--port", "-p", help="SSH port")
KEY = typer.Option(None, "--key", "-i", help="Private key file path")
PASSWORD = typer.Option(False, "--password", help="Prompt for password")
TIMEOUT = typer.Option(DEFAULT_SSH_TIMEOUT, "--timeout", help="Connection timeout (seconds)")


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
):
    """
    russh - run commands and transfer files over SSH
    """
    setup_logging(level=log_level, log_file=log_file)


def _fail(message: str) -> None:
    stderr_console.print(f"[red]Error:[/red] {message}", markup=True, highlight=False)
    raise typer.Exit(1)


def _connect(target, user, port, key_file, password, timeout):
    try:
        config = build_config(target, user, port, key_file, password, timeout)
        return open_client(config)
    except (ConfigError, SSHError) as e:
        _fail(str(e))


@app.command(name="exec")
def exec_run(
    target: str = TARGET,
    command: str = typer.Argument(..., help="Command to run on the remote host"),
    stdin: Optional[Path] = typer.Option(None, "--stdin", help="Local file fed to the command's stdin"),
    user: Optional[str] = USER,
    port: Optional[int] = PORT,
    key_file: Optional[str] = KEY,
    password: bool = PASSWORD,
    timeout: int = TIMEOUT,
):
    """
    Run a command remotely and exit with its status.

    Examples:
        russh exec user@host "uname -a"
        russh exec myserver "wc -l" --stdin data.txt
    """
    client = _connect(target, user, port, key_file, password, timeout)
    with client:
        try:
            with client.exec_command(command) as output:
                if stdin is not None:
                    output.write_stdin(stdin.read_bytes())
                out = output.read_stdout()
                err = output.read_stderr()
                status = output.exit_status()
        except (SSHError, OSError) as e:
            _fail(str(e))

    if out:
        stdout_console.out(out, end="", highlight=False)
    if err:
        stderr_console.out(err, end="", highlight=False)
    raise typer.Exit(status)


@app.command(name="get")
def get_run(
    target: str = TARGET,
    remotepath: str = typer.Argument(..., help="Remote file path"),
    localpath: Path = typer.Argument(..., help="Local destination (overwritten)"),
    cwd: Optional[str] = typer.Option(None, "--cwd", help="Remote working directory"),
    user: Optional[str] = USER,
    port: Optional[int] = PORT,
    key_file: Optional[str] = KEY,
    password: bool = PASSWORD,
    timeout: int = TIMEOUT,
):
    """
    Download a remote file.

    Examples:
        russh get host /etc/hostname ./hostname
        russh get host --cwd /var/log syslog ./syslog
    """
    client = _connect(target, user, port, key_file, password, timeout)
    with client:
        try:
            with client.open_sftp() as sftp:
                sftp.chdir(cwd)
                sftp.get(remotepath, localpath)
        except SSHError as e:
            _fail(str(e))
    stdout_console.print(f"[green]✓[/green] {remotepath} → {localpath}")


@app.command(name="put")
def put_run(
    target: str = TARGET,
    localpath: Path = typer.Argument(..., help="Local file path"),
    remotepath: str = typer.Argument(..., help="Remote destination (created or truncated)"),
    cwd: Optional[str] = typer.Option(None, "--cwd", help="Remote working directory"),
    user: Optional[str] = USER,
    port: Optional[int] = PORT,
    key_file: Optional[str] = KEY,
    password: bool = PASSWORD,
    timeout: int = TIMEOUT,
):
    """
    Upload a local file.

    Examples:
        russh put host ./app.conf /etc/app.conf
    """
    client = _connect(target, user, port, key_file, password, timeout)
    with client:
        try:
            with client.open_sftp() as sftp:
                sftp.chdir(cwd)
                sftp.put(localpath, remotepath)
        except SSHError as e:
            _fail(str(e))
    stdout_console.print(f"[green]✓[/green] {localpath} → {remotepath}")


@app.command(name="ls")
def ls_run(
    target: str = TARGET,
    path: Optional[str] = typer.Argument(None, help="Remote directory (default: login directory)"),
    user: Optional[str] = USER,
    port: Optional[int] = PORT,
    key_file: Optional[str] = KEY,
    password: bool = PASSWORD,
    timeout: int = TIMEOUT,
):
    """
    List a remote directory.
    """
    client = _connect(target, user, port, key_file, password, timeout)
    with client:
        try:
            with client.open_sftp() as sftp:
                names = sftp.listdir(path)
        except SSHError as e:
            _fail(str(e))
    for name in names:
        stdout_console.out(name, highlight=False)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
