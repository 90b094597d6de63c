"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.prompt import Prompt

from ...core.logging import get_stdout_console, get_stderr_console


class RichPromptProvider:
    """Rich-based prompt provider"""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self.console = console or get_stdout_console()
        self.error_console = error_console or get_stderr_console()

    def password(self, message: str) -> str:
        """Prompt for a secret without echo"""
        return Prompt.ask(message, password=True, console=self.console)

    def error(self, message: str) -> None:
        """Display error message"""
        self.error_console.print(f"[red]Error:[/red] {message}")
