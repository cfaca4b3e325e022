"""Context class for the console CLI."""

import sys
from rich.console import Console


class Context:
    """Shared context for CLI commands."""

    def __init__(self):
        self.verbose: bool = False
        self.console = Console()
        self.stderr_console = Console(file=sys.stderr)
