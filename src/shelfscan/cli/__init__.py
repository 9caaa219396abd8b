"""shelfscan CLI - built with Typer and Rich.

Commands:
- Scanning (probe, order)
- Diagnostics (diagnose)
"""

from __future__ import annotations

import sys

from shelfscan.cli._app import (
    DIAG_COMMANDS,
    SCAN_COMMANDS,
    create_main_callback,
    make_app,
)
from shelfscan.cli.diagnostics import register_diagnostics_commands
from shelfscan.cli.scan import register_scan_commands

app = make_app()

# Handles --version, --verbose, --log-file
create_main_callback(app)

register_scan_commands(app)
register_diagnostics_commands(app)


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = [
    "app",
    "main",
    "SCAN_COMMANDS",
    "DIAG_COMMANDS",
]

if __name__ == "__main__":
    sys.exit(main())
