"""Allow ``python -m ota_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m ota_cli`` behaves identically to the ``ota`` console
script.
"""

from __future__ import annotations

from ota_cli.cli.app import cli

if __name__ == "__main__":
    cli()
