"""ota-cli — command-line client for fleet over-the-air updates.

Routes ``<command> <subcommand> [--flags]`` input to the campaigner,
registry, reposerver and director services.
"""

from ota_cli.version import __version__

__all__: list[str] = ["__version__"]
