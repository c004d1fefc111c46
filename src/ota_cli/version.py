"""Single source of truth for the ota-cli version."""

__version__: str = "0.3.0"
