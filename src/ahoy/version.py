"""Single source of truth for the ahoy package version."""

__version__: str = "2.6.0"
