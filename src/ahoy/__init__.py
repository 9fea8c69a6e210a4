"""ahoy: declarative command runner.

Reads ``.ahoy.yml`` files describing named shell commands and exposes each
one as a subcommand of a single CLI.
"""

from ahoy.version import __version__

__all__: list[str] = ["__version__"]
