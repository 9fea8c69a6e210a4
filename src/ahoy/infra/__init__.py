"""Infrastructure layer: external system integration.

This layer wraps all interaction with PyYAML, the filesystem, child
processes and the network.  Every raw third-party exception must be
caught here and re-raised as an :class:`~ahoy.exceptions.AhoyError`
subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from ahoy.infra.config_locator import DEFAULT_CONFIG_NAME, find_config_path
from ahoy.infra.process_runner import build_environment, run_action
from ahoy.infra.starter_download import EXAMPLE_CONFIG_URL, download_file
from ahoy.infra.yaml_provider import YamlConfigProvider

__all__: list[str] = [
    "DEFAULT_CONFIG_NAME",
    "EXAMPLE_CONFIG_URL",
    "YamlConfigProvider",
    "build_environment",
    "download_file",
    "find_config_path",
    "run_action",
]
