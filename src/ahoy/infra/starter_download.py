"""Infrastructure: downloading a starter ``.ahoy.yml``.

This module is the **only** place in the codebase that imports
``httpx``.  All transport and filesystem errors are re-raised as
:class:`~ahoy.exceptions.InitError`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from ahoy.exceptions import EnvironmentError, InitError

logger = logging.getLogger(__name__)

EXAMPLE_CONFIG_URL: str = (
    "https://raw.githubusercontent.com/ahoy-cli/ahoy/master/examples/examples.ahoy.yml"
)
DOWNLOAD_TIMEOUT_SECONDS: float = 30.0


def validate_url(url: str) -> None:
    """Raise :class:`InitError` unless *url* uses http or https."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InitError(
            f"Invalid URL '{url}': only http and https schemes are supported.",
        )


def download_file(url: str, destination: Path) -> None:
    """Fetch *url* and atomically place its body at *destination*.

    The body is written to ``<destination>.tmp`` first and renamed only
    once fully written, so a failed download never leaves a partial file
    at *destination*.
    """
    validate_url(url)

    try:
        import httpx
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "httpx is not installed. Install with: pip install httpx",
        ) from exc

    tmp_path = destination.with_name(destination.name + ".tmp")
    try:
        with httpx.Client(timeout=DOWNLOAD_TIMEOUT_SECONDS, follow_redirects=True) as client:
            with client.stream("GET", url) as response:
                if response.status_code != httpx.codes.OK:
                    raise InitError(
                        f"Failed to download file: server returned "
                        f"{response.status_code} {response.reason_phrase}",
                    )
                with open(tmp_path, "wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
        os.replace(tmp_path, destination)
    except httpx.HTTPError as exc:
        raise InitError(f"Failed to fetch URL {url}: {exc}") from exc
    except OSError as exc:
        raise InitError(f"Failed to write file {destination}: {exc}") from exc
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    logger.debug("Downloaded %s to %s", url, destination)
