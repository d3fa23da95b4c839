"""Idempotent artifact download (no Pants dependencies)."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from pants_spigot._exceptions import FetchError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = httpx.Timeout(30.0, read=300.0)


def fetch_artifact(
    url: str,
    destination: Path,
    *,
    client: Optional[httpx.Client] = None,
) -> bool:
    """Download ``url`` to ``destination`` unless a file is already there.

    The existing file is trusted as-is (no checksum). The body is streamed
    into a temporary file in the destination directory and moved into
    place only once complete.

    Returns:
        True if a download happened, False if the file already existed.

    Raises:
        FetchError: On any HTTP, network or filesystem error.
    """
    destination = Path(destination)
    if destination.is_file():
        logger.debug("%s already exists, skipping download", destination)
        return False

    owns_client = client is None
    if client is None:
        client = httpx.Client(follow_redirects=True, timeout=DOWNLOAD_TIMEOUT)

    tmp_path: Optional[str] = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=".part"
        )
        with os.fdopen(fd, "wb") as out:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    out.write(chunk)
        os.replace(tmp_path, destination)
        tmp_path = None
    except httpx.HTTPError as exc:
        raise FetchError(url, str(exc) or type(exc).__name__) from exc
    except OSError as exc:
        raise FetchError(url, str(exc)) from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        if owns_client:
            client.close()

    logger.info("Downloaded %s to %s", url, destination)
    return True
