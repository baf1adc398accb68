"""Utilities to download DataUSA population payloads.

`download_payload` caches the response body on disk so repeated runs do not
hit the API; `fetch_payload` always goes to the network.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


def cache_path_for(url: str, out_dir: Path) -> Path:
    """Return the cache file path used for a given endpoint URL.

    Args:
        url: DataUSA endpoint URL.
        out_dir: Local cache directory.

    Returns:
        Path of the form ``<out_dir>/population_<digest>.json``.
    """
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    return out_dir / f"population_{digest}.json"


def fetch_payload(url: str, timeout: float = 60.0) -> dict[str, Any]:
    """Fetch and decode the DataUSA JSON payload without caching.

    Raises:
        requests.HTTPError if the remote request fails (non-2xx status).
    """
    log.info("Fetching %s", url)
    import requests  # type: ignore[import-untyped]  # local import to avoid requiring type stubs at module import
    r = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    r.raise_for_status()
    return r.json()


def download_payload(
    url: str,
    out_dir: Path,
    timeout: float = 60.0,
    force: bool = False,
) -> Path:
    """Download or return the cached DataUSA payload.

    Args:
        url: DataUSA endpoint URL.
        out_dir: Local directory to cache downloaded payloads.
        timeout: Request timeout in seconds.
        force: Re-download even when a cached copy exists.

    Returns:
        Path to the downloaded (or cached) JSON file.

    Raises:
        requests.HTTPError if the remote request fails (non-2xx status).
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = cache_path_for(url, out_dir)

    if not force and out_path.exists() and out_path.stat().st_size > 0:
        log.info("Cache hit: %s", out_path)
        return out_path

    payload = fetch_payload(url, timeout=timeout)
    out_path.write_text(json.dumps(payload), encoding="utf-8")
    log.info("Saved: %s (%d bytes)", out_path, out_path.stat().st_size)
    return out_path


def read_payload(path: Path) -> dict[str, Any]:
    """Load a cached payload from disk."""
    return json.loads(path.read_text(encoding="utf-8"))
