"""
Raw byte loading for AudioSource URLs.

Three kinds of reference are accepted:
    data:<mime>;base64,<payload>   inline audio stored in the configuration
    http:// / https://             remote audio, fetched with httpx
    file://<path> or a plain path  local audio
"""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0  # seconds


class SourceFetchError(Exception):
    """Raised when a source's bytes cannot be obtained."""


def parse_data_url(url: str) -> tuple[str, bytes]:
    """
    Split a data: URL into (mime type, decoded bytes).

    Only base64 payloads carry audio; anything else is rejected.
    """
    header, sep, payload = url.partition(",")
    if not sep:
        raise SourceFetchError("data: URL has no payload")
    meta = header[len("data:"):].split(";")
    mime = meta[0] or "application/octet-stream"
    if "base64" not in meta[1:]:
        raise SourceFetchError("data: URL is not base64-encoded")
    try:
        return mime, base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise SourceFetchError(f"Invalid base64 payload: {exc}") from exc


def fetch_remote(url: str, timeout: float = DEFAULT_TIMEOUT,
                 client: Optional[httpx.Client] = None) -> bytes:
    """GET a remote source, following redirects. Non-2xx is a failure."""
    try:
        if client is not None:
            response = client.get(url, follow_redirects=True, timeout=timeout)
        else:
            response = httpx.get(url, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise SourceFetchError(f"Failed to fetch {url}: {exc}") from exc
    return response.content


def read_local(url: str) -> bytes:
    path = Path(unquote(urlparse(url).path)) if url.startswith("file://") else Path(url)
    try:
        return path.expanduser().read_bytes()
    except (OSError, ValueError) as exc:
        # ValueError: a NUL byte in the path
        raise SourceFetchError(f"Failed to read {path}: {exc}") from exc


def load_source_bytes(url: str, timeout: float = DEFAULT_TIMEOUT,
                      client: Optional[httpx.Client] = None) -> bytes:
    """
    Bytes behind any supported source reference.

    Raises:
        SourceFetchError: on an empty reference, a bad data: URL, a network
                          or HTTP error, or an unreadable file.
    """
    if not url:
        raise SourceFetchError("Source has no URL")
    if url.startswith("data:"):
        return parse_data_url(url)[1]
    if url.startswith(("http://", "https://")):
        logger.debug(f"Fetching {url}")
        return fetch_remote(url, timeout=timeout, client=client)
    return read_local(url)
