"""
Run-level and catalog-level url deduplication.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from app.scraping.storage.base import CatalogStore


def normalize_url(url: str) -> str:
    """
    Canonical form used for duplicate checks: lower-cased scheme and host,
    no fragment, no default port, no trailing slash on the path.
    """

    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port
    if port is not None and not (
        (scheme == "http" and port == 80) or (scheme == "https" and port == 443)
    ):
        host = f"{host}:{port}"
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((scheme, host, path, parts.query, ""))


class Deduplicator:
    """
    Rejects urls already emitted in this run or already in the catalog.
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        self._seen: set[str] = set()

    def admit(self, url: str) -> bool:
        key = normalize_url(url)
        if key in self._seen:
            return False
        self._seen.add(key)
        return not self._store.exists(key)

    @property
    def seen_count(self) -> int:
        return len(self._seen)
