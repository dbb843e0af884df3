from __future__ import annotations

import logging
from dataclasses import replace

import requests

from ..game.models import ContentEntry
from .supplier import ContentSupplier, GenerationConfig, RetryPolicy, SupplierError

logger = logging.getLogger(__name__)

DEEZER_BASE_URL = "https://api.deezer.com"


class DeezerPreviewLookup:
    """Finds a 30-second preview clip for a song via the public Deezer search API."""

    def __init__(self, base_url: str = DEEZER_BASE_URL, timeout: float = 10, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(self, artist: str, title: str, year: int | None = None) -> dict | None:
        query = f'artist:"{artist}" track:"{title}"' if artist else title
        try:
            resp = self.session.get(f"{self.base_url}/search", params={"q": query}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise SupplierError(f"Deezer search failed: {exc}") from exc

        results = data.get("data") if isinstance(data, dict) else None
        if not results:
            return None

        if year:
            # Prefer releases within two years of the film.
            near = [
                t for t in results
                if str((t.get("album") or {}).get("release_date", ""))[:4].isdigit()
                and abs(int(str(t["album"]["release_date"])[:4]) - year) <= 2
            ]
            if near:
                results = near

        track = results[0]
        return {
            "previewUrl": track.get("preview") or "",
            "duration": track.get("duration") or 30,
            "link": track.get("link") or "",
        }


class EnrichingSupplier:
    """Wraps another supplier and attaches preview URLs to what it returns.

    Enrichment is best effort: once the retry policy gives up the entry is
    kept as it is.
    """

    def __init__(self, inner: ContentSupplier, lookup: DeezerPreviewLookup, retry: RetryPolicy | None = None):
        self.inner = inner
        self.lookup = lookup
        self.retry = retry or RetryPolicy()

    def generate_one(self, slot_number: int, used_titles: list[str], config: GenerationConfig) -> ContentEntry | None:
        entry = self.inner.generate_one(slot_number, used_titles, config)
        if entry is None or config.mode != "songs" or entry.preview_url:
            return entry

        try:
            found = self.retry.run(
                self.lookup.search,
                entry.performer,
                entry.title,
                entry.year,
                describe=f"preview lookup for {entry.key!r}",
            )
        except SupplierError:
            logger.warning(f"Keeping slot {slot_number} without a preview clip")
            return entry

        if not found or not found.get("previewUrl"):
            return entry
        return replace(entry, preview_url=found["previewUrl"])
