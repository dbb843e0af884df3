from __future__ import annotations

import logging

import requests

from ..game.models import ContentEntry
from .parsing import extract_entry
from .supplier import GenerationConfig, RetryPolicy, SupplierError

logger = logging.getLogger(__name__)


class RemoteTextSupplier:
    """Asks an external text generator for a song tied to a slot number.

    The generator answers with free text that should contain one JSON object
    (``number``, ``song``, ``artist``, ``movie``, ``year``, ``clue``); anything
    else is rejected and retried.
    """

    def __init__(
        self,
        url: str,
        retry: RetryPolicy | None = None,
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        self.url = url
        self.retry = retry or RetryPolicy()
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, slot_number: int, used_titles: list[str], config: GenerationConfig) -> ContentEntry:
        payload = {
            "slot": slot_number,
            "mode": config.mode,
            "languages": list(config.languages),
            "exclude": list(used_titles),
        }
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise SupplierError(f"generator request failed: {exc}") from exc
        return extract_entry(resp.text, slot_number)

    def generate_one(self, slot_number: int, used_titles: list[str], config: GenerationConfig) -> ContentEntry | None:
        entry = self.retry.run(
            self._request,
            slot_number,
            used_titles,
            config,
            describe=f"generator slot {slot_number}",
        )
        if entry.key in {t.lower() for t in used_titles}:
            logger.info(f"Generator repeated {entry.key!r} for slot {slot_number}, dropping it")
            return None
        return entry
