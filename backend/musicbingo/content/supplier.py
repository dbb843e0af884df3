from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Protocol, TypeVar

from ..game.errors import ContentSupplierFailure
from ..game.models import ContentEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODES = ("songs", "movies")
SLOT_RANGES = {"songs": range(1, 76), "movies": range(1, 51)}


class SupplierError(ContentSupplierFailure):
    """An adapter could not produce a usable entry."""
    error = "supplier_error"


@dataclass(frozen=True)
class GenerationConfig:
    mode: str = "songs"
    languages: tuple[str, ...] = ()
    start_year: int | None = None
    end_year: int | None = None
    target_size: int = 75
    initial_batch: int = 3
    batch_size: int = 5

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"Unknown content mode {self.mode!r}")
        if self.initial_batch < 1 or self.batch_size < 1 or self.target_size < 1:
            raise ValueError("Batch and target sizes must be positive")

    @property
    def slot_range(self) -> range:
        return SLOT_RANGES[self.mode]

    @property
    def pool_target(self) -> int:
        return min(self.target_size, len(self.slot_range))

    def with_payload(self, payload: dict | None) -> "GenerationConfig":
        """Overlay client-supplied settings (camelCase keys) on these defaults."""
        payload = payload or {}
        changes: dict = {}
        if "mode" in payload:
            changes["mode"] = str(payload["mode"]).strip().lower()
        languages = payload.get("languages")
        if isinstance(languages, list):
            changes["languages"] = tuple(str(l).strip() for l in languages if str(l).strip())
        for key, attr in (
            ("startYear", "start_year"),
            ("endYear", "end_year"),
            ("targetSize", "target_size"),
        ):
            if payload.get(key) is not None:
                try:
                    changes[attr] = int(payload[key])
                except (TypeError, ValueError):
                    raise ValueError(f"{key} must be an integer")
        if "mode" in changes and "targetSize" not in payload:
            changes["target_size"] = len(SLOT_RANGES.get(changes["mode"], range(0)))
        return replace(self, **changes)


class ContentSupplier(Protocol):
    def generate_one(
        self,
        slot_number: int,
        used_titles: list[str],
        config: GenerationConfig,
    ) -> ContentEntry | None:
        ...


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff_sec: float = 0.5
    backoff_factor: float = 2.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def run(self, fn: Callable[..., T], *args, describe: str = "supplier call") -> T:
        """Call ``fn`` until it stops raising SupplierError or attempts run out.

        The last SupplierError is re-raised once every attempt failed.
        """
        delay = self.backoff_sec
        attempts = max(1, self.max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return fn(*args)
            except SupplierError as exc:
                logger.warning(f"{describe} failed (attempt {attempt}/{attempts}): {exc}")
                if attempt == attempts:
                    raise
                if delay > 0:
                    self.sleep(delay)
                    delay *= self.backoff_factor
