from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Callable, Iterable

from ..game.errors import ContentSupplierFailure
from ..game.models import ContentEntry
from .supplier import ContentSupplier, GenerationConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def placeholder_entry(slot_number: int, config: GenerationConfig) -> ContentEntry:
    if config.mode == "movies":
        return ContentEntry(
            slot_number=slot_number,
            title=f"Mystery Film #{slot_number}",
            clue=f"Film number {slot_number}",
            placeholder=True,
        )
    year = 1900 + slot_number
    return ContentEntry(
        slot_number=slot_number,
        title=f"Song from {year}",
        performer="Various Artists",
        year=year,
        clue=f"Released in {year}",
        placeholder=True,
    )


class ContentGenerator:
    """Turns a ContentSupplier into batches of slot-numbered entries.

    Never fails a batch because of the supplier: a missing or failed entry is
    replaced by a placeholder for the same slot.
    """

    def __init__(self, supplier: ContentSupplier, rng: random.Random | None = None):
        self.supplier = supplier
        self.rng = rng or random.Random()

    def pick_slots(self, count: int, config: GenerationConfig, taken_slots: Iterable[int] = ()) -> list[int]:
        taken = set(taken_slots)
        free = [n for n in config.slot_range if n not in taken]
        return self.rng.sample(free, min(count, len(free)))

    def generate_one(self, slot_number: int, used_titles: list[str], config: GenerationConfig) -> ContentEntry:
        try:
            entry = self.supplier.generate_one(slot_number, list(used_titles), config)
        except ContentSupplierFailure as exc:
            logger.warning(f"Supplier failed for slot {slot_number}, using placeholder: {exc}")
            entry = None
        except Exception:
            logger.error(f"Supplier crashed on slot {slot_number}, using placeholder", exc_info=True)
            entry = None

        if entry is None:
            return placeholder_entry(slot_number, config)
        if entry.slot_number != slot_number:
            entry = replace(entry, slot_number=slot_number)
        return entry

    def bulk_generate(
        self,
        target_count: int,
        config: GenerationConfig,
        used_titles: Iterable[str] = (),
        taken_slots: Iterable[int] = (),
        progress: ProgressCallback | None = None,
    ) -> list[ContentEntry]:
        slots = self.pick_slots(target_count, config, taken_slots)
        used = [t.lower() for t in used_titles]
        entries: list[ContentEntry] = []

        for i, slot in enumerate(slots, start=1):
            entry = self.generate_one(slot, used, config)
            if entry.key in used:
                logger.info(f"Duplicate {entry.key!r} for slot {slot}, using placeholder")
                entry = placeholder_entry(slot, config)
            entries.append(entry)
            used.append(entry.key)
            if progress is not None:
                progress(i, len(slots))

        return entries
