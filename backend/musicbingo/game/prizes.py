from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .models import BingoCard


Marks = list[list[bool]]


def _row(idx: int) -> Callable[[Marks], bool]:
    return lambda marks: all(marks[idx])


def _column(idx: int) -> Callable[[Marks], bool]:
    return lambda marks: all(row[idx] for row in marks)


def _early_five(marks: Marks) -> bool:
    # Free space counts towards the five.
    return sum(1 for row in marks for cell in row if cell) >= 5


def _full_house(marks: Marks) -> bool:
    return all(all(row) for row in marks)


@dataclass(frozen=True)
class PrizeDefinition:
    id: str
    name: str
    description: str
    condition: Callable[[Marks], bool]


PRIZE_CATALOG: tuple[PrizeDefinition, ...] = (
    PrizeDefinition("early-5", "Early 5", "First to mark 5 numbers", _early_five),
    PrizeDefinition("top-row", "Top Row", "Complete top row", _row(0)),
    PrizeDefinition("middle-row", "Middle Row", "Complete middle row", _row(2)),
    PrizeDefinition("bottom-row", "Bottom Row", "Complete bottom row", _row(4)),
    PrizeDefinition("b-column", "B Column", "Complete B column", _column(0)),
    PrizeDefinition("i-column", "I Column", "Complete I column", _column(1)),
    PrizeDefinition("n-column", "N Column", "Complete N column", _column(2)),
    PrizeDefinition("g-column", "G Column", "Complete G column", _column(3)),
    PrizeDefinition("o-column", "O Column", "Complete O column", _column(4)),
    PrizeDefinition("full-house", "Full House", "Mark all numbers", _full_house),
)


@dataclass
class Prize:
    definition: PrizeDefinition
    claimed: bool = False
    winner_name: str | None = None
    winner_id: str | None = None

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    def to_public(self) -> dict:
        winner = None
        if self.claimed:
            winner = {"playerName": self.winner_name, "playerId": self.winner_id}
        return {
            "id": self.definition.id,
            "name": self.definition.name,
            "description": self.definition.description,
            "claimed": self.claimed,
            "winner": winner,
        }


class PrizeLedger:
    """Per-room prize table with first-claimant-wins semantics."""

    def __init__(self, catalog: tuple[PrizeDefinition, ...] = PRIZE_CATALOG):
        self._lock = Lock()
        self._prizes = [Prize(definition=d) for d in catalog]
        self._by_id = {p.id: p for p in self._prizes}

    def evaluate(self, card: BingoCard) -> list[Prize]:
        """Unclaimed prizes whose condition holds for ``card`` right now."""
        marks = card.marks
        return [p for p in self._prizes if not p.claimed and p.definition.condition(marks)]

    def claim(self, prizes: list[Prize], player_name: str, player_id: str) -> list[Prize]:
        """Claim ``prizes`` in order; ones taken in the meantime are skipped."""
        won: list[Prize] = []
        with self._lock:
            for prize in prizes:
                current = self._by_id.get(prize.id)
                if current is None or current.claimed:
                    continue
                current.claimed = True
                current.winner_name = player_name
                current.winner_id = player_id
                won.append(current)
        return won

    def get(self, prize_id: str) -> Prize | None:
        return self._by_id.get(prize_id)

    def unclaimed(self) -> list[Prize]:
        return [p for p in self._prizes if not p.claimed]

    def claimed(self) -> list[Prize]:
        return [p for p in self._prizes if p.claimed]

    def all(self) -> list[Prize]:
        return list(self._prizes)

    def to_public(self) -> list[dict]:
        with self._lock:
            return [p.to_public() for p in self._prizes]
