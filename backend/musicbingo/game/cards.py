from __future__ import annotations

import random

from .models import FREE, BingoCard


COLUMN_NAMES = ("B", "I", "N", "G", "O")
DEFAULT_COLUMN_STARTS = (1, 16, 31, 46, 61)
COLUMN_WIDTH = 15
CARD_SIZE = 5
MAX_UNIQUE_ATTEMPTS = 100

DIAGONAL_DOWN = "Diagonal (Top-Left to Bottom-Right)"
DIAGONAL_UP = "Diagonal (Top-Right to Bottom-Left)"
FULL_HOUSE = "Full House"


class CardGenerator:
    """Deals 5x5 cards where every column is an independent draw from its own range."""

    def __init__(
        self,
        column_ranges: list[tuple[int, int]] | None = None,
        rng: random.Random | None = None,
    ):
        if column_ranges is None:
            column_ranges = [(s, s + COLUMN_WIDTH - 1) for s in DEFAULT_COLUMN_STARTS]
        if len(column_ranges) != CARD_SIZE:
            raise ValueError(f"Need {CARD_SIZE} column ranges, got {len(column_ranges)}")
        for lo, hi in column_ranges:
            if hi - lo + 1 < CARD_SIZE:
                raise ValueError(f"Column range {lo}-{hi} is too narrow")
        self.column_ranges = list(column_ranges)
        self.rng = rng or random.Random()

    def _shuffle(self, values: list[int]) -> list[int]:
        shuffled = list(values)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    def generate_card(self, owner_id: str) -> BingoCard:
        grid: list[list[int | str]] = []
        for col, (lo, hi) in enumerate(self.column_ranges):
            column: list[int | str] = list(self._shuffle(list(range(lo, hi + 1)))[:CARD_SIZE])
            if col == 2:
                column[2] = FREE
            grid.append(column)

        marks = [[False] * CARD_SIZE for _ in range(CARD_SIZE)]
        marks[2][2] = True
        return BingoCard(owner_id=owner_id, grid=grid, marks=marks)

    def generate_unique_card(self, owner_id: str, seen: set[str]) -> BingoCard:
        """Deal a card whose grid is not in ``seen``.

        Gives up after MAX_UNIQUE_ATTEMPTS and returns the last (possibly
        duplicate) card. The signature is recorded in ``seen`` either way.
        """
        card = self.generate_card(owner_id)
        attempts = 1
        while card.signature() in seen and attempts < MAX_UNIQUE_ATTEMPTS:
            card = self.generate_card(owner_id)
            attempts += 1
        seen.add(card.signature())
        return card

    def generate_cards(self, count: int) -> list[BingoCard]:
        seen: set[str] = set()
        return [self.generate_unique_card(f"player-{i + 1}", seen) for i in range(count)]

    @staticmethod
    def mark_number(card: BingoCard, number: int) -> bool:
        if isinstance(number, bool) or not isinstance(number, int):
            return False
        hits = [
            (col, row)
            for col, column in enumerate(card.grid)
            for row, value in enumerate(column)
            if value != FREE and value == number
        ]
        if len(hits) != 1:
            return False
        col, row = hits[0]
        card.marks[row][col] = True
        return True

    @staticmethod
    def check_win_patterns(card: BingoCard) -> list[str]:
        marks = card.marks
        wins: list[str] = []

        for row in range(CARD_SIZE):
            if all(marks[row]):
                wins.append(f"Row {row + 1}")

        for col in range(CARD_SIZE):
            if all(marks[row][col] for row in range(CARD_SIZE)):
                wins.append(f"{COLUMN_NAMES[col]} Column")

        if all(marks[i][i] for i in range(CARD_SIZE)):
            wins.append(DIAGONAL_DOWN)
        if all(marks[i][CARD_SIZE - 1 - i] for i in range(CARD_SIZE)):
            wins.append(DIAGONAL_UP)

        if all(all(row) for row in marks):
            wins.append(FULL_HOUSE)

        return wins

    @staticmethod
    def marked_count(card: BingoCard) -> int:
        return sum(1 for row in card.marks for cell in row if cell)
