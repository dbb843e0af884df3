from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum

from .prizes import PrizeLedger


FREE = "FREE"


class Phase(str, Enum):
    LOBBY = "lobby"
    GENERATING = "generating"
    READY = "ready"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass
class BingoCard:
    owner_id: str
    # grid[col][row]; marks[row][col]
    grid: list[list[int | str]]
    marks: list[list[bool]]

    def signature(self) -> str:
        return "|".join(",".join(str(v) for v in col) for col in self.grid)


@dataclass
class ContentEntry:
    slot_number: int
    title: str
    performer: str = ""
    movie: str = ""
    year: int | None = None
    language: str = ""
    clue: str = ""
    video_id: str = ""
    preview_url: str = ""
    placeholder: bool = False

    @property
    def key(self) -> str:
        if self.performer:
            return f"{self.performer} - {self.title}".lower()
        return self.title.lower()

    def to_public(self) -> dict:
        return {
            "number": self.slot_number,
            "title": self.title,
            "performer": self.performer,
            "movie": self.movie,
            "year": self.year,
            "language": self.language,
            "clue": self.clue,
            "videoId": self.video_id,
            "previewUrl": self.preview_url,
            "placeholder": self.placeholder,
        }


@dataclass
class Player:
    id: str
    name: str
    card: BingoCard
    is_host: bool = False
    joined_at: float = field(default_factory=time.time)


@dataclass
class ClaimResult:
    valid: bool
    message: str
    prizes: list[dict] = field(default_factory=list)
    player_name: str | None = None

    def to_public(self) -> dict:
        return {
            "valid": self.valid,
            "message": self.message,
            "prizes": [dict(p) for p in self.prizes],
            "playerName": self.player_name,
        }


@dataclass
class Room:
    code: str
    players: dict[str, Player] = field(default_factory=dict)
    host_id: str | None = None
    phase: Phase = Phase.LOBBY
    content_mode: str = "songs"
    content_pool: list[ContentEntry] = field(default_factory=list)
    played_entries: list[ContentEntry] = field(default_factory=list)
    used_slot_numbers: set[int] = field(default_factory=set)
    card_signatures: set[str] = field(default_factory=set)
    prize_ledger: PrizeLedger = field(default_factory=PrizeLedger)
    is_generating: bool = False
    is_augmenting: bool = False
    content_generated: bool = False
    target_pool_size: int = 0
    created_at: float = field(default_factory=time.time)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)
    stop_augmenting: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    @property
    def called_numbers(self) -> list[int]:
        return [e.slot_number for e in self.played_entries]

    def unused_entries(self) -> list[ContentEntry]:
        return [e for e in self.content_pool if e.slot_number not in self.used_slot_numbers]

    def used_titles(self) -> list[str]:
        return [e.key for e in self.content_pool]
