"""Session registry: the authoritative in-memory state of every active room.

Locking model:
- ``SessionRegistry._lock`` guards the code -> Room map only.
- Each ``Room.lock`` serializes every mutation of that room.
- Locks are always taken room first, registry second, never the reverse.
- Supplier round-trips run with no lock held. Whoever resumes afterwards
  re-checks that the room is still registered and in the expected phase.
"""
from __future__ import annotations

import logging
import random
import string
import threading
from contextlib import contextmanager
from threading import RLock
from typing import Any, Callable, Iterator

from ..content.generator import ContentGenerator
from ..content.supplier import GenerationConfig
from .cards import CardGenerator
from .errors import (
    ContentAlreadyGenerated,
    ContentStillLoading,
    GameAlreadyStarted,
    HostOnlyViolation,
    InvalidPhaseTransition,
    PlayerNotFound,
    RoomAlreadyExists,
    RoomNotFound,
)
from .models import ClaimResult, ContentEntry, Phase, Player, Room

logger = logging.getLogger(__name__)

Spawner = Callable[..., Any]
PoolListener = Callable[[str], None]
ProgressListener = Callable[[str, int, int], None]


def spawn_thread(fn, *args) -> threading.Thread:
    t = threading.Thread(target=fn, args=args, daemon=True)
    t.start()
    return t


def generate_room_code(length: int = 3, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(string.ascii_uppercase) for _ in range(length))


class SessionRegistry:
    def __init__(
        self,
        generator: ContentGenerator,
        card_generator: CardGenerator | None = None,
        defaults: GenerationConfig | None = None,
        rng: random.Random | None = None,
        spawn: Spawner = spawn_thread,
        on_pool_updated: PoolListener | None = None,
        on_generation_progress: ProgressListener | None = None,
    ):
        self.generator = generator
        self.card_generator = card_generator or CardGenerator()
        self.defaults = defaults or GenerationConfig()
        self.rng = rng or random.Random()
        self.spawn = spawn
        self.on_pool_updated = on_pool_updated
        self.on_generation_progress = on_generation_progress

        self._lock = RLock()
        self._rooms: dict[str, Room] = {}

    # ---- registry ----

    def create_room(self, code: str) -> Room:
        with self._lock:
            if code in self._rooms:
                raise RoomAlreadyExists(code)
            room = Room(code=code)
            self._rooms[code] = room
        logger.info(f"Created room {code}")
        return room

    def find_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def get_room(self, code: str) -> Room:
        room = self.find_room(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def list_rooms(self) -> list[str]:
        with self._lock:
            return list(self._rooms.keys())

    def _is_live(self, room: Room) -> bool:
        return self.find_room(room.code) is room

    def _destroy_locked(self, room: Room) -> None:
        room.stop_augmenting.set()
        with self._lock:
            if self._rooms.get(room.code) is room:
                del self._rooms[room.code]
        logger.info(f"Room {room.code} destroyed")

    @contextmanager
    def _locked(self, code: str) -> Iterator[Room]:
        room = self.get_room(code)
        with room.lock:
            # The room may have been destroyed while we waited for its lock.
            if not self._is_live(room):
                raise RoomNotFound(code)
            yield room

    @staticmethod
    def _require_host(room: Room, actor_id: str | None, action: str) -> None:
        if actor_id is not None and actor_id != room.host_id:
            raise HostOnlyViolation(action)

    # ---- membership ----

    def add_player(self, code: str, conn_id: str, name: str) -> Player:
        with self._locked(code) as room:
            if room.phase != Phase.LOBBY:
                raise GameAlreadyStarted("Game already started")

            display_name = (name or "").strip() or "Player"
            existing = room.players.get(conn_id)
            if existing is not None:
                existing.name = display_name
                return existing

            card = self.card_generator.generate_unique_card(conn_id, room.card_signatures)
            player = Player(id=conn_id, name=display_name, card=card)
            room.players[conn_id] = player

            if room.host_id is None:
                player.is_host = True
                room.host_id = conn_id

            logger.info(f"{display_name} ({conn_id}) joined room {code}, host={room.host_id}")
            return player

    def remove_player(self, code: str, conn_id: str) -> bool:
        """Remove a player in any phase. Returns True if the room was destroyed."""
        with self._locked(code) as room:
            player = room.players.pop(conn_id, None)
            if player is None:
                return False

            if room.host_id == conn_id:
                room.host_id = None
                for pid, other in room.players.items():
                    other.is_host = True
                    room.host_id = pid
                    logger.info(f"Host of room {code} passed to {pid}")
                    break

            if not room.players:
                room.host_id = None
                self._destroy_locked(room)
                return True
            return False

    def remove_connection(self, conn_id: str) -> list[tuple[str, bool]]:
        """Drop ``conn_id`` from every room it belongs to.

        Returns ``(code, destroyed)`` for each room it was removed from.
        """
        removed: list[tuple[str, bool]] = []
        for code in self.list_rooms():
            room = self.find_room(code)
            if room is None or conn_id not in room.players:
                continue
            try:
                destroyed = self.remove_player(code, conn_id)
            except RoomNotFound:
                continue
            removed.append((code, destroyed))
        return removed

    # ---- content ----

    def generate_content(
        self,
        code: str,
        config: GenerationConfig | None = None,
        actor_id: str | None = None,
    ) -> Room:
        """Fill the room's pool with an initial batch, then backfill in the background.

        Blocks the caller only for the initial batch. The rest of the pool is
        fetched by a task started through ``self.spawn``.
        """
        cfg = config or self.defaults

        with self._locked(code) as room:
            self._require_host(room, actor_id, "generate content")
            if room.is_generating:
                raise InvalidPhaseTransition("Content generation already in progress")
            if room.content_generated or room.content_pool:
                raise ContentAlreadyGenerated("Content already generated for this room")
            if room.phase != Phase.LOBBY:
                raise InvalidPhaseTransition(f"Cannot generate content while {room.phase.value}")

            room.is_generating = True
            room.phase = Phase.GENERATING
            room.content_mode = cfg.mode
            room.target_pool_size = cfg.pool_target
            initial = min(cfg.initial_batch, room.target_pool_size)

        logger.info(f"Generating {initial} of {room.target_pool_size} {cfg.mode} for room {code}")

        def _progress(done: int, total: int) -> None:
            self._notify_progress(code, done, total)

        try:
            entries = self.generator.bulk_generate(initial, cfg, progress=_progress)
        except Exception:
            logger.error(f"Content generation failed for room {code}", exc_info=True)
            entries = []

        with room.lock:
            room.is_generating = False
            room.content_generated = True
            if not self._is_live(room):
                raise RoomNotFound(code)

            self._append_entries(room, entries)
            if not room.content_pool:
                logger.warning(f"Room {code} has no content after generation, ending it")
                room.phase = Phase.ENDED
                room.stop_augmenting.set()
                return room

            room.phase = Phase.READY
            needs_more = len(room.content_pool) < room.target_pool_size
            if needs_more:
                room.is_augmenting = True

        if needs_more:
            self.spawn(self._augment, room, cfg)
        return room

    def _append_entries(self, room: Room, entries: list[ContentEntry]) -> int:
        slots = {e.slot_number for e in room.content_pool}
        keys = {e.key for e in room.content_pool}
        added = 0
        for entry in entries:
            if len(room.content_pool) >= room.target_pool_size:
                break
            if entry.slot_number in slots or entry.key in keys:
                continue
            room.content_pool.append(entry)
            slots.add(entry.slot_number)
            keys.add(entry.key)
            added += 1
        return added

    def _should_augment(self, room: Room) -> bool:
        return (
            not room.stop_augmenting.is_set()
            and room.phase != Phase.ENDED
            and self._is_live(room)
        )

    def _augment(self, room: Room, cfg: GenerationConfig) -> None:
        code = room.code
        logger.info(f"Backfilling room {code} towards {room.target_pool_size} entries")
        try:
            while True:
                with room.lock:
                    if not self._should_augment(room):
                        break
                    missing = room.target_pool_size - len(room.content_pool)
                    if missing <= 0:
                        break
                    used = room.used_titles()
                    taken = [e.slot_number for e in room.content_pool]

                try:
                    batch = self.generator.bulk_generate(
                        min(cfg.batch_size, missing), cfg, used_titles=used, taken_slots=taken
                    )
                except Exception:
                    logger.error(f"Backfill failed for room {code}", exc_info=True)
                    break

                with room.lock:
                    if not self._should_augment(room):
                        break
                    added = self._append_entries(room, batch)
                    size = len(room.content_pool)

                if not added:
                    break
                logger.info(f"Room {code} pool now {size}/{room.target_pool_size}")
                self._notify_pool(code)
        finally:
            with room.lock:
                room.is_augmenting = False
            logger.info(f"Backfill for room {code} stopped with {len(room.content_pool)} entries")

    def _notify_pool(self, code: str) -> None:
        if self.on_pool_updated is None:
            return
        try:
            self.on_pool_updated(code)
        except Exception:
            logger.warning(f"Pool listener failed for room {code}", exc_info=True)

    def _notify_progress(self, code: str, done: int, total: int) -> None:
        if self.on_generation_progress is None:
            return
        try:
            self.on_generation_progress(code, done, total)
        except Exception:
            logger.warning(f"Progress listener failed for room {code}", exc_info=True)

    # ---- game ----

    def start_game(self, code: str, actor_id: str | None = None) -> Room:
        with self._locked(code) as room:
            self._require_host(room, actor_id, "start the game")
            if room.phase in (Phase.PLAYING, Phase.ENDED):
                raise GameAlreadyStarted("Game already started")
            if room.phase != Phase.READY:
                raise InvalidPhaseTransition("Content is not ready yet")
            room.phase = Phase.PLAYING
            logger.info(f"Game started in room {code} with {len(room.players)} players")
            return room

    def play_next_entry(self, code: str, actor_id: str | None = None) -> ContentEntry | None:
        """Deal a random unused entry, or end the game and return None when none remain.

        Raises ContentStillLoading instead of ending while backfill can still
        grow the pool.
        """
        with self._locked(code) as room:
            self._require_host(room, actor_id, "play the next song")
            if room.phase == Phase.ENDED:
                return None
            if room.phase != Phase.PLAYING:
                raise InvalidPhaseTransition("Game has not started")

            remaining = room.unused_entries()
            if not remaining:
                if room.is_augmenting and len(room.content_pool) < room.target_pool_size:
                    raise ContentStillLoading("More songs are still loading")
                room.phase = Phase.ENDED
                room.stop_augmenting.set()
                logger.info(f"Room {code} ran out of entries after {len(room.played_entries)} calls")
                return None

            entry = self.rng.choice(remaining)
            room.used_slot_numbers.add(entry.slot_number)
            room.played_entries.append(entry)
            return entry

    def mark_number(self, code: str, number: int) -> int:
        """Mark ``number`` on every card in the room; returns how many cards had it."""
        with self._locked(code) as room:
            return sum(
                1 for p in room.players.values()
                if self.card_generator.mark_number(p.card, number)
            )

    def handle_bingo_claim(self, code: str, conn_id: str) -> ClaimResult:
        room = self.find_room(code)
        if room is None:
            return ClaimResult(valid=False, message="Room not found")

        with room.lock:
            player = room.players.get(conn_id)
            if player is None or not self._is_live(room):
                return ClaimResult(valid=False, message="Player not found")

            eligible = room.prize_ledger.evaluate(player.card)
            if not eligible:
                return ClaimResult(valid=False, message="No valid bingo pattern found", player_name=player.name)

            won = room.prize_ledger.claim(eligible, player.name, player.id)
            if not won:
                return ClaimResult(valid=False, message="Those prizes were already claimed", player_name=player.name)

            logger.info(f"{player.name} claimed {[p.id for p in won]} in room {code}")
            return ClaimResult(
                valid=True,
                message=f"Congratulations! You won: {', '.join(p.name for p in won)}",
                prizes=[p.to_public() for p in won],
                player_name=player.name,
            )

    # ---- projections ----

    def get_room_snapshot(self, code: str) -> dict:
        with self._locked(code) as room:
            current = room.played_entries[-1].to_public() if room.played_entries else None
            return {
                "code": room.code,
                "phase": room.phase.value,
                "hostId": room.host_id,
                "playerCount": len(room.players),
                "players": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "isHost": p.is_host,
                        "markedCount": self.card_generator.marked_count(p.card),
                    }
                    for p in room.players.values()
                ],
                "contentMode": room.content_mode,
                "contentGenerated": room.content_generated,
                "isGenerating": room.is_generating,
                "isBackfilling": room.is_augmenting,
                "gameStarted": room.phase in (Phase.PLAYING, Phase.ENDED),
                "gameEnded": room.phase == Phase.ENDED,
                "targetPoolSize": room.target_pool_size,
                "poolSize": len(room.content_pool),
                "pool": [e.to_public() for e in room.content_pool],
                "calledNumbers": list(room.called_numbers),
                "playedEntries": [e.to_public() for e in room.played_entries],
                "currentEntry": current,
                "prizes": room.prize_ledger.to_public(),
                "createdAt": room.created_at,
            }

    def get_player_card(self, code: str, conn_id: str) -> dict:
        with self._locked(code) as room:
            player = room.players.get(conn_id)
            if player is None:
                raise PlayerNotFound(conn_id)
            card = player.card
            return {
                "ownerId": card.owner_id,
                "grid": [list(col) for col in card.grid],
                "marks": [list(row) for row in card.marks],
                "patterns": self.card_generator.check_win_patterns(card),
                "markedCount": self.card_generator.marked_count(card),
                "isHost": player.is_host,
            }
