import random

import pytest
import requests

from musicbingo.content.catalog import CatalogMovie, CatalogSong, CatalogSupplier
from musicbingo.content.deezer import DeezerPreviewLookup, EnrichingSupplier
from musicbingo.content.generator import ContentGenerator, placeholder_entry
from musicbingo.content.parsing import extract_entry, extract_json_object
from musicbingo.content.remote import RemoteTextSupplier
from musicbingo.content.supplier import GenerationConfig, RetryPolicy, SupplierError
from musicbingo.game.models import ContentEntry


SONGS = GenerationConfig(mode="songs")
MOVIES = GenerationConfig(mode="movies")


class FakeResponse:
    def __init__(self, text="", payload=None, status=200):
        self.text = text
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)


def _no_wait_retry(attempts=3):
    return RetryPolicy(max_attempts=attempts, backoff_sec=0, sleep=lambda s: None)


# ---- parsing ----

def test_extracts_fenced_json():
    text = 'Sure! Here you go:\n```json\n{"number": 7, "song": "Chaiyya Chaiyya", "artist": "Sukhwinder Singh"}\n```\nEnjoy.'
    entry = extract_entry(text, 7)
    assert entry.slot_number == 7
    assert entry.title == "Chaiyya Chaiyya"
    assert entry.performer == "Sukhwinder Singh"


def test_extracts_bare_object_from_prose():
    text = 'The answer is {"number": 12, "song": "Kal Ho Naa Ho", "year": "2003"} as requested.'
    entry = extract_entry(text, 12)
    assert entry.title == "Kal Ho Naa Ho"
    assert entry.year == 2003


def test_braces_inside_strings_do_not_split_objects():
    data = extract_json_object('x {"song": "a } b {", "clue": "c"} y')
    assert data == {"song": "a } b {", "clue": "c"}


@pytest.mark.parametrize("text", [
    "",
    "   ",
    "no json at all",
    '{"a": 1} and also {"b": 2}',
    "```json\n{\"a\": 1}\n```\n```json\n{\"b\": 2}\n```",
    "```json\n{not json}\n```",
    "```json\n[1, 2, 3]\n```",
])
def test_unusable_responses_are_rejected(text):
    with pytest.raises(SupplierError):
        extract_json_object(text)


def test_entry_for_wrong_slot_is_rejected():
    with pytest.raises(SupplierError):
        extract_entry('{"number": 8, "song": "X"}', 7)


def test_entry_without_title_is_rejected():
    with pytest.raises(SupplierError):
        extract_entry('{"number": 7, "artist": "Someone"}', 7)


def test_missing_number_defaults_to_requested_slot():
    assert extract_entry('{"title": "Solo"}', 3).slot_number == 3


# ---- retry ----

def test_retry_backs_off_then_succeeds():
    sleeps = []
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise SupplierError("try again")
        return "ok"

    policy = RetryPolicy(max_attempts=3, backoff_sec=0.5, sleep=sleeps.append)
    assert policy.run(flaky) == "ok"
    assert sleeps == [0.5, 1.0]


def test_retry_reraises_after_last_attempt():
    sleeps = []

    def broken():
        raise SupplierError("down")

    with pytest.raises(SupplierError, match="down"):
        RetryPolicy(max_attempts=2, backoff_sec=0.1, sleep=sleeps.append).run(broken)
    assert sleeps == [0.1]


def test_retry_does_not_catch_other_errors():
    calls = []

    def bug():
        calls.append(1)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        _no_wait_retry().run(bug)
    assert len(calls) == 1


# ---- remote generator ----

def test_remote_supplier_posts_and_parses():
    session = FakeSession([FakeResponse(text='{"number": 4, "song": "Dola Re Dola", "artist": "KK"}')])
    supplier = RemoteTextSupplier("http://gen.local/generate", retry=_no_wait_retry(), session=session)

    entry = supplier.generate_one(4, ["Tum Hi Ho"], SONGS)
    assert entry.title == "Dola Re Dola"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://gen.local/generate")
    assert kwargs["json"] == {"slot": 4, "mode": "songs", "languages": [], "exclude": ["Tum Hi Ho"]}


def test_remote_supplier_retries_transport_and_parse_failures():
    session = FakeSession([
        requests.ConnectionError("refused"),
        FakeResponse(text="I cannot help with that."),
        FakeResponse(text='{"number": 9, "song": "Jai Ho"}'),
    ])
    supplier = RemoteTextSupplier("http://gen.local", retry=_no_wait_retry(), session=session)
    assert supplier.generate_one(9, [], SONGS).title == "Jai Ho"
    assert len(session.calls) == 3


def test_remote_supplier_gives_up():
    session = FakeSession([FakeResponse(status=500)] * 2)
    supplier = RemoteTextSupplier("http://gen.local", retry=_no_wait_retry(2), session=session)
    with pytest.raises(SupplierError):
        supplier.generate_one(1, [], SONGS)


def test_remote_supplier_drops_repeats():
    session = FakeSession([FakeResponse(text='{"number": 2, "song": "Jai Ho", "artist": "A R Rahman"}')])
    supplier = RemoteTextSupplier("http://gen.local", retry=_no_wait_retry(), session=session)
    assert supplier.generate_one(2, ["A R Rahman - Jai Ho"], SONGS) is None


# ---- deezer ----

def _track(preview, release_date):
    return {"preview": preview, "duration": 30, "link": "l", "album": {"release_date": release_date}}


def test_deezer_prefers_release_near_the_year():
    session = FakeSession([FakeResponse(payload={"data": [
        _track("remix.mp3", "2019-01-01"),
        _track("film-era.mp3", "1996-05-01"),
    ]})])
    found = DeezerPreviewLookup(base_url="http://dz/", session=session).search("KK", "Song", 1995)
    assert found["previewUrl"] == "film-era.mp3"
    method, url, kwargs = session.calls[0]
    assert url == "http://dz/search"
    assert kwargs["params"] == {"q": 'artist:"KK" track:"Song"'}


def test_deezer_without_results():
    session = FakeSession([FakeResponse(payload={"data": []})])
    assert DeezerPreviewLookup(session=session).search("", "Song") is None


def test_deezer_transport_error_is_a_supplier_error():
    session = FakeSession([requests.Timeout("slow")])
    with pytest.raises(SupplierError):
        DeezerPreviewLookup(session=session).search("a", "b")


class OneSong:
    def generate_one(self, slot_number, used_titles, config):
        return ContentEntry(slot_number=slot_number, title="Song", performer="Artist", year=2000)


class FakeLookup:
    def __init__(self, result=None, error=False):
        self.result = result
        self.error = error
        self.calls = 0

    def search(self, artist, title, year=None):
        self.calls += 1
        if self.error:
            raise SupplierError("dz down")
        return self.result


def test_enriching_supplier_adds_preview():
    lookup = FakeLookup(result={"previewUrl": "clip.mp3"})
    entry = EnrichingSupplier(OneSong(), lookup, retry=_no_wait_retry()).generate_one(1, [], SONGS)
    assert entry.preview_url == "clip.mp3"


def test_enriching_supplier_keeps_entry_when_lookup_fails():
    lookup = FakeLookup(error=True)
    entry = EnrichingSupplier(OneSong(), lookup, retry=_no_wait_retry(2)).generate_one(1, [], SONGS)
    assert entry.title == "Song"
    assert entry.preview_url == ""
    assert lookup.calls == 2


def test_enriching_supplier_skips_movies():
    lookup = FakeLookup(result={"previewUrl": "clip.mp3"})
    EnrichingSupplier(OneSong(), lookup).generate_one(1, [], MOVIES)
    assert lookup.calls == 0


# ---- catalog ----

CATALOG_SONGS = [
    CatalogSong("Film A", 1995, "Hindi", "One", "Singer A", "vid1"),
    CatalogSong("Film B", 2010, "Kannada", "Two", "Singer B", "vid2"),
]
CATALOG_MOVIES = [
    CatalogMovie("Film A", 1995, "Hindi"),
    CatalogMovie("Film B", 2010, "Kannada"),
]


def test_catalog_filters_by_language_and_year():
    supplier = CatalogSupplier(CATALOG_SONGS, CATALOG_MOVIES, rng=random.Random(0))
    kannada = GenerationConfig(languages=("Kannada",))
    entry = supplier.generate_one(5, [], kannada)
    assert (entry.title, entry.performer, entry.video_id) == ("Two", "Singer B", "vid2")
    assert entry.clue == "From Film B (2010)"

    nineties = GenerationConfig(start_year=1990, end_year=1999)
    assert supplier.generate_one(5, [], nineties).title == "One"


def test_catalog_skips_used_and_runs_out():
    supplier = CatalogSupplier(CATALOG_SONGS, CATALOG_MOVIES, rng=random.Random(0))
    used = ["singer a - one"]
    assert supplier.generate_one(1, used, SONGS).title == "Two"
    assert supplier.generate_one(1, used + ["Singer B - Two"], SONGS) is None


def test_catalog_movie_mode():
    supplier = CatalogSupplier(CATALOG_SONGS, CATALOG_MOVIES, rng=random.Random(0))
    entry = supplier.generate_one(3, ["film a"], MOVIES)
    assert entry.title == "Film B"
    assert entry.performer == ""
    assert entry.key == "film b"


def test_default_catalog_covers_a_full_movie_game():
    supplier = CatalogSupplier(rng=random.Random(1))
    generator = ContentGenerator(supplier, rng=random.Random(1))
    cfg = GenerationConfig(mode="movies", initial_batch=50, target_size=50)
    entries = generator.bulk_generate(50, cfg)
    assert len(entries) == 50
    assert not any(e.placeholder for e in entries)


# ---- config ----

def test_payload_overrides_defaults():
    cfg = GenerationConfig().with_payload({
        "languages": ["Hindi", " ", "Kannada"],
        "startYear": "1990",
        "endYear": 2005,
    })
    assert cfg.languages == ("Hindi", "Kannada")
    assert (cfg.start_year, cfg.end_year) == (1990, 2005)
    assert cfg.pool_target == 75


def test_switching_to_movies_shrinks_target():
    cfg = GenerationConfig().with_payload({"mode": "Movies"})
    assert cfg.mode == "movies"
    assert cfg.pool_target == 50
    assert GenerationConfig(mode="movies", target_size=75).pool_target == 50


@pytest.mark.parametrize("payload", [
    {"mode": "podcasts"},
    {"startYear": "last year"},
    {"targetSize": 0},
])
def test_bad_payload_raises(payload):
    with pytest.raises(ValueError):
        GenerationConfig().with_payload(payload)


# ---- generator ----

class ScriptedSupplier:
    def __init__(self, script):
        self.script = script

    def generate_one(self, slot_number, used_titles, config):
        item = self.script.get(slot_number)
        if isinstance(item, Exception):
            raise item
        return item


def test_placeholders_for_each_mode():
    song = placeholder_entry(12, SONGS)
    assert (song.title, song.performer, song.clue) == ("Song from 1912", "Various Artists", "Released in 1912")
    assert song.placeholder is True
    assert placeholder_entry(4, MOVIES).title == "Mystery Film #4"


def test_pick_slots_avoids_taken_and_stays_in_range():
    generator = ContentGenerator(ScriptedSupplier({}), rng=random.Random(5))
    slots = generator.pick_slots(10, MOVIES, taken_slots=range(1, 45))
    assert sorted(slots) == list(range(45, 51))


def test_bulk_generate_fills_gaps_with_placeholders():
    script = {
        1: ContentEntry(slot_number=1, title="Same", performer="X"),
        2: ContentEntry(slot_number=99, title="Same", performer="X"),
        3: SupplierError("nope"),
        4: None,
        5: ContentEntry(slot_number=5, title="Fresh", performer="Y"),
    }
    generator = ContentGenerator(ScriptedSupplier(script), rng=random.Random(0))
    progress = []
    entries = generator.bulk_generate(
        5, GenerationConfig(target_size=5), taken_slots=range(6, 76),
        progress=lambda done, total: progress.append((done, total)),
    )

    by_slot = {e.slot_number: e for e in entries}
    assert sorted(by_slot) == [1, 2, 3, 4, 5]
    assert by_slot[3].placeholder and by_slot[4].placeholder
    assert by_slot[5].title == "Fresh"
    # Exactly one of the two "Same" answers survives; the other becomes a placeholder.
    same = [e for e in (by_slot[1], by_slot[2]) if e.title == "Same"]
    assert len(same) == 1
    assert progress[-1] == (5, 5)
    assert len(progress) == 5


def test_unexpected_supplier_error_becomes_placeholder():
    script = {n: ContentEntry(slot_number=n, title=f"Song {n}") for n in range(2, 76, 2)}
    script.update({n: KeyError("album") for n in range(1, 76, 2)})
    generator = ContentGenerator(ScriptedSupplier(script), rng=random.Random(0))

    entries = generator.bulk_generate(5, GenerationConfig())
    assert len(entries) == 5
    for entry in entries:
        assert entry.placeholder == bool(entry.slot_number % 2)


def test_bulk_generate_respects_used_titles():
    script = {n: ContentEntry(slot_number=n, title="Old", performer="Band") for n in range(1, 76)}
    generator = ContentGenerator(ScriptedSupplier(script), rng=random.Random(0))
    entries = generator.bulk_generate(2, SONGS, used_titles=["Band - Old"])
    assert all(e.placeholder for e in entries)
