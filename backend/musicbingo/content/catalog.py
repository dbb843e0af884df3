"""Built-in catalog of film songs with known-embeddable YouTube videos.

Used when no remote generator is configured, so a room can always be filled
without any outbound calls.
"""
from __future__ import annotations

import random
from dataclasses import dataclass

from ..game.models import ContentEntry
from .supplier import GenerationConfig


@dataclass(frozen=True)
class CatalogSong:
    movie: str
    year: int
    language: str
    title: str
    artist: str
    video_id: str


@dataclass(frozen=True)
class CatalogMovie:
    title: str
    year: int
    language: str


SONGS: tuple[CatalogSong, ...] = (
    CatalogSong("Dilwale Dulhania Le Jayenge", 1995, "Hindi", "Tujhe Dekha To", "Kumar Sanu, Lata Mangeshkar", "ckkYyeTKMRk"),
    CatalogSong("Dilwale Dulhania Le Jayenge", 1995, "Hindi", "Mere Khwabon Mein", "Lata Mangeshkar", "wU0qfPPjAT4"),
    CatalogSong("Kuch Kuch Hota Hai", 1998, "Hindi", "Kuch Kuch Hota Hai", "Udit Narayan, Alka Yagnik", "GS0CYMJ5R8k"),
    CatalogSong("Kuch Kuch Hota Hai", 1998, "Hindi", "Ladki Badi Anjani Hai", "Kumar Sanu, Alka Yagnik", "ZYJld61niIE"),
    CatalogSong("Kabhi Khushi Kabhie Gham", 2001, "Hindi", "Bole Chudiyan", "Amit Kumar, Sonu Nigam, Alka Yagnik, Udit Narayan", "H_WwHJKcKd8"),
    CatalogSong("Kabhi Khushi Kabhie Gham", 2001, "Hindi", "Suraj Hua Maddham", "Sonu Nigam, Alka Yagnik", "V-A6n44aPjQ"),
    CatalogSong("Dil To Pagal Hai", 1997, "Hindi", "Dil To Pagal Hai", "Lata Mangeshkar, Udit Narayan", "Le-2x2XlVvk"),
    CatalogSong("Dil To Pagal Hai", 1997, "Hindi", "Koi Ladki Hai", "Udit Narayan, Lata Mangeshkar, Asha Bhosle", "xjFn9QsJ4wA"),
    CatalogSong("Hum Aapke Hain Koun", 1994, "Hindi", "Didi Tera Devar Deewana", "Lata Mangeshkar, S. P. Balasubrahmanyam", "xZYdD63rbek"),
    CatalogSong("Hum Aapke Hain Koun", 1994, "Hindi", "Pehla Pehla Pyar", "S. P. Balasubrahmanyam", "YcLMWJq9YoE"),
    CatalogSong("Kal Ho Naa Ho", 2003, "Hindi", "Kal Ho Naa Ho", "Sonu Nigam", "99C4kkcBA3c"),
    CatalogSong("Kal Ho Naa Ho", 2003, "Hindi", "Pretty Woman", "Shankar Mahadevan, Udit Narayan", "bIPqP9EDDCA"),
    CatalogSong("Veer-Zaara", 2004, "Hindi", "Tere Liye", "Lata Mangeshkar, Roop Kumar Rathod", "mfAu5icPVLE"),
    CatalogSong("Veer-Zaara", 2004, "Hindi", "Do Pal", "Lata Mangeshkar, Sonu Nigam", "QcwcJV6QH4g"),
    CatalogSong("Dil Chahta Hai", 2001, "Hindi", "Dil Chahta Hai", "Shankar Mahadevan", "Z9CKqAYDi8k"),
    CatalogSong("Dil Chahta Hai", 2001, "Hindi", "Koi Kahe Kehta Rahe", "Shankar Mahadevan, Shaan", "dQe1WxbIOrY"),
    CatalogSong("Lagaan", 2001, "Hindi", "Mitwa", "Udit Narayan, Alka Yagnik", "pZrfh71qPzQ"),
    CatalogSong("Lagaan", 2001, "Hindi", "Ghanan Ghanan", "Udit Narayan", "GWXh_PyLmLI"),
    CatalogSong("Taare Zameen Par", 2007, "Hindi", "Taare Zameen Par", "Shankar Mahadevan", "3R4uv5bEP1M"),
    CatalogSong("Rang De Basanti", 2006, "Hindi", "Rang De Basanti", "Daler Mehndi", "9c9buwh50uw"),
    CatalogSong("Rang De Basanti", 2006, "Hindi", "Khoon Chala", "Mohit Chauhan", "kHUVJNvj_vI"),
    CatalogSong("Swades", 2004, "Hindi", "Yeh Jo Des Hai Tera", "A.R. Rahman", "RhC8DAPhuLU"),
    CatalogSong("Chak De India", 2007, "Hindi", "Chak De India", "Sukhwinder Singh", "e3Qr7d6LrKw"),
    CatalogSong("Chak De India", 2007, "Hindi", "Badal Pe Paon Hai", "Shilpa Rao, Salim Merchant", "tOlIZ6wuHQQ"),
    CatalogSong("3 Idiots", 2009, "Hindi", "Aal Izz Well", "Sonu Nigam, Shaan, Swanand Kirkire", "yJ-lcdMfziw"),
    CatalogSong("3 Idiots", 2009, "Hindi", "Give Me Some Sunshine", "Suraj Jagan, Sharman Joshi", "3kSFW8fqTl4"),
    CatalogSong("Rockstar", 2011, "Hindi", "Sadda Haq", "Mohit Chauhan", "eeAQuU0ZQ-M"),
    CatalogSong("Rockstar", 2011, "Hindi", "Tum Ho", "Mohit Chauhan, Suzanne D'Mello", "VUnxThNopVs"),
    CatalogSong("Aashiqui 2", 2013, "Hindi", "Tum Hi Ho", "Arijit Singh", "Umqb9KENgmk"),
    CatalogSong("Aashiqui 2", 2013, "Hindi", "Sunn Raha Hai", "Ankit Tiwari", "AGfwHF12JBs"),
    CatalogSong("Yeh Jawaani Hai Deewani", 2013, "Hindi", "Badtameez Dil", "Benny Dayal, Shefali Alvares", "QdFJUaKcp7s"),
    CatalogSong("Yeh Jawaani Hai Deewani", 2013, "Hindi", "Kabira", "Tochi Raina, Rekha Bhardwaj", "jHNNMj5bNQw"),
    CatalogSong("Zindagi Na Milegi Dobara", 2011, "Hindi", "Senorita", "Farhan Akhtar, Hrithik Roshan, Abhay Deol", "5Sf24M-KQ9Q"),
    CatalogSong("Zindagi Na Milegi Dobara", 2011, "Hindi", "Khaabon Ke Parindey", "Mohit Chauhan", "xPvftOCA-9I"),
    CatalogSong("Barfi!", 2012, "Hindi", "Phir Le Aya Dil", "Arijit Singh", "iXZmPYdYmuw"),
    CatalogSong("Chennai Express", 2013, "Hindi", "Lungi Dance", "Yo Yo Honey Singh", "Qan9lFDkE4g"),
    CatalogSong("Ae Dil Hai Mushkil", 2016, "Hindi", "Ae Dil Hai Mushkil", "Arijit Singh", "Z_PODraXg4E"),
    CatalogSong("Kabir Singh", 2019, "Hindi", "Tujhe Kitna Chahne Lage", "Arijit Singh", "dDN-m8bv8jM"),
    CatalogSong("Gully Boy", 2019, "Hindi", "Apna Time Aayega", "Ranveer Singh, DIVINE", "jFktOKGFrI0"),
    CatalogSong("Mohabbatein", 2000, "Hindi", "Humko Humise Chura Lo", "Lata Mangeshkar, Udit Narayan", "Bfwf3u3hfzc"),
    CatalogSong("Om Shanti Om", 2007, "Hindi", "Dard-E-Disco", "Sukhwinder Singh, Marianne D'Cruz, Nisha, Caralisa", "dCbn3rs-_Gs"),
    CatalogSong("Om Shanti Om", 2007, "Hindi", "Ajab Si", "KK", "CwkzK-F7YAE"),
    CatalogSong("Dhoom 2", 2006, "Hindi", "Dhoom Machale", "Pritam", "TlvthH42m5c"),
    CatalogSong("Koi Mil Gaya", 2003, "Hindi", "Koi Mil Gaya", "Udit Narayan", "pweaqcts49w"),
    CatalogSong("Main Hoon Na", 2004, "Hindi", "Main Hoon Na", "Sonu Nigam", "qWlhP3lXWs0"),
    CatalogSong("Fanaa", 2006, "Hindi", "Chand Sifarish", "Shaan, Kailash Kher", "h0tuyaskwKs"),
    CatalogSong("Devdas", 2002, "Hindi", "Dola Re Dola", "Shreya Ghoshal, Kavita Krishnamurthy", "r3pA187gAPQ"),
    CatalogSong("Devdas", 2002, "Hindi", "Bairi Piya", "Udit Narayan, Shreya Ghoshal", "7zNGvUOGRY4"),
    CatalogSong("Mungaru Male", 2006, "Kannada", "Anisuthide", "Sonu Nigam", "yqqjsb7wMl0"),
    CatalogSong("Mungaru Male", 2006, "Kannada", "Mungaru Male", "Sonu Nigam", "Q7ikqU6LHC0"),
    CatalogSong("Jogi", 2005, "Kannada", "Maleyali Jotheyali", "Rajesh Krishnan", "7IfqXrRFwFI"),
    CatalogSong("Jogi", 2005, "Kannada", "Usire Usire", "Kunal Ganjawala", "9YM7q8ZzaCI"),
    CatalogSong("Hudugaru", 2011, "Kannada", "Yeno Yeno", "Sonu Nigam", "WQg0KR19RDw"),
    CatalogSong("Raamachari", 1991, "Kannada", "Hrudaya Samudra", "S. P. Balasubrahmanyam", "gJTlvbLbQ_Q"),
    CatalogSong("Om", 1995, "Kannada", "Nammoora Mandara Hoove", "Rajkumar", "kF_eZ0NhqAg"),
    CatalogSong("Jackie", 2010, "Kannada", "Eradane Sala", "Vijay Prakash", "B73wNbFcTBw"),
    CatalogSong("Gaalipata", 2008, "Kannada", "Ninnena", "Vijay Prakash", "qNfMVLDl2-M"),
    CatalogSong("Junglee", 2009, "Kannada", "Neenaade Nenapu", "Sonu Nigam", "rTuxUAuJRyY"),
    CatalogSong("Pancharangi", 2010, "Kannada", "Daniyeke", "Vijay Prakash", "h7zpDZEuPqE"),
    CatalogSong("Manasaare", 2009, "Kannada", "Manasaare", "Sonu Nigam", "HlPoUber3qY"),
    CatalogSong("Mussanje Mathu", 2008, "Kannada", "Hey Dinakara", "Vijay Prakash", "TpFwWZzJla0"),
    CatalogSong("Cheluvina Chittara", 2007, "Kannada", "Cheluvina Chittara", "Rajesh Krishnan", "pQBz3zKZvCQ"),
)

EXTRA_MOVIES: tuple[CatalogMovie, ...] = (
    CatalogMovie("PK", 2014, "Hindi"),
    CatalogMovie("Dangal", 2016, "Hindi"),
    CatalogMovie("Bajrangi Bhaijaan", 2015, "Hindi"),
    CatalogMovie("Sultan", 2016, "Hindi"),
    CatalogMovie("Jab Tak Hai Jaan", 2012, "Hindi"),
    CatalogMovie("Krrish", 2006, "Hindi"),
    CatalogMovie("Don", 2006, "Hindi"),
    CatalogMovie("Queen", 2014, "Hindi"),
    CatalogMovie("Andhadhun", 2018, "Hindi"),
    CatalogMovie("Padmaavat", 2018, "Hindi"),
    CatalogMovie("KGF Chapter 1", 2018, "Kannada"),
    CatalogMovie("KGF Chapter 2", 2022, "Kannada"),
    CatalogMovie("Kirik Party", 2016, "Kannada"),
    CatalogMovie("Ugramm", 2014, "Kannada"),
    CatalogMovie("Googly", 2013, "Kannada"),
    CatalogMovie("Lucia", 2013, "Kannada"),
    CatalogMovie("RangiTaranga", 2015, "Kannada"),
    CatalogMovie("U Turn", 2016, "Kannada"),
)


def _movies() -> tuple[CatalogMovie, ...]:
    seen: dict[str, CatalogMovie] = {}
    for s in SONGS:
        seen.setdefault(s.movie, CatalogMovie(s.movie, s.year, s.language))
    for m in EXTRA_MOVIES:
        seen.setdefault(m.title, m)
    return tuple(seen.values())


MOVIES = _movies()


def _matches(item, config: GenerationConfig) -> bool:
    if config.languages and item.language not in config.languages:
        return False
    if config.start_year is not None and item.year < config.start_year:
        return False
    if config.end_year is not None and item.year > config.end_year:
        return False
    return True


class CatalogSupplier:
    """Picks an unused catalog song (or film, in movie mode) for a slot."""

    def __init__(self, songs=SONGS, movies=MOVIES, rng: random.Random | None = None):
        self.songs = tuple(songs)
        self.movies = tuple(movies)
        self.rng = rng or random.Random()

    def generate_one(self, slot_number: int, used_titles: list[str], config: GenerationConfig) -> ContentEntry | None:
        used = {t.lower() for t in used_titles}

        if config.mode == "movies":
            movies = [m for m in self.movies if _matches(m, config) and m.title.lower() not in used]
            if not movies:
                return None
            movie = self.rng.choice(movies)
            return ContentEntry(
                slot_number=slot_number,
                title=movie.title,
                movie=movie.title,
                year=movie.year,
                language=movie.language,
            )

        songs = [
            s for s in self.songs
            if _matches(s, config) and f"{s.artist} - {s.title}".lower() not in used
        ]
        if not songs:
            return None
        song = self.rng.choice(songs)
        return ContentEntry(
            slot_number=slot_number,
            title=song.title,
            performer=song.artist,
            movie=song.movie,
            year=song.year,
            language=song.language,
            clue=f"From {song.movie} ({song.year})",
            video_id=song.video_id,
        )
