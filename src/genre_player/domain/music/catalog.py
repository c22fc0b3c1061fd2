"""Built-in genre catalog.

Every genre carries its category's three base parameters first, followed
by the shared effect parameters a listener can reveal on demand.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from genre_player.domain.music.entities import Genre, ParameterSpec
from genre_player.domain.shared.enums import GenreCategory
from genre_player.domain.shared.exceptions import EntityNotFoundError


def _spec(parameter_id: str, default: float, min_value: float = 0.0, max_value: float = 100.0) -> ParameterSpec:
    label = parameter_id.replace("-", " ").title()
    return ParameterSpec(
        id=parameter_id, label=label, min_value=min_value, max_value=max_value, default=default
    )


# Shared effect parameters, revealed on demand.
COMMON_PARAMETERS: tuple[ParameterSpec, ...] = (
    _spec("reverb", 30),
    _spec("delay", 20),
    _spec("compressor", 50),
    _spec("filter", 50),
    _spec("distortion", 0),
    _spec("stereo-width", 50),
    _spec("gain", 50),
)

CATEGORY_PARAMETERS: dict[GenreCategory, tuple[ParameterSpec, ...]] = {
    GenreCategory.FOCUS: (_spec("tempo", 80, 50, 120), _spec("bass", 50), _spec("clarity", 70)),
    GenreCategory.ENERGY: (_spec("energy", 80), _spec("bass", 50), _spec("kick", 85)),
    GenreCategory.RELAX: (_spec("tempo", 80, 50, 120), _spec("space", 75), _spec("balance", 50)),
    GenreCategory.MOOD: (_spec("mood", 60), _spec("bass", 50), _spec("texture", 50)),
    GenreCategory.WORKOUT: (_spec("beat", 90), _spec("energy", 80), _spec("bass", 50)),
}

# Mood phrases used when describing a genre to a generation model.
CATEGORY_MOODS: dict[GenreCategory, str] = {
    GenreCategory.FOCUS: "calm, focused, ambient, peaceful, concentration-enhancing",
    GenreCategory.ENERGY: "energetic, upbeat, dynamic, powerful, exciting",
    GenreCategory.RELAX: "relaxing, peaceful, soothing, gentle, tranquil",
    GenreCategory.MOOD: "emotional, atmospheric, expressive, evocative",
    GenreCategory.WORKOUT: "intense, motivating, powerful, driving, pumping",
}

_GENRE_TABLE: tuple[tuple[GenreCategory, str, str, str], ...] = (
    (GenreCategory.FOCUS, "lofi-beats", "Lo-Fi Beats", "Mellow beats and warm melodies"),
    (GenreCategory.FOCUS, "jazz-instrumental", "Jazz Instrumental", "Elegant jazz playing"),
    (GenreCategory.FOCUS, "ambient", "Ambient", "Dreamy sound for concentration"),
    (GenreCategory.FOCUS, "classic-piano", "Classic Piano", "Gentle piano lines"),
    (GenreCategory.ENERGY, "edm", "EDM", "Big drops and bright synths"),
    (GenreCategory.ENERGY, "house", "House", "Four-on-the-floor grooves"),
    (GenreCategory.ENERGY, "techno", "Techno", "Driving repetitive rhythm"),
    (GenreCategory.ENERGY, "drum-bass", "Drum & Bass", "Fast breakbeats and heavy bass"),
    (GenreCategory.RELAX, "downtempo", "Downtempo", "Slow, laid-back electronica"),
    (GenreCategory.RELAX, "chillwave", "Chillwave", "Hazy nostalgic synths"),
    (GenreCategory.RELAX, "nature-ambient", "Nature Ambient", "Field recordings and soft pads"),
    (GenreCategory.RELAX, "meditation", "Meditation", "Sustained calming tones"),
    (GenreCategory.MOOD, "future-bass", "Future Bass", "Lush chords and emotional drops"),
    (GenreCategory.MOOD, "alternative", "Alternative", "Atmospheric alternative sound"),
    (GenreCategory.MOOD, "synthwave", "Synthwave", "Retro eighties synths"),
    (GenreCategory.MOOD, "trip-hop", "Trip Hop", "Dark, moody breakbeats"),
    (GenreCategory.WORKOUT, "trap", "Trap", "Hard-hitting trap beats"),
    (GenreCategory.WORKOUT, "hardstyle", "Hardstyle", "Distorted kicks at high tempo"),
    (GenreCategory.WORKOUT, "hiphop-beats", "Hip-Hop Beats", "Energetic hip-hop beats"),
)


class GenreCatalog:
    """Lookup of genres by id and category."""

    def __init__(self, genres: Iterable[Genre]) -> None:
        self._genres: dict[str, Genre] = {}
        for genre in genres:
            self._genres[genre.id] = genre

    def __iter__(self) -> Iterator[Genre]:
        return iter(self._genres.values())

    def __len__(self) -> int:
        return len(self._genres)

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self._genres

    def find(self, genre_id: str) -> Genre | None:
        return self._genres.get(genre_id)

    def get(self, genre_id: str) -> Genre:
        genre = self._genres.get(genre_id)
        if genre is None:
            raise EntityNotFoundError("Genre", genre_id)
        return genre

    def by_category(self, category: GenreCategory) -> list[Genre]:
        return [genre for genre in self._genres.values() if genre.category == category]


def build_default_catalog() -> GenreCatalog:
    return GenreCatalog(
        Genre(
            id=genre_id,
            label=label,
            category=category,
            description=description,
            parameters=CATEGORY_PARAMETERS[category] + COMMON_PARAMETERS,
        )
        for category, genre_id, label, description in _GENRE_TABLE
    )

