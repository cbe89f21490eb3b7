"""
Source layouts of the MovieLens corpus and the lookup tables used to decode
their coded fields.

Each layout is described by a `SchemaDescriptor`: delimiters plus one mapper
per entity kind. A mapper turns the already-split tokens of a source row into
the ordered property map written to entities.dat.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .errors import UnknownSchemaError
from .records import EntityKind

PropertyMapper = Callable[[Sequence[str]], Dict[str, Any]]

# ML-100K genre indicator columns, in file order
GENRES_100K: Tuple[str, ...] = (
    "unknown",
    "Action",
    "Adventure",
    "Animation",
    "Children's",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Fantasy",
    "Film-Noir",
    "Horror",
    "Musical",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "War",
    "Western",
)

GENRE_FLAG_OFFSET_100K = 5

AGE_BUCKETS_1M: Mapping[int, str] = MappingProxyType(
    {
        1: "Under 18",
        18: "18-24",
        25: "25-34",
        35: "35-44",
        45: "45-49",
        50: "50-55",
        56: "56+",
    }
)

OCCUPATIONS_1M: Tuple[str, ...] = (
    "other",
    "academic/educator",
    "artist",
    "clerical/admin",
    "college/grad student",
    "customer service",
    "doctor/health care",
    "executive/managerial",
    "farmer",
    "homemaker",
    "K-12 student",
    "lawyer",
    "programmer",
    "retired",
    "sales/marketing",
    "scientist",
    "self-employed",
    "technician/engineer",
    "tradesman/craftsman",
    "unemployed",
    "writer",
)


def _field(tokens: Sequence[str], index: int, default: str = "") -> str:
    return tokens[index] if len(tokens) > index else default


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def decode_genre_flags(flags: Sequence[str]) -> str:
    """
    Decode ML-100K genre indicator columns.

    Active genres ("1") are joined with ", " in table order. Anything other
    than "1" counts as inactive.
    """
    return ", ".join(
        genre for genre, flag in zip(GENRES_100K, flags) if flag.strip() == "1"
    )


def lookup_age_bucket(code: Optional[int]) -> str:
    """ML-1M age code -> bracket label; unknown codes give ""."""
    if code is None:
        return ""
    return AGE_BUCKETS_1M.get(code, "")


def lookup_occupation(code: Optional[int]) -> str:
    """ML-1M occupation code (0-20) -> name; out-of-range codes give ""."""
    if code is None or not 0 <= code < len(OCCUPATIONS_1M):
        return ""
    return OCCUPATIONS_1M[code]


def map_user_100k(tokens: Sequence[str]) -> Dict[str, Any]:
    age = _parse_int(_field(tokens, 1, "0"))
    return {
        "age": age if age is not None else 0,
        "gender": _field(tokens, 2),
        "occupation": _field(tokens, 3),
        "zipCode": _field(tokens, 4),
    }


def map_movie_100k(tokens: Sequence[str]) -> Dict[str, Any]:
    genres = ""
    # flags are only decoded when the full indicator vector is present
    flag_end = GENRE_FLAG_OFFSET_100K + len(GENRES_100K)
    if len(tokens) >= flag_end:
        genres = decode_genre_flags(tokens[GENRE_FLAG_OFFSET_100K:flag_end])

    return {
        "title": _field(tokens, 1),
        "release date": _field(tokens, 2),
        "imdbUrl": _field(tokens, 4),
        "genres": genres,
    }


def map_user_1m(tokens: Sequence[str]) -> Dict[str, Any]:
    return {
        "age": lookup_age_bucket(_parse_int(_field(tokens, 2))),
        "gender": _field(tokens, 1),
        "occupation": lookup_occupation(_parse_int(_field(tokens, 3))),
        "zipCode": _field(tokens, 4),
    }


def map_movie_1m(tokens: Sequence[str]) -> Dict[str, Any]:
    return {
        "title": _field(tokens, 1),
        "genres": _field(tokens, 2).replace("|", ", "),
    }


@dataclass(frozen=True)
class SchemaDescriptor:
    """
    Everything that differs between the MovieLens layouts.

    Attributes:
        name: Registry key ("100k", "1m").
        user_delimiter: Field separator of the users file.
        item_delimiter: Field separator of the movies file.
        rating_delimiter: Field separator of the ratings file.
        user_mapper: Tokens of a users row -> properties.
        movie_mapper: Tokens of a movies row -> properties.
    """
    name: str
    user_delimiter: str
    item_delimiter: str
    rating_delimiter: str
    user_mapper: PropertyMapper
    movie_mapper: PropertyMapper

    def delimiter_for(self, kind: EntityKind) -> str:
        return self.user_delimiter if kind is EntityKind.USER else self.item_delimiter

    def mapper_for(self, kind: EntityKind) -> PropertyMapper:
        return self.user_mapper if kind is EntityKind.USER else self.movie_mapper


ML_100K = SchemaDescriptor(
    name="100k",
    user_delimiter="|",
    item_delimiter="|",
    rating_delimiter="\t",
    user_mapper=map_user_100k,
    movie_mapper=map_movie_100k,
)

ML_1M = SchemaDescriptor(
    name="1m",
    user_delimiter="::",
    item_delimiter="::",
    rating_delimiter="::",
    user_mapper=map_user_1m,
    movie_mapper=map_movie_1m,
)

SCHEMAS: Mapping[str, SchemaDescriptor] = MappingProxyType(
    {ML_100K.name: ML_100K, ML_1M.name: ML_1M}
)


def get_schema(name: str) -> SchemaDescriptor:
    """
    Return the registered descriptor for `name` (case-insensitive).

    Raises:
        UnknownSchemaError: If no descriptor is registered under that name.
    """
    try:
        return SCHEMAS[name.lower()]
    except KeyError:
        raise UnknownSchemaError(
            f"Unknown schema {name!r}. Expected one of: {sorted(SCHEMAS)}"
        ) from None
