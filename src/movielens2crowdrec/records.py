from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

RATING_RELATION_TYPE = "rating.explicit"


class EntityKind(str, Enum):
    """
    Entity types in the CrowdRec format.

    The value of `suffix` is the digit appended to a raw source id so that
    user and movie ids never collide.
    """

    USER = "user"
    MOVIE = "movie"

    @property
    def suffix(self) -> str:
        return "0" if self is EntityKind.USER else "1"


def namespaced_id(raw_id: str, kind: EntityKind) -> int:
    """
    Append the kind digit to the raw id *as text* and parse the result.

    "5" -> 50 (user) / 51 (movie); "12" -> 120 / 121.

    Raises:
        ValueError: If `raw_id` is not an unsigned decimal integer.
    """
    if not (raw_id.isascii() and raw_id.isdigit()):
        raise ValueError(f"Entity id must be an unsigned decimal integer, got {raw_id!r}")
    return int(raw_id + kind.suffix)


def entity_ref(raw_id: str, kind: EntityKind) -> str:
    """Reference string used in relation linkedEntities, e.g. "user:10"."""
    return f"{kind.value}:{raw_id}{kind.suffix}"


def serialize_map(mapping: Mapping[str, Any]) -> str:
    """
    Serialize a property map to its compact JSON form.

    Keys keep insertion order; integers stay unquoted, strings are quoted and
    escaped; non-ASCII text is written as-is.
    """
    return json.dumps(dict(mapping), separators=(",", ":"), ensure_ascii=False)


class EntityRecord(BaseModel):
    """One line of entities.dat."""

    model_config = ConfigDict(frozen=True)

    etype: EntityKind
    eid: int = Field(..., ge=0)
    properties: Dict[str, Any] = Field(default_factory=dict)

    def to_line(self) -> str:
        # timestamp and linkedEntities are always empty for entities
        return "\t".join([self.etype.value, str(self.eid), "", serialize_map(self.properties), ""])


class RelationRecord(BaseModel):
    """One line of relations.dat."""

    model_config = ConfigDict(frozen=True)

    rtype: str = RATING_RELATION_TYPE
    rid: int = Field(..., ge=1)
    timestamp: int
    properties: Dict[str, Any]
    linked_entities: Dict[str, str]

    def to_line(self) -> str:
        return "\t".join(
            [
                self.rtype,
                str(self.rid),
                str(self.timestamp),
                serialize_map(self.properties),
                serialize_map(self.linked_entities),
            ]
        )


@dataclass
class ConversionStats:
    """Mutable counters threaded through one conversion call."""

    records_written: int = 0
    lines_skipped: int = 0


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion phase."""

    phase: str
    output_path: Path
    records_written: int
    lines_skipped: int = 0
