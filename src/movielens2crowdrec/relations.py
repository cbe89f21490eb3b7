"""
Relation conversion: MovieLens ratings file -> relations.dat.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

from .config import ConverterConfig
from .errors import ConversionError
from .logging_utils import configure_logger
from .readers import open_input, read_lines
from .records import (
    ConversionResult,
    ConversionStats,
    EntityKind,
    RelationRecord,
    entity_ref,
)
from .schemas import SchemaDescriptor
from .writers import RELATIONS_FILENAME, open_output, write_records

PHASE = "relations"
RATING_FIELD_COUNT = 4


def parse_rating_line(line: str, delimiter: str) -> Optional[Tuple[str, str, int, int]]:
    """
    Split one ratings row into (user id, movie id, rating, timestamp).

    Ids are stripped of surrounding whitespace, as entity ids are.

    Returns None for a malformed row: wrong token count, or a rating or
    timestamp that is not an integer.
    """
    tokens = line.rstrip("\r\n").split(delimiter)
    if len(tokens) != RATING_FIELD_COUNT:
        return None

    user_id, movie_id, rating, timestamp = tokens
    try:
        return user_id.strip(), movie_id.strip(), int(rating), int(timestamp)
    except ValueError:
        return None


def iter_relation_records(
    lines: Iterable[str],
    schema: SchemaDescriptor,
    stats: ConversionStats | None = None,
    logger: logging.Logger | None = None,
) -> Iterator[RelationRecord]:
    """
    Map ratings rows to RelationRecords.

    `rid` starts at 1 and only advances for accepted rows, so it stays
    gapless when malformed rows are skipped.
    """
    _logger = logger or configure_logger()
    rid = 0

    for line_number, line in enumerate(lines, start=1):
        parsed = parse_rating_line(line, schema.rating_delimiter)
        if parsed is None:
            if stats is not None:
                stats.lines_skipped += 1
            _logger.debug(
                "Skipping malformed rating row",
                extra={"event": "skip_rating_row", "line": line_number},
            )
            continue

        user_id, movie_id, rating, timestamp = parsed
        rid += 1
        yield RelationRecord(
            rid=rid,
            timestamp=timestamp,
            properties={"rating": rating},
            linked_entities={
                "subject": entity_ref(user_id, EntityKind.USER),
                "object": entity_ref(movie_id, EntityKind.MOVIE),
            },
        )


def convert_relations(
    ratings_path: Union[str, Path],
    output_dir: Union[str, Path],
    schema: SchemaDescriptor,
    config: ConverterConfig | None = None,
    logger: logging.Logger | None = None,
) -> ConversionResult:
    """
    Convert a ratings file into `<output_dir>/relations.dat`.

    Raises:
        InputNotFoundError: If the ratings file cannot be opened.
        ConversionError: On a read or write failure.
    """
    _logger = logger or configure_logger()
    config = config or ConverterConfig()
    output_path = Path(output_dir) / RELATIONS_FILENAME
    stats = ConversionStats()

    _logger.info(
        "Converting relations",
        extra={"event": "convert_relations", "phase": PHASE, "schema": schema.name},
    )

    with ExitStack() as stack:
        ratings = stack.enter_context(open_input(ratings_path, config, PHASE))
        out = stack.enter_context(open_output(output_path, config, PHASE, _logger))

        lines = read_lines(ratings, ratings_path, config, PHASE)
        records = iter_relation_records(lines, schema, stats, _logger)
        try:
            stats.records_written = write_records(records, out, config.progress_interval, _logger)
        except OSError as exc:
            raise ConversionError(
                f"I/O failure while writing {output_path}: {exc}",
                output_path,
                PHASE,
            ) from exc

    _logger.info(
        "Relations converted",
        extra={
            "event": "convert_relations_success",
            "phase": PHASE,
            "path": str(output_path),
            "count": stats.records_written,
            "skipped": stats.lines_skipped,
        },
    )

    return ConversionResult(
        phase=PHASE,
        output_path=output_path,
        records_written=stats.records_written,
        lines_skipped=stats.lines_skipped,
    )
