"""
Entity conversion: MovieLens users + movies files -> entities.dat.

Users are written first, then movies, each in input order.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Iterable, Iterator, Union

from .config import ConverterConfig
from .errors import ConversionError
from .logging_utils import configure_logger
from .records import ConversionResult, ConversionStats, EntityKind, EntityRecord, namespaced_id
from .readers import open_input, read_lines
from .schemas import SchemaDescriptor
from .writers import ENTITIES_FILENAME, open_output, write_records

PHASE = "entities"


def iter_entity_records(
    lines: Iterable[str],
    kind: EntityKind,
    schema: SchemaDescriptor,
    stats: ConversionStats | None = None,
    logger: logging.Logger | None = None,
) -> Iterator[EntityRecord]:
    """
    Map source rows of one entity kind to EntityRecords.

    Missing trailing fields fall back to the mapper defaults. Blank lines and
    rows whose id cannot be namespaced are skipped and counted.
    """
    _logger = logger or configure_logger()
    delimiter = schema.delimiter_for(kind)
    mapper = schema.mapper_for(kind)

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            if stats is not None:
                stats.lines_skipped += 1
            continue

        tokens = line.split(delimiter)
        try:
            eid = namespaced_id(tokens[0].strip(), kind)
        except ValueError:
            if stats is not None:
                stats.lines_skipped += 1
            _logger.warning(
                "Skipping row without a numeric id",
                extra={"event": "skip_entity_row", "etype": kind.value, "line": line_number},
            )
            continue

        yield EntityRecord(etype=kind, eid=eid, properties=mapper(tokens))


def convert_entities(
    users_path: Union[str, Path],
    items_path: Union[str, Path],
    output_dir: Union[str, Path],
    schema: SchemaDescriptor,
    config: ConverterConfig | None = None,
    logger: logging.Logger | None = None,
) -> ConversionResult:
    """
    Convert a users file and a movies file into `<output_dir>/entities.dat`.

    Both inputs are opened before the output is created, so a missing input
    leaves no output file behind. Output already written when a later
    failure occurs is not rolled back.

    Raises:
        InputNotFoundError: If either input cannot be opened.
        ConversionError: On a read or write failure.
    """
    _logger = logger or configure_logger()
    config = config or ConverterConfig()
    output_path = Path(output_dir) / ENTITIES_FILENAME
    stats = ConversionStats()

    _logger.info(
        "Converting entities",
        extra={"event": "convert_entities", "phase": PHASE, "schema": schema.name},
    )

    with ExitStack() as stack:
        users = stack.enter_context(open_input(users_path, config, PHASE))
        items = stack.enter_context(open_input(items_path, config, PHASE))
        out = stack.enter_context(open_output(output_path, config, PHASE, _logger))

        for kind, source, source_path in (
            (EntityKind.USER, users, users_path),
            (EntityKind.MOVIE, items, items_path),
        ):
            lines = read_lines(source, source_path, config, PHASE)
            records = iter_entity_records(lines, kind, schema, stats, _logger)
            try:
                stats.records_written += write_records(
                    records, out, config.progress_interval, _logger
                )
            except OSError as exc:
                raise ConversionError(
                    f"I/O failure while writing {output_path}: {exc}",
                    output_path,
                    PHASE,
                ) from exc

    _logger.info(
        "Entities converted",
        extra={
            "event": "convert_entities_success",
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
