from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, Union

from .config import ConverterConfig
from .errors import ConversionError
from .logging_utils import configure_logger
from .records import EntityRecord, RelationRecord

ENTITIES_FILENAME = "entities.dat"
RELATIONS_FILENAME = "relations.dat"


@contextmanager
def open_output(
    output_path: Path,
    config: ConverterConfig,
    phase: str,
    logger: logging.Logger | None = None,
) -> Iterator[IO[str]]:
    """
    Open an output file for writing, creating its folder first.

    The handle is always closed. A failure while closing is logged as a
    warning, not raised.
    """
    _logger = logger or configure_logger()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(output_path, "w", encoding=config.output_encoding, newline="")
    except OSError as exc:
        raise ConversionError(
            f"Cannot open output file {output_path}: {exc}", output_path, phase
        ) from exc

    _logger.info(
        "Writing output file",
        extra={"event": "open_output", "phase": phase, "path": str(output_path)},
    )

    try:
        yield handle
        try:
            handle.flush()
        except OSError as exc:
            raise ConversionError(
                f"Cannot flush output file {output_path}: {exc}", output_path, phase
            ) from exc
    finally:
        try:
            handle.close()
        except OSError as exc:
            _logger.warning(
                "Could not close output file",
                extra={
                    "event": "close_output_failure",
                    "phase": phase,
                    "path": str(output_path),
                    "exception_type": type(exc).__name__,
                },
            )


def write_records(
    records: Iterable[Union[EntityRecord, RelationRecord]],
    handle: IO[str],
    progress_interval: int,
    logger: logging.Logger | None = None,
) -> int:
    """
    Write records one per line; flush and log progress every
    `progress_interval` records. Returns the number of records written.
    """
    _logger = logger or configure_logger()
    written = 0

    for record in records:
        handle.write(record.to_line())
        handle.write("\n")
        written += 1

        if written % progress_interval == 0:
            handle.flush()
            if isinstance(record, EntityRecord):
                progress = {"etype": record.etype.value, "eid": record.eid}
            else:
                progress = {"rid": record.rid}
            _logger.info(
                "Conversion progress",
                extra={"event": "write_progress", "count": written, **progress},
            )

    return written
