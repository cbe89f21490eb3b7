from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable, Iterator, Union

from .config import ConverterConfig
from .errors import ConversionError, InputNotFoundError


def open_input(path: Union[str, Path], config: ConverterConfig, phase: str) -> IO[str]:
    """
    Open a MovieLens source file for reading.

    Raises:
        InputNotFoundError: If the file is missing or cannot be opened.
    """
    try:
        return open(path, "r", encoding=config.input_encoding)
    except OSError as exc:
        raise InputNotFoundError(f"Input file not found: {path}", path, phase) from exc


def read_lines(
    source: Iterable[str],
    path: Union[str, Path],
    config: ConverterConfig,
    phase: str,
) -> Iterator[str]:
    """
    Yield the lines of an opened source file.

    Raises:
        ConversionError: If reading or decoding `path` fails.
    """
    lines = iter(source)
    while True:
        try:
            line = next(lines)
        except StopIteration:
            return
        except UnicodeDecodeError as exc:
            raise ConversionError(
                f"Cannot decode {path} as {config.input_encoding}: {exc}", path, phase
            ) from exc
        except OSError as exc:
            raise ConversionError(f"I/O failure while reading {path}: {exc}", path, phase) from exc
        yield line
