from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ConversionError(RuntimeError):
    """
    Raised when a conversion phase cannot complete.

    Attributes:
        path: The file that caused the failure.
        phase: "entities" or "relations".
    """

    def __init__(self, message: str, path: Union[str, Path], phase: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.phase = phase


class InputNotFoundError(ConversionError):
    """Raised when an input file is missing or cannot be opened."""


class UnknownSchemaError(ValueError):
    """Raised for a schema name with no registered descriptor."""
