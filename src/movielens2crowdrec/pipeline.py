"""
Orchestrator for a full MovieLens -> CrowdRec conversion.

Runs the entity phase, then the relation phase, against one output folder.
The phases are independent: a failure in one is logged and recorded, and
the other still runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from .config import ConverterConfig
from .entities import convert_entities
from .errors import ConversionError
from .logging_utils import configure_logger
from .records import ConversionResult
from .relations import convert_relations
from .schemas import SchemaDescriptor


@dataclass
class PipelineResult:
    """Per-phase outcome of `run_conversion`."""

    output_dir: Path
    results: Dict[str, ConversionResult] = field(default_factory=dict)
    errors: Dict[str, ConversionError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def run_conversion(
    users_path: Union[str, Path],
    items_path: Union[str, Path],
    ratings_path: Union[str, Path],
    output_dir: Union[str, Path],
    schema: SchemaDescriptor,
    config: Optional[ConverterConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> PipelineResult:
    """
    Entry point for one conversion run.

    Steps:
        1. Convert users + movies into entities.dat.
        2. Convert ratings into relations.dat.
    """
    _logger = logger or configure_logger()
    config = config or ConverterConfig()
    outcome = PipelineResult(output_dir=Path(output_dir))

    _logger.info(
        "Starting MovieLens to CrowdRec conversion",
        extra={"event": "pipeline_start", "schema": schema.name, "path": str(output_dir)},
    )

    # ----------------------------------------------------------
    # Step 1: Entities
    # ----------------------------------------------------------
    try:
        outcome.results["entities"] = convert_entities(
            users_path, items_path, output_dir, schema, config, _logger
        )
    except ConversionError as exc:
        _record_failure(outcome, "entities", exc, _logger)

    # ----------------------------------------------------------
    # Step 2: Relations
    # ----------------------------------------------------------
    try:
        outcome.results["relations"] = convert_relations(
            ratings_path, output_dir, schema, config, _logger
        )
    except ConversionError as exc:
        _record_failure(outcome, "relations", exc, _logger)

    _logger.info(
        "MovieLens to CrowdRec conversion finished",
        extra={
            "event": "pipeline_end" if outcome.ok else "pipeline_end_with_errors",
            "schema": schema.name,
        },
    )
    return outcome


def _record_failure(
    outcome: PipelineResult,
    phase: str,
    exc: ConversionError,
    logger: logging.Logger,
) -> None:
    outcome.errors[phase] = exc
    logger.error(
        str(exc),
        extra={
            "event": f"convert_{phase}_failure",
            "phase": phase,
            "path": str(exc.path),
            "exception_type": type(exc).__name__,
        },
    )
