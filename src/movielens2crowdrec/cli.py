"""
Command line driver.

    movielens2crowdrec [--schema {100k,1m}] <usersFile> <itemsFile> <ratingsFile> [<outputDirectory>]

Exit codes: 0 on success (or when only usage is printed), 1 when a
conversion phase failed, 2 on invalid configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ConfigError, load_converter_config_from_env
from .errors import UnknownSchemaError
from .logging_utils import configure_logger
from .pipeline import run_conversion
from .schemas import SCHEMAS, get_schema
from .writers import ENTITIES_FILENAME, RELATIONS_FILENAME

EXIT_OK = 0
EXIT_CONVERSION_FAILED = 1
EXIT_CONFIG_ERROR = 2

USAGE_HINT = (
    "Please enter the paths to the required files.\n"
    "You need at least three arguments: user's data, item's data and rating's data.\n"
    "The 4th argument (optional) defines the path to the output directory."
)


def build_parser(prog: str = "movielens2crowdrec", schema: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        usage=f"{prog} [options] <userDataFile> <itemDataFile> <ratingDataFile> [<outputDirectory>]",
        description="Convert a MovieLens dataset into CrowdRec entities.dat / relations.dat.",
    )
    if schema is None:
        parser.add_argument(
            "--schema",
            default="100k",
            choices=sorted(SCHEMAS),
            help="Source layout: 100k (u.user/u.item/u.data) or 1m (users/movies/ratings.dat).",
        )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override CROWDREC_LOG_LEVEL (e.g. DEBUG, INFO, WARNING).",
    )
    parser.add_argument("paths", nargs="*", metavar="path", help=argparse.SUPPRESS)
    parser.set_defaults(fixed_schema=schema)
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    prog: str = "movielens2crowdrec",
    schema: Optional[str] = None,
) -> int:
    parser = build_parser(prog=prog, schema=schema)
    args = parser.parse_args(argv)
    paths: List[str] = args.paths

    if len(paths) < 3:
        parser.print_usage(sys.stdout)
        print(USAGE_HINT)
        return EXIT_OK
    if len(paths) > 4:
        parser.error(f"unrecognized arguments: {' '.join(paths[4:])}")

    try:
        config = load_converter_config_from_env()
        descriptor = get_schema(args.fixed_schema or args.schema)
        log_level = args.log_level.upper() if args.log_level else config.log_level
        logger = configure_logger(level=log_level)
    except (ConfigError, UnknownSchemaError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    users, items, ratings = paths[:3]
    output_dir = Path(paths[3]) if len(paths) > 3 else config.default_output_dir

    outcome = run_conversion(users, items, ratings, output_dir, descriptor, config, logger)

    if not outcome.ok:
        for phase, exc in outcome.errors.items():
            print(f"ERROR! {phase} conversion failed: {exc}", file=sys.stderr)
        return EXIT_CONVERSION_FAILED

    print("The convert process is finished!")
    print(f"You can find the entities-data under: {output_dir / ENTITIES_FILENAME}")
    print(f"You can find the relations-data under: {output_dir / RELATIONS_FILENAME}")
    return EXIT_OK


def main_100k(argv: Optional[Sequence[str]] = None) -> int:
    return main(argv, prog="ml100k2crowdrec", schema="100k")


def main_1m(argv: Optional[Sequence[str]] = None) -> int:
    return main(argv, prog="ml1m2crowdrec", schema="1m")


def run() -> None:
    sys.exit(main())


def run_100k() -> None:
    sys.exit(main_100k())


def run_1m() -> None:
    sys.exit(main_1m())
