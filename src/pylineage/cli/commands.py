"""
CLI command — argparse front end for pylineage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..config import ProjectConfig
from ..core.query import SubclassFinder
from ..errors import (
    AmbiguousClassNameError, InternalError, LineageError, RootDirectoryError,
)
from . import formatter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_INTERNAL_ERROR = 2


def _configure_logging(verbosity: int):
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def _get_config(args) -> ProjectConfig:
    """Load project config, with command-line flags taking precedence."""
    config = ProjectConfig.load(Path(args.directory).resolve())
    if args.no_cache:
        config.cache_enabled = False
    if args.workers:
        config.workers = args.workers
    return config


def cmd_query(args) -> int:
    """Find subclasses (or superclasses) and print them."""
    root = Path(args.directory)
    if not root.is_dir():
        raise RootDirectoryError(args.directory, "not a directory")

    config = _get_config(args)
    if args.exclude:
        logger.debug("Excluding: %s", args.exclude)
    if not config.cache_enabled:
        logger.debug("Cache disabled")

    finder = SubclassFinder(root, exclude=args.exclude, use_cache=config.cache_enabled,
                            workers=config.workers, config=config)
    logger.debug("Searching for %s of '%s'%s",
                 "superclasses" if args.parents else "subclasses", args.class_name,
                 f" in module '{args.module}'" if args.module else "")

    result = finder.query(args.class_name, args.module, mode=args.mode, parents=args.parents)

    if args.format == "json":
        print(formatter.format_json(result))
    elif args.format == "dot":
        root_ref = finder.resolve_class_reference(args.class_name, args.module)
        edges = finder.edges_within([root_ref, *result.subclasses])
        print(formatter.format_dot(root_ref, result, edges))
    else:
        print(formatter.format_text(result, "superclass" if args.parents else "subclass"))

    if finder.parse_errors:
        logger.info("%d file(s) could not be parsed", len(finder.parse_errors))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pylineage",
        description="Find all subclasses of a Python class, statically",
    )
    parser.add_argument("class_name", help="Name of the class to search for")
    parser.add_argument(
        "--module", "-m", default=None,
        help="Module containing the class, to disambiguate (e.g. 'zoo.animals')",
    )
    parser.add_argument(
        "--directory", "-d", default=".",
        help="Root directory to analyse (default: current dir)",
    )
    parser.add_argument(
        "--exclude", "-e", action="append", default=[],
        help="Directory to exclude (repeatable)",
    )
    parser.add_argument(
        "--format", "-f", choices=["text", "json", "dot"], default="text",
        help="Output format",
    )
    parser.add_argument(
        "--mode", choices=["all", "direct"], default="all",
        help="Transitive (all) or only direct subclasses",
    )
    parser.add_argument(
        "--parents", action="store_true", default=False,
        help="List superclasses instead of subclasses",
    )
    parser.add_argument(
        "--no-cache", action="store_true", default=False,
        help="Do not read or write the extraction cache",
    )
    parser.add_argument("--workers", type=int, default=None, help="Extraction threads")
    parser.add_argument(
        "--verbose", "-v", action="count", default=0,
        help="More logging on stderr (-v info, -vv debug)",
    )
    return parser


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return cmd_query(args)
    except AmbiguousClassNameError as e:
        print(f"Error: {formatter.format_ambiguous(e)}", file=sys.stderr)
        return EXIT_USER_ERROR
    except InternalError as e:
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except LineageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USER_ERROR
