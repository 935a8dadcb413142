from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .errors import ScopeCheckError
from .reporting import violations_to_json
from .runner import ScopeCheckConfig, ScopeCheckRunner

PARALLEL_ENV = "DEPENDENCY_SCOPE_PARALLEL"

EXIT_VIOLATIONS = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


_FLAG_VALUES = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def _is_truthy(value: str | None, default: bool) -> bool:
    """Parse a boolean environment value; unrecognised values keep ``default``."""
    if value is None:
        return default
    return _FLAG_VALUES.get(value.strip().lower(), default)


def _unrecognised_flag(value: str | None) -> bool:
    return value is not None and bool(value.strip()) and value.strip().lower() not in _FLAG_VALUES


def build_parser() -> argparse.ArgumentParser:
    description = (
        "Report dependencies declared test-scoped by the project that another,\n"
        "non-test branch of the dependency tree needs at compile or runtime.\n\n"
        "Examples:\n"
        "  dependency-scope project.yaml\n"
        "  dependency-scope project.yaml --repository ./descriptors --fail\n"
        "  dependency-scope project.yaml --serial --json"
    )
    parser = argparse.ArgumentParser(
        prog="dependency-scope",
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("project", type=Path, help="Project file (YAML or JSON) with the resolved dependency tree")
    parser.add_argument(
        "--repository",
        type=Path,
        help="Descriptor repository file or directory (default: the project file itself)",
    )
    parser.add_argument(
        "--parallel",
        dest="parallel",
        action="store_true",
        default=_is_truthy(os.environ.get(PARALLEL_ENV), True),
        help=f"Resolve descriptors on a worker pool (default, or set {PARALLEL_ENV})",
    )
    parser.add_argument("--serial", dest="parallel", action="store_false", help="Resolve descriptors in a single thread")
    parser.add_argument("--max-workers", type=int, help="Worker pool size (default: min(5 x CPUs, 20))")
    parser.add_argument(
        "--strict-exclusions",
        action="store_true",
        help="Re-evaluate artifacts reached again through a path with different exclusions",
    )
    parser.add_argument("--fail", action="store_true", help="Exit with status 1 when violations are found")
    parser.add_argument("--skip", action="store_true", help="Skip the check entirely")
    parser.add_argument("--link-to-documentation", action="store_true", help="Point to fix instructions after violations")
    parser.add_argument("--json", action="store_true", help="Print violations as JSON on stdout")
    parser.add_argument("--color", dest="color", action="store_true", default=None, help="Force rich-colored output")
    parser.add_argument("--no-color", dest="color", action="store_false", help="Disable colored output")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    return parser


def configure_console(color_flag: Optional[bool]) -> Console:
    if color_flag is True:
        return Console(stderr=True)
    if color_flag is False:
        return Console(stderr=True, no_color=True)
    return Console(stderr=True, no_color=not sys.stderr.isatty())


def configure_logging(console: Console, debug: bool) -> logging.Logger:
    level = logging.DEBUG if debug else logging.INFO
    handler = RichHandler(console=console, show_time=False, show_path=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
    return logging.getLogger("dependency_scope")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.max_workers is not None and args.max_workers < 1:
        parser.error("--max-workers must be a positive integer")

    console = configure_console(args.color)
    logger = configure_logging(console, args.debug)

    env_parallel = os.environ.get(PARALLEL_ENV)
    if _unrecognised_flag(env_parallel):
        logger.warning("Ignoring unrecognised %s value %r", PARALLEL_ENV, env_parallel)

    config = ScopeCheckConfig(
        project_file=args.project,
        repository=args.repository,
        parallel=args.parallel,
        max_workers=args.max_workers,
        strict_exclusions=args.strict_exclusions,
        fail=args.fail,
        skip=args.skip,
        link_to_documentation=args.link_to_documentation,
        logger=logger,
    )

    try:
        result = ScopeCheckRunner().run(config)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted while checking dependency scopes[/]")
        return EXIT_INTERRUPTED
    except ScopeCheckError as exc:
        if args.debug:
            raise
        console.print(f"[red]Error:[/] {escape(str(exc))}")
        return EXIT_ERROR

    if args.json and not result.skipped:
        print(violations_to_json(result.violations, result.stats))

    return EXIT_VIOLATIONS if result.failed else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
