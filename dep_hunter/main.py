from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .analysis import analyze_project
from .config import SIZE_BACKENDS, load_config
from .dependencies import discover_dependencies
from .reports.console import ConsoleReporter
from .reports.json_report import format_json
from .sizes.factory import build_size_provider


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    project_path = Path(args.path).resolve()
    if not project_path.exists():
        raise SystemExit(f"Error: Path {project_path} does not exist")

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Error: invalid config {args.config}: {exc}")

    logger.info("Analyzing dependencies in %s", project_path)
    try:
        dependencies = discover_dependencies(project_path)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}")

    if not dependencies.direct:
        print("No dependencies found in package.json")
        return 0
    logger.info("Found %s direct dependencies", len(dependencies.direct))

    include_dev = args.include_dev or config.analysis.include_dev
    provider = build_size_provider(config, backend=args.backend)
    report = await analyze_project(
        project_path,
        config,
        provider,
        include_dev=include_dev,
        dependencies=dependencies,
    )

    if args.json:
        print(format_json(report))
    else:
        ConsoleReporter().render(report.results, report.unresolved)
    return 0


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dep-hunter",
        description="Analyze dependency usage and removable footprint in Node.js projects",
    )
    parser.add_argument("path", help="Path to the Node.js project to analyze")
    parser.add_argument("--include-dev", action="store_true", help="Include devDependencies in the analysis")
    parser.add_argument("--json", action="store_true", help="Output results as JSON")
    parser.add_argument(
        "--backend",
        choices=sorted(SIZE_BACKENDS),
        default=None,
        help="Size back-end (overrides analysis.size_backend)",
    )
    parser.add_argument("--config", default="./dep-hunter.yaml")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def run() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
