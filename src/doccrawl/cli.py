"""Command-line interface for doccrawl."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .core.runner import DocCrawler
from .logging_config import setup_logging
from .models.config import DEFAULT_IGNORE_SELECTORS, DocCrawlConfig
from .models.events import EventType


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="doccrawl",
        description="Crawl a documentation site and convert its pages to markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl a site into ./docs
  doccrawl -u https://docs.example.com/

  # Only follow documentation pages and take content from <article>
  doccrawl -u https://example.com/docs/ -p "^/docs/.*" -s article

  # Slow down and drop extra noise
  doccrawl -u https://example.com/ -d 500 -i "script,style,.sidebar"

  # Load settings from YAML, overriding the output directory
  doccrawl --config crawl.yaml -o ./site-docs
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--url",
        "-u",
        help="URL to start crawling from (required unless set in --config)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output directory for markdown files (default: ./docs)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="YAML config file; command-line flags take precedence",
    )

    # Crawl settings
    crawl_group = parser.add_argument_group("crawl settings")
    crawl_group.add_argument(
        "--delay",
        "-d",
        type=int,
        default=None,
        metavar="MS",
        help="Delay between requests in milliseconds (default: 100)",
    )
    crawl_group.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum link depth to follow (default: 10)",
    )
    crawl_group.add_argument(
        "--no-domain-restrict",
        action="store_true",
        help="Follow links to other domains",
    )
    crawl_group.add_argument(
        "--path-pattern",
        "-p",
        metavar="REGEX",
        help="Only follow URLs whose path matches this regular expression",
    )

    # Content settings
    content_group = parser.add_argument_group("content settings")
    content_group.add_argument(
        "--selector",
        "-s",
        default=None,
        help='CSS selector for the main content (default: "main")',
    )
    content_group.add_argument(
        "--ignore-selectors",
        "-i",
        metavar="SELECTORS",
        help=f"Comma-separated CSS selectors to remove (default: {','.join(DEFAULT_IGNORE_SELECTORS)})",
    )
    content_group.add_argument(
        "--strip-js",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove inline JavaScript event handlers (default: on)",
    )

    # Output settings
    output_group = parser.add_argument_group("output settings")
    output_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Crawl and convert without writing markdown files",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Minimal output",
    )
    output_group.add_argument(
        "--log-file",
        type=Path,
        help="Also write logs to this file",
    )

    return parser


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge overrides into base, descending into nested sections."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a plain dict."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        raise ValueError(f"Could not parse {path}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of settings")
    return data


def build_config(args: argparse.Namespace) -> DocCrawlConfig:
    """
    Build a DocCrawlConfig from parsed arguments.

    Values from --config are loaded first; any flag given on the command
    line replaces the matching setting.

    Raises:
        ValueError: If the settings are invalid (pydantic ValidationError included)
        OSError: If the config file cannot be read
    """
    config_kwargs: dict[str, Any] = {}

    if args.url:
        config_kwargs["url"] = args.url
    if args.dry_run:
        config_kwargs["dry_run"] = True
    if args.log_file:
        config_kwargs["log_file"] = args.log_file

    # Crawl settings
    crawl_kwargs: dict[str, Any] = {}
    if args.delay is not None:
        crawl_kwargs["delay_ms"] = args.delay
    if args.max_depth is not None:
        crawl_kwargs["max_depth"] = args.max_depth
    if args.no_domain_restrict:
        crawl_kwargs["restrict_to_domain"] = False
    if args.path_pattern:
        crawl_kwargs["path_pattern"] = args.path_pattern
    if crawl_kwargs:
        config_kwargs["crawl"] = crawl_kwargs

    # Content settings
    conversion_kwargs: dict[str, Any] = {}
    if args.selector is not None:
        conversion_kwargs["selector"] = args.selector
    if args.ignore_selectors is not None:
        conversion_kwargs["ignore_selectors"] = args.ignore_selectors
    if args.strip_js is not None:
        conversion_kwargs["strip_inline_handlers"] = args.strip_js
    if conversion_kwargs:
        config_kwargs["conversion"] = conversion_kwargs

    if args.output is not None:
        config_kwargs["output"] = {"directory": args.output}

    # Log level
    if args.verbose:
        config_kwargs["log_level"] = "DEBUG"
    elif args.quiet:
        config_kwargs["log_level"] = "ERROR"

    if args.config:
        config_kwargs = _deep_merge(_load_config_file(args.config), config_kwargs)

    if "url" not in config_kwargs:
        raise ValueError("a start URL is required (use --url or set url in --config)")

    return DocCrawlConfig.model_validate(config_kwargs)


def run_crawler(config: DocCrawlConfig, console: Console, quiet: bool = False, verbose: bool = False) -> int:
    """Run a crawl with a progress display. Returns the exit code."""

    async def run() -> int:
        if not quiet:
            console.print(f"[bold blue]doccrawl[/bold blue] v{__version__}")
            console.print(f"Target: {config.url}")
            console.print(f"Output: {config.output.directory}")
            if config.dry_run:
                console.print("[yellow]Dry run: no files will be written[/yellow]")
            console.print()

        try:
            async with DocCrawler(config) as crawler:
                if quiet:
                    async for _ in crawler.run():
                        pass
                else:
                    with Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        console=console,
                        transient=True,
                    ) as progress:
                        task = progress.add_task("Starting...", total=None)
                        converted = 0

                        async for event in crawler.run():
                            if event.type == EventType.STARTED:
                                progress.update(task, description=f"[cyan]{event.message}")
                            elif event.type == EventType.PAGE_FETCHED:
                                progress.update(
                                    task,
                                    description=f"[cyan]Fetched {event.current}: {event.url}",
                                )
                            elif event.type == EventType.FETCH_COMPLETED:
                                progress.update(task, description=f"[green]Fetched {event.total} pages")
                            elif event.type == EventType.CONVERSION_STARTED:
                                progress.update(task, description=f"[cyan]{event.message}")
                            elif event.type in (EventType.PAGE_SAVED, EventType.PAGE_SKIPPED):
                                converted += 1
                                progress.update(
                                    task,
                                    description=f"[cyan]Processed {converted}: {event.path}",
                                )
                            elif event.type == EventType.PAGE_FAILED:
                                converted += 1
                                console.print(f"[red]Failed:[/red] {event.path} - {event.error}")
                            elif event.type == EventType.WORKSPACE_REMOVED:
                                progress.update(task, description=f"[cyan]{event.message}")
                            elif event.type == EventType.COMPLETED:
                                progress.update(task, description=f"[green]{event.message}")

                # Print stats
                stats = crawler.stats
                if not quiet:
                    console.print()
                    console.print("[bold]Results:[/bold]")
                    console.print(f"  Pages fetched: {stats.pages_fetched}")
                    console.print(f"  Pages converted: {stats.pages_converted}")
                    console.print(f"  Files saved: {stats.files_saved}")
                    console.print(f"  Pages skipped: {stats.pages_skipped}")
                    console.print(f"  Pages failed: {stats.pages_failed}")
                    console.print(f"  Duration: {stats.duration_seconds:.1f}s")

                return 0

        except Exception as e:
            console.print(f"[red]Error:[/red] {e}")
            if verbose:
                import traceback

                traceback.print_exc()
            return 1

    return asyncio.run(run())


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console()

    try:
        config = build_config(args)
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1
    except ImportError:
        console.print("[red]Configuration error:[/red] --config requires PyYAML (pip install doccrawl[yaml])")
        return 1

    setup_logging(
        level=config.log_level,
        log_file=config.log_file,
    )

    return run_crawler(config, console, quiet=args.quiet, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
