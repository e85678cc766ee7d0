import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import FormatDispatcher
from .exceptions import ConfigurationError
from .models import FormatOptions
from .options import parse_timeout
from .session import SessionBannerCache


def setup_logging(log_file: Optional[Path], verbose: bool = False, quiet: bool = False):
    """Sets up logging to the console and, if given, to a log file."""
    if verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        # Create the parent if it doesn't exist so we can log there
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Incremental Formatter: run an external formatter on changed files only")

    p.add_argument("root", type=Path, help="Directory to scan for source files")

    p.add_argument("--formatter", default=config.DEFAULT_FORMATTER,
                   help=f"Formatter executable path or name on PATH (default: {config.DEFAULT_FORMATTER})")
    p.add_argument("--stamp-dir", type=Path, default=None,
                   help=f"Where fingerprint stamps are kept (default: root/{config.STAMP_DIR_NAME})")
    p.add_argument("--extensions", default=config.DEFAULT_EXTENSIONS,
                   help=f"Pipe separated extensions (default: {config.DEFAULT_EXTENSIONS})")
    p.add_argument("--ignore", action="append", default=[], metavar="PATTERNS",
                   help="Pipe separated regexes matched against full paths; may be repeated")
    p.add_argument("-j", "--jobs", default=config.DEFAULT_MAX_PROCESSES,
                   help=f"Parallel formatter processes, a number or '{config.AUTO_PROCESSES}' (default: 1)")
    p.add_argument("--style-config", default=None, help="Explicit style configuration file for the formatter")
    p.add_argument("--timeout", default=None, help="Seconds before a single formatter run is killed (default: none)")
    p.add_argument("--session-id", default=None, help="Build session id; the version banner is shown once per id")
    p.add_argument("--log-file", type=Path, default=None,
                   help=f"Log file (default: stamp-dir/{config.LOG_FILE_NAME})")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging (skipped/ignored files)")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    return p.parse_args(argv)


def build_options(args) -> FormatOptions:
    root = args.root.resolve()
    stamp_dir = args.stamp_dir.resolve() if args.stamp_dir else root / config.STAMP_DIR_NAME
    try:
        timeout = parse_timeout(args.timeout)
    except ValueError:
        raise ConfigurationError(f"Invalid timeout: {args.timeout}")

    return FormatOptions(
        root=root,
        formatter=args.formatter,
        stamp_dir=stamp_dir,
        extensions=args.extensions,
        ignore_patterns=args.ignore,
        max_processes=args.jobs,
        style_config=args.style_config,
        timeout=timeout,
        session_id=args.session_id,
        progress=not args.no_progress,
    )


def main(argv=None, banner_cache: Optional[SessionBannerCache] = None) -> int:
    args = parse_args(argv)
    dispatcher = FormatDispatcher(banner_cache=banner_cache)

    # Validate before any log file exists; a bad configuration must not write to disk
    try:
        options = build_options(args)
        dispatcher.resolve(options)
    except ConfigurationError as e:
        setup_logging(None, args.verbose, args.quiet)
        logging.error(str(e))
        return 1

    log_file = args.log_file if args.log_file else options.stamp_dir / config.LOG_FILE_NAME
    setup_logging(log_file, args.verbose, args.quiet)

    logging.debug("=== Incremental Formatter Started ===")
    logging.debug(f"Root:   {options.root}")
    logging.debug(f"Stamps: {options.stamp_dir}")

    try:
        summary = dispatcher.run(options)
    except ConfigurationError as e:
        logging.error(str(e))
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1
    except Exception:
        logging.exception("Fatal error during formatting.")
        return 1

    return 0 if summary.success else 1


if __name__ == "__main__":
    sys.exit(main())
