"""
CLI entrypoint for clipfiles package.
"""
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from colorama import Fore, Style, just_fix_windows_console

from . import __version__
from .clipboard import ClipboardSink, PyperclipSink
from .core import build_document, collect_files
from .errors import ClipboardUnavailableError, ConfigFileError
from .ignore import IgnorePatterns, load_extra_patterns
from .walk import walk

logger = logging.getLogger("clipfiles")

# Give the clipboard owner time to take the data before we exit
CLIPBOARD_SETTLE_SECONDS = 0.1


class ColorFormatter(logging.Formatter):
    COLORS = {
        logging.DEBUG: Style.DIM,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color = self.COLORS.get(record.levelno)
        return f"{color}{msg}{Style.RESET_ALL}" if color else msg


def setup_logging(verbose: bool = False) -> None:
    """Send clipfiles log records to stderr, colored by level."""
    just_fix_windows_console()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter("[clipfiles] %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _directory(value: str) -> Path:
    path = Path(value)
    if not path.is_dir():
        raise argparse.ArgumentTypeError(f"'{value}' is not a directory")
    return path


def split_patterns(values: Iterable[str]) -> List[str]:
    """Flatten repeated, comma-delimited ``--ignore`` values."""
    return [p for v in values for p in v.split(",") if p.strip()]


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="clipfiles",
        description="Copy the text files of a directory tree to the clipboard.",
    )
    p.add_argument("path", type=_directory, help="Path to the directory to process")
    p.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERNS",
        help="Additional files or directories to ignore, comma separated (supports glob patterns)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument("--hidden", action="store_true", help="Include hidden files and directories")
    p.add_argument(
        "--show-content",
        action="store_true",
        help="Print the copied document instead of the list of files",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def main(
    argv: Optional[Sequence[str]] = None,
    sink_factory: Callable[[], ClipboardSink] = PyperclipSink,
) -> int:
    ns = _parse_args(argv)
    setup_logging(ns.verbose)

    try:
        root = ns.path.resolve()

        extra: List[str] = []
        if ns.config:
            try:
                extra.extend(load_extra_patterns(ns.config.resolve()))
                logger.debug("Loaded extra patterns from %s", ns.config)
            except ConfigFileError as e:
                logger.error("Error: %s", e)
                return 1
        extra.extend(split_patterns(ns.ignore))

        patterns = IgnorePatterns.build(extra)

        try:
            sink = sink_factory()
        except ClipboardUnavailableError as e:
            logger.error("Error: %s", e)
            return 1

        logger.debug("Scanning %s …", root)
        doc = build_document(
            collect_files(root, patterns, walker=lambda r: walk(r, hidden=ns.hidden))
        )

        try:
            sink.set_text(doc.text)
        except ClipboardUnavailableError as e:
            logger.error("Error: %s", e)
            return 1
        time.sleep(CLIPBOARD_SETTLE_SECONDS)

        print("File structure and contents copied to clipboard:")
        if ns.show_content:
            print(doc.text)
        else:
            for rel in sorted(doc.paths):
                print(f"- {rel}")
        logger.debug("Done. %d files, %d characters.", len(doc), len(doc.text))

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=ns.verbose)
        return 1

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
