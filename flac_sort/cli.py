from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .album_tagger import AlbumTagger
from .commands import check_dirs as cmd_check_dirs
from .commands import clean_names as cmd_clean_names
from .commands import info as cmd_info
from .commands import tags as cmd_tags
from .config import Settings, find_config
from .models import ProcessingError
from .orchestrator import AlbumOrchestrator
from .scanner import LibraryScanner
from .state import RunStatistics
from .tagging import FlacTagStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ShortPathFormatter(logging.Formatter):
    """Drops the run root from logged paths so album names stay readable."""

    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if root]

    def _shorten(self, message: str) -> str:
        for root in self.roots:
            if not message:
                break
            message = message.replace(f"{root}/", "")
        return message

    def format(self, record: logging.LogRecord) -> str:
        return self._shorten(super().format(record))


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


class ArgumentParser(argparse.ArgumentParser):
    # Usage errors exit 1; exit code 2 belongs to "tags" on a non-directory.
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _yes_no(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"y", "yes"}:
        return True
    if lowered in {"n", "no"}:
        return False
    raise argparse.ArgumentTypeError("compilation flag must be Y or N")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="flac-sort", description="FLAC album library normalizer")
    parser.add_argument("--config", type=Path, help="Path to flac-sort.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--warnings-log",
        type=Path,
        default=None,
        help="Also write warnings and errors to this file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    tag_parser = subparsers.add_parser("tag", help="Tag every FLAC file in one directory")
    tag_parser.add_argument("album", help="Album title")
    tag_parser.add_argument("album_artist", help="Album artist")
    tag_parser.add_argument("genre", help="Genre")
    tag_parser.add_argument("compilation", type=_yes_no, help="Y if the album is a compilation, else N")
    tag_parser.add_argument("--directory", type=Path, default=Path("."))

    album_parser = subparsers.add_parser(
        "album", help="Flatten, tag and rename a single 'Artist - Album' directory"
    )
    album_parser.add_argument("path", type=Path)
    album_parser.add_argument("genre")
    album_parser.add_argument(
        "--remove-cover",
        action="store_true",
        help="Delete cover.jpg once it has been embedded",
    )

    batch_parser = subparsers.add_parser(
        "batch", help="Tag and rename every album directory in place with one genre"
    )
    batch_parser.add_argument("genre")
    batch_parser.add_argument("--directory", type=Path, default=Path("."))

    sort_parser = subparsers.add_parser(
        "sort", help="Process every album under ROOT and sort it by quality"
    )
    sort_parser.add_argument("root", type=Path)
    sort_parser.add_argument("genre", help="Genre used when the name carries no [Genre] group")
    sort_parser.add_argument(
        "--force-sort",
        action="store_true",
        help="Create the quality folders when they are missing",
    )

    info_parser = subparsers.add_parser("info", help="Print one summary line per track")
    info_parser.add_argument("file", type=Path, nargs="?")

    tags_parser = subparsers.add_parser("tags", help="Inspect or rewrite a single tag")
    mode = tags_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-i", dest="mode", action="store_const", const=cmd_tags.INSPECT, help="Inspect")
    mode.add_argument("-o", dest="mode", action="store_const", const=cmd_tags.OVERWRITE, help="Overwrite")
    mode.add_argument("-n", dest="mode", action="store_const", const=cmd_tags.DRY_RUN, help="Dry run")
    tags_parser.add_argument("path", type=Path)
    tags_parser.add_argument("tag")
    tags_parser.add_argument("regex", nargs="?")
    tags_parser.add_argument("replacement", nargs="?", default="")
    tags_parser.add_argument("-r", "--recursive", action="store_true")
    tags_parser.add_argument("-d", "--delete", action="store_true", help="Delete the tag on match")
    tags_parser.add_argument("--stats", action="store_true", help="Print counters to stderr")
    tags_parser.add_argument("--hide-missing", action="store_true")
    tags_parser.add_argument("--hide-nomatch", action="store_true")
    tags_parser.add_argument("--quiet", action="store_true", help="Hide missing and non-matching files")

    check_parser = subparsers.add_parser(
        "check-dirs", help="List leaf directories without FLAC files"
    )
    check_parser.add_argument("root", type=Path, nargs="?", default=Path("."))
    check_parser.add_argument("--clean", action="store_true", help="Delete them instead")

    clean_parser = subparsers.add_parser(
        "clean-names", help="Rewrite [MP4] and [Unknown] markers in folder names"
    )
    clean_parser.add_argument("genre", nargs="?", default=cmd_clean_names.DEFAULT_GENRE)
    clean_parser.add_argument("--directory", type=Path, default=Path("."))
    return parser


def configure_logging(
    level: int, roots: Sequence[Path], warnings_log: Optional[Path] = None
) -> WarningBufferHandler:
    display_roots = [root.resolve() for root in roots]
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT, display_roots))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(ShortPathFormatter(LOG_FORMAT, display_roots))
    root_logger.addHandler(warn_buffer)

    if warnings_log is not None:
        file_handler = logging.FileHandler(warnings_log, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(ShortPathFormatter(LOG_FORMAT, display_roots))
        root_logger.addHandler(file_handler)

    logging.getLogger("PIL").setLevel(logging.WARNING)
    return warn_buffer


def _display_roots(args: argparse.Namespace) -> List[Path]:
    for name in ("root", "directory", "path"):
        value = getattr(args, name, None)
        if isinstance(value, Path):
            return [value if value.is_dir() else value.parent]
    return [Path.cwd()]


def _print_summary(stats: RunStatistics, settings: Settings, sorted_run: bool) -> None:
    print("\n======== Processing Summary ========")
    sorting = settings.sorting
    lines = (
        stats.summary_lines(sorting.cd_dir, sorting.hires_dir)
        if sorted_run
        else stats.summary_lines()
    )
    for line in lines:
        print(line)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings.from_optional(find_config(args.config))
    except (FileNotFoundError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.INFO)
    warn_buffer = configure_logging(level, _display_roots(args), args.warnings_log)
    store = FlacTagStore()
    audio_exts = settings.library.audio_extensions

    try:
        match args.command:
            case "tag":
                tagger = AlbumTagger(LibraryScanner(settings), store, settings.artwork)
                report = tagger.tag(
                    args.directory,
                    args.album,
                    args.album_artist,
                    args.genre,
                    args.compilation,
                )
                print(f"Tagged {report.tracks_tagged} track(s) in {args.directory}")
                return 1 if report.tracks_failed else 0
            case "album":
                orchestrator = AlbumOrchestrator(settings, store)
                final_path = orchestrator.process_album(
                    args.path, args.genre, remove_cover=args.remove_cover
                )
                print(f"Done: {final_path.name}")
                return 0
            case "batch":
                orchestrator = AlbumOrchestrator(settings, store)
                stats = orchestrator.run_in_place(args.directory, args.genre)
                _print_summary(stats, settings, sorted_run=False)
                return 1 if stats.errors else 0
            case "sort":
                orchestrator = AlbumOrchestrator(settings, store)
                sort = True if args.force_sort else None
                sorted_run = args.force_sort or orchestrator.sorting_available(args.root)
                stats = orchestrator.run(args.root, args.genre, sort=sort)
                _print_summary(stats, settings, sorted_run=sorted_run)
                return 1 if stats.errors else 0
            case "info":
                return cmd_info.run(store, args.file, Path.cwd(), audio_exts)
            case "tags":
                options = cmd_tags.TagEditOptions(
                    mode=args.mode,
                    tag=args.tag,
                    pattern=args.regex,
                    replacement=args.replacement,
                    recursive=args.recursive,
                    delete_on_match=args.delete,
                    show_stats=args.stats,
                    hide_missing=args.hide_missing or args.quiet,
                    hide_nomatch=args.hide_nomatch or args.quiet,
                )
                return cmd_tags.run(store, args.path, options, audio_exts)
            case "check-dirs":
                return cmd_check_dirs.run(args.root, audio_exts, clean=args.clean)
            case "clean-names":
                cmd_clean_names.run(args.directory, args.genre)
                return 0
            case _:
                parser.error("Unknown command")
    except ProcessingError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        if warn_buffer.records:
            print(f"\n\033[33mWarnings/Errors: {len(warn_buffer.records)}\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
