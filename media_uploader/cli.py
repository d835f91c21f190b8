"""Command line interface for media_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich.logging import RichHandler

from .cli_progress import BatchProgressDisplay, render_configuration_summary
from .errors import ConfigurationError
from .models import MediaList, UploadConfig, entries_from_list, entries_to_list
from .utils.events import BATCH_FAILED, TASK_STATE, VALIDATION_FAILED


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _resolve_log_level(debug: bool, log_level: Optional[str]) -> Optional[int]:
    """--debug wins over --log-level, which wins over LOG_LEVEL. None means silent."""
    if debug:
        return logging.DEBUG
    name = (log_level or os.getenv("LOG_LEVEL") or "").strip().upper()
    if not name:
        return None
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Route library logs through a RichHandler on stderr.

    Nothing is logged unless a level was asked for; the rich progress display
    is the default output. Returns the effective mode for the summary panel.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    logging.disable(logging.NOTSET)

    level = None if silent else _resolve_log_level(debug, log_level)
    if level is None:
        logging.disable(logging.CRITICAL)
        return "silent"

    handler = RichHandler(rich_tracebacks=True, markup=False, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    """Parse ``[export ]KEY=value``; comments, blanks and junk give None."""
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if not sep or not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return key, value


def _load_env_file(path: Path, override: bool = False) -> None:
    """Export the pairs of a .env file; existing variables win unless ``override``."""
    if not path.is_file():
        problem = "not a file" if path.exists() else "not found"
        raise CLIError(f"env file {problem}: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for pair in filter(None, map(_parse_env_line, lines)):
        key, value = pair
        if override:
            os.environ[key] = value
        else:
            os.environ.setdefault(key, value)


def _resolve_default_env_file() -> Optional[Path]:
    candidate = Path.cwd() / ".env"
    return candidate if candidate.is_file() else None


def _require_env(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise CLIError(f"{name} environment variable is not set")
    return value


def _load_media_list(path: Optional[Path]) -> MediaList:
    """Read the current field value (JSON array) from disk; missing file means empty."""
    if path is None or not path.exists():
        return ()
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "[]")
    except (OSError, ValueError) as exc:
        raise CLIError(f"could not read media list {path}: {exc}") from exc
    if not isinstance(data, list):
        raise CLIError(f"media list {path} must contain a JSON array")
    try:
        return entries_from_list(data)
    except (KeyError, TypeError) as exc:
        raise CLIError(f"invalid entry in media list {path}: {exc}") from exc


def _dump_media_list(entries: MediaList) -> str:
    return json.dumps(entries_to_list(entries), indent=2, ensure_ascii=False)


def _save_media_list(path: Path, entries: MediaList) -> None:
    path.write_text(_dump_media_list(entries) + "\n", encoding="utf-8")


async def _run_upload(
    files: List[Path],
    list_path: Optional[Path],
    config: UploadConfig,
    api_url: str,
    cdn_domain: str,
    token: Optional[str],
) -> int:
    from .orchestrator import UploadOrchestrator

    entries = _load_media_list(list_path)

    try:
        orchestrator = UploadOrchestrator(api_url, cdn_domain, config=config, token=token)
    except ConfigurationError as exc:
        raise CLIError(str(exc)) from exc

    display = BatchProgressDisplay()
    async with orchestrator:
        orchestrator.events.on(TASK_STATE, display.on_task_state)
        field = orchestrator.bind(entries)
        field.on(VALIDATION_FAILED, display.on_validation_failed)
        field.on(BATCH_FAILED, display.on_batch_failed)

        result = await field.pick(files)
        display.on_finish(result)

        if list_path is not None:
            _save_media_list(list_path, field.entries)
        else:
            print(_dump_media_list(field.entries))

    return 0 if result.all_success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="media-up",
        description="Upload a batch of images and append them to a media list.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Image files to upload")
    parser.add_argument(
        "-l",
        "--list",
        dest="list_path",
        type=Path,
        default=None,
        help="JSON file holding the current media list (updated in place)",
    )
    parser.add_argument(
        "-m",
        "--max",
        dest="max_items",
        type=int,
        default=UploadConfig.max_items,
        help=f"Maximum number of entries in the list, 0 for no limit (default {UploadConfig.max_items})",
    )
    parser.add_argument(
        "-a",
        "--annotated",
        action="store_true",
        help="Attach empty title/analysis fields to each uploaded image",
    )
    parser.add_argument(
        "--no-compress",
        action="store_true",
        help="Upload original bytes without compression",
    )
    parser.add_argument(
        "-j",
        "--concurrency",
        type=int,
        default=None,
        help="Maximum simultaneous uploads (default: based on file sizes)",
    )
    parser.add_argument(
        "--discard-removed",
        action="store_true",
        help="Do not re-add uploads whose placeholder was removed mid-flight",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="media-up (from media_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if not args.files:
        parser.print_help()
        return 0

    files = [Path(f).expanduser() for f in args.files]
    missing = [str(f) for f in files if not f.is_file()]
    if missing:
        print(f"ERROR: file(s) not found: {', '.join(missing)}", file=sys.stderr)
        return 1

    try:
        api_url = _require_env("MEDIA_API_URL")
        cdn_domain = _require_env("MEDIA_CDN_DOMAIN")
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    token = os.getenv("MEDIA_API_TOKEN") or None

    config = UploadConfig(
        max_items=args.max_items if args.max_items > 0 else None,
        compress=not args.no_compress,
        max_concurrency=args.concurrency,
        discard_removed_uploads=args.discard_removed,
        annotated=args.annotated,
    )

    render_configuration_summary(
        {
            "Files": len(files),
            "List": str(args.list_path) if args.list_path else "(stdout)",
            "Max Items": config.max_items or "(no limit)",
            "Annotated": "yes" if config.annotated else "no",
            "Compress": "yes" if config.compress else "no",
            "Concurrency": config.max_concurrency or "(auto)",
            "API": api_url,
            "CDN Domain": cdn_domain,
            "Token": "set" if token else "-",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(
            _run_upload(
                files=files,
                list_path=args.list_path,
                config=config,
                api_url=api_url,
                cdn_domain=cdn_domain,
                token=token,
            )
        )
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
