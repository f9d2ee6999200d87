from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from swing_ics.browser import close_browser, open_schedule_page
from swing_ics.config import Settings, get_settings
from swing_ics.models import ExportResult
from swing_ics.parser import ParseError
from swing_ics.schedule import default_filename, export_live, export_schedule, read_schedule_file


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export a Langara Swing course schedule to an .ics calendar")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--html", type=str, help="Saved 'By Course View' schedule page", default=None)
    source.add_argument("--url", type=str, help="Schedule page to open in the browser", default=None)
    parser.add_argument("--output", type=str, help="Where to write the .ics file", default=None)
    parser.add_argument("--stdout", action="store_true", help="Print the calendar instead of writing a file")
    parser.add_argument("--headful", action="store_true", help="Open browser headful to sign in")
    parser.add_argument("--verbose", action="store_true", help="Log row-level diagnostics")
    return parser.parse_args(argv)


def _export_from_browser(url: Optional[str], headful: bool, settings: Settings) -> ExportResult:
    playwright, browser, context, page = open_schedule_page(settings, url=url, headful=headful)
    try:
        return export_live(page, settings, url)
    finally:
        close_browser(playwright, browser, context, settings)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    settings = get_settings()
    if not args.html and not (args.url or settings.schedule_url):
        logging.error("Nothing to export: pass --html FILE, --url URL or set SWING_SCHEDULE_URL")
        return 2

    try:
        if args.html:
            result = export_schedule(read_schedule_file(args.html), settings)
        else:
            result = _export_from_browser(args.url, args.headful, settings)
    except ParseError as exc:
        logging.error("Error: %s", exc)
        return 1

    content = result.calendar.to_ics()
    if args.stdout:
        sys.stdout.write(content)
        return 0

    output = Path(args.output) if args.output else Path(settings.output_dir) / default_filename(date.today())
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    logging.info("Exported %d course session(s) to %s", len(result.sessions), output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
