from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from bs4 import BeautifulSoup
from playwright.sync_api import Page

from .config import Settings
from .ical import generate_calendar
from .locator import detect_view, find_data_table
from .models import ExportResult
from .parser import ParseError, TableNotFound, aggregate_sessions


def default_filename(today: date) -> str:
    return f"langara-schedule-{today.isoformat()}.ics"


def read_schedule_file(path: Union[str, Path]) -> str:
    return Path(path).read_text(encoding="utf-8", errors="ignore")


def export_schedule(html: str, settings: Optional[Settings] = None, url: str = "") -> ExportResult:
    """Turn a saved or live schedule page into a calendar plus diagnostics."""
    settings = settings or Settings()
    soup = BeautifulSoup(html, "lxml")

    table = find_data_table(soup)
    view = detect_view(soup, url=url, table=table, search_table=False)
    if view == "week":
        logging.warning(
            'This looks like the "By Week View"; switch to the "By Course View" tab '
            "to export the full semester schedule"
        )
    if table is None:
        raise TableNotFound()

    sessions, stats = aggregate_sessions(table)
    calendar = generate_calendar(sessions, settings)
    if len(calendar) < len(sessions):
        logging.warning("%d session(s) had no usable date or time and were left out", len(sessions) - len(calendar))
    return ExportResult(calendar=calendar, stats=stats, view=view, sessions=sessions)


def fetch_schedule_page(page: Page, settings: Settings, url: Optional[str] = None) -> str:
    target = url or settings.schedule_url
    if target and page.url != target:
        logging.info("Fetching schedule %s", target)
        page.goto(target, wait_until="networkidle")
    page.wait_for_selector("table", timeout=10_000)
    html = page.content()

    pages_dir = Path("artifacts/pages")
    pages_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = pages_dir / f"schedule_{date.today().isoformat()}.html"
    artifact_path.write_text(html, encoding="utf-8")
    logging.debug("Saved page to %s", artifact_path)
    return html


def export_live(page: Page, settings: Settings, url: Optional[str] = None) -> ExportResult:
    html = fetch_schedule_page(page, settings, url)
    try:
        return export_schedule(html, settings, url=page.url)
    except ParseError as exc:
        logging.error("Failed to parse schedule page: %s", exc)
        screenshots_dir = Path("artifacts/screenshots")
        screenshots_dir.mkdir(parents=True, exist_ok=True)
        screenshot_path = screenshots_dir / f"schedule_{date.today().isoformat()}.png"
        try:
            page.screenshot(path=str(screenshot_path), full_page=True)
            logging.info("Saved screenshot to %s", screenshot_path)
        except Exception as shot_exc:
            logging.warning("Unable to capture screenshot: %s", shot_exc)
        raise
