from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings


def create_context(settings: Settings, headful: bool = False) -> Tuple[Playwright, Browser, BrowserContext]:
    playwright = sync_playwright().start()
    browser = playwright.chromium.launch(headless=not headful)
    storage_state = Path(settings.storage_state_path)
    context = browser.new_context(
        storage_state=str(storage_state) if storage_state.exists() else None,
        timezone_id=settings.timezone_name,
    )
    return playwright, browser, context


def on_login_page(url: str, settings: Settings) -> bool:
    if settings.login_url_prefix:
        return url.startswith(settings.login_url_prefix)
    return "login" in url.lower()


def _sign_in(page: Page, target: str, settings: Settings, headful: bool) -> None:
    if not on_login_page(page.url, settings):
        return
    if not headful:
        logging.error("Redirected to login page; rerun with --headful to sign in")
        raise RuntimeError("Login required, rerun with --headful")

    logging.info("Waiting up to %ds for interactive login...", settings.login_timeout_ms // 1000)
    try:
        page.wait_for_url(lambda u: not on_login_page(u, settings), timeout=settings.login_timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise RuntimeError("Login was not completed in time") from exc
    page.goto(target, wait_until="networkidle")

    if on_login_page(page.url, settings):
        logging.error("Still on login page; manual intervention may be required")
        raise RuntimeError("Login failed")


def open_schedule_page(
    settings: Settings, url: Optional[str] = None, headful: bool = False
) -> tuple[Playwright, Browser, BrowserContext, Page]:
    target = url or settings.schedule_url
    if not target:
        raise RuntimeError("No schedule URL given; pass --url or set SWING_SCHEDULE_URL")

    playwright, browser, context = create_context(settings, headful=headful)
    try:
        page = context.new_page()
        page.goto(target, wait_until="networkidle")
        _sign_in(page, target, settings, headful)
    except Exception:
        close_browser(playwright, browser, context, settings)
        raise

    logging.info("Schedule page loaded, session stored at %s", settings.storage_state_path)
    context.storage_state(path=settings.storage_state_path)
    return playwright, browser, context, page


def close_browser(playwright: Playwright, browser: Browser, context: BrowserContext, settings: Settings) -> None:
    try:
        context.storage_state(path=settings.storage_state_path)
    finally:
        context.close()
        browser.close()
        playwright.stop()
