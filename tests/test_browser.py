import pytest

from swing_ics.browser import on_login_page
from swing_ics.config import Settings
from swing_ics.parser import TableNotFound
from swing_ics.schedule import export_live, fetch_schedule_page


class FakePage:
    def __init__(self, html: str, url: str = "https://example.edu/schedule"):
        self.html = html
        self.url = url
        self.visited = []
        self.screenshots = []

    def goto(self, url, wait_until=None):
        self.visited.append(url)
        self.url = url

    def wait_for_selector(self, selector, timeout=None):
        pass

    def content(self):
        return self.html

    def screenshot(self, path, full_page=False):
        self.screenshots.append(path)


def test_on_login_page_default_rule():
    settings = Settings()
    assert on_login_page("https://example.edu/prod/twbkwbis.P_WWWLogin", settings)
    assert not on_login_page("https://example.edu/prod/bwskfshd.P_CrseSchdDetl", settings)


def test_on_login_page_with_prefix():
    settings = Settings(login_url_prefix="https://sso.example.edu/")
    assert on_login_page("https://sso.example.edu/idp", settings)
    assert not on_login_page("https://example.edu/login-help", settings)


def test_fetch_schedule_page_saves_artifact(tmp_path, monkeypatch, schedule_html, settings):
    monkeypatch.chdir(tmp_path)
    page = FakePage(schedule_html)

    html = fetch_schedule_page(page, settings, "https://example.edu/other")

    assert html == schedule_html
    assert page.visited == ["https://example.edu/other"]
    assert list((tmp_path / "artifacts" / "pages").glob("*.html"))


def test_export_live(tmp_path, monkeypatch, schedule_html, settings):
    monkeypatch.chdir(tmp_path)
    result = export_live(FakePage(schedule_html), settings)
    assert len(result.calendar) == 4
    assert result.view == "course"


def test_export_live_screenshots_on_parse_error(tmp_path, monkeypatch, settings):
    monkeypatch.chdir(tmp_path)
    page = FakePage("<html><body><table><tr><td>Maintenance</td></tr></table></body></html>")

    with pytest.raises(TableNotFound):
        export_live(page, settings)

    assert len(page.screenshots) == 1
    assert (tmp_path / "artifacts" / "screenshots").is_dir()
