from __future__ import annotations

from typing import List, Sequence

import pytest
from bs4 import BeautifulSoup, Tag

from swing_ics.config import Settings

FIRST_HEADER = ["CRN", "Subj", "Crse", "Sec", "Status", "Cred", "Title"]
SECOND_HEADER = [""] * 7 + ["Start", "End", "Type", "Days", "Time", "Room", "Instructor"]

BLANK_IDENTITY = [""] * 7

DATA_ROWS = [
    ["12345", "CPSC", "1150", "001", "Registered", "3.00", "Program Design",
     "06-MAY-2024", "09-AUG-2024", "Lecture", "-T-R---", "1230-1420", "A130", "Smith"],
    BLANK_IDENTITY + ["06-MAY-2024", "09-AUG-2024", "Lab", "M------", "830-1025", "B012", "Jones"],
    BLANK_IDENTITY + ["12-AUG-2024", "12-AUG-2024", "Exam", "-------", "0900-1200", "GYM", ""],
    None,
    ["23456", "MATH", "1171", "002", "Registered", "3.00", "Calculus I",
     "07-MAY-2024", "09-AUG-2024", "Lecture", "M-W----", "1030-1220", "C204", "Doe"],
    ["", "", "Waitlisted"],
]


def render_row(cells: Sequence[str], tag: str = "td") -> str:
    return "<tr>" + "".join(f"<{tag}>{c or '&nbsp;'}</{tag}>" for c in cells) + "</tr>"


def render_table(
    header_rows: Sequence[Sequence[str]],
    data_rows: Sequence[Sequence[str] | None],
    attrs: str = 'class="datadisplaytable" summary="This layout table lists registered courses"',
) -> str:
    parts = [f"<table {attrs}>"]
    parts.extend(render_row(h, "th") for h in header_rows)
    for row in data_rows:
        if row is None:
            parts.append('<tr><td colspan="14">&nbsp;</td></tr>')
        else:
            parts.append(render_row(row))
    parts.append("</table>")
    return "".join(parts)


def make_table(header_rows: Sequence[Sequence[str]], data_rows: Sequence[Sequence[str] | None]) -> Tag:
    soup = BeautifulSoup(render_table(header_rows, data_rows), "lxml")
    return soup.find("table")


def table_rows(table: Tag, with_cells: str = "td") -> List[Tag]:
    return [row for row in table.find_all("tr") if row.find(with_cells) is not None]


@pytest.fixture
def schedule_html() -> str:
    table = render_table([FIRST_HEADER, SECOND_HEADER], DATA_ROWS)
    return (
        "<html><head><title>Student Schedule</title></head><body>"
        '<div class="pagebodydiv">'
        '<table class="plaintable"><tr><td>Langara College</td></tr></table>'
        "<h3>Registered Courses</h3>"
        '<p class="infotext">Lectures and labs are listed separately.</p>'
        f"{table}"
        "</div></body></html>"
    )


@pytest.fixture
def schedule_table(schedule_html: str) -> Tag:
    return BeautifulSoup(schedule_html, "lxml").find("table", class_="datadisplaytable")


@pytest.fixture
def settings() -> Settings:
    return Settings()
