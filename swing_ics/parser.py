from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from .locator import find_data_table
from .models import SESSION_TYPES, CourseIdentity, ParseStats, SessionRecord
from .utils import DATE_REGEX, DAYS_REGEX, TIME_REGEX, cell_text

MIN_DATA_CELLS = 3
INVALID_ROW_LOG_LIMIT = 5

VIEW_HINT = 'Please ensure you are on the "By Course View" page with registered courses visible.'

# Banner's two-row header: CRN | Subj | Crse | Sec | Status | Cred | Title |
# Start | End | Type | Days | Time | Room | Instructor
FALLBACK_COLUMNS: Dict[str, int] = {
    "Subj": 1,
    "Crse": 2,
    "Sec": 3,
    "Title": 6,
    "Start": 7,
    "End": 8,
    "Type": 9,
    "Days": 10,
    "Time": 11,
    "Room": 12,
}


class ParseError(Exception):
    pass


class TableNotFound(ParseError):
    def __init__(self, message: str = "Could not find course schedule table on this page."):
        super().__init__(f"{message} {VIEW_HINT}")


class NoSessionsFound(ParseError):
    def __init__(self, stats: ParseStats):
        self.stats = stats
        super().__init__(f"No course data found in the table. {stats.describe()}. {VIEW_HINT}")


def _header_rows(table: Tag) -> List[Tag]:
    rows: List[Tag] = []
    for row in table.find_all("tr"):
        if row.find("th") is None:
            break
        rows.append(row)
    return rows


def get_column_index(table: Tag, header: str) -> Optional[int]:
    """Position of the first header cell containing ``header`` (case-insensitive).

    The first header row wins; later header rows are only consulted when it
    has no match, and the scan stops at the first row without header cells.
    """
    needle = header.upper()
    first = next((row for row in table.find_all("tr") if row.find("th") is not None), None)
    candidates = ([first] if first is not None else []) + _header_rows(table)
    for row in candidates:
        for index, th in enumerate(row.find_all("th")):
            if needle in cell_text(th).upper():
                return index
    return None


@dataclass(frozen=True)
class ColumnMap:
    indices: Dict[str, Optional[int]]

    @classmethod
    def resolve(cls, table: Tag) -> "ColumnMap":
        return cls({name: get_column_index(table, name) for name in FALLBACK_COLUMNS})

    def cell(self, texts: Sequence[str], name: str) -> str:
        index = self.indices.get(name)
        if index is not None and index < len(texts):
            return texts[index]
        fallback = FALLBACK_COLUMNS[name]
        if fallback < len(texts):
            return texts[fallback]
        return ""


def match_type(texts: Sequence[str]) -> str:
    for text in texts:
        if text.upper() in SESSION_TYPES:
            return text
    return ""


def match_dates(texts: Sequence[str]) -> Tuple[str, str]:
    for index, text in enumerate(texts):
        if DATE_REGEX.match(text):
            following = texts[index + 1] if index + 1 < len(texts) else ""
            return text, following if DATE_REGEX.match(following) else ""
    return "", ""


def match_time(texts: Sequence[str]) -> str:
    return next((t for t in texts if TIME_REGEX.match(t)), "")


def match_days(texts: Sequence[str]) -> str:
    return next((t for t in texts if DAYS_REGEX.match(t)), "")


def row_identity(texts: Sequence[str], columns: ColumnMap) -> CourseIdentity:
    return CourseIdentity(
        subject=columns.cell(texts, "Subj"),
        course=columns.cell(texts, "Crse"),
        section=columns.cell(texts, "Sec"),
        title=columns.cell(texts, "Title"),
    )


def row_texts(row: Tag) -> List[str]:
    return [cell_text(td) for td in row.find_all("td")]


def parse_row(
    row: Tag,
    table: Tag,
    context: CourseIdentity = CourseIdentity(),
    columns: Optional[ColumnMap] = None,
) -> Optional[SessionRecord]:
    """Extract one session from a data row, or None when the row holds none."""
    texts = row_texts(row)
    if len(texts) < MIN_DATA_CELLS:
        return None
    if columns is None:
        columns = ColumnMap.resolve(table)

    session_type = match_type(texts) or columns.cell(texts, "Type")

    start, end = match_dates(texts)
    if not start:
        start, end = columns.cell(texts, "Start"), columns.cell(texts, "End")

    time_range = match_time(texts) or columns.cell(texts, "Time")
    days = match_days(texts) or columns.cell(texts, "Days")

    own = row_identity(texts, columns)

    if not session_type.strip():
        return None
    if not start and not time_range:
        return None

    return SessionRecord(
        subject=own.subject or context.subject,
        course=own.course or context.course,
        section=own.section or context.section,
        title=own.title or context.title,
        session_type=session_type.strip().upper(),
        days_mask=days,
        time_range=time_range,
        start_date=start,
        end_date=end,
        room=columns.cell(texts, "Room"),
    )


def aggregate_sessions(
    table: Tag, initial: CourseIdentity = CourseIdentity()
) -> Tuple[List[SessionRecord], ParseStats]:
    rows = table.find_all("tr")
    headers = _header_rows(table)
    stats = ParseStats(total_rows=len(rows), header_rows=len(headers))
    logging.debug(
        "Found %d header row(s): %s",
        stats.header_rows,
        [[cell_text(th) for th in row.find_all("th")] for row in headers],
    )

    columns = ColumnMap.resolve(table)
    context = initial
    sessions: List[SessionRecord] = []

    for row in rows[stats.header_rows:]:
        texts = row_texts(row)
        if len(texts) < MIN_DATA_CELLS:
            stats.skipped_rows += 1
            continue

        own = row_identity(texts, columns)
        if own.is_complete:
            context = own

        record = parse_row(row, table, context, columns)
        if record is None:
            stats.invalid_rows += 1
            if stats.invalid_rows <= INVALID_ROW_LOG_LIMIT:
                logging.debug(
                    "Invalid row %d (%d cells): %s",
                    stats.invalid_rows,
                    len(texts),
                    " | ".join(f'[{i}]="{t}"' for i, t in enumerate(texts)),
                )
            continue

        sessions.append(record)
        if record.identity.is_complete:
            context = record.identity

    stats.sessions = len(sessions)
    logging.info(
        "Parsed %d sessions, skipped %d header/empty rows, %d invalid rows",
        stats.sessions,
        stats.skipped_rows,
        stats.invalid_rows,
    )
    if not sessions:
        raise NoSessionsFound(stats)
    return sessions, stats


def parse_sessions_from_html(html: str) -> Tuple[List[SessionRecord], ParseStats]:
    soup = BeautifulSoup(html, "lxml")
    table = find_data_table(soup)
    if table is None:
        raise TableNotFound()
    return aggregate_sessions(table)
