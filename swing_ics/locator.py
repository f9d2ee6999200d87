from __future__ import annotations

import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from .utils import cell_text

SIBLING_SEARCH_DEPTH = 10
ANCESTOR_SEARCH_DEPTH = 5
MIN_FALLBACK_ROWS = 3

HEADING_SELECTOR = "h2, h3, h4, .pageheader, .header, th, td"

# Banner/Ellucian styling used for the schedule table.
KNOWN_TABLE_SELECTORS = [
    ".datadisplaytable",
    "table.datadisplaytable",
    'table[summary*="course"]',
    'table[summary*="schedule"]',
    'table[summary*="Registered"]',
]

Strategy = Callable[[BeautifulSoup], Optional[Tag]]


def header_texts(table: Tag) -> List[str]:
    return [cell_text(th) for th in table.find_all("th")]


def _has_type_column(table: Tag) -> bool:
    return any("TYPE" in h.upper() for h in header_texts(table))


def _has_key_columns(table: Tag) -> bool:
    for header in header_texts(table):
        upper = header.upper()
        if "TYPE" in upper or "START" in upper or "DAYS" in upper:
            return True
        if "SUBJ" in upper and "CRSE" in upper:
            return True
    return False


def _is_registered_heading(node: Tag) -> bool:
    text = node.get_text(" ").upper()
    return "REGISTERED" in text and "COURSE" in text


def _table_after(heading: Tag) -> Optional[Tag]:
    element = heading.find_next_sibling()
    depth = 0
    while element is not None and depth < SIBLING_SEARCH_DEPTH:
        if element.name == "table" and _has_type_column(element):
            return element
        element = element.find_next_sibling()
        depth += 1
    return None


def _table_around(heading: Tag) -> Optional[Tag]:
    parent = heading.parent
    depth = 0
    while isinstance(parent, Tag) and depth < ANCESTOR_SEARCH_DEPTH:
        table = parent.find("table")
        if table is not None and _has_type_column(table):
            return table
        parent = parent.parent
        depth += 1
    return None


def find_by_registered_heading(soup: BeautifulSoup) -> Optional[Tag]:
    """Table following (or sharing a container with) a "Registered Courses" heading."""
    for heading in soup.select(HEADING_SELECTOR):
        if not _is_registered_heading(heading):
            continue
        table = _table_after(heading) or _table_around(heading)
        if table is not None:
            return table
    return None


def find_by_known_selector(soup: BeautifulSoup) -> Optional[Tag]:
    for selector in KNOWN_TABLE_SELECTORS:
        for candidate in soup.select(selector):
            if candidate.name == "table" and _has_key_columns(candidate):
                logging.debug("Selector %s matched a table", selector)
                return candidate
    return None


def find_by_header_scan(soup: BeautifulSoup) -> Optional[Tag]:
    for table in soup.find_all("table"):
        if len(table.find_all("tr")) <= MIN_FALLBACK_ROWS:
            continue
        joined = " ".join(header_texts(table)).upper()
        if "TYPE" in joined and ("START" in joined or "DAYS" in joined):
            return table
    return None


STRATEGIES: List[Strategy] = [
    find_by_registered_heading,
    find_by_known_selector,
    find_by_header_scan,
]


def find_data_table(soup: BeautifulSoup, strategies: Optional[List[Strategy]] = None) -> Optional[Tag]:
    for strategy in strategies or STRATEGIES:
        table = strategy(soup)
        if table is not None:
            logging.info("Schedule table found via %s. Headers: %s", strategy.__name__, header_texts(table))
            return table
    logging.warning("Could not find course schedule table")
    return None


def detect_view(
    soup: BeautifulSoup, url: str = "", table: Optional[Tag] = None, search_table: bool = True
) -> str:
    """Guess which Banner tab the page shows: "course", "week" or "unknown".

    Pass ``search_table=False`` when ``table`` already holds the result of
    :func:`find_data_table`, so a missing table is not looked up again.
    """
    page_text = soup.get_text(" ")
    lowered_url = url.lower()
    if "course" in lowered_url or "By Course View" in page_text or "Registered Courses" in page_text:
        return "course"
    if "week" in lowered_url or "By Week View" in page_text:
        return "week"
    if table is None and search_table:
        table = find_data_table(soup)
    if table is not None:
        headers = header_texts(table)
        if "Start" in headers and "End" in headers:
            return "course"
    return "unknown"
