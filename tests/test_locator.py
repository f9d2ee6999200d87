from bs4 import BeautifulSoup

from swing_ics.locator import (
    detect_view,
    find_by_header_scan,
    find_by_known_selector,
    find_by_registered_heading,
    find_data_table,
    header_texts,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_heading_followed_by_table():
    soup = _soup(
        "<div><h3>Registered Courses</h3><p>note</p>"
        '<table id="target"><tr><th>Subj</th><th>Type</th></tr></table></div>'
    )
    assert find_by_registered_heading(soup)["id"] == "target"


def test_heading_inside_sibling_container():
    soup = _soup(
        '<div><div><span class="header">My Registered Courses</span></div>'
        '<table id="target"><tr><th>Schedule Type</th></tr></table></div>'
    )
    assert find_by_registered_heading(soup)["id"] == "target"


def test_heading_ignores_tables_without_type_column():
    soup = _soup("<div><h3>Registered Courses</h3><table><tr><th>Name</th></tr></table></div>")
    assert find_by_registered_heading(soup) is None


def test_heading_falls_back_to_shared_container():
    filler = "<p>x</p>" * 12
    soup = _soup(
        f"<body><h3>Registered Courses</h3>{filler}"
        '<table id="far"><tr><th>Type</th></tr></table></body>'
    )
    assert find_by_registered_heading(soup)["id"] == "far"


def _layout_then_heading(fillers: int) -> BeautifulSoup:
    # the layout table comes first, so every container lookup finds it instead
    return _soup(
        '<div><table id="layout"><tr><td>menu</td></tr></table>'
        "<h3>Registered Courses</h3>" + "<p>x</p>" * fillers
        + '<table id="target"><tr><th>Type</th></tr></table></div>'
    )


def test_heading_sibling_search_reaches_tenth_sibling():
    assert find_by_registered_heading(_layout_then_heading(9))["id"] == "target"


def test_heading_sibling_search_stops_after_ten_siblings():
    assert find_by_registered_heading(_layout_then_heading(10)) is None


def _nested_heading(levels: int) -> BeautifulSoup:
    heading = "<div>" * levels + "<h3>Registered Courses</h3>" + "</div>" * levels
    return _soup(f'<div id="container">{heading}<table id="target"><tr><th>Type</th></tr></table></div>')


def test_heading_ancestor_search_reaches_fifth_ancestor():
    assert find_by_registered_heading(_nested_heading(4))["id"] == "target"


def test_heading_ancestor_search_stops_after_five_levels():
    assert find_by_registered_heading(_nested_heading(5)) is None


def test_known_selector_requires_key_columns():
    soup = _soup(
        '<table class="datadisplaytable" id="info"><tr><th>Name</th></tr></table>'
        '<table class="datadisplaytable" id="target"><tr><th>Subj Crse</th></tr></table>'
    )
    assert find_by_known_selector(soup)["id"] == "target"


def test_known_selector_matches_summary_attribute():
    soup = _soup('<table summary="Student schedule" id="target"><tr><th>Days</th></tr></table>')
    assert find_by_known_selector(soup)["id"] == "target"


def test_known_selector_skips_non_table_elements():
    soup = _soup('<div class="datadisplaytable"><p>Start here</p></div>')
    assert find_by_known_selector(soup) is None


def test_header_scan_needs_more_than_three_rows():
    header = "<tr><th>Type</th><th>Start</th></tr>"
    short = f'<table id="short">{header}<tr><td>a</td></tr><tr><td>b</td></tr></table>'
    long = f'<table id="long">{header}' + "<tr><td>a</td></tr>" * 3 + "</table>"
    soup = _soup(short + long)
    assert find_by_header_scan(soup)["id"] == "long"


def test_header_scan_needs_type_and_start_or_days():
    rows = "<tr><td>a</td></tr>" * 4
    soup = _soup(f"<table><tr><th>Type</th><th>Room</th></tr>{rows}</table>")
    assert find_by_header_scan(soup) is None


def test_find_data_table_first_strategy_wins(schedule_html):
    soup = _soup(schedule_html)
    table = find_data_table(soup)
    assert "Type" in header_texts(table)
    assert "datadisplaytable" in table["class"]


def test_find_data_table_custom_strategy_order():
    soup = _soup(
        '<h3>Registered Courses</h3><table id="heading"><tr><th>Type</th></tr></table>'
        '<table class="datadisplaytable" id="styled"><tr><th>Days</th></tr></table>'
    )
    table = find_data_table(soup, [find_by_known_selector, find_by_registered_heading])
    assert table["id"] == "styled"


def test_find_data_table_not_found():
    soup = _soup("<table><tr><td>Welcome</td></tr></table>")
    assert find_data_table(soup) is None


def test_detect_view_from_text_and_url():
    assert detect_view(_soup("<p>By Week View</p>")) == "week"
    assert detect_view(_soup("<p>By Course View</p>")) == "course"
    assert detect_view(_soup("<p>Schedule</p>"), url="https://example.edu/schedule?view=week") == "week"
    assert detect_view(_soup("<p>Nothing here</p>")) == "unknown"


def test_detect_view_from_start_end_headers():
    rows = "<tr><td>a</td></tr>" * 4
    soup = _soup(
        "<table><tr><th>Start</th><th>End</th><th>Type</th></tr>" + rows + "</table>"
    )
    assert detect_view(soup) == "course"


def test_detect_view_without_search_keeps_missing_table():
    rows = "<tr><td>a</td></tr>" * 4
    soup = _soup("<table><tr><th>Start</th><th>End</th><th>Type</th></tr>" + rows + "</table>")
    assert detect_view(soup, table=None, search_table=False) == "unknown"
