from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ics import Calendar, Event
from ics.grammar.parse import ContentLine

from .config import Settings
from .models import CalendarDocument, SessionRecord
from .utils import (
    build_datetime,
    decode_date,
    decode_days,
    decode_time,
    hash_source,
    to_utc_datetime,
)

UNTIL_TIME = "23:59"
UID_DOMAIN = "swing-ics"


def course_label(session: SessionRecord) -> str:
    """``"CPSC 1150 001"``, degrading to whatever identity fields are present."""
    section = f" {session.section}" if session.section else ""
    if session.subject and session.course:
        return f"{session.subject} {session.course}".strip() + section
    if session.subject:
        return session.subject + section
    if session.course:
        return session.course + section
    return session.title or f"Course{section}"


def build_summary(session: SessionRecord, label: str) -> str:
    if session.is_exam:
        return f"FINAL EXAM - {label}"
    return f"{label} {session.session_type}"


def build_location(room: str, institution: str) -> str:
    return f"{institution}, Room {room}" if room else institution


def build_rrule(session: SessionRecord, end_date: Optional[str], settings: Settings) -> Optional[str]:
    days = decode_days(session.days_mask)
    if not days or not end_date:
        return None
    until = to_utc_datetime(end_date, UNTIL_TIME, settings.timezone, follow_dst=settings.dst_aware_until)
    return f"FREQ=WEEKLY;BYDAY={','.join(days)};UNTIL={until}"


def event_uid(session: SessionRecord, index: int = 0) -> str:
    parts = [
        session.subject,
        session.course,
        session.section,
        session.session_type,
        session.days_mask,
        session.time_range,
        session.start_date,
        session.end_date,
        session.room,
        str(index),
    ]
    return f"{hash_source(parts)}@{UID_DOMAIN}"


def create_event(session: SessionRecord, settings: Settings, uid: Optional[str] = None) -> Optional[Event]:
    start_date = decode_date(session.start_date)
    end_date = decode_date(session.end_date)
    times = decode_time(session.time_range)
    if not start_date or not times:
        logging.warning("Invalid date or time for course, skipping: %s", session)
        return None
    start_time, end_time = times

    label = course_label(session)
    # multi-day exam blocks end on their own date
    last_day = end_date if session.is_exam and end_date else start_date

    ev = Event(uid=uid or event_uid(session))
    try:
        # naive values serialize as UTC stamps; fix_ics_content turns them into local TZID times
        ev.begin = build_datetime(start_date, start_time)
        ev.end = build_datetime(last_day, end_time)
    except ValueError as exc:
        logging.warning("Unusable time range %r for course, skipping: %s", session.time_range, exc)
        return None
    ev.name = build_summary(session, label)
    ev.description = session.title or label
    ev.location = build_location(session.room, settings.institution)

    if not session.is_exam:
        rrule = build_rrule(session, end_date, settings)
        if rrule:
            ev.extra.append(ContentLine(name="RRULE", value=rrule))
    return ev


def fix_ics_content(text: str, tzid: str) -> Tuple[List[str], Dict[str, str]]:
    """Split serialized calendar text into header lines and VEVENT blocks keyed by UID.

    DTSTART/DTEND get a ``TZID`` parameter and lose the trailing ``Z``,
    DTSTAMP lines are dropped so the text only depends on the schedule, and
    CALSCALE and X-WR-TIMEZONE are added after PRODID when missing.
    """
    header: List[str] = []
    blocks: Dict[str, str] = {}
    current: Optional[List[str]] = None
    uid = ""
    for line in text.splitlines():
        if not line.strip():
            continue
        if line == "BEGIN:VEVENT":
            current = [line]
            uid = ""
            continue
        if current is None:
            if line != "END:VCALENDAR":
                header.append(line)
            continue
        if line.startswith(("DTSTART:", "DTEND:")):
            name, value = line.split(":", 1)
            line = f"{name};TZID={tzid}:{value.rstrip('Z')}"
        elif line.startswith("DTSTAMP"):
            continue
        elif line.startswith("UID:"):
            uid = line[len("UID:"):]
        current.append(line)
        if line == "END:VEVENT":
            blocks[uid] = "\r\n".join(current) + "\r\n"
            current = None

    extras = []
    if not any(line.startswith("CALSCALE:") for line in header):
        extras.append("CALSCALE:GREGORIAN")
    if not any(line.startswith("X-WR-TIMEZONE:") for line in header):
        extras.append(f"X-WR-TIMEZONE:{tzid}")
    anchor = next((i for i, line in enumerate(header) if line.startswith("PRODID:")), len(header) - 1)
    header[anchor + 1:anchor + 1] = extras
    return header, blocks


def generate_calendar(
    sessions: Iterable[SessionRecord], settings: Optional[Settings] = None
) -> CalendarDocument:
    settings = settings or Settings()
    cal = Calendar(creator=f"-//{settings.product_id}//EN")
    order: List[str] = []
    for index, session in enumerate(sessions):
        event = create_event(session, settings, uid=event_uid(session, index))
        if event is not None:
            cal.events.add(event)
            order.append(event.uid)
    logging.debug("Built %d calendar events", len(order))

    header, blocks = fix_ics_content("".join(cal.serialize_iter()), settings.timezone_name)
    return CalendarDocument(header=tuple(header), events=tuple(blocks[uid] for uid in order))
