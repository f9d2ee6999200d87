from __future__ import annotations

from dataclasses import dataclass, field

SESSION_TYPES = ("LECTURE", "LAB", "EXAM")


@dataclass(frozen=True)
class CourseIdentity:
    """Course fields carried over to continuation rows that leave them blank."""

    subject: str = ""
    course: str = ""
    section: str = ""
    title: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.subject and self.course)


@dataclass(frozen=True)
class SessionRecord:
    subject: str
    course: str
    section: str
    title: str
    session_type: str
    days_mask: str
    time_range: str
    start_date: str
    end_date: str
    room: str

    @property
    def identity(self) -> CourseIdentity:
        return CourseIdentity(self.subject, self.course, self.section, self.title)

    @property
    def is_exam(self) -> bool:
        return self.session_type == "EXAM"


@dataclass
class ParseStats:
    total_rows: int = 0
    header_rows: int = 0
    skipped_rows: int = 0
    invalid_rows: int = 0
    sessions: int = 0

    def describe(self) -> str:
        return (
            f"Found {self.total_rows} total rows, {self.header_rows} header rows, "
            f"{self.skipped_rows} empty rows, {self.invalid_rows} invalid data rows"
        )


@dataclass(frozen=True)
class CalendarDocument:
    """A serialized calendar: header lines plus CRLF-terminated VEVENT blocks."""

    header: tuple[str, ...]
    events: tuple[str, ...]

    def to_ics(self) -> str:
        body = "".join(f"{line}\r\n" for line in self.header)
        body += "".join(self.events)
        return body + "END:VCALENDAR\r\n"

    def __str__(self) -> str:
        return self.to_ics()

    def __len__(self) -> int:
        return len(self.events)


@dataclass
class ExportResult:
    calendar: CalendarDocument
    stats: ParseStats
    view: str = "unknown"
    sessions: list[SessionRecord] = field(default_factory=list)

    @property
    def skipped_events(self) -> int:
        return len(self.sessions) - len(self.calendar)
