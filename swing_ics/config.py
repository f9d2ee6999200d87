from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TIMEZONE = "America/Los_Angeles"


@dataclass
class Settings:
    schedule_url: str = ""
    login_url_prefix: str = ""
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIMEZONE))
    product_id: str = "Langara Swing Schedule Exporter"
    institution: str = "Langara College"
    dst_aware_until: bool = False
    storage_state_path: str = "storage_state.json"
    output_dir: str = "."
    login_timeout_ms: int = 120_000

    @property
    def timezone_name(self) -> str:
        return self.timezone.key


MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

# Monday first; Thursday is "R" and Sunday is "U" in the Banner mask.
WEEKDAY_LETTERS = ("M", "T", "W", "R", "F", "S", "U")
WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
DAY_PLACEHOLDER = "-"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_timezone() -> ZoneInfo:
    tz_name = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(tz_name)
    except Exception:  # pragma: no cover
        logging.warning("Invalid TIMEZONE %s, falling back to %s", tz_name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def get_settings() -> Settings:
    settings = Settings(
        schedule_url=os.getenv("SWING_SCHEDULE_URL", ""),
        login_url_prefix=os.getenv("SWING_LOGIN_URL_PREFIX", ""),
        timezone=get_timezone(),
        product_id=os.getenv("ICS_PRODUCT_ID", "Langara Swing Schedule Exporter"),
        institution=os.getenv("ICS_INSTITUTION", "Langara College"),
        dst_aware_until=_env_flag("ICS_DST_AWARE_UNTIL"),
        storage_state_path=os.getenv("STORAGE_STATE_PATH", "storage_state.json"),
        output_dir=os.getenv("OUTPUT_DIR", "."),
    )
    if settings.dst_aware_until:
        logging.info("UNTIL timestamps will follow %s daylight saving rules", settings.timezone_name)
    return settings
