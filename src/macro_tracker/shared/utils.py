"""Shared utility functions for Macro Tracker."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pytz

EASTERN = pytz.timezone("America/New_York")

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

# Regular trading hours, minutes after midnight ET
RTH_OPEN_MINUTES = 9 * 60 + 30
RTH_CLOSE_MINUTES = 16 * 60


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    # Loggers are process-wide; only attach handlers once
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_eastern(instant: datetime) -> datetime:
    """Convert an instant to US Eastern wall-clock time.

    Naive datetimes are treated as UTC. The conversion goes through the IANA
    tz database, so EST/EDT switches follow the actual DST calendar.
    """
    if instant.tzinfo is None:
        instant = pytz.UTC.localize(instant)
    return instant.astimezone(EASTERN)


@dataclass(frozen=True)
class EasternFields:
    """Calendar fields of an instant in Eastern Time."""

    hour: int
    minute: int
    second: int
    weekday: int  # Monday=0 ... Sunday=6
    date: date

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute


def eastern_fields(instant: datetime) -> EasternFields:
    """Break an instant into Eastern-Time hour/minute/second/weekday."""
    et = to_eastern(instant)
    return EasternFields(
        hour=et.hour,
        minute=et.minute,
        second=et.second,
        weekday=et.weekday(),
        date=et.date(),
    )


def is_weekend(weekday: int) -> bool:
    """Saturday and Sunday carry no sessions."""
    return weekday >= 5


def next_trading_day(weekday: int) -> str:
    """Name of the next weekday after ``weekday``.

    Holidays are not modelled; only weekends are skipped.
    """
    day = weekday
    for _ in range(3):
        day = (day + 1) % 7
        if not is_weekend(day):
            return WEEKDAY_NAMES[day]
    # Unreachable: any three consecutive days contain a weekday
    raise ValueError(f"Invalid weekday: {weekday}")


def is_regular_trading_time(dt: datetime) -> bool:
    """Check if an instant falls inside the NY cash session (09:30-16:00 ET, Mon-Fri)."""
    fields = eastern_fields(dt)
    if is_weekend(fields.weekday):
        return False
    return RTH_OPEN_MINUTES <= fields.minutes < RTH_CLOSE_MINUTES


def parse_iso_date(value: date | str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date without any timezone shift."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e
