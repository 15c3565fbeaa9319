"""Configuration: .env loading, paths, constants."""

import math
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dateutil import tz
from dotenv import load_dotenv

from easy_ticket.errors import ConfigurationError
from easy_ticket.models import CityEntry
from easy_ticket.normalize.city_registry import CityRegistry, parse_city_table
from easy_ticket.normalize.date_parser import reminder_to_minutes
from easy_ticket.normalize.patterns import ROUTE_STYLES

# Project root = parent of easy_ticket/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# --- Cities handled ---
DEFAULT_CITIES = "THE=TERESINA - PI;PHB=PARNAIBA - PI;PIR=PIRIPIRI - PI"

# --- Trips ---
DEFAULT_TRIP_DURATION_HOURS = "3"
DEFAULT_REMINDERS = "30m,1h,1.5h"
DEFAULT_TIMEZONE = "America/Fortaleza"
DEFAULT_ROUTE_PATTERN = "span"

# --- Candidate messages ---
DEFAULT_SEARCH_SUBJECT = "Expresso Guanabara - Compra confirmada com sucesso"
DEFAULT_SEARCH_WINDOW = "1m"

# --- Names of things we create ---
DEFAULT_LABEL_NAME = "Passagem Guanabara agendada"
DEFAULT_FOLDER_NAME = "Bilhetes - passagens Guanabara"
DEFAULT_CALENDAR_NAME = "Viagens"
DEFAULT_TICKET_PREFIX = "Bilhete Guanabara"

# --- Paths ---
MBOX_PATH = os.getenv("MBOX_PATH", str(PROJECT_ROOT / "inbox.mbox"))
LABELS_PATH = Path(os.getenv("LABELS_PATH", str(PROJECT_ROOT / "labels.json")))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(PROJECT_ROOT / "output")))

_WINDOW = re.compile(r'^\d+[dmy]$')


@dataclass(frozen=True)
class Settings:
    cities: Tuple[CityEntry, ...]
    trip_duration_hours: float = 3.0
    reminders: Tuple[str, ...] = ("30m", "1h", "1.5h")
    search_subject: str = DEFAULT_SEARCH_SUBJECT
    search_window: str = DEFAULT_SEARCH_WINDOW
    label_name: str = DEFAULT_LABEL_NAME
    folder_name: str = DEFAULT_FOLDER_NAME
    calendar_name: str = DEFAULT_CALENDAR_NAME
    ticket_prefix: str = DEFAULT_TICKET_PREFIX
    route_pattern: str = DEFAULT_ROUTE_PATTERN
    timezone: str = DEFAULT_TIMEZONE

    @property
    def query(self) -> str:
        return f'subject:"{self.search_subject}" newer_than:{self.search_window}'

    @property
    def reminder_minutes(self) -> list:
        minutes = [reminder_to_minutes(r) for r in self.reminders]
        return [m for m in minutes if m]

    @property
    def tzinfo(self):
        return tz.gettz(self.timezone)

    def registry(self) -> CityRegistry:
        return CityRegistry(self.cities)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build validated Settings from ``env`` (defaults to os.environ).

    Raises ConfigurationError on anything that would make a run meaningless.
    """
    env = os.environ if env is None else env

    def get(key: str, default: str) -> str:
        value = env.get(key)
        return default if value is None or not value.strip() else value.strip()

    cities = parse_city_table(get("CITIES", DEFAULT_CITIES))
    CityRegistry(cities)  # validates

    try:
        duration = float(get("TRIP_DURATION_HOURS", DEFAULT_TRIP_DURATION_HOURS))
    except ValueError:
        raise ConfigurationError("TRIP_DURATION_HOURS must be a number")
    if not math.isfinite(duration) or duration <= 0:
        raise ConfigurationError("TRIP_DURATION_HOURS must be a positive finite number")

    reminders = tuple(r.strip() for r in get("REMINDERS", DEFAULT_REMINDERS).split(",") if r.strip())
    for reminder in reminders:
        try:
            reminder_to_minutes(reminder)
        except ValueError as e:
            raise ConfigurationError(str(e))

    window = get("SEARCH_WINDOW", DEFAULT_SEARCH_WINDOW)
    if not _WINDOW.match(window):
        raise ConfigurationError(f"SEARCH_WINDOW {window!r} must look like 7d, 1m or 1y")

    route_pattern = get("ROUTE_PATTERN", DEFAULT_ROUTE_PATTERN)
    if route_pattern not in ROUTE_STYLES:
        raise ConfigurationError(
            f"ROUTE_PATTERN {route_pattern!r} not one of {sorted(ROUTE_STYLES)}"
        )

    timezone = get("TIMEZONE", DEFAULT_TIMEZONE)
    if tz.gettz(timezone) is None:
        raise ConfigurationError(f"Unknown TIMEZONE {timezone!r}")

    return Settings(
        cities=cities,
        trip_duration_hours=duration,
        reminders=reminders,
        search_subject=get("SEARCH_SUBJECT", DEFAULT_SEARCH_SUBJECT),
        search_window=window,
        label_name=get("LABEL_NAME", DEFAULT_LABEL_NAME),
        folder_name=get("FOLDER_NAME", DEFAULT_FOLDER_NAME),
        calendar_name=get("CALENDAR_NAME", DEFAULT_CALENDAR_NAME),
        ticket_prefix=get("TICKET_PREFIX", DEFAULT_TICKET_PREFIX),
        route_pattern=route_pattern,
        timezone=timezone,
    )
