"""Data models for the ticket scheduling pipeline."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


@dataclass(frozen=True)
class CityEntry:
    code: str  # short identifier, e.g. "THE"
    name: str  # canonical display name, "LOCALITY - REGION"


@dataclass(frozen=True)
class Route:
    """An (origin, destination) pair as printed in the message body."""
    origin: str
    destination: str
    position: int = 0  # offset of the match in the scanned text


@dataclass(frozen=True)
class DateMention:
    raw: str
    position: int = 0


@dataclass(frozen=True)
class RouteKey:
    """Normalized origin/destination pair used to look up attachments.

    Build it with ``route_key()`` so both sides go through the same
    normalization; equality and hashing are the dataclass ones.
    """
    origin: str
    destination: str

    def swapped(self) -> "RouteKey":
        return RouteKey(self.destination, self.origin)

    def __str__(self) -> str:
        return f"{self.origin}|{self.destination}"


@dataclass(frozen=True)
class Resolution:
    attachment: Optional[Any]
    origin: str
    destination: str
    was_swapped: bool = False


@dataclass
class TripLeg:
    start: datetime
    end: datetime
    origin: str
    destination: str
    attachment: Optional[Any] = None
    was_swapped: bool = False
    index: int = 0  # position of the (date, route) pair inside its message


@dataclass
class EventAttachment:
    file_id: str
    file_url: str
    title: str


@dataclass
class CalendarEvent:
    title: str
    start: datetime
    end: datetime
    reminders: List[int] = field(default_factory=list)  # popup offsets, minutes
    attachments: List[EventAttachment] = field(default_factory=list)

    def to_payload(self) -> dict:
        payload = {
            "summary": self.title,
            "start": {"dateTime": self.start.isoformat()},
            "end": {"dateTime": self.end.isoformat()},
            "reminders": {
                "useDefault": False,
                "overrides": [{"method": "popup", "minutes": m} for m in self.reminders],
            },
        }
        if self.attachments:
            payload["attachments"] = [
                {"fileId": a.file_id, "fileUrl": a.file_url, "title": a.title}
                for a in self.attachments
            ]
        return payload


@dataclass
class Failure:
    thread_id: str
    operation: str
    error: str
    message_index: Optional[int] = None
    leg_index: Optional[int] = None


@dataclass
class RunSummary:
    threads_found: int = 0
    threads_skipped: int = 0
    threads_marked: int = 0
    events_created: int = 0
    swapped_legs: int = 0
    failures: List[Failure] = field(default_factory=list)


@dataclass
class Blob:
    """Copy of an attachment's bytes that can be renamed before storing."""
    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    def renamed(self, name: str) -> "Blob":
        return Blob(name=name, data=self.data, content_type=self.content_type)


@dataclass(frozen=True)
class Label:
    name: str
